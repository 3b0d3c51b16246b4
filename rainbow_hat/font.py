r"""
14-segment font for the alphanumeric display.

Segment numbering (bit k of the mask lights stroke k):

      ---0---
     |\  |  /|
     5 8 9 A 1
     |  \|/  |
      -6- -7-
     |  /|\  |
     4 B C D 2
     |/  |  \|
      ---3---   E (decimal point)

Bit 14 (E) is the decimal point. It is never part of a glyph and is stored
separately in each GlyphCell.
"""

from types import MappingProxyType
from typing import Mapping

SEGMENT_BITS = 14
SEGMENT_MASK = (1 << SEGMENT_BITS) - 1
BLANK = 0x0000


# Lowercase letters fold to uppercase before lookup and have no entries here
FONT: Mapping[str, int] = MappingProxyType({
    " ": 0b00000000000000,
    "!": 0b00000000000110,
    '"': 0b00001000100000,
    "#": 0b01001011001110,
    "$": 0b01001011101101,
    "%": 0b00110000100100,
    "&": 0b10001101011101,
    "'": 0b00010000000000,
    "(": 0b10010000000000,
    ")": 0b00100100000000,
    "*": 0b11111111000000,
    "+": 0b01001011000000,
    ",": 0b00100000000000,
    "-": 0b00000011000000,
    ".": 0b00000000000000,
    "/": 0b00110000000000,
    "0": 0b00110000111111,
    "1": 0b00000000000110,
    "2": 0b00000011011011,
    "3": 0b00000010001111,
    "4": 0b00000011100110,
    "5": 0b10000001101001,
    "6": 0b00000011111101,
    "7": 0b00000000000111,
    "8": 0b00000011111111,
    "9": 0b00000011101111,
    ":": 0b01001000000000,
    ";": 0b00101000000000,
    "<": 0b10010000000000,
    "=": 0b00000011001000,
    ">": 0b00100100000000,
    "?": 0b01000010000011,
    "@": 0b00001010111011,
    "A": 0b00000011110111,
    "B": 0b01001010001111,
    "C": 0b00000000111001,
    "D": 0b01001000001111,
    "E": 0b00000011111001,
    "F": 0b00000001110001,
    "G": 0b00000010111101,
    "H": 0b00000011110110,
    "I": 0b01001000000000,
    "J": 0b00000000011110,
    "K": 0b10010001110000,
    "L": 0b00000000111000,
    "M": 0b00010100110110,
    "N": 0b10000100110110,
    "O": 0b00000000111111,
    "P": 0b00000011110011,
    "Q": 0b10000000111111,
    "R": 0b10000011110011,
    "S": 0b00000011101101,
    "T": 0b01001000000001,
    "U": 0b00000000111110,
    "V": 0b00110000110000,
    "W": 0b10100000110110,
    "X": 0b10110100000000,
    "Y": 0b01010100000000,
    "Z": 0b00110000001001,
    "[": 0b00000000111001,
    "\\": 0b10000100000000,
    "]": 0b00000000001111,
    "^": 0b00110000000011,
    "_": 0b00000000001000,
    "`": 0b00000100000000,
    "{": 0b00100101001001,
    "|": 0b01001000000000,
    "}": 0b10010010001001,
    "~": 0b00010100100000,
})


def glyph_for(char: str) -> int:
    """
    Return the segment mask for a single character.

    Lowercase letters use their uppercase glyph. Characters without a glyph
    render blank rather than failing.
    """
    return FONT.get(char.upper(), BLANK) if len(char) == 1 else BLANK
