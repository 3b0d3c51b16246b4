"""
Four-character 14-segment alphanumeric display.

Alphanum4 keeps one GlyphCell per character position and flushes them to the
HT16K33 display RAM as 8 bytes, 2 per cell:

  low byte  = segment bits 0-7
  high byte = segment bits 8-13 in bits 0-5, decimal point in bit 6
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .bus import BusAccess, create_bus
from .config import BoardConfig, NUM_DIGITS
from .font import BLANK, SEGMENT_MASK, glyph_for
from .ht16k33 import HT16K33
from .validation import validate_index

logger = logging.getLogger(__name__)


DECIMAL_POINT_BIT = 6
# The colon indicator is wired to the decimal point of this cell
COLON_CELL = 1


@dataclass(frozen=True)
class GlyphCell:
    segments: int = BLANK
    decimal_point: bool = False

    def __post_init__(self) -> None:
        if not (0 <= self.segments <= SEGMENT_MASK):
            raise ValueError(
                f"Segment mask must fit in 14 bits, got {self.segments:#06x}"
            )

    def pack(self) -> bytes:
        """Pack into the two display-RAM bytes for this position."""
        low = self.segments & 0xFF
        high = (self.segments >> 8) & 0x3F
        if self.decimal_point:
            high |= 1 << DECIMAL_POINT_BIT
        return bytes([low, high])


class Alphanum4:
    """
    Framebuffer and flush for the 4-character display.

    Text longer than 4 characters is truncated. Characters without a glyph are
    shown blank.
    """

    def __init__(
        self, bus: Optional[BusAccess] = None, controller: Optional[HT16K33] = None
    ):
        """
        Args:
            bus: Bus used for the controller (default: created from the default config)
            controller: HT16K33 driver (default: new instance on bus, which
                sends the display-on configuration)
        """
        self._owns_bus = bus is None and controller is None
        self.bus = bus or (controller.bus if controller else create_bus())
        self.controller = controller or HT16K33(self.bus)
        self._cells = [GlyphCell()] * NUM_DIGITS

        logger.info(f"Alphanumeric display initialized with {NUM_DIGITS} digits")

    @classmethod
    def from_config(
        cls, config: BoardConfig, bus: Optional[BusAccess] = None
    ) -> "Alphanum4":
        display = cls(bus or create_bus(config))
        display._owns_bus = bus is None
        return display

    def __enter__(self) -> "Alphanum4":
        return self

    def __exit__(self, exc_type, exc_value, tb) -> None:
        self.close()

    @property
    def cells(self) -> Tuple[GlyphCell, ...]:
        return tuple(self._cells)

    def get_cell(self, index: int) -> GlyphCell:
        validate_index(index, NUM_DIGITS, "digit")
        return self._cells[index]

    def set_digit_raw(self, index: int, mask: int) -> None:
        """Set the segment mask at a position, keeping its decimal point."""
        validate_index(index, NUM_DIGITS, "digit")
        self._cells[index] = GlyphCell(mask, self._cells[index].decimal_point)

    def set_decimal(self, index: int, on: bool) -> None:
        """
        Turn the decimal point at a position on or off.

        Raises:
            IndexOutOfRange: If index is not 0-3
        """
        validate_index(index, NUM_DIGITS, "digit")
        self._cells[index] = GlyphCell(self._cells[index].segments, bool(on))

    def set_digit(self, index: int, char: str, decimal: bool = False) -> None:
        validate_index(index, NUM_DIGITS, "digit")
        self._cells[index] = GlyphCell(glyph_for(char), bool(decimal))

    def print_str(
        self, text: str, colon: bool = False, justify_right: bool = False
    ) -> None:
        """
        Render up to 4 characters of text into the buffer.

        Characters past the 4th are dropped and positions not covered by the
        text are blanked. Decimal points are cleared, then the colon indicator
        is set from `colon`.

        Args:
            text: Text to show, case-insensitive
            colon: Light the colon indicator
            justify_right: Align text shorter than 4 characters to the right
        """
        chars = text[:NUM_DIGITS]
        start = NUM_DIGITS - len(chars) if justify_right else 0

        cells = [GlyphCell()] * NUM_DIGITS
        for offset, char in enumerate(chars):
            cells[start + offset] = GlyphCell(glyph_for(char))
        self._cells[:] = cells

        self.set_decimal(COLON_CELL, colon)

    def print_number_str(self, value: str, justify_right: bool = True) -> None:
        """
        Render a numeric string, folding each '.' into the preceding digit's
        decimal point.

        Raises:
            ValueError: If more than 4 non-'.' characters remain, or a '.' has
                no digit before it
        """
        digits = len(value) - value.count(".")
        if digits > NUM_DIGITS:
            raise ValueError(f"'{value}' needs {digits} digits, display has {NUM_DIGITS}")

        start = NUM_DIGITS - digits if justify_right else 0
        pos = start
        cells = [GlyphCell()] * NUM_DIGITS
        for char in value:
            if char == ".":
                if pos == start or cells[pos - 1].decimal_point:
                    raise ValueError(f"Misplaced decimal point in '{value}'")
                cells[pos - 1] = GlyphCell(cells[pos - 1].segments, True)
            else:
                cells[pos] = GlyphCell(glyph_for(char))
                pos += 1
        self._cells[:] = cells

    def print_float(
        self, value: float, decimal_digits: int = 2, justify_right: bool = True
    ) -> None:
        if decimal_digits < 0:
            raise ValueError(f"decimal_digits must be >= 0, got {decimal_digits}")
        self.print_number_str(f"{value:.{decimal_digits}f}", justify_right)

    def print_hex(self, value: int, justify_right: bool = True) -> None:
        if not (0 <= value <= 0xFFFF):
            raise ValueError(f"Hex value must be 0x0000-0xFFFF, got {value}")
        self.print_number_str(f"{value:X}", justify_right)

    def clear(self) -> None:
        """Blank every position. Call show() to update the display."""
        self._cells[:] = [GlyphCell()] * NUM_DIGITS

    def encode(self) -> bytes:
        """Display RAM contents for the current buffer."""
        return b"".join(cell.pack() for cell in self._cells)

    def show(self) -> None:
        """
        Write the buffer to the display RAM in one burst.

        Raises:
            BusError: If the write fails. The buffer is left unchanged.
        """
        buffer = self.encode()
        self.controller.write_display(buffer)
        logger.debug(f"Display refreshed: {buffer.hex()}")

    def close(self) -> None:
        """Blank the display, and close the bus if this instance created it."""
        try:
            self.clear()
            self.show()
        finally:
            if self._owns_bus:
                self.bus.close()
