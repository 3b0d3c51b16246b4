"""
Rainbow HAT device encoding package.

This package provides:
- APA102 LED chain framebuffer and wire encoding
- 14-segment alphanumeric display buffer, font and HT16K33 register writes
- Piezo buzzer tone generation from MIDI note numbers
- Hardware and mock bus implementations for SPI, I2C and GPIO access
"""

from .alphanum4 import Alphanum4, GlyphCell
from .apa102 import APA102Encoder, Pixel
from .bus import BusAccess, BusError, HardwareBus, MockBus, create_bus
from .buzzer import Buzzer, midi_note_to_frequency
from .config import BoardConfig, default_config, load_from_toml
from .rainbow import LedChain
from .validation import IndexOutOfRange, InvalidNote, ValidationError

__version__ = "0.1.0"

__all__ = [
    "Alphanum4",
    "APA102Encoder",
    "BoardConfig",
    "BusAccess",
    "BusError",
    "Buzzer",
    "GlyphCell",
    "HardwareBus",
    "IndexOutOfRange",
    "InvalidNote",
    "LedChain",
    "MockBus",
    "Pixel",
    "ValidationError",
    "create_bus",
    "default_config",
    "load_from_toml",
    "midi_note_to_frequency",
]
