"""
Holtek HT16K33 LED controller.

Command bytes are written as addressed writes with an empty payload; display
RAM is written as one burst starting at register 0x00.
"""

import logging
from typing import Sequence

from .bus import BusAccess

logger = logging.getLogger(__name__)


SYSTEM_SETUP = 0x20
OSCILLATOR = 0x01
BLINK_CMD = 0x80
BLINK_DISPLAYON = 0x01
BLINK_OFF = 0x00
BLINK_2HZ = 0x02
BLINK_1HZ = 0x04
BLINK_HALFHZ = 0x06
CMD_BRIGHTNESS = 0xE0
DISPLAY_RAM = 0x00

BLINK_RATES = (BLINK_OFF, BLINK_2HZ, BLINK_1HZ, BLINK_HALFHZ)
MAX_BRIGHTNESS = 15


class HT16K33:
    """
    Driver for the HT16K33 display controller.

    The oscillator, display-on and brightness commands are sent once, when the
    instance is created.
    """

    def __init__(
        self,
        bus: BusAccess,
        blink_rate: int = BLINK_OFF,
        brightness: int = MAX_BRIGHTNESS,
    ):
        self.bus = bus
        self.blink_rate = blink_rate
        self.brightness = brightness

        self.bus.addressed_write(SYSTEM_SETUP | OSCILLATOR, b"")
        self.set_blink(blink_rate)
        self.set_brightness(brightness)
        logger.info(
            f"HT16K33 initialized (blink={blink_rate:#04x}, brightness={brightness})"
        )

    def set_blink(self, rate: int) -> None:
        """
        Turn the display on with the given blink rate.

        Args:
            rate: One of BLINK_OFF, BLINK_2HZ, BLINK_1HZ, BLINK_HALFHZ

        Raises:
            ValueError: If rate is not a supported blink rate
        """
        if rate not in BLINK_RATES:
            raise ValueError(f"Unsupported blink rate {rate:#04x}")
        self.bus.addressed_write(BLINK_CMD | BLINK_DISPLAYON | rate, b"")
        self.blink_rate = rate

    def set_brightness(self, level: int) -> None:
        """Set the dimming level of the whole display, 0-15."""
        if isinstance(level, bool) or not isinstance(level, int):
            raise ValueError(f"Brightness must be an int, got {level!r}")
        if not 0 <= level <= MAX_BRIGHTNESS:
            raise ValueError(f"Brightness must be 0-{MAX_BRIGHTNESS}, got {level}")
        self.bus.addressed_write(CMD_BRIGHTNESS | level, b"")
        self.brightness = level

    def write_display(self, buffer: Sequence[int]) -> None:
        """Write raw display RAM bytes starting at address 0x00."""
        self.bus.addressed_write(DISPLAY_RAM, bytes(buffer))
