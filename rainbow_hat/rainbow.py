"""
LED Chain - pixel buffer for the APA102 rainbow.

LedChain owns a fixed-length list of Pixels and flushes it through
APA102Encoder to the bus in a single serial write.
"""

import logging
from typing import Optional, Tuple

from .apa102 import APA102Encoder, MAX_LEVEL, Pixel
from .bus import BusAccess, create_bus
from .config import BoardConfig, NUM_PIXELS
from .validation import clamp_brightness, validate_index

logger = logging.getLogger(__name__)


# Raw level 7 of 31, the board's power-on default
DEFAULT_BRIGHTNESS = 7 / MAX_LEVEL


class LedChain:
    """
    Framebuffer and flush for a chain of APA102 pixels.

    Brightness values outside 0.0-1.0 are clamped. set_* calls only touch the
    buffer; nothing reaches the chain until show().
    """

    def __init__(
        self,
        bus: Optional[BusAccess] = None,
        num_pixels: int = NUM_PIXELS,
        encoder: Optional[APA102Encoder] = None,
    ):
        """
        Args:
            bus: Bus used for show() (default: created from the default config)
            num_pixels: Chain length, fixed for the life of the instance
            encoder: Protocol encoder (default: new instance)
        """
        if num_pixels <= 0:
            raise ValueError(f"num_pixels must be > 0, got {num_pixels}")

        self._owns_bus = bus is None
        self.bus = bus or create_bus()
        self.encoder = encoder or APA102Encoder()
        self._pixels = [Pixel(brightness=DEFAULT_BRIGHTNESS)] * num_pixels

        logger.info(f"LED chain initialized with {num_pixels} pixels")

    @classmethod
    def from_config(
        cls, config: BoardConfig, bus: Optional[BusAccess] = None
    ) -> "LedChain":
        chain = cls(bus or create_bus(config), num_pixels=config.num_pixels)
        chain._owns_bus = bus is None
        return chain

    def __enter__(self) -> "LedChain":
        return self

    def __exit__(self, exc_type, exc_value, tb) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._pixels)

    @property
    def num_pixels(self) -> int:
        return len(self._pixels)

    @property
    def pixels(self) -> Tuple[Pixel, ...]:
        """Snapshot of the buffer in chain order."""
        return tuple(self._pixels)

    def get_pixel(self, index: int) -> Pixel:
        validate_index(index, len(self._pixels), "pixel")
        return self._pixels[index]

    def set_pixel(
        self, index: int, r: int, g: int, b: int, brightness: float = DEFAULT_BRIGHTNESS
    ) -> None:
        """
        Set the colour and brightness of one pixel.

        Args:
            index: Pixel position, 0 is the first pixel on the chain
            r, g, b: Channel values 0-255
            brightness: 0.0-1.0, clamped

        Raises:
            IndexOutOfRange: If index is outside the chain
            ValueError: If a channel is outside 0-255
        """
        validate_index(index, len(self._pixels), "pixel")
        self._pixels[index] = Pixel(r, g, b, clamp_brightness(brightness))

    def set_all(
        self, r: int, g: int, b: int, brightness: float = DEFAULT_BRIGHTNESS
    ) -> None:
        pixel = Pixel(r, g, b, clamp_brightness(brightness))
        for i in range(len(self._pixels)):
            self._pixels[i] = pixel

    def set_brightness(self, brightness: float) -> None:
        """Set the brightness of every pixel, keeping their colours."""
        brightness = clamp_brightness(brightness)
        for i, p in enumerate(self._pixels):
            self._pixels[i] = Pixel(p.red, p.green, p.blue, brightness)

    def clear(self) -> None:
        """Turn every pixel black. Brightness is kept."""
        for i, p in enumerate(self._pixels):
            self._pixels[i] = Pixel(0, 0, 0, p.brightness)

    def encode(self) -> bytes:
        """Encode the current buffer without writing it."""
        return self.encoder.encode(self._pixels)

    def show(self) -> None:
        """
        Write the buffer to the chain as one serial transfer.

        Raises:
            BusError: If the write fails. The buffer is left unchanged.
        """
        frame = self.encode()
        self.bus.serial_write(frame)
        logger.debug(f"Chain refreshed: {len(self._pixels)} pixels, {len(frame)} bytes")

    def close(self) -> None:
        """Blank the chain, and close the bus if this instance created it."""
        try:
            self.clear()
            self.show()
        finally:
            if self._owns_bus:
                self.bus.close()
