"""
Pure APA102 Protocol Encoding Logic

This module contains the Pixel value type and the APA102Encoder class, which
turns a sequence of pixels into the byte stream an APA102 chain expects. It has
no I/O dependencies.

Stream format:
  [0x00 x 4] + N x [0b111LLLLL, blue, green, red] + [0xFF x ceil(N / 2)]

L is the 5-bit global brightness level of the pixel.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from .validation import clamp_brightness, validate_channel


START_FRAME_LENGTH = 4
START_FRAME_BYTE = 0x00
END_FRAME_BYTE = 0xFF
PIXEL_HEADER = 0b11100000
MAX_LEVEL = 31


@dataclass(frozen=True)
class Pixel:
    red: int = 0
    green: int = 0
    blue: int = 0
    brightness: float = 0.0

    def __post_init__(self) -> None:
        for name in ("red", "green", "blue"):
            object.__setattr__(self, name, validate_channel(getattr(self, name), name))
        if not (0.0 <= self.brightness <= 1.0):
            raise ValueError(
                f"Pixel brightness must be 0.0-1.0, got {self.brightness}"
            )

    @property
    def level(self) -> int:
        """5-bit brightness level sent on the wire."""
        return brightness_to_level(self.brightness)


def brightness_to_level(brightness: float) -> int:
    """
    Convert a 0.0-1.0 brightness into the 5-bit APA102 level.

    Uses Python's round (half to even), so 0.5 maps to 16 (15.5 rounds up to
    the even neighbour).
    """
    level = round(clamp_brightness(brightness) * MAX_LEVEL)
    return min(max(level, 0), MAX_LEVEL)


def end_frame_length(num_pixels: int) -> int:
    """One 0xFF byte per two pixels, rounded up."""
    return (num_pixels + 1) // 2


def pixel_frame(pixel: Pixel) -> Tuple[int, int, int, int]:
    """The four per-pixel frame bytes: header|level, blue, green, red."""
    return (PIXEL_HEADER | pixel.level, pixel.blue, pixel.green, pixel.red)


class APA102Encoder:
    """
    Pure protocol encoder for APA102 chains.

    All methods take pixels and return bytes; nothing is written anywhere.
    """

    def encode_start_frame(self) -> bytes:
        return bytes([START_FRAME_BYTE] * START_FRAME_LENGTH)

    def encode_pixel(self, pixel: Pixel) -> bytes:
        """Encode one pixel as [header|level, blue, green, red]."""
        return bytes(pixel_frame(pixel))

    def encode_end_frame(self, num_pixels: int) -> bytes:
        return bytes([END_FRAME_BYTE] * end_frame_length(num_pixels))

    def encode(self, pixels: Sequence[Pixel]) -> bytes:
        """
        Encode a complete chain refresh.

        Args:
            pixels: Pixels in chain order

        Returns:
            bytes: Start frame, one 4-byte frame per pixel, end frame
        """
        frames = np.empty((len(pixels), 4), dtype=np.uint8)
        for i, pixel in enumerate(pixels):
            frames[i] = pixel_frame(pixel)

        return (
            self.encode_start_frame()
            + frames.tobytes()
            + self.encode_end_frame(len(pixels))
        )
