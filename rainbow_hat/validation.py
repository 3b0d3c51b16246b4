"""
Cross-cutting validation logic for the Rainbow HAT encoders.

This module holds the error taxonomy for caller mistakes and the argument
checks shared by the LED chain, the alphanumeric display and the buzzer.
Transport failures are not validation errors; they surface as
``rainbow_hat.bus.BusError``.

Policies applied here:
- Brightness outside 0.0-1.0 is clamped, never rejected
- Indexes outside the fixed buffer length are rejected
- Note numbers outside 0-127 are rejected
"""

import math
import operator

import numpy as np


class ValidationError(ValueError):
    """Base exception for invalid arguments passed by the caller."""
    pass


class IndexOutOfRange(ValidationError, IndexError):
    """Raised when a pixel or glyph index is outside the fixed buffer."""
    pass


class InvalidNote(ValidationError):
    """Raised when a MIDI note number is outside 0-127."""
    pass


MIN_NOTE = 0
MAX_NOTE = 127


def validate_index(index: int, size: int, what: str = "index") -> None:
    """
    Validate that an index addresses one of ``size`` fixed slots.

    Args:
        index: Position requested by the caller
        size: Length of the fixed buffer
        what: Name used in the error message ("pixel", "digit", ...)

    Raises:
        IndexOutOfRange: If index is not an int within [0, size)
    """
    if isinstance(index, bool) or not isinstance(index, int):
        raise IndexOutOfRange(f"{what} index must be an int, got {index!r}")
    if not 0 <= index < size:
        raise IndexOutOfRange(f"{what} index {index} out of range 0-{size - 1}")


def validate_channel(value: int, name: str) -> int:
    """
    Validate an 8-bit colour channel.

    Any integer type is accepted (numpy integers included) and returned as a
    plain int.

    Raises:
        ValueError: If value is not an integer within 0-255
    """
    if isinstance(value, (bool, np.bool_)):
        raise ValueError(f"{name} must be an int, got {value!r}")
    try:
        value = operator.index(value)
    except TypeError as e:
        raise ValueError(f"{name} must be an int, got {value!r}") from e
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must be 0-255, got {value}")
    return value


def clamp_brightness(brightness: float) -> float:
    """Clamp a brightness value into [0.0, 1.0]. NaN is treated as 0.0."""
    brightness = float(brightness)
    if math.isnan(brightness):
        return 0.0
    return min(max(brightness, 0.0), 1.0)


def validate_note(note_number: int) -> None:
    """
    Validate a MIDI note number.

    Raises:
        InvalidNote: If note_number is not an int within 0-127
    """
    if isinstance(note_number, bool) or not isinstance(note_number, int):
        raise InvalidNote(f"Note number must be an int, got {note_number!r}")
    if not MIN_NOTE <= note_number <= MAX_NOTE:
        raise InvalidNote(
            f"Note number {note_number} out of range {MIN_NOTE}-{MAX_NOTE}"
        )


def validate_duration(duration: float) -> None:
    """
    Validate a tone duration in seconds.

    Raises:
        ValueError: If duration is not a finite number greater than 0
    """
    if not (isinstance(duration, (int, float)) and math.isfinite(duration)):
        raise ValueError(f"Duration must be a finite number, got {duration!r}")
    if duration <= 0:
        raise ValueError(f"Duration must be > 0, got {duration}")
