"""
Piezo buzzer tone generator.

Converts MIDI note numbers to equal-tempered frequencies (note 69 = A4 =
440 Hz) and drives the buzzer's PWM output for a fixed duration.
"""

import logging
import threading
from typing import Callable, Optional

from .bus import BusAccess, create_bus
from .config import BUZZER_DUTY, BoardConfig
from .validation import validate_duration, validate_note

logger = logging.getLogger(__name__)


A4_NOTE = 69
A4_FREQUENCY = 440.0


def midi_note_to_frequency(note_number: int) -> float:
    """
    Get the frequency in Hz of a MIDI note.

    Raises:
        InvalidNote: If note_number is not an int within 0-127
    """
    validate_note(note_number)
    return A4_FREQUENCY * 2.0 ** ((note_number - A4_NOTE) / 12.0)


class Buzzer:
    """
    Tone generator for the piezo buzzer.

    play_note() and note() block for the duration of the tone. The output is
    stopped on every exit path, including errors and KeyboardInterrupt.
    """

    def __init__(
        self,
        bus: Optional[BusAccess] = None,
        duty: float = BUZZER_DUTY,
        sleep: Optional[Callable[[float], object]] = None,
    ):
        """
        Args:
            bus: Bus driving the PWM output (default: created from the default config)
            duty: PWM duty cycle in (0, 1]
            sleep: Blocking wait used for note durations (default: a wait that
                stop() cuts short)
        """
        self._owns_bus = bus is None
        self.bus = bus or create_bus()
        self.duty = duty
        if not (0.0 < self.duty <= 1.0):
            raise ValueError(f"Duty must be in (0, 1], got {self.duty}")
        self._stopped = threading.Event()
        self._sleep = sleep or self._stopped.wait
        self._playing = False

    @classmethod
    def from_config(
        cls, config: BoardConfig, bus: Optional[BusAccess] = None
    ) -> "Buzzer":
        buzzer = cls(bus or create_bus(config), duty=config.buzzer.duty)
        buzzer._owns_bus = bus is None
        return buzzer

    def __enter__(self) -> "Buzzer":
        return self

    def __exit__(self, exc_type, exc_value, tb) -> None:
        self.close()

    @property
    def playing(self) -> bool:
        return self._playing

    def note(self, frequency_hz: float, duration_seconds: float) -> None:
        """
        Play a raw frequency.

        Args:
            frequency_hz: Frequency in Hz, > 0
            duration_seconds: Tone length in seconds, > 0

        Raises:
            ValueError: If frequency or duration is not positive
            BusError: If the PWM output fails
        """
        if not frequency_hz > 0:
            raise ValueError(f"Frequency must be > 0, got {frequency_hz}")
        validate_duration(duration_seconds)

        logger.debug(f"Playing {frequency_hz:.3f}Hz for {duration_seconds:.3f}s")
        try:
            self._stopped.clear()
            self._playing = True
            self.bus.pwm_start(frequency_hz, self.duty)
            self._sleep(duration_seconds)
        finally:
            self.stop()

    def play_note(self, note_number: int, duration_seconds: float) -> None:
        """
        Play a MIDI note.

        Raises:
            InvalidNote: If note_number is not within 0-127
            ValueError: If duration is not positive
            BusError: If the PWM output fails
        """
        validate_note(note_number)
        validate_duration(duration_seconds)
        self.note(midi_note_to_frequency(note_number), duration_seconds)

    def stop(self) -> None:
        """
        Silence the buzzer immediately. Safe to call when silent.

        May be called from another thread to end a note early.
        """
        self._stopped.set()
        try:
            self.bus.pwm_stop()
        finally:
            self._playing = False

    def close(self) -> None:
        try:
            self.stop()
        finally:
            if self._owns_bus:
                self.bus.close()
