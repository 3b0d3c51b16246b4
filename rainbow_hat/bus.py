"""
Bus/GPIO I/O Boundary

This module provides the BusAccess interface used by every encoder in the
package, plus its hardware and mock implementations. Encoders only produce
bytes and frequencies; everything that touches SPI, I2C or GPIO lives here.

Primitives:
- serial_write: one SPI transfer (APA102 chain)
- addressed_write: one I2C register burst (HT16K33 display)
- digital_read: one GPIO level read
- pwm_start / pwm_stop: variable-frequency output on the buzzer pin
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Set, Tuple

from .config import BoardConfig, default_config

logger = logging.getLogger(__name__)


class BusError(Exception):
    """Raised when a bus or GPIO operation fails."""

    pass


class BusAccess(ABC):
    """
    Abstract base class for bus and GPIO access.

    Implementations raise BusError for every transport failure and never
    retry on their own.
    """

    @abstractmethod
    def serial_write(self, data: bytes) -> None:
        """
        Write a byte sequence to the serial (SPI) bus as one transfer.

        Raises:
            BusError: If the write fails
        """
        pass

    @abstractmethod
    def addressed_write(self, register: int, data: bytes) -> None:
        """
        Write a byte sequence to a register of the addressed (I2C) peripheral.

        Args:
            register: Register or command byte
            data: Payload following the register byte, may be empty

        Raises:
            BusError: If the write fails
        """
        pass

    @abstractmethod
    def digital_read(self, pin: int) -> bool:
        """Read the level of a GPIO pin (BCM numbering)."""
        pass

    @abstractmethod
    def pwm_start(self, frequency_hz: float, duty: float) -> None:
        """
        Start (or retune) the variable-frequency output.

        Args:
            frequency_hz: Output frequency in Hz
            duty: Duty cycle in (0, 1]
        """
        pass

    @abstractmethod
    def pwm_stop(self) -> None:
        """Stop the variable-frequency output. Safe to call when stopped."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release every resource held by the bus."""
        pass


class HardwareBus(BusAccess):
    """
    Hardware implementation using spidev, smbus2 and RPi.GPIO.

    Each transport is opened on first use, so a bus used only by the buzzer
    never touches SPI or I2C.
    """

    def __init__(self, config: BoardConfig):
        self.config = config
        self._spi = None
        self._i2c = None
        self._gpio = None
        self._pwm = None
        self._pwm_active = False
        self._pins: Set[int] = set()

    def _open_spi(self):
        if self._spi is None:
            sc = self.config.spi
            try:
                from spidev import SpiDev

                spi = SpiDev()
                spi.open(sc.bus, sc.device)
                spi.max_speed_hz = sc.max_speed_hz
                spi.mode = sc.mode
            except (ImportError, OSError) as e:
                raise BusError(f"SPI open failed: {e}") from e
            self._spi = spi
            logger.info(
                f"Opened SPI {sc.bus}.{sc.device} at {sc.max_speed_hz}Hz (mode {sc.mode})"
            )
        return self._spi

    def _open_i2c(self):
        if self._i2c is None:
            ic = self.config.i2c
            try:
                from smbus2 import SMBus

                self._i2c = SMBus(ic.bus)
            except (ImportError, OSError) as e:
                raise BusError(f"I2C open failed: {e}") from e
            logger.info(f"Opened I2C bus {ic.bus} for device {ic.address:#04x}")
        return self._i2c

    def _open_gpio(self):
        if self._gpio is None:
            try:
                import RPi.GPIO as GPIO
            except (ImportError, RuntimeError) as e:
                raise BusError(f"RPi.GPIO not available: {e}") from e
            GPIO.setmode(GPIO.BCM)
            GPIO.setwarnings(False)
            self._gpio = GPIO
            logger.info("GPIO initialized (BCM mode)")
        return self._gpio

    def serial_write(self, data: bytes) -> None:
        spi = self._open_spi()
        try:
            spi.writebytes2(bytes(data))
        except Exception as e:
            raise BusError(f"SPI write failed: {e}") from e

    def addressed_write(self, register: int, data: bytes) -> None:
        i2c = self._open_i2c()
        address = self.config.i2c.address
        try:
            if data:
                i2c.write_i2c_block_data(address, register & 0xFF, list(data))
            else:
                i2c.write_byte(address, register & 0xFF)
        except Exception as e:
            raise BusError(
                f"I2C write to {address:#04x} register {register:#04x} failed: {e}"
            ) from e

    def digital_read(self, pin: int) -> bool:
        GPIO = self._open_gpio()
        try:
            if pin not in self._pins:
                GPIO.setup(pin, GPIO.IN, pull_up_down=GPIO.PUD_UP)
                self._pins.add(pin)
            return bool(GPIO.input(pin))
        except Exception as e:
            raise BusError(f"GPIO{pin} read failed: {e}") from e

    def pwm_start(self, frequency_hz: float, duty: float) -> None:
        GPIO = self._open_gpio()
        pin = self.config.buzzer.pin
        try:
            if self._pwm is None:
                GPIO.setup(pin, GPIO.OUT, initial=GPIO.LOW)
                self._pins.add(pin)
                self._pwm = GPIO.PWM(pin, frequency_hz)
            else:
                self._pwm.ChangeFrequency(frequency_hz)

            if self._pwm_active:
                self._pwm.ChangeDutyCycle(duty * 100.0)
            else:
                self._pwm.start(duty * 100.0)
                self._pwm_active = True
        except Exception as e:
            raise BusError(f"PWM start on GPIO{pin} failed: {e}") from e

    def pwm_stop(self) -> None:
        if self._pwm is None or not self._pwm_active:
            return
        try:
            self._pwm.stop()
        except Exception as e:
            raise BusError(f"PWM stop failed: {e}") from e
        finally:
            self._pwm_active = False

    def _release_steps(self):
        steps = [("PWM", self.pwm_stop)]
        if self._spi is not None:
            steps.append(("SPI", self._spi.close))
        if self._i2c is not None:
            steps.append(("I2C", self._i2c.close))
        if self._gpio is not None and self._pins:
            gpio, pins = self._gpio, sorted(self._pins)
            steps.append(("GPIO", lambda: gpio.cleanup(pins)))
        return steps

    def close(self) -> None:
        """
        Release every transport, each independently of the others.

        Raises:
            BusError: For the first release that failed, after all were tried
        """
        failure = None
        for name, release in self._release_steps():
            try:
                release()
            except Exception as e:
                logger.error(f"{name} release failed: {e}")
                failure = failure or e

        self._spi = None
        self._i2c = None
        self._pwm = None
        self._pins.clear()

        if failure is not None:
            raise BusError(f"Hardware bus close failed: {failure}") from failure
        logger.info("Closed hardware bus")


class MockBus(BusAccess):
    """
    Mock implementation for testing and development.

    Records every write and PWM change instead of touching hardware. Pin levels
    returned by digital_read are set with set_pin.
    """

    def __init__(self, config: Optional[BoardConfig] = None):
        self.config = config or default_config()
        self.serial_writes: List[bytes] = []
        self.addressed_writes: List[Tuple[int, bytes]] = []
        self.pwm_events: List[Tuple] = []
        self.pwm_active = False
        self.pwm_frequency: Optional[float] = None
        self.pwm_duty: Optional[float] = None
        self._levels = {}
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise BusError("Mock bus is closed")

    def serial_write(self, data: bytes) -> None:
        self._check_open()
        self.serial_writes.append(bytes(data))
        logger.debug(f"[MOCK] serial_write: {len(data)} bytes")

    def addressed_write(self, register: int, data: bytes) -> None:
        self._check_open()
        self.addressed_writes.append((register & 0xFF, bytes(data)))
        logger.debug(
            f"[MOCK] addressed_write: register {register:#04x}, {len(data)} bytes"
        )

    def set_pin(self, pin: int, level: bool) -> None:
        self._levels[pin] = bool(level)

    def digital_read(self, pin: int) -> bool:
        self._check_open()
        return self._levels.get(pin, True)

    def pwm_start(self, frequency_hz: float, duty: float) -> None:
        self._check_open()
        self.pwm_active = True
        self.pwm_frequency = frequency_hz
        self.pwm_duty = duty
        self.pwm_events.append(("start", frequency_hz, duty))
        logger.debug(f"[MOCK] pwm_start: {frequency_hz:.3f}Hz, duty {duty:.2f}")

    def pwm_stop(self) -> None:
        if self.pwm_active:
            self.pwm_events.append(("stop",))
            logger.debug("[MOCK] pwm_stop")
        self.pwm_active = False

    def close(self) -> None:
        self.pwm_stop()
        self._closed = True
        logger.info("[MOCK] Closed bus")


def create_bus(
    config: Optional[BoardConfig] = None, use_hardware: Optional[bool] = None
) -> BusAccess:
    """
    Factory function to create the appropriate bus implementation.

    Args:
        config: Board configuration (default: the fixed board pinout)
        use_hardware: Force hardware (True) or mock (False). If None, uses config.mock

    Returns:
        BusAccess: Hardware or mock implementation
    """
    config = config or default_config()
    if use_hardware is None:
        use_hardware = not config.mock

    if use_hardware:
        logger.info("Creating hardware bus")
        return HardwareBus(config)
    else:
        logger.info("Creating mock bus")
        return MockBus(config)
