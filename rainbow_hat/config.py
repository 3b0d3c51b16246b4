# rainbow_hat/config.py
from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


# Fixed pinout of the target board
NUM_PIXELS = 7
NUM_DIGITS = 4
HT16K33_ADDRESS = 0x70
BUZZER_PIN = 13
BUZZER_DUTY = 0.9


@dataclass(frozen=True)
class SpiConfig:
    """SPI port carrying the APA102 chain (DAT=GPIO10, CLK=GPIO11, CS=GPIO8)."""

    bus: int = 0
    device: int = 0
    max_speed_hz: int = 1_000_000
    mode: int = 0

    def __post_init__(self) -> None:
        if self.bus < 0 or self.device < 0:
            raise ValueError(
                f"SPI bus/device must be non-negative, got {self.bus}.{self.device}"
            )
        if self.max_speed_hz <= 0:
            raise ValueError("SPI max_speed_hz must be > 0")
        if self.mode not in (0, 1, 2, 3):
            raise ValueError(f"SPI mode must be 0-3, got {self.mode}")


@dataclass(frozen=True)
class I2cConfig:
    """I2C port and address of the HT16K33 display controller."""

    bus: int = 1
    address: int = HT16K33_ADDRESS

    def __post_init__(self) -> None:
        if self.bus < 0:
            raise ValueError(f"I2C bus must be non-negative, got {self.bus}")
        if not (0x03 <= self.address <= 0x77):
            raise ValueError(
                f"I2C address must be 0x03-0x77, got {self.address:#04x}"
            )


@dataclass(frozen=True)
class BuzzerConfig:
    pin: int = BUZZER_PIN
    duty: float = BUZZER_DUTY

    def __post_init__(self) -> None:
        if self.pin < 0:
            raise ValueError(f"Buzzer pin must be non-negative, got {self.pin}")
        if not (0.0 < self.duty <= 1.0):
            raise ValueError(f"Buzzer duty must be in (0, 1], got {self.duty}")


@dataclass(frozen=True)
class BoardConfig:
    num_pixels: int = NUM_PIXELS
    spi: SpiConfig = field(default_factory=SpiConfig)
    i2c: I2cConfig = field(default_factory=I2cConfig)
    buzzer: BuzzerConfig = field(default_factory=BuzzerConfig)
    mock: bool = True

    def __post_init__(self) -> None:
        if self.num_pixels <= 0:
            raise ValueError(f"num_pixels must be > 0, got {self.num_pixels}")


def load_from_toml(config_path: str | Path) -> BoardConfig:
    """
    Load a BoardConfig from a TOML file.

    Every table and key is optional; missing values fall back to the fixed
    board defaults.

    Expected TOML structure:

    [board]
    num_pixels = 7
    mock = false

    [spi]
    bus = 0
    device = 0
    max_speed_hz = 1000000
    mode = 0

    [i2c]
    bus = 1
    address = 0x70

    [buzzer]
    pin = 13
    duty = 0.9
    """
    p = Path(config_path)
    if not p.exists():
        raise FileNotFoundError(f"Configuration file not found: {p}")

    with p.open("rb") as f:
        data = tomllib.load(f)

    board = data.get("board") or {}
    spi = data.get("spi") or {}
    i2c = data.get("i2c") or {}
    buzzer = data.get("buzzer") or {}

    cfg = BoardConfig(
        num_pixels=int(board.get("num_pixels", NUM_PIXELS)),
        spi=SpiConfig(
            bus=int(spi.get("bus", 0)),
            device=int(spi.get("device", 0)),
            max_speed_hz=int(spi.get("max_speed_hz", 1_000_000)),
            mode=int(spi.get("mode", 0)),
        ),
        i2c=I2cConfig(
            bus=int(i2c.get("bus", 1)),
            address=int(i2c.get("address", HT16K33_ADDRESS)),
        ),
        buzzer=BuzzerConfig(
            pin=int(buzzer.get("pin", BUZZER_PIN)),
            duty=float(buzzer.get("duty", BUZZER_DUTY)),
        ),
        mock=bool(board.get("mock", True)),
    )

    logger.info(
        "Loaded BoardConfig: %d pixels, spi=%d.%d@%dHz, i2c=%d@%#04x, buzzer=GPIO%d (mock=%s)",
        cfg.num_pixels,
        cfg.spi.bus,
        cfg.spi.device,
        cfg.spi.max_speed_hz,
        cfg.i2c.bus,
        cfg.i2c.address,
        cfg.buzzer.pin,
        cfg.mock,
    )
    return cfg


def default_config() -> BoardConfig:
    """The fixed Rainbow HAT pinout, with the mock bus selected."""
    return BoardConfig()
