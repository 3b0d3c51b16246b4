"""Tests for the LedChain framebuffer and its flush to the bus."""

import numpy as np
import pytest

from rainbow_hat.apa102 import Pixel
from rainbow_hat.bus import BusError, MockBus
from rainbow_hat.config import BoardConfig
from rainbow_hat.rainbow import DEFAULT_BRIGHTNESS, LedChain
from rainbow_hat.validation import IndexOutOfRange


@pytest.fixture
def bus():
    return MockBus()


@pytest.fixture
def chain(bus):
    return LedChain(bus)


def test_initial_buffer(chain):
    """A new chain holds 7 black pixels at the default brightness."""
    assert len(chain) == 7
    assert chain.pixels == (Pixel(brightness=DEFAULT_BRIGHTNESS),) * 7
    assert chain.get_pixel(0).level == 7


def test_set_get_round_trip(chain):
    """set_pixel stores the colour and the clamped brightness."""
    chain.set_pixel(3, 255, 128, 0, 0.5)
    assert chain.get_pixel(3) == Pixel(255, 128, 0, 0.5)

    chain.set_pixel(4, 1, 2, 3, 7.0)
    assert chain.get_pixel(4).brightness == 1.0

    chain.set_pixel(5, 1, 2, 3, -1.0)
    assert chain.get_pixel(5).brightness == 0.0


def test_index_out_of_range(chain):
    """Positions outside 0..N-1 are rejected without touching the buffer."""
    before = chain.pixels
    for index in (-1, 7, 100):
        with pytest.raises(IndexOutOfRange):
            chain.set_pixel(index, 1, 2, 3)
    with pytest.raises(IndexOutOfRange):
        chain.get_pixel(7)
    assert chain.pixels == before


def test_channel_out_of_range(chain):
    with pytest.raises(ValueError):
        chain.set_pixel(0, 256, 0, 0)


def test_numpy_channels(chain):
    """numpy integers are valid channel values and are stored as plain ints."""
    chain.set_pixel(0, np.uint8(10), np.uint8(20), np.uint8(30), 1.0)
    chain.set_all(np.int64(1), np.uint16(2), np.uint8(3), 0.5)
    chain.set_pixel(6, np.uint8(255), 0, np.int32(7), np.float32(1.0))

    pixel = chain.get_pixel(6)
    assert pixel == Pixel(255, 0, 7, 1.0)
    assert type(pixel.red) is int
    assert chain.encode()[4 + 4 * 6:4 + 4 * 7] == bytes([0xFF, 7, 0, 255])

    with pytest.raises(ValueError):
        chain.set_pixel(0, np.uint16(256), 0, 0)
    with pytest.raises(ValueError):
        chain.set_pixel(0, np.True_, 0, 0)


def test_set_does_not_write(chain, bus):
    """Buffer mutations never reach the bus on their own."""
    chain.set_pixel(0, 10, 20, 30)
    chain.set_all(1, 1, 1)
    chain.set_brightness(0.2)
    chain.clear()
    assert bus.serial_writes == []


def test_show_is_single_write(chain, bus):
    """show() sends the full encoded stream in exactly one serial write."""
    chain.set_pixel(0, 0x11, 0x22, 0x33, 1.0)
    chain.show()

    assert len(bus.serial_writes) == 1
    frame = bus.serial_writes[0]
    assert frame == chain.encode()
    assert len(frame) == 4 + 4 * 7 + 4
    assert frame[4:8] == bytes([0xFF, 0x33, 0x22, 0x11])
    assert bus.addressed_writes == []


def test_show_is_idempotent(chain, bus):
    """Repeated show() without changes sends identical streams."""
    chain.set_all(9, 8, 7, 0.4)
    chain.show()
    chain.show()
    assert bus.serial_writes[0] == bus.serial_writes[1]


def test_identical_buffers_identical_bytes(bus):
    """Two chains with the same contents encode to the same bytes."""
    a = LedChain(bus)
    b = LedChain(MockBus())
    for chain in (a, b):
        chain.set_pixel(2, 100, 50, 25, 0.75)
    assert a.encode() == b.encode()


def test_bus_error_keeps_buffer(chain, bus, monkeypatch):
    """A failed write propagates BusError and leaves the buffer intact."""
    chain.set_pixel(1, 5, 6, 7, 0.3)
    before = chain.pixels

    def failing_write(data):
        raise BusError("SPI write failed")

    monkeypatch.setattr(bus, "serial_write", failing_write)
    with pytest.raises(BusError):
        chain.show()
    assert chain.pixels == before


def test_clear_keeps_brightness(chain):
    chain.set_all(200, 100, 50, 0.6)
    chain.clear()
    assert all(p == Pixel(0, 0, 0, 0.6) for p in chain.pixels)


def test_set_brightness_keeps_colour(chain):
    chain.set_pixel(0, 10, 20, 30, 0.1)
    chain.set_brightness(2.0)
    assert chain.get_pixel(0) == Pixel(10, 20, 30, 1.0)
    assert all(p.brightness == 1.0 for p in chain.pixels)


def test_close_blanks_and_keeps_injected_bus(chain, bus):
    """close() sends a black frame but leaves an injected bus open."""
    chain.set_all(255, 255, 255, 1.0)
    chain.close()

    last = bus.serial_writes[-1]
    for i in range(7):
        assert last[4 + 4 * i + 1:4 + 4 * i + 4] == b"\x00\x00\x00"
    bus.serial_write(b"\x00")


def test_context_manager_owns_bus():
    """A chain created without a bus closes its own mock bus on exit."""
    with LedChain() as chain:
        chain.set_pixel(0, 1, 2, 3)
        chain.show()
        bus = chain.bus
    with pytest.raises(BusError):
        bus.serial_write(b"\x00")


def test_from_config_uses_pixel_count():
    chain = LedChain.from_config(BoardConfig(num_pixels=3), bus=MockBus())
    assert len(chain) == 3
    assert len(chain.encode()) == 4 + 4 * 3 + 2


def test_invalid_chain_length():
    with pytest.raises(ValueError):
        LedChain(MockBus(), num_pixels=0)


if __name__ == "__main__":
    pytest.main([__file__])
