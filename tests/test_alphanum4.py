"""Tests for the 4-character alphanumeric display buffer."""

import pytest

from rainbow_hat.alphanum4 import COLON_CELL, Alphanum4, GlyphCell
from rainbow_hat.bus import BusError, MockBus
from rainbow_hat.font import BLANK, glyph_for
from rainbow_hat.validation import IndexOutOfRange


@pytest.fixture
def bus():
    return MockBus()


@pytest.fixture
def display(bus):
    display = Alphanum4(bus)
    bus.addressed_writes.clear()
    return display


def expected_ram(*cells):
    return b"".join(cell.pack() for cell in cells)


def test_init_turns_display_on():
    bus = MockBus()
    Alphanum4(bus)
    assert bus.addressed_writes == [(0x21, b""), (0x81, b""), (0xEF, b"")]


def test_glyph_cell_pack():
    """Low byte is bits 0-7, high byte bits 8-13 plus the decimal point."""
    assert GlyphCell(0x3FFF).pack() == bytes([0xFF, 0x3F])
    assert GlyphCell(0x0106, True).pack() == bytes([0x06, 0x41])
    assert GlyphCell().pack() == b"\x00\x00"
    with pytest.raises(ValueError):
        GlyphCell(0x4000)


def test_print_str_and_show(display, bus):
    """print_str fills the buffer; show sends 8 bytes at register 0x00."""
    display.print_str("1234")
    assert [c.segments for c in display.cells] == [glyph_for(c) for c in "1234"]

    display.show()
    assert len(bus.addressed_writes) == 1
    register, data = bus.addressed_writes[0]
    assert register == 0x00
    assert len(data) == 8
    assert data == expected_ram(*(GlyphCell(glyph_for(c)) for c in "1234"))


def test_print_str_truncates(display):
    display.print_str("HELLO")
    assert [c.segments for c in display.cells] == [glyph_for(c) for c in "HELL"]


def test_print_str_blanks_uncovered_positions(display):
    display.print_str("8888")
    display.print_str("AB")
    assert display.cells[2:] == (GlyphCell(), GlyphCell())

    display.print_str("AB", justify_right=True)
    assert display.cells[:2] == (GlyphCell(), GlyphCell())
    assert display.get_cell(3).segments == glyph_for("B")


def test_unknown_characters_render_blank(display):
    display.print_str("AéB")
    assert display.get_cell(1).segments == BLANK
    assert display.get_cell(2).segments == glyph_for("B")


def test_lowercase_matches_uppercase(display):
    display.print_str("abcd")
    lower = display.encode()
    display.print_str("ABCD")
    assert display.encode() == lower


def test_colon(display):
    """The colon indicator is the decimal point of one fixed cell."""
    display.print_str("1230", colon=True)
    data = display.encode()
    assert data[2 * COLON_CELL + 1] & 0x40
    assert sum(1 for cell in display.cells if cell.decimal_point) == 1

    display.print_str("1230")
    assert not any(cell.decimal_point for cell in display.cells)


def test_set_decimal(display):
    display.print_str("AAAA")
    display.set_decimal(3, True)
    assert display.get_cell(3) == GlyphCell(glyph_for("A"), True)

    display.set_digit_raw(3, 0x0001)
    assert display.get_cell(3) == GlyphCell(0x0001, True)

    display.set_decimal(3, False)
    assert display.get_cell(3) == GlyphCell(0x0001, False)


@pytest.mark.parametrize("index", [-1, 4, 10])
def test_index_out_of_range(display, index):
    with pytest.raises(IndexOutOfRange):
        display.set_decimal(index, True)
    with pytest.raises(IndexOutOfRange):
        display.set_digit(index, "A")
    with pytest.raises(IndexOutOfRange):
        display.set_digit_raw(index, 0)


def test_clear(display, bus):
    display.print_str("8888", colon=True)
    display.clear()
    assert display.encode() == b"\x00" * 8
    assert bus.addressed_writes == []


def test_print_number_str(display):
    """Each '.' sets the decimal point of the digit before it."""
    display.print_number_str("1.5")
    assert display.cells == (
        GlyphCell(),
        GlyphCell(),
        GlyphCell(glyph_for("1"), True),
        GlyphCell(glyph_for("5")),
    )

    display.print_number_str("42", justify_right=False)
    assert display.get_cell(0).segments == glyph_for("4")
    assert display.get_cell(2) == GlyphCell()


@pytest.mark.parametrize("value", ["12345", ".5", "1..5"])
def test_print_number_str_rejects(display, value):
    display.print_str("ABCD")
    before = display.cells
    with pytest.raises(ValueError):
        display.print_number_str(value)
    assert display.cells == before


def test_print_float(display):
    display.print_float(3.14159)
    assert display.cells == (
        GlyphCell(),
        GlyphCell(glyph_for("3"), True),
        GlyphCell(glyph_for("1")),
        GlyphCell(glyph_for("4")),
    )

    with pytest.raises(ValueError):
        display.print_float(12345.0, decimal_digits=0)


def test_print_hex(display):
    display.print_hex(0xBEEF)
    assert [c.segments for c in display.cells] == [glyph_for(c) for c in "BEEF"]

    display.print_hex(0x1F)
    assert display.cells[:2] == (GlyphCell(), GlyphCell())
    assert display.get_cell(3).segments == glyph_for("F")

    with pytest.raises(ValueError):
        display.print_hex(0x10000)


def test_bus_error_keeps_buffer(display, bus, monkeypatch):
    display.print_str("WXYZ")
    before = display.cells

    def failing_write(register, data):
        raise BusError("I2C write failed")

    monkeypatch.setattr(bus, "addressed_write", failing_write)
    with pytest.raises(BusError):
        display.show()
    assert display.cells == before


def test_close_blanks_display(display, bus):
    display.print_str("8888")
    display.close()
    assert bus.addressed_writes[-1] == (0x00, b"\x00" * 8)


if __name__ == "__main__":
    pytest.main([__file__])
