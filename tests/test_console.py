import pytest

from kernsim.console import ATTRIB, NUM_COLS, NUM_ROWS, Console
from kernsim.text import format_printf


@pytest.fixture
def console():
    return Console()


def test_puts_writes_text_and_moves_cursor(console):
    assert console.puts("hi") == 2
    assert console.row(0) == "hi"
    assert console.cursor(0) == (2, 0)


def test_written_cells_carry_default_attribute(console):
    console.putc("A")
    assert console.video[0] == ord("A")
    assert console.video[1] == ATTRIB


def test_puts_stops_at_nul(console):
    assert console.puts("ab\0cd") == 2
    assert console.row(0) == "ab"


def test_newline_moves_to_next_row(console):
    console.puts("abc\n")
    assert console.cursor(0) == (0, 1)
    console.putc("\r")
    assert console.cursor(0) == (0, 2)


def test_wrap_then_backspace_returns_to_previous_row(console):
    console.puts("a" * NUM_COLS)
    assert console.cursor(0) == (0, 1)
    console.putc("\b")
    assert console.cursor(0) == (NUM_COLS - 1, 0)
    assert console.row(0) == "a" * (NUM_COLS - 1)


def test_backspace_at_left_edge_without_wrap_stays(console):
    console.putc("\n")
    console.putc("\b")
    assert console.cursor(0) == (0, 1)


def test_backspace_erases_previous_character(console):
    console.puts("xyz")
    console.putc("\b")
    assert console.row(0) == "xy"
    assert console.cursor(0) == (2, 0)


def test_newline_on_last_row_scrolls(console):
    console.puts("first\nsecond")
    console.puts("\n" * (NUM_ROWS - 1))
    assert console.cursor(0) == (0, NUM_ROWS - 1)
    assert console.row(0) == "second"
    assert console.row(NUM_ROWS - 1) == ""


def test_printf_returns_format_length_and_prints(console):
    fmt = "v=%d h=%#x s=%s"
    result = console.printf(fmt, -5, 255, "ok")
    assert result == len(fmt)
    assert console.row(0) == format_printf(fmt, -5, 255, "ok")


def test_clear_blanks_screen_and_homes_cursor(console):
    console.puts("hello\nworld")
    console.clear()
    assert console.text() == "\n" * (NUM_ROWS - 1)
    assert console.cursor(0) == (0, 0)
    assert console.hardware_cursor == 0


def test_hardware_cursor_tracks_displayed_cursor(console):
    console.puts("ab\ncd")
    x, y = console.cursor(0)
    assert console.hardware_cursor == y * NUM_COLS + x


def test_switch_terminal_preserves_each_screen(console):
    console.puts("one")
    console.switch_terminal(1)
    assert console.displayed == 1
    assert console.row(0) == ""
    console.key_putc("t")
    console.switch_terminal(0)
    assert console.row(0) == "one"
    console.switch_terminal(1)
    assert console.row(0) == "t"


def test_background_output_goes_to_backing_screen(console):
    console.scheduled = 2
    console.puts("bg")
    assert console.row(0) == ""
    assert console.cursor(2) == (2, 0)
    assert console.cursor(0) == (0, 0)
    console.switch_terminal(2)
    assert console.row(0) == "bg"


def test_key_putc_uses_displayed_terminal(console):
    console.scheduled = 1
    console.key_putc("k")
    assert console.row(0) == "k"
    assert console.cursor(0) == (1, 0)
    assert console.cursor(1) == (0, 0)


def test_invalid_terminal_index_rejected(console):
    with pytest.raises(ValueError):
        console.switch_terminal(3)
    with pytest.raises(ValueError):
        console.scheduled = -1


def test_putc_rejects_multi_character_string(console):
    with pytest.raises(ValueError):
        console.putc("ab")


def test_row_out_of_range(console):
    with pytest.raises(IndexError):
        console.row(NUM_ROWS)