"""A text-mode console with three virtual terminals sharing one screen."""

from __future__ import annotations

from typing import Union

from kernsim.text import format_printf

NUM_COLS = 80
NUM_ROWS = 25
ATTRIB = 0x07
NUM_TERMINALS = 3

Char = Union[str, bytes, int]


def _blank_screen() -> bytearray:
    return bytearray([0x00, ATTRIB] * (NUM_COLS * NUM_ROWS))


def _code_of(c: Char) -> int:
    if isinstance(c, int):
        if not 0 <= c <= 0xFF:
            raise ValueError(f"character code out of range: {c}")
        return c
    if isinstance(c, (bytes, bytearray)):
        if len(c) != 1:
            raise ValueError("expected a single byte")
        return c[0]
    if len(c) != 1:
        raise ValueError("expected a single character")
    return ord(c) & 0xFF


def _check_terminal(index: int) -> int:
    if not 0 <= index < NUM_TERMINALS:
        raise ValueError(f"terminal index must be in 0..{NUM_TERMINALS - 1}, got {index}")
    return index


class Console:
    """An 80x25 text screen shown by one of three terminals at a time.

    ``video`` holds the visible screen as character/attribute byte pairs.
    Each terminal not on display keeps its contents in a backing screen.
    Output from :meth:`putc` goes to the terminal in ``scheduled``; output
    from :meth:`key_putc` always goes to the terminal on display.
    """

    def __init__(self) -> None:
        self.video = _blank_screen()
        self._backing = [_blank_screen() for _ in range(NUM_TERMINALS)]
        self._cursors = [[0, 0] for _ in range(NUM_TERMINALS)]
        self._wrapped = [False] * NUM_TERMINALS
        self.displayed = 0
        self._prev_terminal = 0
        self._scheduled = 0
        self._echo = False
        self.hardware_cursor = 0

    @property
    def scheduled(self) -> int:
        """The terminal whose program is currently running."""
        return self._scheduled

    @scheduled.setter
    def scheduled(self, index: int) -> None:
        self._scheduled = _check_terminal(index)

    def _screen_for(self, idx: int) -> bytearray:
        return self.video if idx == self.displayed else self._backing[idx]

    def _update_cursor(self) -> None:
        x, y = self._cursors[self.displayed]
        self.hardware_cursor = (y * NUM_COLS + x) & 0xFFFF

    @staticmethod
    def _scroll(screen: bytearray, fill: int) -> None:
        body = (NUM_ROWS - 1) * NUM_COLS * 2
        screen[0:body] = screen[NUM_COLS * 2:NUM_COLS * 2 + body]
        screen[1:body:2] = bytes([ATTRIB]) * (body // 2)
        screen[body:] = bytes([fill, ATTRIB]) * NUM_COLS

    @staticmethod
    def _set_cell(screen: bytearray, x: int, y: int, code: int) -> None:
        offset = (NUM_COLS * y + x) * 2
        screen[offset] = code
        screen[offset + 1] = ATTRIB

    def putc(self, c: Char) -> None:
        """Write one character, handling newline, backspace, wrap and scroll."""
        code = _code_of(c)
        idx = self.displayed if self._echo else self._scheduled
        screen = self._screen_for(idx)
        cursor = self._cursors[idx]
        shown = self.displayed

        if code in (0x0A, 0x0D):
            cursor[1] += 1
            cursor[0] = 0
            self._wrapped[shown] = False
            if cursor[1] >= NUM_ROWS:
                self._scroll(screen, 0x00)
                cursor[1] -= 1
        elif code == 0x08:
            if cursor[0] != 0:
                cursor[0] -= 1
            elif self._wrapped[shown]:
                cursor[1] -= 1
                cursor[0] = NUM_COLS - 1
                self._wrapped[shown] = False
            self._set_cell(screen, cursor[0], cursor[1], 0x00)
            cursor[1] = (cursor[1] + cursor[0] // NUM_COLS) % NUM_ROWS
            cursor[0] %= NUM_COLS
        else:
            self._set_cell(screen, cursor[0], cursor[1], code)
            cursor[0] += 1
            if cursor[0] >= NUM_COLS:
                cursor[1] += 1
                self._wrapped[shown] = True
                if cursor[1] >= NUM_ROWS:
                    self._scroll(screen, ord(" "))
                    cursor[1] -= 1
            cursor[0] %= NUM_COLS
            cursor[1] = (cursor[1] + cursor[0] // NUM_COLS) % NUM_ROWS
        self._update_cursor()

    def key_putc(self, c: Char) -> None:
        """Echo a typed character on the terminal that is on display."""
        self._echo = True
        try:
            self.putc(c)
        finally:
            self._echo = False

    def puts(self, s: Union[str, bytes]) -> int:
        """Write a string up to its first NUL; return the characters written."""
        written = 0
        for ch in s:
            code = _code_of(ch)
            if code == 0:
                break
            self.putc(code)
            written += 1
        return written

    def printf(self, fmt: str, *args: object) -> int:
        """Print with the kernel's printf conversions.

        Returns the length of the format string, as the kernel does.
        """
        self.puts(format_printf(fmt, *args))
        return len(fmt)

    def clear(self) -> None:
        """Blank the visible screen and home the displayed terminal's cursor."""
        self.video[:] = _blank_screen()
        self._cursors[self.displayed] = [0, 0]
        self._update_cursor()

    def switch_terminal(self, index: int) -> None:
        """Save the visible screen and bring terminal ``index`` to the front."""
        _check_terminal(index)
        self._backing[self.displayed][:] = self.video
        if self._prev_terminal != index:
            self._prev_terminal = index
            self.displayed = index
            self.video[:] = self._backing[index]
        self._update_cursor()

    def cursor(self, terminal: int) -> tuple[int, int]:
        """Return the ``(x, y)`` cursor of a terminal."""
        x, y = self._cursors[_check_terminal(terminal)]
        return x, y

    def row(self, y: int) -> str:
        """Return row ``y`` of the visible screen, NULs as spaces, right-trimmed."""
        if not 0 <= y < NUM_ROWS:
            raise IndexError(f"row must be in 0..{NUM_ROWS - 1}, got {y}")
        start = y * NUM_COLS * 2
        chars = self.video[start:start + NUM_COLS * 2:2]
        return chars.replace(b"\0", b" ").decode("latin-1").rstrip(" ")

    def text(self) -> str:
        """Return the whole visible screen as lines joined by newlines."""
        return "\n".join(self.row(y) for y in range(NUM_ROWS))