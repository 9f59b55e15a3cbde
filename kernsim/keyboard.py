"""PS/2 scan code set 1 handling with per-terminal line buffers."""

from __future__ import annotations

from typing import Callable, Optional

from kernsim.console import NUM_TERMINALS, Console
from kernsim.pic import PIC

BS = 0x08
ENTR = 0x28
KEY_IRQ = 1
KEY_DP = 0x60
MAX_SCAN = 58
MAX_BUFFER = 128
TAB = 15

LEFT_SHIFT = 0x2A
LEFT_RELEASE = 0xAA
RIGHT_SHIFT = 0x36
RIGHT_RELEASE = 0xB6
CTRL = 0x1D
CTRL_RELEASE = 0x9D
CAPS = 0x3A
ALT = 56
ALT_RELEASE = 0xB8
F1 = 0x3B
F2 = 0x3C
F3 = 0x3D

Q, P = 0x10, 0x19
A, L = 0x1E, 0x26
Z, M = 0x2C, 0x32

_TABLE: tuple[tuple[str, str], ...] = (
    ("\0", "\0"), ("\0", "\0"),
    ("1", "!"), ("2", "@"), ("3", "#"), ("4", "$"),
    ("5", "%"), ("6", "^"), ("7", "&"), ("8", "*"),
    ("9", "("), ("0", ")"), ("-", "_"), ("=", "+"),
    (chr(BS), chr(BS)), ("\t", "\t"),
    ("q", "Q"), ("w", "W"), ("e", "E"), ("r", "R"),
    ("t", "T"), ("y", "Y"), ("u", "U"), ("i", "I"),
    ("o", "O"), ("p", "P"), ("[", "{"), ("]", "}"),
    (chr(ENTR), chr(ENTR)), ("\0", "\0"),
    ("a", "A"), ("s", "S"), ("d", "D"), ("f", "F"),
    ("g", "G"), ("h", "H"), ("j", "J"), ("k", "K"),
    ("l", "L"), (";", ":"), ("'", '"'), ("`", "~"),
    ("\0", "\0"), ("\\", "|"),
    ("z", "Z"), ("x", "X"), ("c", "C"), ("v", "V"),
    ("b", "B"), ("n", "N"), ("m", "M"), (",", "<"),
    (".", ">"), ("/", "?"),
    ("\0", "\0"), ("\0", "\0"), ("\0", "\0"), (" ", " "),
)

_MODIFIERS = {
    LEFT_SHIFT: ("left_shift", True),
    LEFT_RELEASE: ("left_shift", False),
    RIGHT_SHIFT: ("right_shift", True),
    RIGHT_RELEASE: ("right_shift", False),
    CTRL: ("ctrl", True),
    CTRL_RELEASE: ("ctrl", False),
    ALT: ("alt", True),
    ALT_RELEASE: ("alt", False),
}

_FUNCTION_KEYS = {F1: 0, F2: 1, F3: 2}


def _is_letter(code: int) -> bool:
    return Q <= code <= P or A <= code <= L or Z <= code <= M


def translate_scancode(code: int, shift: bool, caps: bool) -> str:
    """Return the character a make code produces under shift and caps lock.

    Caps lock only affects letters; holding shift with caps lock on gives a
    lower-case letter.
    """
    if not 1 < code < MAX_SCAN:
        raise ValueError(f"scan code {code:#x} has no character")
    plain, shifted = _TABLE[code]
    if _is_letter(code):
        return shifted if shift != caps else plain
    return shifted if shift else plain


class Keyboard:
    """Turns scan codes into characters for the terminal on display.

    Typed characters are echoed on ``console`` and passed to ``on_input``.
    Each terminal has its own line buffer; only terminals switched on with
    :meth:`enable` accept typing. Alt+F1..F3 mark a request to switch to
    terminal 0..2 in ``switch_requests``.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        pic: Optional[PIC] = None,
        on_input: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.console = console if console is not None else Console()
        self.pic = pic if pic is not None else PIC()
        self.on_input = on_input
        self.left_shift = False
        self.right_shift = False
        self.ctrl = False
        self.caps = False
        self.alt = False
        self.enabled = [False] * NUM_TERMINALS
        self.switch_requests = [False] * NUM_TERMINALS
        self._buffers = [["\0"] * MAX_BUFFER for _ in range(NUM_TERMINALS)]
        self._count = 0
        self._saved_counts = [0] * NUM_TERMINALS

    @property
    def shift(self) -> bool:
        """Whether either shift key is held."""
        return self.left_shift or self.right_shift

    def enable(self, terminal: int) -> None:
        """Let ``terminal`` accept typed input and unmask the keyboard IRQ."""
        if not 0 <= terminal < NUM_TERMINALS:
            raise ValueError(f"terminal index must be in 0..{NUM_TERMINALS - 1}")
        self.enabled[terminal] = True
        self.pic.enable_irq(KEY_IRQ)

    def _emit(self, ch: str) -> None:
        if self.on_input is not None:
            self.on_input(ch)
        self.console.key_putc(ch)

    def handle_scancode(self, code: int) -> None:
        """Process one byte read from the keyboard data port."""
        self.pic.send_eoi(KEY_IRQ)
        try:
            self._dispatch(code)
        finally:
            self.pic.send_eoi(KEY_IRQ)

    def _dispatch(self, code: int) -> None:
        if code in _MODIFIERS:
            name, state = _MODIFIERS[code]
            setattr(self, name, state)
            return
        if code == CAPS:
            self.caps = not self.caps
            return
        if self.alt and code in _FUNCTION_KEYS:
            self.switch_requests[_FUNCTION_KEYS[code]] = True
            return
        term = self.console.displayed
        if not (1 < code < MAX_SCAN and self.enabled[term]):
            return
        buf = self._buffers[term]
        key = _TABLE[code][0]
        if key == chr(ENTR):
            buf[:self._count] = ["\0"] * self._count
            self._emit("\n")
            self._count = 0
        elif key == chr(BS):
            if self._count > 0:
                self._emit("\b")
                self._count -= 1
                buf[self._count] = "\0"
        elif code == L and self.ctrl:
            self.console.clear()
            for ch in buf[:self._count]:
                self.console.key_putc(ch)
        elif code == TAB:
            if self._count + 4 < MAX_BUFFER - 1:
                for _ in range(4):
                    buf[self._count] = "\t"
                    self._count += 1
                    self._emit(" ")
        elif self._count < MAX_BUFFER - 1:
            ch = translate_scancode(code, self.shift, self.caps)
            buf[self._count] = ch
            self._count += 1
            self._emit(ch)

    def switch_buffer(self, index: int) -> None:
        """Save the line length of the displayed terminal and restore ``index``'s."""
        if not 0 <= index < NUM_TERMINALS:
            raise ValueError(f"terminal index must be in 0..{NUM_TERMINALS - 1}")
        self._saved_counts[self.console.displayed] = self._count
        self._count = self._saved_counts[index]

    def buffer(self) -> str:
        """Return the line typed so far on the terminal on display."""
        return "".join(self._buffers[self.console.displayed][:self._count])