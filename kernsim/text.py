"""Small string helpers and the kernel's minimal printf formatter."""

from __future__ import annotations

from typing import Union

_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_UINT32_MASK = 0xFFFFFFFF

Text = Union[str, bytes]


def _as_uint32(value: int) -> int:
    return int(value) & _UINT32_MASK


def _as_int32(value: int) -> int:
    value = _as_uint32(value)
    return value - (1 << 32) if value & 0x80000000 else value


def itoa(value: int, radix: int = 10) -> str:
    """Render ``value`` as an unsigned 32-bit number in base ``radix``.

    Digits above nine are upper-case letters.
    """
    if not 2 <= radix <= len(_DIGITS):
        raise ValueError(f"radix must be between 2 and {len(_DIGITS)}, got {radix}")
    remaining = _as_uint32(value)
    if remaining == 0:
        return "0"
    digits = []
    while remaining:
        remaining, digit = divmod(remaining, radix)
        digits.append(_DIGITS[digit])
    return strrev("".join(digits))


def strrev(s: Text) -> Text:
    """Return ``s`` reversed, keeping its type."""
    return s[::-1]


def _char_of(arg: object) -> str:
    if isinstance(arg, str):
        if len(arg) != 1:
            raise ValueError("%c expects a single character")
        return arg
    if isinstance(arg, (bytes, bytearray)):
        if len(arg) != 1:
            raise ValueError("%c expects a single byte")
        return chr(arg[0])
    return chr(int(arg) & 0xFF)


def _string_of(arg: object) -> str:
    if isinstance(arg, (bytes, bytearray)):
        raw = bytes(arg).split(b"\0", 1)[0]
        return raw.decode("latin-1")
    text = str(arg)
    return text.split("\0", 1)[0]


def format_printf(fmt: str, *args: object) -> str:
    """Format ``fmt`` with the kernel's reduced printf conversions.

    Supported: ``%%``, ``%x``, ``%#x`` (eight digits, zero padded, no prefix),
    ``%u``, ``%d``, ``%c`` and ``%s``. Unknown conversions print nothing and
    consume no argument.
    """
    out: list[str] = []
    pending = iter(args)

    def next_arg() -> object:
        try:
            return next(pending)
        except StopIteration:
            raise ValueError("not enough arguments for format string") from None

    pos = 0
    length = len(fmt)
    while pos < length:
        ch = fmt[pos]
        pos += 1
        if ch != "%":
            out.append(ch)
            continue
        alternate = False
        while pos < length and fmt[pos] == "#":
            alternate = True
            pos += 1
        if pos >= length:
            break
        spec = fmt[pos]
        pos += 1
        if spec == "%":
            out.append("%")
        elif spec == "x":
            digits = itoa(int(next_arg()), 16)
            out.append(digits.rjust(8, "0") if alternate else digits)
        elif spec == "u":
            out.append(itoa(int(next_arg()), 10))
        elif spec == "d":
            value = _as_int32(int(next_arg()))
            if value < 0:
                out.append("-" + itoa(-value, 10))
            else:
                out.append(itoa(value, 10))
        elif spec == "c":
            out.append(_char_of(next_arg()))
        elif spec == "s":
            out.append(_string_of(next_arg()))
    return "".join(out)


def _codes(s: Text) -> list[int]:
    if isinstance(s, str):
        return [ord(c) & 0xFF for c in s]
    return list(s)


def _signed_char(code: int) -> int:
    return code - 256 if code >= 128 else code


def strncmp(s1: Text, s2: Text, n: int) -> int:
    """Compare at most ``n`` characters of two NUL-terminated strings.

    Returns zero when equal, otherwise the signed difference of the first
    mismatching characters. The end of a string counts as a NUL.
    """
    a = _codes(s1)
    b = _codes(s2)
    for i in range(max(n, 0)):
        c1 = _signed_char(a[i]) if i < len(a) else 0
        c2 = _signed_char(b[i]) if i < len(b) else 0
        if c1 != c2 or c1 == 0:
            return c1 - c2
    return 0


def strncpy(src: Text, n: int) -> Text:
    """Copy up to ``n`` characters of ``src``, stopping at a NUL, padded to ``n``."""
    if n < 0:
        raise ValueError("n must not be negative")
    if isinstance(src, str):
        head = src.split("\0", 1)[0][:n]
        return head + "\0" * (n - len(head))
    head = bytes(src).split(b"\0", 1)[0][:n]
    return head + b"\0" * (n - len(head))