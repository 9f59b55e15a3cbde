"""User-level support routines: string helpers, command parsing and system calls."""

from __future__ import annotations

import itertools
import os
import signal
import subprocess
from enum import IntEnum
from typing import Iterator, Optional, Sequence, Union

MAX_COMMAND = 1023
DIR_NAME_LEN = 32

Text = Union[str, bytes]


class SyscallNumber(IntEnum):
    """System call numbers passed in EAX."""

    HALT = 1
    EXECUTE = 2
    READ = 3
    WRITE = 4
    OPEN = 5
    CLOSE = 6
    GETARGS = 7
    VIDMAP = 8
    SET_HANDLER = 9
    SIGRETURN = 10


def _codes(s: Text) -> list[int]:
    if isinstance(s, str):
        return [ord(c) & 0xFF for c in s]
    return list(s)


def _code_at(codes: list[int], i: int) -> int:
    return codes[i] if i < len(codes) else 0


def strcmp(s1: Text, s2: Text) -> int:
    """Compare two NUL-terminated strings as unsigned characters."""
    a, b = _codes(s1), _codes(s2)
    i = 0
    while True:
        c1, c2 = _code_at(a, i), _code_at(b, i)
        if c1 != c2:
            return c1 - c2
        if c1 == 0:
            return 0
        i += 1


def strncmp(s1: Text, s2: Text, n: int) -> int:
    """Compare at most ``n`` unsigned characters of two NUL-terminated strings."""
    a, b = _codes(s1), _codes(s2)
    for i in range(max(n, 0)):
        c1, c2 = _code_at(a, i), _code_at(b, i)
        if c1 != c2:
            return c1 - c2
        if c1 == 0:
            return 0
    return 0


def parse_command(command: Text) -> list[str]:
    """Split a command line into an argument vector.

    The program name is prefixed with ``./``. Arguments are separated by
    spaces; a newline where an argument would start ends the line.
    """
    text = command.decode("latin-1") if isinstance(command, (bytes, bytearray)) else command
    text = text.split("\0", 1)[0]
    if len(text) > MAX_COMMAND:
        raise ValueError(f"command longer than {MAX_COMMAND} characters")
    length = len(text)
    pos = 0
    while pos < length and text[pos] not in " \n":
        pos += 1
    args = ["./" + text[:pos]]
    if pos < length:
        pos += 1
        while True:
            while pos < length and text[pos] == " ":
                pos += 1
            if pos >= length or text[pos] == "\n":
                break
            start = pos
            while pos < length and text[pos] not in " \n":
                pos += 1
            args.append(text[start:pos])
            if pos < length:
                pos += 1
    return args


def execute(command: Text) -> int:
    """Run a program from the current directory and wait for it.

    Returns its exit status, -1 if it was killed by SIGKILL and 256 if it
    was killed by any other signal. Raises OSError if it cannot be started.
    """
    args = parse_command(command)
    completed = subprocess.run(args, check=False)
    code = completed.returncode
    if code >= 0:
        return code
    if -code == signal.SIGKILL:
        return -1
    return 256


def getargs(argv: Sequence[str], nbytes: int) -> str:
    """Join the arguments after the program name with single spaces.

    Raises ValueError unless the result and its terminating NUL fit in
    ``nbytes`` bytes.
    """
    joined = " ".join(argv[1:])
    if len(joined) + 1 > nbytes:
        raise ValueError(f"arguments do not fit in {nbytes} bytes")
    return joined


class DirectoryListing:
    """Reads a directory one name per call, as a file opened on ``.``."""

    def __init__(self, path: Union[str, os.PathLike] = ".") -> None:
        self._scan: Optional[os.ScandirIterator] = os.scandir(path)
        self._names: Iterator[str] = itertools.chain(
            (".", ".."), (entry.name for entry in self._scan)
        )

    def __enter__(self) -> "DirectoryListing":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def read(self, nbytes: int) -> bytes:
        """Return the next name, NUL padded, cut to ``nbytes`` and 32 bytes.

        Returns empty bytes once every name has been read.
        """
        if self._scan is None:
            raise ValueError("read from a closed directory")
        if nbytes < 1:
            raise ValueError("nbytes must be positive")
        name = next(self._names, None)
        if name is None:
            return b""
        raw = os.fsencode(name)
        limit = min(nbytes, DIR_NAME_LEN)
        return (raw + b"\0" * DIR_NAME_LEN)[:limit]

    def close(self) -> None:
        """Release the directory; further reads fail."""
        if self._scan is not None:
            self._scan.close()
            self._scan = None