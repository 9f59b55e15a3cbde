"""Blinking-character records for the fish animation and their allocator."""

from __future__ import annotations

import struct
from dataclasses import dataclass, fields
from enum import IntEnum
from typing import Union

NUM_COLS = 80
NUM_ROWS = 25
FRAME_OFFSET = 40
FRAME_BLINK_LENGTH = 15

_LAYOUT = struct.Struct("<HccHHHHI")


class RtcCommand(IntEnum):
    """Commands accepted by the blink driver's ioctl."""

    ADD = 0
    REMOVE = 1
    FIND = 2
    SYNC = 3


@dataclass
class BlinkStruct:
    """A screen location that alternates between two characters."""

    location: int = 0
    on_char: str = "\0"
    off_char: str = "\0"
    on_length: int = 0
    off_length: int = 0
    countdown: int = 0
    status: int = 0
    next_addr: int = 0

    SIZE = _LAYOUT.size

    def pack(self) -> bytes:
        """Return the packed 16-byte record."""
        return _LAYOUT.pack(
            self.location,
            self.on_char.encode("latin-1"),
            self.off_char.encode("latin-1"),
            self.on_length,
            self.off_length,
            self.countdown,
            self.status,
            self.next_addr,
        )

    @classmethod
    def unpack(cls, data: bytes) -> "BlinkStruct":
        """Decode a packed record."""
        location, on, off, on_len, off_len, countdown, status, nxt = _LAYOUT.unpack(data)
        return cls(location, on.decode("latin-1"), off.decode("latin-1"),
                   on_len, off_len, countdown, status, nxt)


class BlinkPool:
    """A fixed pool of records, one per screen cell; a slot is free while its location is 0."""

    def __init__(self, size: int = NUM_COLS * NUM_ROWS) -> None:
        self._slots = [BlinkStruct() for _ in range(size)]

    def __len__(self) -> int:
        return len(self._slots)

    def __getitem__(self, index: int) -> BlinkStruct:
        return self._slots[index]

    def allocate(self) -> BlinkStruct:
        """Return the first free record; raise MemoryError if there is none."""
        for slot in self._slots:
            if slot.location == 0:
                return slot
        raise MemoryError("no free blink records")

    def free(self, entry: BlinkStruct) -> None:
        """Zero every field of a record from this pool."""
        if not any(slot is entry for slot in self._slots):
            raise ValueError("record does not belong to this pool")
        for f in fields(entry):
            setattr(entry, f.name, f.default)


def _chars(frame: Union[str, bytes]):
    text = frame.decode("latin-1") if isinstance(frame, (bytes, bytearray)) else frame
    return iter(text)


def add_frames(frame0: Union[str, bytes], frame1: Union[str, bytes]) -> list[BlinkStruct]:
    """Return the blink records that animate between two text frames.

    Cells where either frame has a visible character become a record whose
    on character comes from ``frame0`` and off character from ``frame1``.
    """
    reader0, reader1 = _chars(frame0), _chars(frame1)
    eof0 = eof1 = False
    c0 = c1 = "0"
    row = 0
    records: list[BlinkStruct] = []
    while not eof0 or not eof1:
        col = 0
        while True:
            if c0 != "\n":
                c0 = next(reader0, None)
                if c0 is None:
                    c0, eof0 = "\n", True
            if c1 != "\n":
                c1 = next(reader1, None)
                if c1 is None:
                    c1, eof1 = "\n", True
            if c0 == "\n" and c1 == "\n":
                break
            if c0 not in " \n" or c1 not in " \n":
                records.append(BlinkStruct(
                    location=row * NUM_COLS + col + FRAME_OFFSET,
                    on_char=" " if c0 == "\n" else c0,
                    off_char=" " if c1 == "\n" else c1,
                    on_length=FRAME_BLINK_LENGTH,
                    off_length=FRAME_BLINK_LENGTH,
                ))
            col += 1
        c0 = "\n" if eof0 else "0"
        c1 = "\n" if eof1 else "0"
        row += 1
    return records