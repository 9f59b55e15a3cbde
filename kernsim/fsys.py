"""Read-only access to a flat boot-block file system image."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Union

from kernsim.text import strncmp

BLOCK_SIZE = 4096
FILENAME_LEN = 32
BOOTBLOCK_RESERVED = 52
DIR_ENTRIES = 63
DENTRY_RESERVED = 24
INODE_DATA_BLOCK = 1023

_DENTRY_SIZE = FILENAME_LEN + 8 + DENTRY_RESERVED
_DENTRIES_OFFSET = 12 + BOOTBLOCK_RESERVED
_DIRECTORY_TYPE = 1
_REGULAR_TYPE = 2

Name = Union[str, bytes]


class FileSystemError(Exception):
    """Raised when a lookup or read on the file system image fails."""


@dataclass(frozen=True)
class Dentry:
    """One directory entry: a raw 32-byte name, a file type and an inode number."""

    file_name: bytes
    filetype: int
    inode_num: int

    @classmethod
    def unpack(cls, image: bytes, offset: int) -> "Dentry":
        """Decode the entry stored at ``offset`` of ``image``."""
        file_name = bytes(image[offset:offset + FILENAME_LEN])
        filetype, inode_num = struct.unpack_from("<II", image, offset + FILENAME_LEN)
        return cls(file_name, filetype, inode_num)

    @property
    def name(self) -> str:
        """The file name up to its first NUL."""
        return self.file_name.split(b"\0", 1)[0].decode("latin-1")


class FileSystem:
    """A file system image: a boot block, then inode blocks, then data blocks."""

    def __init__(self, image: bytes) -> None:
        self._image = bytes(image)
        if len(self._image) < BLOCK_SIZE:
            raise FileSystemError("image is smaller than one boot block")
        self.dir_count, self.inode_count, self.data_count = struct.unpack_from(
            "<III", self._image, 0
        )
        if self.dir_count > DIR_ENTRIES:
            raise FileSystemError(
                f"directory count {self.dir_count} exceeds {DIR_ENTRIES} entries"
            )
        self._entries = tuple(
            Dentry.unpack(self._image, _DENTRIES_OFFSET + i * _DENTRY_SIZE)
            for i in range(DIR_ENTRIES)
        )

    def read_dentry_by_name(self, fname: Name) -> Dentry:
        """Find the entry whose name matches ``fname`` in its first 32 characters."""
        for entry in self._entries[:self.dir_count]:
            if strncmp(fname, entry.file_name, FILENAME_LEN) == 0:
                return entry
        raise FileSystemError(f"no such file: {fname!r}")

    def read_dentry_by_index(self, index: int) -> Dentry:
        """Return the directory entry at ``index``."""
        if index < 0 or index > self.dir_count or index >= DIR_ENTRIES:
            raise FileSystemError(f"invalid directory index {index}")
        return self._entries[index]

    def _inode_offset(self, inode: int) -> int:
        if not 0 <= inode < self.inode_count:
            raise FileSystemError(f"invalid inode {inode}")
        offset = BLOCK_SIZE * (1 + inode)
        if offset + BLOCK_SIZE > len(self._image):
            raise FileSystemError(f"image truncated before inode {inode}")
        return offset

    def file_length(self, inode: int) -> int:
        """Return the length in bytes of the file held by ``inode``."""
        (length,) = struct.unpack_from("<I", self._image, self._inode_offset(inode))
        return length

    def read_data(self, inode: int, offset: int, length: int) -> bytes:
        """Read up to ``length`` bytes of ``inode`` from ``offset``.

        Fewer bytes come back at the end of the file; none past it.
        """
        if offset < 0 or length < 0:
            raise ValueError("offset and length must not be negative")
        inode_offset = self._inode_offset(inode)
        (file_length,) = struct.unpack_from("<I", self._image, inode_offset)
        end = min(offset + length, file_length)
        data_base = BLOCK_SIZE * (1 + self.inode_count)
        out = bytearray()
        pos = offset
        while pos < end:
            slot, within = divmod(pos, BLOCK_SIZE)
            if slot >= INODE_DATA_BLOCK:
                raise FileSystemError(f"inode {inode} has no data block slot {slot}")
            (block,) = struct.unpack_from("<I", self._image, inode_offset + 4 + 4 * slot)
            if block > INODE_DATA_BLOCK:
                raise FileSystemError(f"bad data block number {block} in inode {inode}")
            take = min(BLOCK_SIZE - within, end - pos)
            start = data_base + BLOCK_SIZE * block + within
            chunk = self._image[start:start + take]
            if len(chunk) < take:
                raise FileSystemError(f"image truncated in data block {block}")
            out += chunk
            pos += take
        return bytes(out)

    def open(self, name: Name) -> Union["FileReader", "DirectoryReader"]:
        """Open a regular file or the directory by name."""
        entry = self.read_dentry_by_name(name)
        if entry.filetype == _DIRECTORY_TYPE:
            return DirectoryReader(self)
        if entry.filetype == _REGULAR_TYPE:
            return FileReader(self, entry.inode_num)
        raise FileSystemError(f"{entry.name!r} is neither a file nor a directory")


class FileReader:
    """Sequential reads from one file, remembering the position."""

    def __init__(self, fs: FileSystem, inode: int) -> None:
        self.fs = fs
        self.inode = inode
        self.position = 0

    def read(self, nbytes: int) -> bytes:
        """Read up to ``nbytes`` bytes and advance the position by what was read."""
        data = self.fs.read_data(self.inode, self.position, nbytes)
        self.position += len(data)
        return data

    def write(self, data: bytes) -> int:
        """Always fails: the file system is read-only."""
        raise FileSystemError("file system is read-only")


class DirectoryReader:
    """Reads the directory one file name per call."""

    def __init__(self, fs: FileSystem) -> None:
        self.fs = fs
        self.position = 0

    def read(self, nbytes: int) -> bytes:
        """Return the next raw name field, at most ``nbytes`` and 32 bytes long.

        Returns empty bytes once every entry has been read.
        """
        if nbytes < 0:
            raise ValueError("nbytes must not be negative")
        if self.position >= self.fs.dir_count:
            return b""
        entry = self.fs.read_dentry_by_index(self.position)
        self.position += 1
        return entry.file_name[:min(nbytes, FILENAME_LEN)]

    def write(self, data: bytes) -> int:
        """Always fails: the file system is read-only."""
        raise FileSystemError("file system is read-only")