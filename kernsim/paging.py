"""Two-level x86 paging structures: a page directory and two page tables."""

from __future__ import annotations

from dataclasses import dataclass, field

ENTRIES = 1024
KERNEL_ADDR = 0x400000
VID_MEM = 0xB8000
EIGHT_MB = 0x800000
FOUR_MB = 0x400000

PAGE_SHIFT = 12
VIDEO_PAGE = VID_MEM >> PAGE_SHIFT
BACKING_PAGES = (0xB9000 >> PAGE_SHIFT, 0xBA000 >> PAGE_SHIFT, 0xBB000 >> PAGE_SHIFT)
PROGRAM_DIRECTORY_INDEX = 32
VIDMAP_DIRECTORY_INDEX = 33

_ADDR_LIMIT = 1 << 20
_AVAIL_LIMIT = 1 << 3


def _encode(flags: tuple[bool, ...], avail: int, addr: int) -> int:
    if not 0 <= avail < _AVAIL_LIMIT:
        raise ValueError(f"avail must fit in 3 bits, got {avail}")
    if not 0 <= addr < _ADDR_LIMIT:
        raise ValueError(f"address field must fit in 20 bits, got {addr:#x}")
    bits = sum(1 << position for position, flag in enumerate(flags) if flag)
    return bits | (avail << 9) | (addr << PAGE_SHIFT)


def _split(value: int, count: int) -> tuple[list[bool], int, int]:
    if not 0 <= value <= 0xFFFFFFFF:
        raise ValueError(f"entry must be a 32-bit value, got {value:#x}")
    flags = [bool(value >> position & 1) for position in range(count)]
    return flags, (value >> 9) & 0x7, value >> PAGE_SHIFT


@dataclass
class PageDirectoryEntry:
    """One page directory entry; ``page_size`` selects a 4 MB page."""

    present: bool = False
    rw: bool = False
    us: bool = False
    pwt: bool = False
    pcd: bool = False
    accessed: bool = False
    reserved: bool = False
    page_size: bool = False
    global_page: bool = False
    avail: int = 0
    addr: int = 0

    def _flags(self) -> tuple[bool, ...]:
        return (
            self.present, self.rw, self.us, self.pwt, self.pcd,
            self.accessed, self.reserved, self.page_size, self.global_page,
        )

    def encode(self) -> int:
        """Return the entry as the 32-bit word the processor reads."""
        return _encode(self._flags(), self.avail, self.addr)

    @classmethod
    def decode(cls, value: int) -> "PageDirectoryEntry":
        """Build an entry from its 32-bit word."""
        flags, avail, addr = _split(value, 9)
        return cls(*flags, avail=avail, addr=addr)


@dataclass
class PageTableEntry:
    """One page table entry mapping a 4 kB page."""

    present: bool = False
    rw: bool = False
    us: bool = False
    pwt: bool = False
    pcd: bool = False
    accessed: bool = False
    dirty: bool = False
    pat: bool = False
    global_page: bool = False
    avail: int = 0
    page_addr: int = 0

    def _flags(self) -> tuple[bool, ...]:
        return (
            self.present, self.rw, self.us, self.pwt, self.pcd,
            self.accessed, self.dirty, self.pat, self.global_page,
        )

    def encode(self) -> int:
        """Return the entry as the 32-bit word the processor reads."""
        return _encode(self._flags(), self.avail, self.page_addr)

    @classmethod
    def decode(cls, value: int) -> "PageTableEntry":
        """Build an entry from its 32-bit word."""
        flags, avail, addr = _split(value, 9)
        return cls(*flags, avail=avail, page_addr=addr)


def _check_table_address(address: int) -> int:
    if not 0 <= address <= 0xFFFFFFFF or address % (1 << PAGE_SHIFT):
        raise ValueError(f"page table address must be 4 kB aligned, got {address:#x}")
    return address


@dataclass
class PagingTables:
    """The kernel's page directory, its low-memory page table and the vidmap table.

    ``page_table_addr`` and ``vidmap_table_addr`` are the physical addresses
    where the two page tables live. ``directory_loads`` counts how many times
    the directory was loaded, which also flushes the TLB.
    """

    page_table_addr: int = 0
    vidmap_table_addr: int = 0
    directory: list[PageDirectoryEntry] = field(
        default_factory=lambda: [PageDirectoryEntry() for _ in range(ENTRIES)]
    )
    page_table: list[PageTableEntry] = field(
        default_factory=lambda: [PageTableEntry() for _ in range(ENTRIES)]
    )
    vidmap_table: list[PageTableEntry] = field(
        default_factory=lambda: [PageTableEntry() for _ in range(ENTRIES)]
    )
    directory_loads: int = 0

    def __post_init__(self) -> None:
        _check_table_address(self.page_table_addr)
        _check_table_address(self.vidmap_table_addr)

    def _load_directory(self) -> None:
        self.directory_loads += 1

    def paging_init(self) -> None:
        """Map the first 4 MB through the page table and the kernel as a 4 MB page."""
        self.directory[0] = PageDirectoryEntry(
            present=True, rw=True, addr=self.page_table_addr >> PAGE_SHIFT
        )
        self.directory[1] = PageDirectoryEntry(
            present=True, rw=True, page_size=True, global_page=True,
            addr=KERNEL_ADDR >> PAGE_SHIFT,
        )
        mapped = {VIDEO_PAGE, *BACKING_PAGES}
        self.page_table = [
            PageTableEntry(present=i in mapped, rw=True, page_addr=i)
            for i in range(ENTRIES)
        ]
        for i in range(2, ENTRIES):
            self.directory[i] = PageDirectoryEntry(rw=True, page_size=True, addr=i)
        self._load_directory()

    def page_setup(self, pid: int) -> None:
        """Map the 4 MB user page at 128 MB to the physical page of process ``pid``."""
        if pid < 0:
            raise ValueError(f"pid must not be negative, got {pid}")
        physical = EIGHT_MB + FOUR_MB * pid
        if physical > 0xFFFFFFFF:
            raise ValueError(f"pid {pid} maps beyond the 32-bit address space")
        self.directory[PROGRAM_DIRECTORY_INDEX] = PageDirectoryEntry(
            present=True, rw=True, us=True, page_size=True, global_page=True,
            addr=physical >> PAGE_SHIFT,
        )
        self._load_directory()

    def page_setup_vidmap(self) -> None:
        """Map the user page table at 132 MB with its first page on video memory."""
        self.directory[VIDMAP_DIRECTORY_INDEX] = PageDirectoryEntry(
            present=True, rw=True, us=True, global_page=True,
            addr=self.vidmap_table_addr >> PAGE_SHIFT,
        )
        self.vidmap_table = [
            PageTableEntry(present=True, rw=True, us=True, global_page=True, page_addr=VIDEO_PAGE)
        ] + [
            PageTableEntry(present=True, rw=True, us=True, page_addr=i)
            for i in range(1, ENTRIES)
        ]
        self._load_directory()

    @staticmethod
    def _target_page(index: int, same_flag: bool) -> int:
        if same_flag:
            return VIDEO_PAGE
        if not 0 <= index < len(BACKING_PAGES):
            raise ValueError(f"terminal index must be in 0..{len(BACKING_PAGES) - 1}, got {index}")
        return VIDEO_PAGE + index + 1

    def task_video_mapping(self, index: int, same_flag: bool) -> None:
        """Point kernel video memory at the screen or at terminal ``index``'s backing page."""
        self.page_table[VIDEO_PAGE].page_addr = self._target_page(index, same_flag)
        self._load_directory()

    def task_vidmap(self, index: int, same_flag: bool) -> None:
        """Point the user video page at the screen or at terminal ``index``'s backing page."""
        self.vidmap_table[0].page_addr = self._target_page(index, same_flag)
        self._load_directory()