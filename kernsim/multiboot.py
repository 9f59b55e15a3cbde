"""Multiboot boot information and the kernel's boot-time report."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from kernsim.text import format_printf

MULTIBOOT_HEADER_FLAGS = 0x00000003
MULTIBOOT_HEADER_MAGIC = 0x1BADB002
MULTIBOOT_BOOTLOADER_MAGIC = 0x2BADB002

MODULE_PREVIEW_BYTES = 16


@dataclass
class ElfSectionHeaderTable:
    """The ELF section header table described by the boot loader."""

    num: int = 0
    size: int = 0
    addr: int = 0
    shndx: int = 0


@dataclass
class Module:
    """A boot module: its address range and the bytes loaded there."""

    mod_start: int = 0
    mod_end: int = 0
    string: int = 0
    reserved: int = 0
    data: bytes = b""


@dataclass
class MemoryMapEntry:
    """One entry of the boot loader's memory map."""

    size: int = 20
    base_addr_low: int = 0
    base_addr_high: int = 0
    length_low: int = 0
    length_high: int = 0
    type: int = 0


@dataclass
class MultibootInfo:
    """The information structure a Multiboot boot loader hands to the kernel."""

    flags: int = 0
    mem_lower: int = 0
    mem_upper: int = 0
    boot_device: int = 0
    cmdline: str = ""
    mods: list[Module] = field(default_factory=list)
    elf_sec: ElfSectionHeaderTable = field(default_factory=ElfSectionHeaderTable)
    mmap_length: int = 0
    mmap_addr: int = 0
    mmap: list[MemoryMapEntry] = field(default_factory=list)

    @property
    def fs_start(self) -> Optional[int]:
        """Start address of the last module, where the file system image lives."""
        return self.mods[-1].mod_start if self.mods else None


def _check_flag(flags: int, bit: int) -> bool:
    return bool(flags & (1 << bit))


def _signed_byte(value: int) -> int:
    return value - 256 if value >= 128 else value


def boot_report(magic: int, info: MultibootInfo) -> str:
    """Return the text the kernel prints about the boot information.

    Raises ValueError if ``magic`` is not the boot loader magic number or
    if flag bits 4 and 5 are both set.
    """
    if magic != MULTIBOOT_BOOTLOADER_MAGIC:
        raise ValueError(format_printf("Invalid magic number: 0x%#x", magic))

    lines = [format_printf("flags = 0x%#x", info.flags)]
    if _check_flag(info.flags, 0):
        lines.append(format_printf(
            "mem_lower = %uKB, mem_upper = %uKB", info.mem_lower, info.mem_upper
        ))
    if _check_flag(info.flags, 1):
        lines.append(format_printf("boot_device = 0x%#x", info.boot_device))
    if _check_flag(info.flags, 2):
        lines.append(format_printf("cmdline = %s", info.cmdline))
    if _check_flag(info.flags, 3):
        for number, mod in enumerate(info.mods):
            lines.append(format_printf("Module %d loaded at address: 0x%#x", number, mod.mod_start))
            lines.append(format_printf("Module %d ends at address: 0x%#x", number, mod.mod_end))
            lines.append("First few bytes of module:")
            lines.append("".join(
                format_printf("0x%x ", _signed_byte(b))
                for b in mod.data[:MODULE_PREVIEW_BYTES]
            ))
    if _check_flag(info.flags, 4) and _check_flag(info.flags, 5):
        raise ValueError("Both bits 4 and 5 are set.")
    if _check_flag(info.flags, 5):
        elf = info.elf_sec
        lines.append(format_printf(
            "elf_sec: num = %u, size = 0x%#x, addr = 0x%#x, shndx = 0x%#x",
            elf.num, elf.size, elf.addr, elf.shndx,
        ))
    if _check_flag(info.flags, 6):
        lines.append(format_printf(
            "mmap_addr = 0x%#x, mmap_length = 0x%x", info.mmap_addr, info.mmap_length
        ))
        for entry in info.mmap:
            lines.append(format_printf(
                "    size = 0x%x, base_addr = 0x%#x%#x",
                entry.size, entry.base_addr_high, entry.base_addr_low,
            ))
            lines.append(format_printf(
                "    type = 0x%x,  length    = 0x%#x%#x",
                entry.type, entry.length_high, entry.length_low,
            ))
    return "\n".join(lines) + "\n"