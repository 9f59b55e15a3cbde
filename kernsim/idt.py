"""The interrupt descriptor table and the processor exception handler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

NUM_VEC = 256
NUM_EXCEPTIONS = 20
RESERVED_EXCEPTION = 15

PIT_IDT = 0x20
KEYBOARD_IDT = 0x21
RTC_IDT = 0x28
SYSCALL_IDT = 0x80

TITLES = (
    "Divide by Zero",
    "Debug",
    "NMI Interrupt",
    "Breakpoint",
    "Overflow",
    "Bound Range Exceeded",
    "Invalid Opcode",
    "Device Busy",
    "Double Fault",
    "Coprocessor Overrun",
    "Invalid TSS",
    "Segment not Present",
    "Stack-Segment Fault",
    "General Protection",
    "Page Fault",
    "reserve",
    "x87 FPU",
    "Alignment Check",
    "Machine Check",
    "SIMD Floating Point",
)

EXCEPTION_HANDLERS = {
    0: "divide",
    1: "reserve",
    2: "nmi",
    3: "breakpoint",
    4: "overflow",
    5: "bound",
    6: "opcode",
    7: "dna",
    8: "double_fault",
    9: "coprocessor",
    10: "tss_stack",
    11: "segment",
    12: "stack",
    13: "general_protection",
    14: "page_fault",
    16: "fpu",
    17: "alignment_check",
    18: "machine_check",
    19: "simd",
}

INTERRUPT_HANDLERS = {
    PIT_IDT: "handle_pit",
    KEYBOARD_IDT: "handle_keyboard",
    RTC_IDT: "handle_rtc",
    SYSCALL_IDT: "syscall_handler",
}


class ExceptionHalt(Exception):
    """Raised when a processor exception stops the running program."""

    def __init__(self, vector: int, title: str) -> None:
        super().__init__(f"Exception: {title}")
        self.vector = vector
        self.title = title


def exception_title(vector: int) -> str:
    """Return the name of processor exception ``vector``."""
    if not 0 <= vector < NUM_EXCEPTIONS:
        raise ValueError(f"exception vector must be in 0..{NUM_EXCEPTIONS - 1}, got {vector}")
    return TITLES[vector]


def exception_handler(vector: int) -> None:
    """Report exception ``vector`` and halt the program by raising :class:`ExceptionHalt`."""
    raise ExceptionHalt(vector, exception_title(vector))


@dataclass
class GateDescriptor:
    """One IDT gate: handler, segment selector, type bits, privilege and presence."""

    handler: Optional[str] = None
    seg_selector: int = 0
    reserved4: int = 0
    reserved3: int = 0
    reserved2: int = 0
    reserved1: int = 0
    size: int = 0
    reserved0: int = 0
    dpl: int = 0
    present: bool = False


class InterruptDescriptorTable:
    """All 256 gates of the IDT, filled by :meth:`init` for a given code segment."""

    def __init__(self, kernel_cs: int) -> None:
        if not 0 <= kernel_cs <= 0xFFFF:
            raise ValueError(f"segment selector must fit in 16 bits, got {kernel_cs:#x}")
        self.kernel_cs = kernel_cs
        self.gates = [GateDescriptor() for _ in range(NUM_VEC)]
        self.loaded = False

    def __len__(self) -> int:
        return len(self.gates)

    def __getitem__(self, vector: int) -> GateDescriptor:
        return self.gates[vector]

    def init(self) -> None:
        """Install exception, device and system call gates and load the table."""
        self.gates = [
            GateDescriptor(
                seg_selector=self.kernel_cs,
                reserved4=0,
                reserved3=1,
                reserved2=1,
                reserved1=1,
                size=1,
                reserved0=0,
                dpl=0,
                present=vector < NUM_EXCEPTIONS and vector != RESERVED_EXCEPTION,
            )
            for vector in range(NUM_VEC)
        ]
        for vector, name in EXCEPTION_HANDLERS.items():
            self.gates[vector].handler = name
        for vector, name in INTERRUPT_HANDLERS.items():
            gate = self.gates[vector]
            gate.reserved3 = 1
            gate.present = True
            gate.handler = name
        self.gates[SYSCALL_IDT].dpl = 3
        self.loaded = True