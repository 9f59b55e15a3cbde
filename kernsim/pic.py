"""A model of the cascaded pair of 8259 programmable interrupt controllers."""

from __future__ import annotations

MASTER_8259_PORT = 0x20
SLAVE_8259_PORT = 0xA0
MASTER_DP = 0x21
SLAVE_DP = 0xA1
SLAVE_IRQ = 2
MASTER_IRQ = 8

ICW1 = 0x11
ICW2_MASTER = 0x20
ICW2_SLAVE = 0x28
ICW3_MASTER = 0x04
ICW3_SLAVE = 0x02
ICW4 = 0x01

EOI = 0x60

NUM_IRQS = 16


class PIC:
    """Primary and secondary 8259 controllers with their interrupt masks.

    Every byte sent to an I/O port is appended to ``writes`` as a
    ``(port, value)`` pair. IRQ numbers outside 0..15 are ignored.
    """

    def __init__(self) -> None:
        self.master_mask = 0xFF
        self.slave_mask = 0xFF
        self.writes: list[tuple[int, int]] = []

    def _outb(self, data: int, port: int) -> None:
        self.writes.append((port, data & 0xFF))

    def init(self) -> None:
        """Send the initialisation words to both controllers and unmask the cascade."""
        self._outb(ICW1, MASTER_8259_PORT)
        self._outb(ICW2_MASTER, MASTER_DP)
        self._outb(ICW3_MASTER, MASTER_DP)
        self._outb(ICW4, MASTER_DP)

        self._outb(ICW1, SLAVE_8259_PORT)
        self._outb(ICW2_SLAVE, SLAVE_DP)
        self._outb(ICW3_SLAVE, SLAVE_DP)
        self._outb(ICW4, SLAVE_DP)

        self.enable_irq(SLAVE_IRQ)

    @staticmethod
    def _valid(irq_num: int) -> bool:
        return 0 <= irq_num < NUM_IRQS

    def enable_irq(self, irq_num: int) -> None:
        """Unmask ``irq_num``: 0-7 on the primary, 8-15 on the secondary."""
        if not self._valid(irq_num):
            return
        if irq_num < MASTER_IRQ:
            self.master_mask &= ~(1 << irq_num) & 0xFF
            self._outb(self.master_mask, MASTER_DP)
        else:
            self.slave_mask &= ~(1 << (irq_num - MASTER_IRQ)) & 0xFF
            self._outb(self.slave_mask, SLAVE_DP)

    def disable_irq(self, irq_num: int) -> None:
        """Mask ``irq_num``: 0-7 on the primary, 8-15 on the secondary."""
        if not self._valid(irq_num):
            return
        if irq_num < MASTER_IRQ:
            self.master_mask |= 1 << irq_num
            self._outb(self.master_mask, MASTER_DP)
        else:
            self.slave_mask |= 1 << (irq_num - MASTER_IRQ)
            self._outb(self.slave_mask, SLAVE_DP)

    def send_eoi(self, irq_num: int) -> None:
        """Signal end of interrupt; secondary IRQs also acknowledge the cascade."""
        if not self._valid(irq_num):
            return
        if irq_num < MASTER_IRQ:
            self._outb(EOI | irq_num, MASTER_8259_PORT)
        else:
            self._outb(EOI | (irq_num - MASTER_IRQ), SLAVE_8259_PORT)
            self._outb(EOI | SLAVE_IRQ, MASTER_8259_PORT)