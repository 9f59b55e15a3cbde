import pytest

from kernsim.pic import (
    EOI,
    ICW1,
    ICW2_MASTER,
    ICW2_SLAVE,
    ICW3_MASTER,
    ICW3_SLAVE,
    ICW4,
    MASTER_8259_PORT,
    MASTER_DP,
    PIC,
    SLAVE_8259_PORT,
    SLAVE_DP,
    SLAVE_IRQ,
)


def test_initial_masks_block_everything():
    pic = PIC()
    assert pic.master_mask == 0xFF
    assert pic.slave_mask == 0xFF
    assert pic.writes == []


def test_init_sends_control_words_then_unmasks_cascade():
    pic = PIC()
    pic.init()
    assert pic.writes[:8] == [
        (MASTER_8259_PORT, ICW1),
        (MASTER_DP, ICW2_MASTER),
        (MASTER_DP, ICW3_MASTER),
        (MASTER_DP, ICW4),
        (SLAVE_8259_PORT, ICW1),
        (SLAVE_DP, ICW2_SLAVE),
        (SLAVE_DP, ICW3_SLAVE),
        (SLAVE_DP, ICW4),
    ]
    assert pic.writes[8] == (MASTER_DP, pic.master_mask)
    assert pic.master_mask & (1 << SLAVE_IRQ) == 0
    assert pic.master_mask | (1 << SLAVE_IRQ) == 0xFF
    assert pic.slave_mask == 0xFF


@pytest.mark.parametrize("irq", range(8))
def test_enable_and_disable_master_irq(irq):
    pic = PIC()
    pic.enable_irq(irq)
    assert pic.master_mask == 0xFF & ~(1 << irq)
    assert pic.writes[-1] == (MASTER_DP, pic.master_mask)
    pic.disable_irq(irq)
    assert pic.master_mask == 0xFF
    assert pic.writes[-1] == (MASTER_DP, 0xFF)
    assert pic.slave_mask == 0xFF


@pytest.mark.parametrize("irq", range(8, 16))
def test_enable_and_disable_slave_irq(irq):
    pic = PIC()
    pic.enable_irq(irq)
    assert pic.slave_mask == 0xFF & ~(1 << (irq - 8))
    assert pic.writes[-1] == (SLAVE_DP, pic.slave_mask)
    pic.disable_irq(irq)
    assert pic.slave_mask == 0xFF
    assert pic.master_mask == 0xFF


def test_master_eoi_is_one_write():
    pic = PIC()
    pic.send_eoi(1)
    assert pic.writes == [(MASTER_8259_PORT, EOI | 1)]


def test_slave_eoi_also_acknowledges_cascade():
    pic = PIC()
    pic.send_eoi(8)
    assert pic.writes == [
        (SLAVE_8259_PORT, EOI | 0),
        (MASTER_8259_PORT, EOI | SLAVE_IRQ),
    ]


@pytest.mark.parametrize("irq", [-1, 16, 100])
def test_out_of_range_irq_is_ignored(irq):
    pic = PIC()
    pic.enable_irq(irq)
    pic.disable_irq(irq)
    pic.send_eoi(irq)
    assert pic.writes == []
    assert (pic.master_mask, pic.slave_mask) == (0xFF, 0xFF)