import pytest

from kernsim.paging import (
    EIGHT_MB,
    ENTRIES,
    FOUR_MB,
    KERNEL_ADDR,
    VID_MEM,
    PageDirectoryEntry,
    PageTableEntry,
    PagingTables,
)


@pytest.fixture
def tables():
    t = PagingTables(page_table_addr=0x1000, vidmap_table_addr=0x2000)
    t.paging_init()
    return t


def test_pte_encode_video_page():
    entry = PageTableEntry(present=True, rw=True, page_addr=VID_MEM >> 12)
    assert entry.encode() & ~0xFFF == VID_MEM
    assert entry.encode() == 0xB8003


def test_pde_round_trip():
    entry = PageDirectoryEntry(
        present=True, us=True, page_size=True, global_page=True, avail=5, addr=0x400
    )
    assert PageDirectoryEntry.decode(entry.encode()) == entry


def test_pte_round_trip():
    entry = PageTableEntry(rw=True, dirty=True, pat=True, avail=2, page_addr=0xFFFFF)
    assert PageTableEntry.decode(entry.encode()) == entry


def test_encode_rejects_oversized_address():
    with pytest.raises(ValueError):
        PageTableEntry(page_addr=1 << 20).encode()


def test_encode_rejects_oversized_avail():
    with pytest.raises(ValueError):
        PageDirectoryEntry(avail=8).encode()


def test_unaligned_table_address_rejected():
    with pytest.raises(ValueError):
        PagingTables(page_table_addr=0x1234)


def test_init_first_directory_entry_points_to_page_table(tables):
    first = tables.directory[0]
    assert first.present and first.rw and not first.page_size
    assert first.addr << 12 == 0x1000


def test_init_kernel_page(tables):
    kernel = tables.directory[1]
    assert kernel.present and kernel.page_size and kernel.global_page
    assert kernel.addr << 12 == KERNEL_ADDR


def test_init_present_pages_are_video_pages(tables):
    present = {i for i, e in enumerate(tables.page_table) if e.present}
    assert present == {0xB8000 >> 12, 0xB9000 >> 12, 0xBA000 >> 12, 0xBB000 >> 12}
    assert all(e.page_addr == i for i, e in enumerate(tables.page_table))


def test_init_other_directory_entries_absent(tables):
    assert len(tables.directory) == ENTRIES
    assert not any(e.present for e in tables.directory[2:])
    assert tables.directory_loads == 1


def test_page_setup_maps_process_pages(tables):
    tables.page_setup(0)
    first = tables.directory[32].addr << 12
    tables.page_setup(1)
    second = tables.directory[32].addr << 12
    assert first == EIGHT_MB
    assert second - first == FOUR_MB
    assert tables.directory[32].us and tables.directory[32].present


def test_page_setup_rejects_negative_pid(tables):
    with pytest.raises(ValueError):
        tables.page_setup(-1)


def test_vidmap_first_page_is_video_memory(tables):
    tables.page_setup_vidmap()
    assert tables.directory[33].addr << 12 == 0x2000
    assert tables.vidmap_table[0].page_addr << 12 == VID_MEM
    assert all(e.present and e.us for e in tables.vidmap_table)


def test_task_video_mapping_background_and_foreground(tables):
    tables.task_video_mapping(1, False)
    assert tables.page_table[VID_MEM >> 12].page_addr << 12 == 0xBA000
    tables.task_video_mapping(1, True)
    assert tables.page_table[VID_MEM >> 12].page_addr << 12 == VID_MEM


def test_task_vidmap_background(tables):
    tables.page_setup_vidmap()
    tables.task_vidmap(2, False)
    assert tables.vidmap_table[0].page_addr << 12 == 0xBB000
    tables.task_vidmap(0, False)
    assert tables.vidmap_table[0].page_addr << 12 == 0xB9000


def test_task_video_mapping_rejects_bad_terminal(tables):
    with pytest.raises(ValueError):
        tables.task_video_mapping(3, False)