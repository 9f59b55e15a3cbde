# kernsim

`kernsim` models the pieces of a small x86 teaching kernel in plain Python,
so their behaviour can be explored and tested without booting anything.
It has no dependencies outside the standard library.

## Modules

- `kernsim.text` – string helpers: `itoa(value, radix)` (unsigned 32-bit,
  upper-case digits), `strrev`, `strncmp`, `strncpy` (NUL padded to `n`)
  and `format_printf`, a cut-down printf that understands `%%`, `%x`,
  `%#x` (eight zero-padded hex digits, no `0x` prefix), `%u`, `%d`, `%c`
  and `%s`. Unknown conversions print nothing.
- `kernsim.console` – `Console`, an 80×25 text screen shared by three
  terminals. It offers `putc`, `key_putc`, `puts`, `printf`, `clear`,
  `switch_terminal`, `cursor`, `row` and `text`, and handles newlines,
  backspace (including back across a wrapped line end), wrapping and
  scrolling. `putc` writes to the terminal set in `scheduled`;
  `key_putc` writes to the one on display (`displayed`).
- `kernsim.fsys` – `FileSystem`, a reader for a read-only image made of a
  boot block, inode blocks and 4 kB data blocks. It has
  `read_dentry_by_name`, `read_dentry_by_index`, `read_data`,
  `file_length` and `open`, which returns a `FileReader` for a regular
  file or a `DirectoryReader` for the directory. Entries are `Dentry`
  records; failures raise `FileSystemError`, as do all writes.
- `kernsim.pic` – `PIC`, the pair of 8259 controllers: `init`,
  `enable_irq`, `disable_irq` and `send_eoi`. Masks are kept in
  `master_mask` and `slave_mask`, and every port write is recorded in
  `writes` as `(port, value)`.
- `kernsim.keyboard` – `Keyboard`, a scan code set 1 handler with shift,
  caps lock, ctrl+L (redraw the line), tab (four spaces), backspace,
  enter and a line buffer per terminal. Alt+F1..F3 set
  `switch_requests`. Also `translate_scancode(code, shift, caps)`.
- `kernsim.paging` – `PagingTables` (`paging_init`, `page_setup`,
  `page_setup_vidmap`, `task_video_mapping`, `task_vidmap`) with
  `PageDirectoryEntry` and `PageTableEntry`, which `encode` to and
  `decode` from the 32-bit x86 entry layout.
- `kernsim.idt` – `InterruptDescriptorTable` of 256 `GateDescriptor`
  gates filled by `init`, plus `exception_title` and
  `exception_handler`, which raises `ExceptionHalt`.
- `kernsim.multiboot` – `MultibootInfo`, `Module`,
  `ElfSectionHeaderTable`, `MemoryMapEntry` and `boot_report`, which
  returns the boot-time information printout and raises `ValueError` for
  a wrong magic number or when flag bits 4 and 5 are both set.
- `kernsim.support` – user-level helpers: `strcmp`, `strncmp`,
  `parse_command`, `execute` (runs `./<program>` with `subprocess` and
  returns its exit status), `getargs`, `DirectoryListing` (host directory
  names one per read, starting with `.` and `..`) and the
  `SyscallNumber` enumeration.
- `kernsim.fish` – the blinking-frames demo model: `BlinkStruct` (packs
  to a 16-byte record), `BlinkPool` (`allocate`, `free`), `RtcCommand`
  and `add_frames`, which turns two text frames into blink records.

## Example

```python
from kernsim.console import Console
from kernsim.text import format_printf

console = Console()
console.printf("value: %#x\n", 0xE)
print(console.row(0))             # "value: 0000000E"
print(format_printf("%d%%", -5))  # "-5%"
```

Reading a file system image:

```python
from kernsim.fsys import FileSystem

with open("filesystem.img", "rb") as fh:
    fs = FileSystem(fh.read())

entry = fs.read_dentry_by_name(b"frame0.txt")
data = fs.read_data(entry.inode_num, 0, fs.file_length(entry.inode_num))
```

Building blink records from two frames:

```python
from kernsim.fish import add_frames

records = add_frames("ab\n", "cd\n")
print([(r.location, r.on_char, r.off_char) for r in records])
# [(40, 'a', 'c'), (41, 'b', 'd')]
```

## What it does not do

- It does not boot or run a kernel, and it has no command-line program;
  everything is used as a library.
- There is no system call dispatcher, scheduler or process management:
  the models are separate objects that you connect yourself.
- The blink driver that would take `RtcCommand` requests and animate the
  screen is not included; `kernsim.fish` only builds and stores the
  records.
- There is no real-time clock or timer model.

## Installing and testing

```
pip install .[test]
pytest
```