# xvkern

`xvkern` models the core pieces of a small x86 teaching kernel in plain Python. You can use it to study several things without an emulator or a cross compiler:

- how such a kernel lays out and maps memory,
- how it reads program headers,
- how it checks system-call arguments,
- how it parses shell commands.

## Modules

| Module              | Contents |
|---------------------|----------|
| `xvkern.mmu`        | Address arithmetic: `pdx`, `ptx`, `pgaddr`, `pgroundup`, `pgrounddown`, `v2p`, `p2v`. Page-table entry helpers: `pte_addr`, `pte_flags`. Boot descriptor bytes: `seg_asm`, `seg_nullasm`. The `SegDesc` class (`seg`, `seg16`, `pack`, `unpack`) and the `GateDesc` class (`gate`, `pack`, `unpack`). The paging and layout constants: `PGSIZE`, `KERNBASE`, `PHYSTOP`, `PTE_P`, and others. |
| `xvkern.elf`        | `ElfHeader.parse` / `pack` and `ProgramHeader.parse` / `pack`. `program_headers(data)` lists every program header of an image. A bad or short image raises `ElfError`. |
| `xvkern.cstring`    | NUL-terminated string routines: `memset`, `memcmp`, `memmove`, `strlen`, `strcmp`, `strncmp`, `strncpy`, `safestrcpy`, `strchr`, `atoi`, and `gets(stream, max)`. |
| `xvkern.constants`  | Kernel parameters such as `NPROC`, `NOFILE` and `MAXARG`. The enumerations `OpenFlag`, `FileType`, `Syscall`, `Trap` and `Irq`. The `Stat` record (`pack` / `unpack`) and the `RtcDate` record. |
| `xvkern.vm`         | `PhysicalMemory` is a simulated range of page frames with `kalloc`, `kfree`, `read`, `write` and `free_pages`. `PageDirectory` is a two-level page table stored in that memory; its methods are listed below. Running out of pages raises `OutOfMemory`. |
| `xvkern.umalloc`    | `Heap(limit)` is a first-fit free-list allocator with `sbrk`, `malloc` and `free`. `malloc` returns `None` when the break would pass `limit`. |
| `xvkern.syscall`    | `UserContext` holds a process's memory and its saved `esp` and `eax`. It provides `fetch_int`, `fetch_str`, `arg_int`, `arg_ptr` and `arg_str`, which raise `BadAddress` on out-of-range addresses. `dispatch(proc, handlers, log)` runs the handler for `proc.eax` and stores its result back. An unknown number, or a `BadAddress` raised by the handler, gives `-1`. |
| `xvkern.shell`      | `tokens(line)` yields the tokens of a command line. `parse_command(line)` builds a tree of `ExecCmd`, `RedirCmd`, `PipeCmd`, `ListCmd` and `BackCmd`. Bad input raises `ShellSyntaxError`. |
| `xvkern.wc`         | `count(stream)` returns `Counts(lines, words, chars)` for a binary stream. `main(argv=None)` backs the `xvkern-wc` command. |
| `xvkern.locks`      | `SpinLock` and `SleepLock`, both usable as context managers. `SpinLock` raises `LockError` when a thread acquires it twice or releases it without holding it. `SleepLock` raises `LockError` when the thread that holds it acquires it again. |

`PageDirectory` methods:

- `setup_kernel`: builds a directory holding the kernel mappings.
- `walk`, `map_pages`: look up and create page-table entries.
- `init_user`, `load_user`: place code and program data in user memory.
- `alloc_user`, `dealloc_user`: grow and shrink user memory.
- `copy`: copies the directory, as for a fork.
- `clear_user`: makes a page inaccessible to user code.
- `user_to_kernel`, `copy_out`, `read_user`: reach user memory from the kernel side.
- `free`: releases every page the directory owns.

## Examples

```python
from xvkern import mmu, cstring, shell

mmu.pgroundup(5000)          # 8192
mmu.pgrounddown(5000)        # 4096

cstring.atoi("42abc")        # 42

tree = shell.parse_command("cat README | grep kernel > out; echo done")
isinstance(tree, shell.ListCmd)   # True
```

```python
from xvkern.vm import PhysicalMemory, PageDirectory

mem = PhysicalMemory(0x100000, 0x200000)
pgdir = PageDirectory(mem)
pgdir.alloc_user(0, 8192)
pgdir.copy_out(100, b"hello")
pgdir.read_user(100, 5)      # b"hello"
```

## Counting lines, words and bytes

For each file named, the `xvkern-wc` command prints the number of lines, words and bytes, followed by the file name. With no file names it reads standard input. It exits with status 1 at the first file it cannot open.

```
xvkern-wc README.md
```

## What it does not do

The package does not boot or run a kernel:

- There are no processes, no scheduler and no file system.
- The shell module parses command lines into trees but does not execute them.
- `dispatch` routes a call number to handlers that you supply; the package provides no system-call implementations of its own.

## Running the tests

The tests use pytest, which is available through the `test` extra:

```
pip install .[test]
pytest
```