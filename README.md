# pocketemu

A small, dependency-free set of building blocks for emulating handheld
consoles.

- `pocketemu.gba.memory` – `GBAMemory`, the byte-addressed bus with EWRAM,
  IWRAM, palette RAM, VRAM, OAM and a cartridge ROM buffer. Reads of unmapped
  addresses return zero, writes outside RAM are ignored, and `MemoryStats`
  counts every byte read and written. Multi-byte accesses are little-endian.
- `pocketemu.gba.cpu` – `ARM7TDMI`, a processor core with a register file,
  CPSR flags (`CPSRFlag`) and ARM/Thumb switching. `execute_instruction`
  runs one instruction: in ARM state MOV, ADD, SUB, LDR and STR are carried
  out (ADD and SUB update the flags); in Thumb state MOV and ADD. Other
  decoded instructions only advance the program counter. `CPUStats` counts
  cycles and instructions.
- `pocketemu.gba.gpu` – `GBAGPU`, display registers, an OAM table and a
  scanline renderer. `render_scanline(memory)` returns the 240 colours of the
  current line from text or bitmap backgrounds (modes 0–5) and 8-pixel-wide
  sprites; `update()` advances the scanline and counts frames.
- `pocketemu.rom` – `RomHeader` and `RomGenerator`, which build a Game Boy
  cartridge image with entry point, logo, title, header checksum and global
  checksum, padded with `0xFF` to 32 KB.
- `pocketemu.common` – bit helpers (`is_bit_set`, `set_bit`, `clear_bits`,
  …), `gcd`, `lcm`, `clamp`, `lerp`, angle conversion, `to_title_case`,
  `frequency_map`, `most_common`, `has_intersection`, a `PerformanceMonitor`
  and a `Logger` with `LogLevel` thresholds that prints to standard output.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Building a Game Boy ROM

```python
from pocketemu.rom import RomGenerator

generator = RomGenerator("HELLO")
generator.add_program(0x150, bytes([0x00, 0x01, 0x02]))
image = generator.generate_rom()   # 32 KB, checksums filled in
generator.save_rom("hello.gb")
```

`add_program` raises `ValueError` if the program would lie outside
`0x0000`–`0xFFFF`.

## Running an instruction

```python
from pocketemu.gba.cpu import ARM7TDMI
from pocketemu.gba.memory import GBAMemory

memory = GBAMemory()
memory.write_32(0x03000000, 0xE3A00005)   # MOV R0, #5
cpu = ARM7TDMI()
cpu.pc = 0x03000000
cpu.execute_instruction(memory)
assert cpu.read_register(0) == 5
assert cpu.pc == 0x03000004
```

## Rendering a line

```python
from pocketemu.gba.gpu import GBAGPU
from pocketemu.gba.memory import GBAMemory

memory = GBAMemory()
gpu = GBAGPU()
gpu.dispcnt = 3                  # mode 3: 16-bit direct colour
memory.write_16(0x06000000, 0x7FFF)
line = gpu.render_scanline(memory)
assert line[0] == 0x7FFF
gpu.update()                     # next scanline
```

## What it does not do

The CPU, memory and GPU are separate objects: there is no machine class that
loads a ROM and runs them together frame by frame, no configuration loading,
and no command-line program, display window or sound. Code that wants a
running emulator drives `ARM7TDMI.execute_instruction`, `GBAGPU.update` and
`GBAGPU.render_scanline` itself.