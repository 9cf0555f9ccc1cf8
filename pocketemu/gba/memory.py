"""Byte-addressed memory map of the handheld's 32-bit bus."""

from __future__ import annotations

from dataclasses import dataclass

ROM_BASE = 0x08000000
EWRAM_BASE = 0x02000000
IWRAM_BASE = 0x03000000
PALETTE_BASE = 0x05000000
VRAM_BASE = 0x06000000
OAM_BASE = 0x07000000

IWRAM_SIZE = 0x8000
EWRAM_SIZE = 0x40000
PALETTE_SIZE = 0x400
VRAM_SIZE = 0x18000
OAM_SIZE = 0x400

_ROM_WINDOW_END = 0x00FFFFFF
_ADDRESS_MASK = 0xFFFFFFFF


def _check_address(address: int) -> None:
    if not 0 <= address <= _ADDRESS_MASK:
        raise ValueError(f"address {address:#x} does not fit in 32 bits")


def _check_value(value: int, bits: int) -> None:
    if not 0 <= value < (1 << bits):
        raise ValueError(f"value {value:#x} does not fit in {bits} bits")


@dataclass
class MemoryStats:
    """Counts of byte-level bus accesses."""

    reads: int = 0
    writes: int = 0
    cache_hits: int = 0
    cache_misses: int = 0


class GBAMemory:
    """Work RAM, palette RAM, VRAM, OAM and cartridge ROM behind one bus."""

    def __init__(self) -> None:
        self.iwram = bytearray(IWRAM_SIZE)
        self.ewram = bytearray(EWRAM_SIZE)
        self.palette_ram = bytearray(PALETTE_SIZE)
        self.vram = bytearray(VRAM_SIZE)
        self.oam_ram = bytearray(OAM_SIZE)
        self.rom = b""
        self.stats = MemoryStats()

    def load_rom(self, rom_data: bytes) -> None:
        self.rom = bytes(rom_data)

    def _ram_at(self, address: int) -> tuple[bytearray, int] | None:
        for base, buffer in (
            (EWRAM_BASE, self.ewram),
            (IWRAM_BASE, self.iwram),
            (PALETTE_BASE, self.palette_ram),
            (VRAM_BASE, self.vram),
            (OAM_BASE, self.oam_ram),
        ):
            offset = address - base
            if 0 <= offset < len(buffer):
                return buffer, offset
        return None

    def read_8(self, address: int) -> int:
        """Read one byte; unmapped addresses read as zero."""
        _check_address(address)
        self.stats.reads += 1
        if address <= _ROM_WINDOW_END:
            # The low window is decoded relative to ROM_BASE; the offset wraps
            # around 32 bits and only lands inside the ROM if it is that large.
            offset = (address - ROM_BASE) & _ADDRESS_MASK
            return self.rom[offset] if offset < len(self.rom) else 0
        located = self._ram_at(address)
        if located is None:
            return 0
        buffer, offset = located
        return buffer[offset]

    def read_16(self, address: int) -> int:
        """Read a little-endian half-word."""
        low = self.read_8(address)
        high = self.read_8((address + 1) & _ADDRESS_MASK)
        return (high << 8) | low

    def read_32(self, address: int) -> int:
        """Read a little-endian word."""
        low = self.read_16(address)
        high = self.read_16((address + 2) & _ADDRESS_MASK)
        return (high << 16) | low

    def write_8(self, address: int, value: int) -> None:
        """Write one byte; writes outside RAM are ignored."""
        _check_address(address)
        _check_value(value, 8)
        self.stats.writes += 1
        located = self._ram_at(address)
        if located is not None:
            buffer, offset = located
            buffer[offset] = value

    def write_16(self, address: int, value: int) -> None:
        """Write a little-endian half-word."""
        _check_value(value, 16)
        self.write_8(address, value & 0xFF)
        self.write_8((address + 1) & _ADDRESS_MASK, value >> 8)

    def write_32(self, address: int, value: int) -> None:
        """Write a little-endian word."""
        _check_value(value, 32)
        self.write_16(address, value & 0xFFFF)
        self.write_16((address + 2) & _ADDRESS_MASK, value >> 16)