"""Builder for cartridge images with a valid header and checksums."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

NINTENDO_LOGO = bytes(
    [
        0xCE, 0xED, 0x66, 0x66, 0xCC, 0x0D, 0x00, 0x0B, 0x03, 0x73, 0x00, 0x83, 0x00, 0x0C, 0x00, 0x0D,
        0x00, 0x08, 0x11, 0x1F, 0x88, 0x89, 0x00, 0x0E, 0xDC, 0xCC, 0x6E, 0xE6, 0xDD, 0xDD, 0xD9, 0x99,
        0xBB, 0xBB, 0x67, 0x63, 0x6E, 0x0E, 0xEC, 0xCC, 0xDD, 0xDC, 0x99, 0x9F, 0xBB, 0xB9, 0x33, 0x3E,
    ]
)

HEADER_SIZE = 0x150
MIN_ROM_SIZE = 32 * 1024
PADDING_BYTE = 0xFF
MAX_ADDRESS = 0xFFFF

ENTRY_POINT_OFFSET = 0x100
LOGO_OFFSET = 0x104
TITLE_OFFSET = 0x134
MANUFACTURER_OFFSET = 0x144
CGB_FLAG_OFFSET = 0x146
NEW_LICENSEE_OFFSET = 0x147
SGB_FLAG_OFFSET = 0x149
CARTRIDGE_TYPE_OFFSET = 0x14A
ROM_SIZE_OFFSET = 0x14B
RAM_SIZE_OFFSET = 0x14C
DESTINATION_OFFSET = 0x14D
OLD_LICENSEE_OFFSET = 0x14E
ROM_VERSION_OFFSET = 0x14F
GLOBAL_CHECKSUM_OFFSET = 0x151

# NOP; JP 0x0150
_ENTRY_POINT = bytes([0x00, 0xC3, 0x50, 0x01])

_FIXED_LENGTHS = {
    "nintendo_logo": 48,
    "title": 16,
    "manufacturer_code": 2,
    "new_licensee_code": 2,
}
_BYTE_FIELDS = (
    "cgb_flag",
    "sgb_flag",
    "cartridge_type",
    "rom_size",
    "ram_size",
    "destination_code",
    "old_licensee_code",
    "rom_version",
    "header_checksum",
)


@dataclass
class RomHeader:
    """The cartridge header fields, with the logo and title as raw bytes."""

    nintendo_logo: bytes = NINTENDO_LOGO
    title: bytes = bytes(16)
    manufacturer_code: bytes = bytes(2)
    cgb_flag: int = 0x00
    new_licensee_code: bytes = bytes(2)
    sgb_flag: int = 0x00
    cartridge_type: int = 0x00
    rom_size: int = 0x00
    ram_size: int = 0x00
    destination_code: int = 0x00
    old_licensee_code: int = 0x00
    rom_version: int = 0x00
    header_checksum: int = 0x00
    global_checksum: int = field(default=0x0000)

    def __post_init__(self) -> None:
        for name, length in _FIXED_LENGTHS.items():
            value = bytes(getattr(self, name))
            if len(value) != length:
                raise ValueError(f"{name} must be {length} bytes, got {len(value)}")
            setattr(self, name, value)
        for name in _BYTE_FIELDS:
            value = getattr(self, name)
            if not 0 <= value <= 0xFF:
                raise ValueError(f"{name} must be a byte, got {value}")
        if not 0 <= self.global_checksum <= 0xFFFF:
            raise ValueError(f"global_checksum must fit in 16 bits, got {self.global_checksum}")

    @classmethod
    def with_title(cls, title: str) -> RomHeader:
        """Build a default header whose title is the first 16 bytes of ``title``."""
        encoded = title.encode("utf-8")[:16]
        return cls(title=encoded.ljust(16, b"\x00"))

    def _checksummed_bytes(self) -> bytes:
        return b"".join(
            (
                self.title,
                self.manufacturer_code,
                bytes([self.cgb_flag]),
                self.new_licensee_code,
                bytes(
                    [
                        self.sgb_flag,
                        self.cartridge_type,
                        self.rom_size,
                        self.ram_size,
                        self.destination_code,
                        self.old_licensee_code,
                        self.rom_version,
                    ]
                ),
            )
        )

    def calculate_header_checksum(self) -> int:
        """Subtract each header byte plus one from zero, modulo 256."""
        checksum = 0
        for byte in self._checksummed_bytes():
            checksum = (checksum - byte - 1) & 0xFF
        return checksum

    def calculate_global_checksum(self, rom_data: bytes) -> int:
        """Sum every byte of ``rom_data`` modulo 65536."""
        return sum(rom_data) & 0xFFFF

    def to_bytes(self) -> bytes:
        """Lay the header out as the first 0x150 bytes of an image."""
        image = bytearray(HEADER_SIZE)
        image[ENTRY_POINT_OFFSET:LOGO_OFFSET] = _ENTRY_POINT
        image[LOGO_OFFSET:TITLE_OFFSET] = self.nintendo_logo
        image[TITLE_OFFSET:MANUFACTURER_OFFSET] = self.title
        image[MANUFACTURER_OFFSET:CGB_FLAG_OFFSET] = self.manufacturer_code
        image[CGB_FLAG_OFFSET] = self.cgb_flag
        image[NEW_LICENSEE_OFFSET:SGB_FLAG_OFFSET] = self.new_licensee_code
        image[SGB_FLAG_OFFSET] = self.sgb_flag
        image[CARTRIDGE_TYPE_OFFSET] = self.cartridge_type
        image[ROM_SIZE_OFFSET] = self.rom_size
        image[RAM_SIZE_OFFSET] = self.ram_size
        image[DESTINATION_OFFSET] = self.destination_code
        image[OLD_LICENSEE_OFFSET] = self.old_licensee_code
        image[ROM_VERSION_OFFSET] = self.rom_version
        return bytes(image)


class RomGenerator:
    """Assembles program bytes behind a header into a complete image."""

    def __init__(self, title: str) -> None:
        self.header = RomHeader.with_title(title)
        self._program = bytearray()

    @property
    def program_data(self) -> bytes:
        return bytes(self._program)

    def add_program(self, start_address: int, program: bytes) -> None:
        """Place ``program`` at ``start_address`` of the program area, growing it as needed."""
        program = bytes(program)
        if not 0 <= start_address <= MAX_ADDRESS:
            raise ValueError(f"start address 0x{start_address:X} is outside 0x0000-0xFFFF")
        end_address = start_address + len(program)
        if end_address > MAX_ADDRESS:
            raise ValueError(f"program ends at 0x{end_address:X}, beyond 0xFFFF")
        if end_address > len(self._program):
            self._program.extend(bytes(end_address - len(self._program)))
        self._program[start_address:end_address] = program

    def generate_rom(self) -> bytes:
        """Build the image, updating the header's checksums on the way."""
        self.header.header_checksum = self.header.calculate_header_checksum()

        rom = bytearray(self.header.to_bytes())
        rom += self._program
        if len(rom) < MIN_ROM_SIZE:
            rom += bytes([PADDING_BYTE]) * (MIN_ROM_SIZE - len(rom))

        self.header.global_checksum = self.header.calculate_global_checksum(rom)
        rom[GLOBAL_CHECKSUM_OFFSET:GLOBAL_CHECKSUM_OFFSET + 2] = self.header.global_checksum.to_bytes(
            2, "little"
        )
        return bytes(rom)

    def save_rom(self, filename: str | os.PathLike[str]) -> None:
        """Write the generated image to ``filename``."""
        Path(filename).write_bytes(self.generate_rom())