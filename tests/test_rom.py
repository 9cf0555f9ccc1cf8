import pytest

from pocketemu.rom import NINTENDO_LOGO, RomGenerator, RomHeader


def test_rom_header_creation():
    header = RomHeader.with_title("TEST GAME")
    assert header.title[0:9] == b"TEST GAME"
    assert header.title[9:] == bytes(7)


def test_rom_generator():
    generator = RomGenerator("TEST ROM")
    generator.add_program(0x150, [0x00, 0x01, 0x02])

    rom_data = generator.generate_rom()
    assert len(rom_data) == 32 * 1024
    assert rom_data[0x150] == 0x00
    # The global checksum is stored over bytes 0x151-0x152 after it is computed.
    assert rom_data[0x151:0x153] == generator.header.global_checksum.to_bytes(2, "little")
    # The program area follows the 0x150-byte header.
    assert rom_data[0x150 + 0x150:0x150 + 0x153] == bytes([0x00, 0x01, 0x02])


def test_title_is_truncated_to_sixteen_bytes():
    header = RomHeader.with_title("ABCDEFGHIJKLMNOPQRSTU")
    assert header.title == b"ABCDEFGHIJKLMNOP"


def test_default_header_uses_logo():
    assert RomHeader().nintendo_logo == NINTENDO_LOGO
    assert len(NINTENDO_LOGO) == 48


def test_to_bytes_layout():
    header = RomHeader.with_title("LAYOUT")
    header.cartridge_type = 0x01
    header.rom_size = 0x02
    header.ram_size = 0x03
    header.rom_version = 0x07
    image = header.to_bytes()
    assert len(image) == 0x150
    assert image[0x100:0x104] == bytes([0x00, 0xC3, 0x50, 0x01])
    assert image[0x104:0x134] == NINTENDO_LOGO
    assert image[0x134:0x144] == header.title
    assert image[0x14A] == 0x01
    assert image[0x14B] == 0x02
    assert image[0x14C] == 0x03
    assert image[0x14F] == 0x07


def test_header_checksum_of_all_zero_fields():
    assert RomHeader().calculate_header_checksum() == 0xE4


def test_header_checksum_drops_by_one_per_title_increment():
    base = RomHeader.with_title("A").calculate_header_checksum()
    bumped = RomHeader.with_title("B").calculate_header_checksum()
    assert (base - bumped) % 256 == 1


def test_global_checksum_is_sum_modulo_65536():
    header = RomHeader()
    assert header.calculate_global_checksum(b"") == 0
    assert header.calculate_global_checksum(bytes([0xFF]) * 257) == (0xFF * 257) & 0xFFFF


def test_generate_sets_header_checksum():
    generator = RomGenerator("CHK")
    generator.generate_rom()
    assert generator.header.header_checksum == generator.header.calculate_header_checksum()


def test_global_checksum_covers_image_before_it_is_stored():
    generator = RomGenerator("SUM")
    rom = generator.generate_rom()
    restored = bytearray(rom)
    restored[0x151:0x153] = b"\xff\xff"
    assert generator.header.calculate_global_checksum(restored) == generator.header.global_checksum


def test_padding_is_ff():
    rom = RomGenerator("PAD").generate_rom()
    assert rom[0x150] == 0xFF
    assert rom[-1] == 0xFF


def test_large_program_is_not_padded():
    generator = RomGenerator("BIG")
    generator.add_program(0, bytes(40000))
    rom = generator.generate_rom()
    assert len(rom) == 0x150 + 40000


def test_add_program_overwrites_and_grows():
    generator = RomGenerator("OVR")
    generator.add_program(2, b"\x01\x02\x03")
    generator.add_program(3, b"\x09")
    assert generator.program_data == b"\x00\x00\x01\x09\x03"


@pytest.mark.parametrize("start, program", [(0xFFFF, b"\x01"), (-1, b"\x01"), (0x10000, b"")])
def test_add_program_out_of_range(start, program):
    generator = RomGenerator("ERR")
    with pytest.raises(ValueError):
        generator.add_program(start, program)


def test_invalid_header_field_rejected():
    with pytest.raises(ValueError):
        RomHeader(nintendo_logo=b"\x00" * 10)
    with pytest.raises(ValueError):
        RomHeader(cartridge_type=0x100)


def test_save_rom_writes_generated_image(tmp_path):
    generator = RomGenerator("SAVE")
    generator.add_program(0x10, b"\xAA\xBB")
    target = tmp_path / "game.gb"
    generator.save_rom(target)
    assert target.read_bytes() == generator.generate_rom()