import pytest

from pocketemu.gba.cpu import (
    ARM7TDMI,
    CPSRFlag,
    CPUMode,
    CPUStats,
)
from pocketemu.gba.memory import IWRAM_BASE, GBAMemory

MOV_R0_5 = 0xE3A00005
ADD_R2_R0_3 = 0xE2802003
ADD_R1_R0_1 = 0xE2801001
SUB_R1_R0_1 = 0xE2401001


@pytest.fixture
def memory():
    return GBAMemory()


def arm_cpu_at_iwram(memory, *words):
    cpu = ARM7TDMI()
    cpu.pc = IWRAM_BASE
    for index, word in enumerate(words):
        memory.write_32(IWRAM_BASE + 4 * index, word)
    return cpu


def thumb_cpu_at_iwram(memory, *halfwords):
    cpu = ARM7TDMI()
    cpu.pc = IWRAM_BASE
    cpu.enter_thumb_mode()
    for index, half in enumerate(halfwords):
        memory.write_16(IWRAM_BASE + 2 * index, half)
    return cpu


def test_power_on_state():
    cpu = ARM7TDMI()
    assert cpu.pc == 0x08000000
    assert cpu.sp == 0x03007F00
    assert cpu.cpsr == 0x1F
    assert cpu.mode is CPUMode.USER
    assert cpu.thumb_mode is False
    assert cpu.registers == [0] * 16
    assert cpu.stats == CPUStats()


def test_reset_restores_everything(memory):
    cpu = arm_cpu_at_iwram(memory, MOV_R0_5)
    cpu.execute_instruction(memory)
    cpu.enter_thumb_mode()
    cpu.instruction_cache[1] = 2
    cpu.reset()
    assert cpu.pc == 0x08000000
    assert cpu.registers == [0] * 16
    assert cpu.thumb_mode is False
    assert cpu.instruction_cache == {}
    assert cpu.stats == CPUStats()


def test_register_round_trip_and_out_of_range():
    cpu = ARM7TDMI()
    cpu.write_register(7, 0x12345678)
    assert cpu.read_register(7) == 0x12345678
    cpu.write_register(16, 99)
    assert cpu.read_register(16) == 0
    assert cpu.registers == [0] * 7 + [0x12345678] + [0] * 8


@pytest.mark.parametrize("flag", list(CPSRFlag))
def test_flag_round_trip(flag):
    cpu = ARM7TDMI()
    cpu.set_flag(flag, True)
    assert cpu.get_flag(flag) is True
    assert cpu.cpsr & flag.value == flag.value
    cpu.set_flag(flag, False)
    assert cpu.get_flag(flag) is False


def test_thumb_and_arm_mode_switch():
    cpu = ARM7TDMI()
    cpu.enter_thumb_mode()
    assert cpu.thumb_mode and cpu.get_flag(CPSRFlag.THUMB)
    cpu.enter_arm_mode()
    assert not cpu.thumb_mode and not cpu.get_flag(CPSRFlag.THUMB)
    assert cpu.cpsr == 0x1F


def test_arm_mov_immediate(memory):
    cpu = arm_cpu_at_iwram(memory, MOV_R0_5)
    cpu.execute_instruction(memory)
    assert cpu.read_register(0) == 5
    assert cpu.pc == IWRAM_BASE + 4


def test_arm_mov_rotated_immediate(memory):
    cpu = arm_cpu_at_iwram(memory, 0xE3A014FF)
    cpu.execute_instruction(memory)
    assert cpu.read_register(1) == 0xFF000000


def test_arm_add(memory):
    cpu = arm_cpu_at_iwram(memory, MOV_R0_5, ADD_R2_R0_3)
    cpu.execute_instruction(memory)
    cpu.execute_instruction(memory)
    assert cpu.read_register(2) == cpu.read_register(0) + 3
    assert not cpu.get_flag(CPSRFlag.ZERO)
    assert not cpu.get_flag(CPSRFlag.CARRY)


def test_arm_add_wraps_and_sets_carry_and_zero(memory):
    cpu = arm_cpu_at_iwram(memory, ADD_R1_R0_1)
    cpu.write_register(0, 0xFFFFFFFF)
    cpu.execute_instruction(memory)
    assert cpu.read_register(1) == 0
    assert cpu.get_flag(CPSRFlag.ZERO)
    assert cpu.get_flag(CPSRFlag.CARRY)
    assert not cpu.get_flag(CPSRFlag.NEGATIVE)


def test_arm_sub_borrow(memory):
    cpu = arm_cpu_at_iwram(memory, SUB_R1_R0_1)
    cpu.execute_instruction(memory)
    assert cpu.read_register(1) == 0xFFFFFFFF
    assert cpu.get_flag(CPSRFlag.NEGATIVE)
    assert not cpu.get_flag(CPSRFlag.CARRY)


def test_arm_sub_no_borrow(memory):
    cpu = arm_cpu_at_iwram(memory, SUB_R1_R0_1)
    cpu.write_register(0, 5)
    cpu.execute_instruction(memory)
    assert cpu.read_register(1) == 4
    assert cpu.get_flag(CPSRFlag.CARRY)
    assert not cpu.get_flag(CPSRFlag.ZERO)


def test_arm_unhandled_opcode_only_advances(memory):
    cpu = arm_cpu_at_iwram(memory, 0x00000000)
    cpu.execute_instruction(memory)
    assert cpu.pc == IWRAM_BASE + 4
    assert cpu.registers == [0] * 16


def test_arm_stats_counted(memory):
    cpu = arm_cpu_at_iwram(memory, MOV_R0_5, ADD_R2_R0_3)
    cpu.execute_instruction(memory)
    cpu.execute_instruction(memory)
    assert cpu.stats.cycles == 2
    assert cpu.stats.instructions == 2
    assert cpu.stats.arm_instructions == 2
    assert cpu.stats.thumb_instructions == 0


def test_thumb_mov(memory):
    cpu = thumb_cpu_at_iwram(memory, 0x0110)
    cpu.write_register(2, 42)
    cpu.execute_instruction(memory)
    assert cpu.read_register(1) == 42
    assert cpu.pc == IWRAM_BASE + 2


def test_thumb_add(memory):
    cpu = thumb_cpu_at_iwram(memory, 0x4320)
    cpu.write_register(3, 10)
    cpu.write_register(4, 32)
    cpu.execute_instruction(memory)
    assert cpu.read_register(3) == 42
    assert cpu.read_register(4) == 32


def test_thumb_add_wraps_to_32_bits(memory):
    cpu = thumb_cpu_at_iwram(memory, 0x4320)
    cpu.write_register(3, 0xFFFFFFFF)
    cpu.write_register(4, 2)
    cpu.execute_instruction(memory)
    assert cpu.read_register(3) == 1


def test_thumb_other_group_only_advances(memory):
    cpu = thumb_cpu_at_iwram(memory, 0x2000)
    cpu.write_register(0, 7)
    cpu.execute_instruction(memory)
    assert cpu.pc == IWRAM_BASE + 2
    assert cpu.read_register(0) == 7
    assert cpu.stats.thumb_instructions == 1
    assert cpu.stats.arm_instructions == 0


def test_execution_from_unmapped_rom_reads_zero(memory):
    cpu = ARM7TDMI()
    cpu.execute_instruction(memory)
    assert cpu.pc == 0x08000000 + 4
    assert memory.stats.reads == 4