"""ARM7TDMI processor core with a partial ARM and Thumb instruction set."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from pocketemu.gba.memory import GBAMemory

RESET_PC = 0x08000000
RESET_SP = 0x03007F00
RESET_CPSR = 0x1F
REGISTER_COUNT = 16

_WORD_MASK = 0xFFFFFFFF
_SIGN_BIT = 0x80000000


class CPUMode(Enum):
    """Processor operating modes."""

    USER = auto()
    FIQ = auto()
    IRQ = auto()
    SUPERVISOR = auto()
    ABORT = auto()
    UNDEFINED = auto()
    SYSTEM = auto()


@dataclass
class CPUStats:
    """Counters updated as instructions execute."""

    cycles: int = 0
    instructions: int = 0
    arm_instructions: int = 0
    thumb_instructions: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    branch_taken: int = 0
    branch_not_taken: int = 0


class ARMInstruction(Enum):
    """Instructions of the 32-bit ARM set."""

    AND = auto()
    EOR = auto()
    SUB = auto()
    RSB = auto()
    ADD = auto()
    ADC = auto()
    SBC = auto()
    RSC = auto()
    TST = auto()
    TEQ = auto()
    CMP = auto()
    CMN = auto()
    ORR = auto()
    MOV = auto()
    BIC = auto()
    MVN = auto()
    B = auto()
    BL = auto()
    BX = auto()
    BLX = auto()
    LDR = auto()
    STR = auto()
    LDM = auto()
    STM = auto()
    LDRB = auto()
    STRB = auto()
    LDRH = auto()
    STRH = auto()
    MRC = auto()
    MCR = auto()
    LDC = auto()
    STC = auto()
    SWI = auto()
    UNDEFINED = auto()


class ThumbInstruction(Enum):
    """Instructions of the 16-bit Thumb set."""

    MOV = auto()
    CMP = auto()
    ADD = auto()
    SUB = auto()
    AND = auto()
    EOR = auto()
    LSL = auto()
    LSR = auto()
    ASR = auto()
    ADC = auto()
    SBC = auto()
    ROR = auto()
    TST = auto()
    NEG = auto()
    CMP2 = auto()
    CMN = auto()
    ORR = auto()
    MUL = auto()
    BIC = auto()
    MVN = auto()
    B = auto()
    BL = auto()
    BX = auto()
    BLX = auto()
    LDR = auto()
    STR = auto()
    LDRB = auto()
    STRB = auto()
    LDRH = auto()
    STRH = auto()
    LDSB = auto()
    LDSH = auto()
    STRH2 = auto()
    PUSH = auto()
    POP = auto()
    UNDEFINED = auto()


class CPSRFlag(Enum):
    """Bits of the current program status register, valued by their mask."""

    NEGATIVE = 0x80000000
    ZERO = 0x40000000
    CARRY = 0x20000000
    OVERFLOW = 0x10000000
    THUMB = 0x20
    FIQ_DISABLE = 0x40
    IRQ_DISABLE = 0x80


# Data-processing opcodes, indexed by bits 21-24 of an ARM instruction.
_ARM_OPCODES = (
    ARMInstruction.AND,
    ARMInstruction.EOR,
    ARMInstruction.SUB,
    ARMInstruction.RSB,
    ARMInstruction.ADD,
    ARMInstruction.ADC,
    ARMInstruction.SBC,
    ARMInstruction.RSC,
    ARMInstruction.TST,
    ARMInstruction.TEQ,
    ARMInstruction.CMP,
    ARMInstruction.CMN,
    ARMInstruction.ORR,
    ARMInstruction.MOV,
    ARMInstruction.BIC,
    ARMInstruction.MVN,
)

# Thumb groups, indexed by the top three bits of the instruction.
_THUMB_GROUPS = (
    ThumbInstruction.MOV,
    ThumbInstruction.CMP,
    ThumbInstruction.ADD,
    ThumbInstruction.SUB,
    ThumbInstruction.AND,
    ThumbInstruction.EOR,
    ThumbInstruction.LSL,
    ThumbInstruction.LSR,
)


def _decode_arm(instruction: int) -> ARMInstruction:
    return _ARM_OPCODES[(instruction >> 21) & 0xF]


def _decode_thumb(instruction: int) -> ThumbInstruction:
    return _THUMB_GROUPS[((instruction >> 10) & 0x3F) >> 3]


def _rotate_right(value: int, amount: int) -> int:
    amount %= 32
    return ((value >> amount) | (value << (32 - amount))) & _WORD_MASK


def _sign_extend(value: int, bits: int) -> int:
    sign = 1 << (bits - 1)
    return (value & (sign - 1)) - (value & sign)


def _operand2(instruction: int) -> int:
    immediate = instruction & 0xFF
    rotate = (instruction >> 8) & 0xF
    return _rotate_right(immediate, rotate * 2)


class ARM7TDMI:
    """Register file, status register and instruction executor."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Return every register, cache and counter to its power-on value."""
        self.registers = [0] * REGISTER_COUNT
        self.pc = RESET_PC
        self.lr = 0
        self.sp = RESET_SP
        self.cpsr = RESET_CPSR
        self.spsr = 0
        self.mode = CPUMode.USER
        self.thumb_mode = False
        self.instruction_cache: dict[int, int] = {}
        self.data_cache: dict[int, int] = {}
        self.stats = CPUStats()

    def read_register(self, reg: int) -> int:
        """Return R0-R15; any other index reads as zero."""
        if 0 <= reg < REGISTER_COUNT:
            return self.registers[reg]
        return 0

    def write_register(self, reg: int, value: int) -> None:
        """Store a 32-bit value in R0-R15; other indices are ignored."""
        if 0 <= reg < REGISTER_COUNT:
            self.registers[reg] = value & _WORD_MASK

    def get_flag(self, flag: CPSRFlag) -> bool:
        return bool(self.cpsr & flag.value)

    def set_flag(self, flag: CPSRFlag, value: bool) -> None:
        if value:
            self.cpsr |= flag.value
        else:
            self.cpsr &= ~flag.value & _WORD_MASK

    def enter_thumb_mode(self) -> None:
        self.thumb_mode = True
        self.set_flag(CPSRFlag.THUMB, True)

    def enter_arm_mode(self) -> None:
        self.thumb_mode = False
        self.set_flag(CPSRFlag.THUMB, False)

    def execute_instruction(self, memory: GBAMemory) -> None:
        """Fetch, decode and execute one instruction at the program counter."""
        if self.thumb_mode:
            self._execute_thumb(memory)
        else:
            self._execute_arm(memory)

    def _advance(self, amount: int) -> None:
        self.pc = (self.pc + amount) & _WORD_MASK

    def _execute_arm(self, memory: GBAMemory) -> None:
        instruction = memory.read_32(self.pc)
        decoded = _decode_arm(instruction)
        rd = (instruction >> 12) & 0xF
        rn = (instruction >> 16) & 0xF

        if decoded is ARMInstruction.MOV:
            self.write_register(rd, _operand2(instruction))
            self._advance(4)
        elif decoded is ARMInstruction.ADD:
            operand = _operand2(instruction)
            result = (self.read_register(rn) + operand) & _WORD_MASK
            self.write_register(rd, result)
            # Flags see Rn after the write, so Rd == Rn observes the result.
            self._update_flags_add(self.read_register(rn), operand, result)
            self._advance(4)
        elif decoded is ARMInstruction.SUB:
            operand = _operand2(instruction)
            result = (self.read_register(rn) - operand) & _WORD_MASK
            self.write_register(rd, result)
            self._update_flags_sub(self.read_register(rn), operand, result)
            self._advance(4)
        elif decoded is ARMInstruction.B:
            offset = _sign_extend(instruction & 0xFFFFFF, 24)
            self.pc = (self.pc + (offset << 2)) & _WORD_MASK
        elif decoded is ARMInstruction.LDR:
            address = (self.read_register(rn) + (instruction & 0xFFF)) & _WORD_MASK
            self.write_register(rd, memory.read_32(address))
            self._advance(4)
        elif decoded is ARMInstruction.STR:
            address = (self.read_register(rn) + (instruction & 0xFFF)) & _WORD_MASK
            memory.write_32(address, self.read_register(rd))
            self._advance(4)
        else:
            self._advance(4)

        self.stats.cycles += 1
        self.stats.instructions += 1
        self.stats.arm_instructions += 1

    def _execute_thumb(self, memory: GBAMemory) -> None:
        instruction = memory.read_16(self.pc)
        decoded = _decode_thumb(instruction)
        rd = (instruction >> 8) & 0x7
        rs = (instruction >> 3) & 0x7

        if decoded is ThumbInstruction.MOV:
            self.write_register(rd, self.read_register(rs))
            self._advance(2)
        elif decoded is ThumbInstruction.ADD:
            self.write_register(rd, self.read_register(rd) + self.read_register(rs))
            self._advance(2)
        elif decoded is ThumbInstruction.B:
            offset = _sign_extend(instruction & 0xFF, 8)
            self.pc = (self.pc + (offset << 1)) & _WORD_MASK
        else:
            self._advance(2)

        self.stats.cycles += 1
        self.stats.instructions += 1
        self.stats.thumb_instructions += 1

    def _update_flags_add(self, a: int, b: int, result: int) -> None:
        self.set_flag(CPSRFlag.ZERO, result == 0)
        self.set_flag(CPSRFlag.NEGATIVE, bool(result & _SIGN_BIT))
        self.set_flag(CPSRFlag.CARRY, result < a)
        self.set_flag(CPSRFlag.OVERFLOW, bool((a ^ result) & (b ^ result) & _SIGN_BIT))

    def _update_flags_sub(self, a: int, b: int, result: int) -> None:
        self.set_flag(CPSRFlag.ZERO, result == 0)
        self.set_flag(CPSRFlag.NEGATIVE, bool(result & _SIGN_BIT))
        self.set_flag(CPSRFlag.CARRY, a >= b)
        self.set_flag(CPSRFlag.OVERFLOW, bool((a ^ b) & (a ^ result) & _SIGN_BIT))