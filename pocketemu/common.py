"""Shared constants and small utilities: bits, maths, strings, logging, timing."""

from __future__ import annotations

import math
import time
from collections import Counter
from collections.abc import Hashable, Iterable, Sequence
from enum import IntEnum
from typing import Any, TypeVar

CPU_FREQUENCY = 4_194_304
SCREEN_WIDTH = 160
SCREEN_HEIGHT = 144
MEMORY_SIZE = 0x10000
REGISTER_COUNT = 8
MAX_INSTRUCTION_LENGTH = 3
ENTROPY_POOL_SIZE = 1024
QUANTUM_STATES_COUNT = 256
DISTRIBUTION_QUALITY_THRESHOLD = 0.5

T = TypeVar("T")
H = TypeVar("H", bound=Hashable)


class PerformanceMonitor:
    """Records named checkpoints as seconds elapsed since creation."""

    def __init__(self) -> None:
        self._start = time.perf_counter()
        self._measurements: list[tuple[str, float]] = []

    def mark(self, name: str) -> None:
        self._measurements.append((name, self.total_time()))

    @property
    def measurements(self) -> list[tuple[str, float]]:
        return list(self._measurements)

    def total_time(self) -> float:
        """Seconds elapsed since the monitor was created."""
        return time.perf_counter() - self._start

    def print_report(self) -> None:
        print("Performance Report:")
        print(f"Total time: {self.total_time():.6f}s")
        for name, elapsed in self._measurements:
            print(f"  {name}: {elapsed:.6f}s")


def _check_byte(value: int) -> None:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"value {value} is not a byte")


def _check_bit(bit: int) -> None:
    if not 0 <= bit < 8:
        raise ValueError(f"bit {bit} is out of range 0..7")


def is_bit_set(value: int, bit: int) -> bool:
    _check_byte(value)
    _check_bit(bit)
    return bool(value & (1 << bit))


def set_bit(value: int, bit: int) -> int:
    _check_byte(value)
    _check_bit(bit)
    return value | (1 << bit)


def clear_bit(value: int, bit: int) -> int:
    _check_byte(value)
    _check_bit(bit)
    return value & ~(1 << bit) & 0xFF


def toggle_bit(value: int, bit: int) -> int:
    _check_byte(value)
    _check_bit(bit)
    return value ^ (1 << bit)


def get_bit(value: int, bit: int) -> int:
    _check_byte(value)
    _check_bit(bit)
    return (value >> bit) & 1


def set_bits(value: int, mask: int) -> int:
    _check_byte(value)
    _check_byte(mask)
    return value | mask


def clear_bits(value: int, mask: int) -> int:
    _check_byte(value)
    _check_byte(mask)
    return value & ~mask & 0xFF


def has_any_bit(value: int, mask: int) -> bool:
    _check_byte(value)
    _check_byte(mask)
    return bool(value & mask)


def has_all_bits(value: int, mask: int) -> bool:
    _check_byte(value)
    _check_byte(mask)
    return value & mask == mask


def gcd(a: int, b: int) -> int:
    """Greatest common divisor by Euclid's algorithm."""
    while b:
        a, b = b, a % b
    return a


def lcm(a: int, b: int) -> int:
    """Least common multiple; raises ZeroDivisionError when both are zero."""
    return a * b // gcd(a, b)


def clamp(value: Any, minimum: Any, maximum: Any) -> Any:
    if value < minimum:
        return minimum
    if value > maximum:
        return maximum
    return value


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def deg_to_rad(degrees: float) -> float:
    return degrees * math.pi / 180.0


def rad_to_deg(radians: float) -> float:
    return radians * 180.0 / math.pi


def is_empty_or_whitespace(s: str) -> bool:
    return not s.strip()


def to_title_case(s: str) -> str:
    """Upper-case the first letter of each word and lower-case the rest."""
    result = []
    capitalize = True
    for char in s:
        if char.isspace():
            capitalize = True
            result.append(char)
        elif capitalize:
            result.append(char.upper()[0])
            capitalize = False
        else:
            result.append(char.lower()[0])
    return "".join(result)


def frequency_map(items: Iterable[H]) -> dict[H, int]:
    return dict(Counter(items))


def most_common(items: Iterable[H]) -> H | None:
    """Return the most frequent item, or None for an empty input."""
    top = Counter(items).most_common(1)
    return top[0][0] if top else None


def has_intersection(a: Iterable[Hashable], b: Sequence[Hashable] | Iterable[Hashable]) -> bool:
    return not set(a).isdisjoint(b)


class LogLevel(IntEnum):
    """Logging severities, ordered from least to most severe."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4

    @property
    def label(self) -> str:
        return self.name

    @classmethod
    def from_str(cls, s: str) -> LogLevel | None:
        """Parse a level name case-insensitively; None if unknown."""
        return cls.__members__.get(s.upper())


class Logger:
    """Prints messages at or above a threshold level to standard output."""

    def __init__(self, level: LogLevel = LogLevel.INFO) -> None:
        self.level = level

    def log(self, level: LogLevel, message: str) -> None:
        if level >= self.level:
            print(f"[{level.label}] {message}")

    def trace(self, message: str) -> None:
        self.log(LogLevel.TRACE, message)

    def debug(self, message: str) -> None:
        self.log(LogLevel.DEBUG, message)

    def info(self, message: str) -> None:
        self.log(LogLevel.INFO, message)

    def warn(self, message: str) -> None:
        self.log(LogLevel.WARN, message)

    def error(self, message: str) -> None:
        self.log(LogLevel.ERROR, message)