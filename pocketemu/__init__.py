"""Handheld-console emulation pieces: GBA CPU, memory and GPU, a Game Boy ROM builder and helpers."""

__version__ = "0.1.0"