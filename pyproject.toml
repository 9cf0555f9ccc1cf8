[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pocketemu"
version = "0.1.0"
description = "Handheld-console emulation pieces: a GBA CPU, memory map and scanline GPU, plus a Game Boy ROM builder"
requires-python = ">=3.10"
dependencies = []
keywords = ["emulator", "gameboy", "gba", "arm7tdmi", "rom", "retro"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pocketemu"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
