"""Graphics unit: background layers, sprites and scanline timing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from pocketemu.gba.memory import PALETTE_BASE, VRAM_BASE, GBAMemory

SCREEN_WIDTH = 240
MODE5_WIDTH = 160
VBLANK_START = 144
LINES_PER_FRAME = 160
SPRITE_COUNT = 128
OAM_ENTRIES = 0x200
PALETTE_ENTRIES = 0x200
VRAM_SIZE = 0x18000

SCREEN_BLOCK_SIZE = 0x800
CHAR_BLOCK_SIZE = 0x4000
TILE_SIZE = 32
OBJ_TILE_BASE = 0x06010000
OBJ_PALETTE_BASE = 0x05000200

# Screen size field of a background control register: (columns, rows) in tiles.
_SCREEN_SIZES = {0: (32, 32), 1: (64, 32), 2: (32, 64), 3: (64, 64)}
_SPRITE_HEIGHTS = (8, 16, 32, 64)


@dataclass
class GPUStats:
    """Counters updated while rendering and advancing scanlines."""

    frames_rendered: int = 0
    pixels_drawn: int = 0
    sprites_rendered: int = 0
    backgrounds_rendered: int = 0
    vblank_count: int = 0
    hblank_count: int = 0


class DisplayMode(Enum):
    """Video modes selected by the low three bits of the display control."""

    MODE0 = 0
    MODE1 = 1
    MODE2 = 2
    MODE3 = 3
    MODE4 = 4
    MODE5 = 5


class BackgroundType(Enum):
    """How a background layer is drawn."""

    TEXT = auto()
    AFFINE = auto()
    BITMAP = auto()
    DISABLED = auto()


@dataclass(frozen=True)
class SpriteAttribute:
    """The four attribute half-words of one sprite."""

    attr0: int
    attr1: int
    attr2: int
    attr3: int


@dataclass
class PaletteColor:
    """An RGBA colour."""

    r: int
    g: int
    b: int
    a: int


_BITMAP_MODES = (DisplayMode.MODE3, DisplayMode.MODE4, DisplayMode.MODE5)
_ENABLED_LAYERS = {DisplayMode.MODE0: 4, DisplayMode.MODE1: 3, DisplayMode.MODE2: 2}


class GBAGPU:
    """Display registers, sprite table and scanline renderer."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Return every register, table and counter to its power-on value."""
        self.dispcnt = 0
        self.green_swap = 0
        self.dispstat = 0
        self.vcount = 0
        self.bgcnt = [0] * 4
        self.bgofs = [0] * 4
        self.oam = [0] * OAM_ENTRIES
        self.palette = [0] * PALETTE_ENTRIES
        self.vram = bytearray(VRAM_SIZE)
        self.current_scanline = 0
        self.frame_count = 0
        self.stats = GPUStats()

    @property
    def display_mode(self) -> DisplayMode:
        """The selected video mode; the reserved values 6 and 7 act as mode 0."""
        mode = self.dispcnt & 0x7
        return DisplayMode(mode) if mode <= 5 else DisplayMode.MODE0

    def is_background_enabled(self, bg: int) -> bool:
        if not 0 <= bg < 4:
            return False
        return bg < _ENABLED_LAYERS.get(self.display_mode, 0)

    def background_type(self, bg: int) -> BackgroundType:
        if not 0 <= bg < 4:
            return BackgroundType.DISABLED
        if self.display_mode in _BITMAP_MODES:
            return BackgroundType.BITMAP
        return BackgroundType.TEXT

    def render_scanline(self, memory: GBAMemory) -> list[int]:
        """Draw the current line from memory and return its 240 colours."""
        line = [0] * SCREEN_WIDTH
        for bg in range(4):
            if self.is_background_enabled(bg):
                self._render_background(bg, line, memory)
        self._render_sprites(line, memory)
        self.stats.pixels_drawn += SCREEN_WIDTH
        self.stats.backgrounds_rendered += 1
        return line

    def update(self) -> None:
        """Advance to the next scanline, wrapping into a new frame."""
        self.current_scanline += 1
        if self.current_scanline >= LINES_PER_FRAME:
            self.current_scanline = 0
            self.frame_count += 1
            self.stats.frames_rendered += 1
            self.stats.vblank_count += 1
        elif self.current_scanline >= VBLANK_START:
            self.stats.vblank_count += 1
        else:
            self.stats.hblank_count += 1
        self.vcount = self.current_scanline

    def _render_background(self, bg: int, line: list[int], memory: GBAMemory) -> None:
        kind = self.background_type(bg)
        if kind is BackgroundType.TEXT:
            self._render_text_background(bg, line, memory)
        elif kind is BackgroundType.BITMAP:
            self._render_bitmap_background(line, memory)
        elif kind is BackgroundType.AFFINE:
            self._render_affine_background(line, memory)

    def _render_text_background(self, bg: int, line: list[int], memory: GBAMemory) -> None:
        control = self.bgcnt[bg]
        scroll_x = self.bgofs[bg] & 0x1FF
        scroll_y = (self.bgofs[bg] >> 8) & 0x1FF
        columns, rows = _SCREEN_SIZES[(control >> 14) & 0x3]
        char_base = (control >> 2) & 0xF
        screen_base = (control >> 8) & 0x1F

        screen_y = (self.current_scanline + scroll_y) % (rows * 8)
        tile_y, pixel_y = divmod(screen_y, 8)
        for x in range(SCREEN_WIDTH):
            screen_x = (x + scroll_x) % (columns * 8)
            tile_x, pixel_x = divmod(screen_x, 8)

            entry_addr = VRAM_BASE + screen_base * SCREEN_BLOCK_SIZE + (tile_y * columns + tile_x) * 2
            entry = memory.read_16(entry_addr)
            tile_index = entry & 0x3FF
            h_flip = (entry >> 10) & 0x1
            v_flip = (entry >> 11) & 0x1
            palette_bank = (entry >> 12) & 0xF

            tile_addr = VRAM_BASE + char_base * CHAR_BLOCK_SIZE + tile_index * TILE_SIZE
            column = 7 - pixel_x if h_flip else pixel_x
            row = 7 - pixel_y if v_flip else pixel_y
            pixels = memory.read_8(tile_addr + row * 4 + column // 2)

            # The nibble is picked by the unflipped column.
            color_index = pixels & 0xF if pixel_x % 2 == 0 else (pixels >> 4) & 0xF
            if color_index:
                line[x] = memory.read_16(PALETTE_BASE + palette_bank * 32 + color_index * 2)

    def _render_bitmap_background(self, line: list[int], memory: GBAMemory) -> None:
        mode = self.display_mode
        row = self.current_scanline
        if mode is DisplayMode.MODE3:
            for x in range(SCREEN_WIDTH):
                line[x] = memory.read_16(VRAM_BASE + (row * SCREEN_WIDTH + x) * 2)
        elif mode is DisplayMode.MODE4:
            for x in range(SCREEN_WIDTH):
                color_index = memory.read_8(VRAM_BASE + row * SCREEN_WIDTH + x)
                if color_index:
                    line[x] = memory.read_16(PALETTE_BASE + color_index * 2)
        elif mode is DisplayMode.MODE5:
            for x in range(MODE5_WIDTH):
                line[x] = memory.read_16(VRAM_BASE + (row * MODE5_WIDTH + x) * 2)

    def _render_affine_background(self, line: list[int], memory: GBAMemory) -> None:
        # Identity transform: pixels are read straight from a 240-wide bitmap.
        row = self.current_scanline
        for x in range(SCREEN_WIDTH):
            line[x] = memory.read_16(VRAM_BASE + (row * SCREEN_WIDTH + x) * 2)

    def _sprite(self, index: int) -> SpriteAttribute:
        base = index * 4
        return SpriteAttribute(*self.oam[base:base + 4])

    @staticmethod
    def _sprite_height(sprite: SpriteAttribute) -> int:
        return _SPRITE_HEIGHTS[(sprite.attr1 >> 14) & 0x3]

    def _sprite_on_scanline(self, sprite: SpriteAttribute) -> bool:
        y = sprite.attr0 & 0xFF
        return y <= self.current_scanline < y + self._sprite_height(sprite)

    def _render_sprites(self, line: list[int], memory: GBAMemory) -> None:
        for index in range(SPRITE_COUNT):
            sprite = self._sprite(index)
            if self._sprite_on_scanline(sprite):
                self._render_sprite(sprite, line, memory)

    def _render_sprite(self, sprite: SpriteAttribute, line: list[int], memory: GBAMemory) -> None:
        x = sprite.attr1 & 0x1FF
        y = sprite.attr0 & 0xFF
        tile_index = sprite.attr2 & 0x3FF
        palette_bank = (sprite.attr2 >> 12) & 0xF
        row = self.current_scanline - y
        tile_addr = OBJ_TILE_BASE + tile_index * TILE_SIZE + row * 4

        for pixel_x in range(8):
            pixels = memory.read_8(tile_addr + pixel_x // 2)
            color_index = pixels & 0xF if pixel_x % 2 == 0 else (pixels >> 4) & 0xF
            if not color_index:
                continue
            target = x + pixel_x
            if target < SCREEN_WIDTH:
                line[target] = memory.read_16(OBJ_PALETTE_BASE + palette_bank * 32 + color_index * 2)