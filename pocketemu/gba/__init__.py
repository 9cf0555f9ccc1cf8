"""Game Boy Advance CPU, memory map and scanline GPU."""