#!/usr/bin/env python3

"""
Framebuffer Emulator

Pixels are written here, and are only drawn to the actual display (the host
rendering system) when the host loop next refreshes.  Calling a rendering
library for every pixel toggle would lower speed substantially, so sprites are
composited into this buffer and the whole screen is handed over at once.

Programs cannot write directly into video memory.  Instead, sprites are drawn
to the screen using an XOR method, and collisions (where any pixel was set,
but was unset by an XOR) are reported back to the CPU.

Coordinates always wrap around the screen edges, so a sprite drawn partly off
the right edge reappears on the left.

The redraw flag is one-shot: the CPU sets it whenever the screen is cleared or
drawn to, and the host loop consumes it when rendering.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import SCREEN_WIDTH, SCREEN_HEIGHT


class Framebuffer:
    def __init__(self, vid_width=SCREEN_WIDTH, vid_height=SCREEN_HEIGHT):
        self.vid_width = vid_width
        self.vid_height = vid_height
        self.vid_size = vid_width * vid_height
        self.pixels = [False] * self.vid_size  # Row-major
        self.redraw_needed = False

    def clear(self):
        for vram_loc in range(self.vid_size):
            self.pixels[vram_loc] = False

        self.redraw_needed = True

    def xor_pixel(self, x, y):
        # Returns True if a set pixel was erased
        x %= self.vid_width
        y %= self.vid_height
        vram_loc = y * self.vid_width + x
        collision = self.pixels[vram_loc]
        self.pixels[vram_loc] = not collision
        return collision

    def get_pixel(self, x, y):
        return self.pixels[(y % self.vid_height) * self.vid_width + (x % self.vid_width)]

    def mark_redraw(self):
        self.redraw_needed = True

    def consume_redraw(self):
        redraw_needed = self.redraw_needed
        self.redraw_needed = False
        return redraw_needed

    def render(self, renderer):
        # Push every pixel to the host renderer, then show the result
        vid_width = self.vid_width

        for y in range(self.vid_height):
            row = y * vid_width

            for x in range(vid_width):
                renderer.set_pixel(x, y, int(self.pixels[row + x]))

        renderer.refresh_display(True)

    def get_vid_size(self):
        return self.vid_width, self.vid_height
