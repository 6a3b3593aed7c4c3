#!/usr/bin/env python3

"""
PyGame Renderer Plugin

Used by the host loop to draw the screen.  This draws graphics onto an SDL
window surface via PyGame.  Note that the surface is allocated at the size of
the emulated screen, and then the contents are stretched (using 'Nearest
Neighbour' translation) to fit the window itself.  This means we don't have to
draw the same pixel multiple times.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import pygame
from .r_null import Renderer as RendererBase
from ..constants import APP_NAME

# Background, then foreground
COLOUR_MAP = (0x222222, 0xDDDDDD)


class Renderer(RendererBase):
    def __init__(self, scale=None, **kwargs):
        if scale is None:
            scale = 512  # Default window width if not supplied, or set to default

        pygame.display.init()
        self.set_title(APP_NAME)
        self.rgb_buffer = None
        self.scaled_size = (scale, scale // 2)
        self.display_surface = pygame.display.set_mode(self.scaled_size)

        # Split compound RGB values for faster byte-based lookup later
        self.rgb_map = [bytes((i >> 16, (i >> 8) & 0xFF, i & 0xFF)) for i in COLOUR_MAP]

        super().__init__(scale)

    def set_resolution(self, width, height):
        # Call superclass method first so set_pixel knows the row width
        super().set_resolution(width, height)
        total_pixels = width * height
        self.rgb_buffer = memoryview(bytearray(self.rgb_map[0] * total_pixels))  # 24-bit

        # Force a refresh now, in case nothing else is drawn afterwards
        self.refresh_display(True)

    def set_pixel(self, x, y, colour):
        # Update RGB buffer in-place to minimise allocations and PyGame calls
        rgb_location = (y * self.width + x) * 3
        self.rgb_buffer[rgb_location:rgb_location + 3] = self.rgb_map[colour]

    def refresh_display(self, content_changed=False):
        if content_changed and self.rgb_buffer:
            # Blit the bytearray straight to the surface, rather than updating individual pixels
            render_surface = pygame.image.frombuffer(self.rgb_buffer, (self.width, self.height), "RGB")
            scaled_win = pygame.transform.scale(render_surface, self.scaled_size)
            self.display_surface.blit(scaled_win, (0, 0))
            pygame.display.flip()

    def set_title(self, title):
        pygame.display.set_caption(title)

    def shutdown(self):
        # PyGame currently segfaults if display.quit is called via __del__
        pygame.display.quit()
        super().shutdown()
