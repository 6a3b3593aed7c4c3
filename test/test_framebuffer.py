#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from pchip.renderers.r_null import Renderer
from pchip.framebuffer import Framebuffer


class RecordingRenderer(Renderer):
    def __init__(self):
        self.pixels = {}
        self.refreshes = 0
        super().__init__()

    def set_pixel(self, x, y, colour):
        self.pixels[(x, y)] = colour

    def refresh_display(self, content_changed=False):
        if content_changed:
            self.refreshes += 1


class TestFrameBuffer(unittest.TestCase):
    def setUp(self):
        self.framebuffer = Framebuffer(4, 3)

    def test_framebuffer_default_size(self):
        framebuffer = Framebuffer()
        self.assertEqual((64, 32), framebuffer.get_vid_size())
        self.assertEqual(64 * 32, len(framebuffer.pixels))
        self.assertFalse(any(framebuffer.pixels))
        self.assertFalse(framebuffer.redraw_needed)

    def test_framebuffer_xor_pixel(self):
        fb = self.framebuffer
        self.assertFalse(fb.xor_pixel(1, 2))
        self.assertEqual(
            [False] * 9 + [True] + [False] * 2,
            fb.pixels
        )
        self.assertTrue(fb.get_pixel(1, 2))
        self.assertTrue(fb.xor_pixel(1, 2))  # Erasing a set pixel is a collision
        self.assertFalse(any(fb.pixels))

    def test_framebuffer_xor_pixel_wraps(self):
        fb = self.framebuffer
        fb.xor_pixel(4, 3)
        self.assertTrue(fb.get_pixel(0, 0))
        fb.xor_pixel(9, 7)
        self.assertTrue(fb.get_pixel(1, 1))
        self.assertEqual(2, sum(fb.pixels))

    def test_framebuffer_clear(self):
        fb = self.framebuffer
        fb.xor_pixel(0, 0)
        fb.xor_pixel(3, 2)
        self.assertFalse(fb.redraw_needed)
        fb.clear()
        self.assertFalse(any(fb.pixels))
        self.assertTrue(fb.redraw_needed)

    def test_framebuffer_consume_redraw(self):
        fb = self.framebuffer
        self.assertFalse(fb.consume_redraw())
        fb.mark_redraw()
        self.assertTrue(fb.consume_redraw())
        self.assertFalse(fb.consume_redraw())

    def test_framebuffer_render(self):
        fb = self.framebuffer
        renderer = RecordingRenderer()
        fb.xor_pixel(2, 1)
        fb.render(renderer)
        self.assertEqual(12, len(renderer.pixels))
        self.assertEqual(1, renderer.pixels[(2, 1)])
        self.assertEqual(0, renderer.pixels[(1, 2)])
        self.assertEqual(1, renderer.refreshes)
