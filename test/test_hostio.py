#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import os
import tempfile
import unittest
from pchip.constants import MAX_PROGRAM_SIZE, MEM_SIZE
from pchip.hostio import Loader, LoaderError
from pchip.ram import RAM


class TestLoader(unittest.TestCase):
    def setUp(self):
        self.loader = Loader()
        self.tempdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tempdir.cleanup()

    def _write_rom(self, data):
        filename = os.path.join(self.tempdir.name, "test.ch8")

        with open(filename, "wb") as f:
            f.write(data)

        return filename

    def test_loader_system_font(self):
        font = self.loader.load_system_font()
        self.assertEqual(80, len(font))
        # '0' and 'F' glyphs
        self.assertEqual(b"\xF0\x90\x90\x90\xF0", font[:5])
        self.assertEqual(b"\xF0\x80\xF0\x80\x80", font[75:])

        # Every glyph fits in the left half of an 8-pixel sprite
        for row in font:
            self.assertEqual(0, row & 0x0F)

    def test_loader_load_file_present(self):
        filename = self._write_rom(b"\x00\xE0\x12\x02")
        self.assertEqual(b"\x00\xE0\x12\x02", self.loader.load_binary(filename))

    def test_loader_load_file_largest(self):
        filename = self._write_rom(b"\xAA" * MAX_PROGRAM_SIZE)
        self.assertEqual(MAX_PROGRAM_SIZE, len(self.loader.load_binary(filename)))

    def test_loader_load_file_too_large(self):
        filename = self._write_rom(b"\xAA" * (MAX_PROGRAM_SIZE + 1))
        self.assertRaises(LoaderError, self.loader.load_binary, filename)

    def test_loader_load_file_missing(self):
        self.assertRaises(FileNotFoundError, self.loader.load_binary, "NoFile.ch8")

    def test_loader_install(self):
        ram = RAM()
        ram.resize(MEM_SIZE)
        self.loader.install(ram, b"\x12\x34")
        self.assertEqual(self.loader.load_system_font(), bytes(ram.read_block(0, 80)))
        self.assertEqual(bytes(0x200 - 80), bytes(ram.read_block(80, 0x200 - 80)))
        self.assertEqual(b"\x12\x34", bytes(ram.read_block(0x200, 2)))
        self.assertEqual(bytes(MEM_SIZE - 0x202), bytes(ram.read_block(0x202, MEM_SIZE - 0x202)))
