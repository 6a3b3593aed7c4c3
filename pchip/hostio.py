#!/usr/bin/env python3

"""
Host I/O Functionality

Handles loading ROM binaries and the base system font for later writing into
RAM.  Problems reading a ROM surface here, before the CPU ever runs.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import FONT_START, MAX_PROGRAM_SIZE, PROGRAM_START, SYSTEM_FONT


class LoaderError(Exception):
    pass


class Loader:
    def load_binary(self, filename):
        with open(filename, "rb") as f:
            # Read one byte more than allowed, so oversized ROMs are caught without reading the whole file
            data = f.read(MAX_PROGRAM_SIZE + 1)

        if len(data) > MAX_PROGRAM_SIZE:
            raise LoaderError(
                "ROM '{}' is too large.  At most {} bytes can be loaded.".format(filename, MAX_PROGRAM_SIZE)
            )

        return data

    def load_system_font(self):
        return SYSTEM_FONT

    def install(self, ram, program):
        # Font first, then the program.  Everything else stays zeroed.
        ram.write_block(FONT_START, self.load_system_font())
        ram.write_block(PROGRAM_START, program)
