#!/usr/bin/env python3

"""
Curses Audio Plugin

Allows beeps to be played in the Terminal window (no sampled sound)!

Beeps cannot be stopped since they are effectively just a CTRL+G (character 7 -
BEL), so a running sound timer rings the bell at most once per interval rather
than on every CPU step.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import curses
from time import perf_counter
from .a_null import Audio as AudioBase

BEEP_INTERVAL = 0.2


class Audio(AudioBase):
    def __init__(self):
        self.next_beep_time = 0.0

    def beep(self):
        this_time = perf_counter()

        if this_time >= self.next_beep_time:
            curses.beep()
            self.next_beep_time = this_time + BEEP_INTERVAL
