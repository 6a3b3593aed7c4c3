#!/usr/bin/env python3

"""
PyGame Audio Plugin

Plays the buzzer within PyGame / SDL.

The CHIP-8 buzzer is simply 'on' while the sound timer is running.  Each step
of a running timer asks for a beep, so a short square wave is played whenever
one isn't already sounding.  The wave is stretched from a 1-bit, 16-byte
pattern to fit a modern 8-bit PyGame / SDL buffer, retaining the shape of a
square wave.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import pygame
from .a_null import Audio as AudioBase

PLAYBACK_FREQUENCY = 44100.0
BEEP_FREQUENCY = 4000.0
BEEP_PATTERN = b"\x00\xFF" * 8  # 1-bit square wave, 128 bits long
BEEP_LOOPS = 20                 # Roughly one 60Hz frame of sound per beep
DEFAULT_VOLUME = 0.1


class Audio(AudioBase):
    def __init__(self):
        pygame.mixer.pre_init(int(PLAYBACK_FREQUENCY), size=8, channels=1, buffer=512, allowedchanges=0)
        pygame.mixer.init()
        self.sound = pygame.mixer.Sound(buffer=self._resample(BEEP_PATTERN, PLAYBACK_FREQUENCY / BEEP_FREQUENCY))
        self.sound.set_volume(DEFAULT_VOLUME)
        self.channel = None

    def _resample(self, pattern, sample_multiplier):
        # Stretch the width and height of the emulated square waveform to fit the host buffer
        resampled_buffer_size = int(len(pattern) * 8 * sample_multiplier)
        resampled_buffer = bytearray(resampled_buffer_size)

        for resampled_buffer_pos in range(resampled_buffer_size):
            buffer_byte_pos = resampled_buffer_pos / sample_multiplier
            byte = int(buffer_byte_pos / 8.0)
            bit = 7 - int(buffer_byte_pos % 8.0)
            resampled_buffer[resampled_buffer_pos] = ((pattern[byte] >> bit) & 1) * 0xFF

        return bytes(resampled_buffer)

    def beep(self):
        # Don't restart a beep which is already playing
        if self.channel is None or not self.channel.get_busy():
            self.channel = self.sound.play(loops=BEEP_LOOPS)

    def shutdown(self):
        self.sound.stop()
        pygame.mixer.quit()
        super().shutdown()
