#!/usr/bin/env python3

"""
Host Loop

Drives the CPU from the host side.  The CPU knows nothing about real time, so
this is where instruction pacing, input polling and display updates happen.

Inputs are polled and the display refreshed at 60Hz, as constantly checking
the host's event queue or redrawing the window would be far too slow.  In
between, the CPU is stepped at a fixed rate, which also sets the rate of the
delay and sound timers.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from time import perf_counter
from .constants import APP_NAME, CLOCK_SPEED, DISPLAY_FREQ, NUM_KEYS

DISPLAY_INTERVAL = 1.0 / DISPLAY_FREQ


class HostLoop:
    def __init__(self, cpu, framebuffer, renderer, inputs, clock_speed=CLOCK_SPEED):
        self.cpu = cpu
        self.framebuffer = framebuffer
        self.renderer = renderer
        self.inputs = inputs
        self.core_interval = None if clock_speed <= 0 else 1.0 / clock_speed

        # Performance-related vars
        self.next_display_update_time = 0
        self.perf_counter_fps = 0
        self.perf_counter_ops = 0
        self.next_perf_report_time = 0
        self.report_perf()

    def run(self):
        while True:
            this_time = perf_counter()  # Do this first for maximum precision

            if not self.tick(this_time):
                return

            if self.core_interval is not None:
                # Wait for the next step.  Do this last to take into account time spent on this one.
                next_time = this_time + self.core_interval

                while perf_counter() < next_time:  # Unfortunately we have to do this to get the timing right
                    pass

    def tick(self, this_time):
        # Returns False once the user has asked to quit

        # Performance counters
        if this_time >= self.next_perf_report_time:
            self.next_perf_report_time = int(this_time) + 1.0
            # Report before refreshing, as refreshing will likely show the report
            self.report_perf(self.perf_counter_fps, self.perf_counter_ops)
            self.perf_counter_ops = 0
            self.perf_counter_fps = 0

        # Prevent unnecessary display rendering in excess of host frame rate
        if this_time >= self.next_display_update_time:
            if self.inputs.process_messages():  # Process inputs at 60Hz too, to avoid slowdown
                return False

            self.poll_keys()
            self.next_display_update_time = this_time + DISPLAY_INTERVAL

            if self.refresh_framebuffer():
                self.perf_counter_fps += 1

        self.cpu.step()
        self.perf_counter_ops += 1
        return True

    def poll_keys(self):
        keys = self.cpu.keys

        for key in range(NUM_KEYS):
            keys[key] = self.inputs.is_key_down(key)

    def refresh_framebuffer(self):
        # Only redraw if the CPU has touched the screen since the last refresh
        if not self.framebuffer.consume_redraw():
            return False

        self.framebuffer.render(self.renderer)
        return True

    def report_perf(self, fps=0, ops=0):
        self.renderer.set_title("{} - {} FPS, {} OPS".format(APP_NAME, fps, ops))
