#!/usr/bin/env python3

"""
Stack Emulator

The call stack lives outside system RAM, since there is no specified location
for it and no program can address it.  It is a fixed 16-slot array of return
addresses with a stack pointer indexing the next free slot.

Calling more than 16 levels deep, or returning with nothing on the stack, is
left undefined by the original hardware.  Both are treated as fatal here.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import STACK_DEPTH


class StackError(Exception):
    pass


class Stack:
    def __init__(self, size=STACK_DEPTH):
        self.items = [0] * size
        self.size = size
        self.sp = 0

    def push(self, item):
        if self.sp >= self.size:
            raise StackError("Stack overflow")

        self.items[self.sp] = item
        self.sp += 1

    def pop(self):
        if self.sp <= 0:
            raise StackError("Stack underflow")

        # Decrement first, since the pointer is always one past the top item
        self.sp -= 1
        return self.items[self.sp]

    def get_items(self):
        # For debugging
        return self.items[:self.sp]
