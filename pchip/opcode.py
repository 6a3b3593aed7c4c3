#!/usr/bin/env python3

"""
Opcode Decoder

Splits a raw 16-bit instruction word into the fixed bit-fields shared by every
CHIP-8 instruction.  References to Vx, Vy, byte and addr always sit in the same
opcode position, so decoding never fails: every word yields a field tuple, and
it is up to the instruction mapping to decide whether that tuple means anything.

    group = 0xF000  Instruction family
    nnn   = 0x0FFF  Address / 12-bit literal
    x     = 0x0F00  Register (0-15)
    y     = 0x00F0  Register (0-15)
    n     = 0x000F  Nibble
    kk    = 0x00FF  Byte
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

CPU_ENDIAN = "big"  # CHIP-8 is big-endian


class Opcode:
    __slots__ = ("raw", "group", "nnn", "x", "y", "n", "kk")

    def __init__(self, word):
        word &= 0xFFFF
        self.raw = word
        self.group = (word & 0xF000) >> 12
        self.nnn = word & 0x0FFF
        self.x = (word & 0x0F00) >> 8
        self.y = (word & 0x00F0) >> 4
        self.n = word & 0x000F
        self.kk = word & 0x00FF

    @classmethod
    def from_bytes(cls, high, low):
        return cls(int.from_bytes(bytes((high, low)), CPU_ENDIAN, signed=False))

    def __repr__(self):
        return "Opcode(0x{:04x})".format(self.raw)

    def __eq__(self, other):
        return isinstance(other, Opcode) and other.raw == self.raw

    def __hash__(self):
        return hash(self.raw)
