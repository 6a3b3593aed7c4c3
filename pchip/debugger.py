#!/usr/bin/env python3

"""
CPU Debugger

If enabled, this will output information before each instruction executed:
    * All 16 of the [V] registers, starting with most significant (Vf) and
      reducing to least significant (V0)
    * I  - Index register
    * DT - Delay timer
    * ST - Sound timer
    * PC - Program counter
    * SP - Stack pointer
    * TK - Steps taken so far
    * OP - OpCode number
    * IN - Decoded instruction

Unknown opcodes are always reported, whether live output is enabled or not,
since the CPU carries on past them and they would otherwise go unnoticed.  The
report adds the stack contents.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .instructions import describe


class Debugger:
    def __init__(self):
        self.live = False

    def debug(self, cpu, instruction, verbose=False):
        debug_str = (
            "V: 0x" + ("{:02x}" * 16) +
            " I: 0x{:04x} DT: 0x{:02x} ST: 0x{:02x} PC: 0x{:03x} SP: 0x{:01x} TK: {} OP: 0x{:04x} IN: {}"
        ).format(
            *[cpu.v[reg_num] for reg_num in range(15, -1, -1)] +
            [cpu.i, cpu.dt, cpu.st, cpu.pc, cpu.stack.sp, cpu.ticks, cpu.opcode, instruction]
        )

        if verbose:
            stack_items = cpu.stack.get_items()
            stack_str = (" 0x{:03x}" * len(stack_items)).format(*stack_items)
            debug_str += "\nStack:{}".format(stack_str or " (Empty)")

        return debug_str

    def set_live(self, enabled):
        self.live = enabled

    def is_live(self):
        return self.live

    def output(self, cpu, instruction):
        print(self.debug(cpu, describe(instruction)))

    def report_unknown_opcode(self, cpu, error):
        print(
            "Opcode 0x{:04x} at address 0x{:03x} is not a CHIP-8 instruction, skipping.\n{}".format(
                error.opcode.raw, cpu.pc, self.debug(cpu, "???", verbose=True)
            )
        )
