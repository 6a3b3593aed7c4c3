#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import io
import unittest
from contextlib import redirect_stdout
from pchip.constants import MEM_SIZE
from pchip.cpu import CPU
from pchip.debugger import Debugger
from pchip.framebuffer import Framebuffer
from pchip.ram import RAM
from pchip.stack import Stack
from pchip.audio.a_null import Audio


class TestDebugger(unittest.TestCase):
    def setUp(self):
        self.ram = RAM()
        self.ram.resize(MEM_SIZE)
        self.stack = Stack()
        self.debugger = Debugger()
        self.cpu = CPU(self.ram, self.stack, Framebuffer(), Audio(), self.debugger)

    def test_debugger_live_flag(self):
        self.assertFalse(self.debugger.is_live())
        self.debugger.set_live(True)
        self.assertTrue(self.debugger.is_live())

    def test_debugger_debug(self):
        self.cpu.v[0xF] = 0xAB
        self.cpu.v[0x0] = 0x01
        self.cpu.i = 0x123
        self.cpu.opcode = 0x6001
        debug_str = self.debugger.debug(self.cpu, "LD V0, 0x01")
        self.assertTrue(debug_str.startswith("V: 0xab"))
        self.assertIn("01 I: 0x0123", debug_str)
        self.assertIn("PC: 0x200", debug_str)
        self.assertIn("OP: 0x6001 IN: LD V0, 0x01", debug_str)
        self.assertNotIn("Stack", debug_str)

    def test_debugger_debug_verbose(self):
        self.assertTrue(self.debugger.debug(self.cpu, "???", verbose=True).endswith("Stack: (Empty)"))
        self.stack.push(0x202)
        self.assertTrue(self.debugger.debug(self.cpu, "???", verbose=True).endswith("Stack: 0x202"))

    def test_debugger_live_output(self):
        self.debugger.set_live(True)
        cpu = CPU(self.ram, self.stack, Framebuffer(), Audio(), self.debugger)
        self.ram.write_block(0x200, b"\x6A\x42")
        output = io.StringIO()

        with redirect_stdout(output):
            cpu.step()

        self.assertIn("IN: LD Va, 0x42", output.getvalue())
        self.assertEqual(0x42, cpu.v[0xA])

    def test_debugger_reports_unknown_opcode(self):
        self.ram.write_block(0x200, b"\xE1\x23")
        output = io.StringIO()

        with redirect_stdout(output):
            self.cpu.step()

        self.assertIn("Opcode 0xe123 at address 0x200", output.getvalue())
        self.assertEqual(0x200, self.cpu.pc)
