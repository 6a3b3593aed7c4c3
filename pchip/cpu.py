#!/usr/bin/env python3

"""
CPU Emulator (CHIP-8)

Like a real computer, this is where most of the processing happens.  Each call
to step() fetches one instruction, decodes it into an instruction variant, and
executes it against the machine state held here: registers, index, program
counter, timers and keys, plus the attached RAM, stack and framebuffer.

Timing is entirely up to the caller.  The delay and sound timers decrement once
per step, so the host must call step() at a steady rate for programs to run at
the intended speed.

Instructions which write Vf as a flag are marked in their handlers.  Vf is an
ordinary register otherwise, so programs may also use it for data.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from random import Random
from .constants import (
    FLAG_REGISTER, FONT_GLYPH_SIZE, FONT_START, INSTRUCTION_SIZE, NUM_KEYS, NUM_REGISTERS, PROGRAM_START,
    SPRITE_WIDTH
)
from .instructions import (
    UnknownOpcodeError, to_instruction, JumpToMachineCode, Clear, Return, Jump, Call, SkipNextEqualLiteral,
    SkipNextNotEqualLiteral, SkipNextEqualRegister, RegisterSetLiteral, RegisterAddAssign, RegisterSetRegister,
    RegisterSetRegisterBitwiseOr, RegisterSetRegisterBitwiseAnd, RegisterSetRegisterBitwiseXor,
    RegisterSetRegisterAdd, RegisterSetRegisterSub, RegisterSetRegisterShr, RegisterSetRegisterSubn,
    RegisterSetRegisterShl, SkipNextNotEqualRegister, SetIndex, JumpTo, RandBitwiseAnd, DrawSprite,
    SkipNextKeyPressed, SkipNextKeyNotPressed, SetDelayTimerValue, KeyPressWait, SetDelayTimerRegister,
    SetSoundTimerRegister, IndexAddAssignRegister, SetIndexToDigitSprite, StoreBCDAtIndex, StoreRegistersAtIndex,
    ReadRegistersAtIndex
)
from .opcode import Opcode, CPU_ENDIAN


class CPUError(Exception):
    pass


class CPU:
    def __init__(self, ram, stack, framebuffer, audio, debugger, rng=None):
        self.ram = ram
        self.stack = stack
        self.framebuffer = framebuffer
        self.audio = audio
        self.debugger = debugger
        self.live_debug = self.debugger.is_live()
        self.rng = Random() if rng is None else rng

        # Define instruction handlers, one per variant
        self.instructions = {
            JumpToMachineCode:             self._0nnn,
            Clear:                         self._00E0,
            Return:                        self._00EE,
            Jump:                          self._1nnn,
            Call:                          self._2nnn,
            SkipNextEqualLiteral:          self._3xkk,
            SkipNextNotEqualLiteral:       self._4xkk,
            SkipNextEqualRegister:         self._5xy0,
            RegisterSetLiteral:            self._6xkk,
            RegisterAddAssign:             self._7xkk,
            RegisterSetRegister:           self._8xy0,
            RegisterSetRegisterBitwiseOr:  self._8xy1,
            RegisterSetRegisterBitwiseAnd: self._8xy2,
            RegisterSetRegisterBitwiseXor: self._8xy3,
            RegisterSetRegisterAdd:        self._8xy4,
            RegisterSetRegisterSub:        self._8xy5,
            RegisterSetRegisterShr:        self._8xy6,
            RegisterSetRegisterSubn:       self._8xy7,
            RegisterSetRegisterShl:        self._8xyE,
            SkipNextNotEqualRegister:      self._9xy0,
            SetIndex:                      self._Annn,
            JumpTo:                        self._Bnnn,
            RandBitwiseAnd:                self._Cxkk,
            DrawSprite:                    self._Dxyn,
            SkipNextKeyPressed:            self._Ex9E,
            SkipNextKeyNotPressed:         self._ExA1,
            SetDelayTimerValue:            self._Fx07,
            KeyPressWait:                  self._Fx0A,
            SetDelayTimerRegister:         self._Fx15,
            SetSoundTimerRegister:         self._Fx18,
            IndexAddAssignRegister:        self._Fx1E,
            SetIndexToDigitSprite:         self._Fx29,
            StoreBCDAtIndex:               self._Fx33,
            StoreRegistersAtIndex:         self._Fx55,
            ReadRegistersAtIndex:          self._Fx65
        }

        # Initialise registers
        self.v = memoryview(bytearray(NUM_REGISTERS))  # Bytearrays are mutable, so updating a register is fast
        self.i = 0  # Index register

        # Initialise timers
        self.dt = 0  # Delay timer
        self.st = 0  # Sound timer

        # Initialise program counter, current opcode and step counter
        self.pc = PROGRAM_START
        self.opcode = 0
        self.ticks = 0

        # Written by the host loop before each step
        self.keys = [False] * NUM_KEYS

    @property
    def halted(self):
        # There is no room for a whole instruction beyond the last byte of RAM
        return self.pc + 1 > self.ram.mem_top

    def step(self):
        if self.halted:
            return

        self.ticks += 1

        if self.dt > 0:
            self.dt -= 1

        if self.st > 0:
            self.st -= 1
            self.audio.beep()

        self.opcode = self.fetch()

        try:
            self.decode_exec()
        except UnknownOpcodeError as err:
            # Stray data is tolerated.  Report it and leave the program counter alone.
            self.debugger.report_unknown_opcode(self, err)

    def fetch(self):
        return int.from_bytes(self.ram.read_block(self.pc, INSTRUCTION_SIZE), CPU_ENDIAN, signed=False)

    def decode_exec(self):
        instruction = to_instruction(Opcode(self.opcode))

        if self.live_debug:
            self.debugger.output(self, instruction)

        self.instructions[type(instruction)](instruction)

    def inc_pc(self):
        self.pc += INSTRUCTION_SIZE

    def skip_pc(self):
        self.pc += INSTRUCTION_SIZE * 2

    def _skip_if(self, condition):
        if condition:
            self.skip_pc()
        else:
            self.inc_pc()

    def _key_down(self, reg):
        key = self.v[reg]

        if key >= NUM_KEYS:
            raise CPUError("Key 0x{:02x} in V{:01x} is out of range at address 0x{:03x}".format(key, reg, self.pc))

        return self.keys[key]

    def _0nnn(self, instruction):  # SYS addr
        # Machine code routines only ran on the original hardware, so most interpreters ignore this
        self.inc_pc()

    def _00E0(self, instruction):  # CLS
        self.framebuffer.clear()
        self.inc_pc()

    def _00EE(self, instruction):  # RET
        # The return address already points past the original call
        self.pc = self.stack.pop()

    def _1nnn(self, instruction):  # JP addr
        self.pc = instruction.addr

    def _2nnn(self, instruction):  # CALL addr
        self.stack.push(self.pc + INSTRUCTION_SIZE)
        self.pc = instruction.addr

    def _3xkk(self, instruction):  # SE Vx, byte
        self._skip_if(self.v[instruction.reg] == instruction.lit)

    def _4xkk(self, instruction):  # SNE Vx, byte
        self._skip_if(self.v[instruction.reg] != instruction.lit)

    def _5xy0(self, instruction):  # SE Vx, Vy
        self._skip_if(self.v[instruction.left] == self.v[instruction.right])

    def _6xkk(self, instruction):  # LD Vx, byte
        self.v[instruction.reg] = instruction.lit
        self.inc_pc()

    def _7xkk(self, instruction):  # ADD Vx, byte
        # Wraps, but unlike 8xy4, Vf is left untouched
        reg = instruction.reg
        self.v[reg] = (self.v[reg] + instruction.lit) & 0xFF
        self.inc_pc()

    def _8xy0(self, instruction):  # LD Vx, Vy
        self.v[instruction.left] = self.v[instruction.right]
        self.inc_pc()

    def _8xy1(self, instruction):  # OR Vx, Vy
        self.v[instruction.left] |= self.v[instruction.right]
        self.inc_pc()

    def _8xy2(self, instruction):  # AND Vx, Vy
        self.v[instruction.left] &= self.v[instruction.right]
        self.inc_pc()

    def _8xy3(self, instruction):  # XOR Vx, Vy
        self.v[instruction.left] ^= self.v[instruction.right]
        self.inc_pc()

    def _8xy4(self, instruction):  # ADD Vx, Vy
        val = self.v[instruction.left] + self.v[instruction.right]
        self.v[instruction.left] = val & 0xFF
        self.v[FLAG_REGISTER] = int(val > 0xFF)  # Vf is set when carrying
        self.inc_pc()

    def _post_8xy5_8xy7(self, left, val):  # Post-SUB/SUBN
        self.v[left] = val & 0xFF
        # Vf is set when NOT borrowing, and this happens AFTER Vx is set, in case Vf is also the destination
        self.v[FLAG_REGISTER] = int(val >= 0)
        self.inc_pc()

    def _8xy5(self, instruction):  # SUB Vx, Vy
        self._post_8xy5_8xy7(instruction.left, self.v[instruction.left] - self.v[instruction.right])

    def _8xy6(self, instruction):  # SHR Vx {, Vy}
        # Vy is ignored.  Vf takes the low bit first, then Vx is shifted.
        left = instruction.left
        self.v[FLAG_REGISTER] = self.v[left] & 0x1
        self.v[left] = self.v[left] >> 1
        self.inc_pc()

    def _8xy7(self, instruction):  # SUBN Vx, Vy
        self._post_8xy5_8xy7(instruction.left, self.v[instruction.right] - self.v[instruction.left])

    def _8xyE(self, instruction):  # SHL Vx {, Vy}
        # Vf takes the high bit first, then Vx is shifted
        reg = instruction.reg
        self.v[FLAG_REGISTER] = self.v[reg] >> 7
        self.v[reg] = (self.v[reg] << 1) & 0xFF
        self.inc_pc()

    def _9xy0(self, instruction):  # SNE Vx, Vy
        self._skip_if(self.v[instruction.left] != self.v[instruction.right])

    def _Annn(self, instruction):  # LD I, addr
        self.i = instruction.value
        self.inc_pc()

    def _Bnnn(self, instruction):  # JP V0, addr
        # Not masked.  Jumping off the end of memory halts the CPU.
        self.pc = self.v[0x0] + instruction.addr

    def _Cxkk(self, instruction):  # RND Vx, byte
        # The ANDing here is intentional.  This is not a random number between 0 and 'byte' inclusive.
        self.v[instruction.reg] = self.rng.randint(0, 0xFF) & instruction.lit
        self.inc_pc()

    def _Dxyn(self, instruction):  # DRW Vx, Vy, nibble
        self._draw_sprite(self.v[instruction.x], self.v[instruction.y], instruction.size)
        self.inc_pc()

    def _draw_sprite(self, vx_pos, vy_pos, height):
        # Sprites are 8 pixels wide, one byte per row, read from RAM at I.  Each set bit toggles a pixel, wrapping
        # around the screen edges.  Vf is set if any pixel was switched off.
        framebuffer = self.framebuffer
        collided = False

        for y, spr_data in enumerate(self.ram.read_block(self.i, height)):
            scr_y = vy_pos + y

            for x in range(SPRITE_WIDTH):
                if spr_data & (0x80 >> x):
                    if framebuffer.xor_pixel(vx_pos + x, scr_y):
                        # Don't stop drawing.  Just remember there was a collision.
                        collided = True

        self.v[FLAG_REGISTER] = int(collided)
        framebuffer.mark_redraw()

    def _Ex9E(self, instruction):  # SKP Vx
        self._skip_if(self._key_down(instruction.reg))

    def _ExA1(self, instruction):  # SKNP Vx
        self._skip_if(not self._key_down(instruction.reg))

    def _Fx07(self, instruction):  # LD Vx, DT
        self.v[instruction.reg] = self.dt
        self.inc_pc()

    def _Fx0A(self, instruction):  # LD Vx, K
        # There is no real wait here.  If nothing is pressed, the program counter stays put and this instruction runs
        # again on the next step, so the timers and display keep going in the meantime.
        for key, key_down in enumerate(self.keys):
            if key_down:
                self.v[instruction.reg] = key
                self.inc_pc()
                return

    def _Fx15(self, instruction):  # LD DT, Vx
        self.dt = self.v[instruction.reg]
        self.inc_pc()

    def _Fx18(self, instruction):  # LD ST, Vx
        self.st = self.v[instruction.reg]
        self.inc_pc()

    def _Fx1E(self, instruction):  # ADD I, Vx
        # No flag.  Overflowing I only matters once it is used to address RAM.
        self.i += self.v[instruction.reg]
        self.inc_pc()

    def _Fx29(self, instruction):  # LD F, Vx
        self.i = FONT_START + self.v[instruction.reg] * FONT_GLYPH_SIZE
        self.inc_pc()

    def _Fx33(self, instruction):  # LD B, Vx
        val = self.v[instruction.reg]
        i = self.i
        self.ram.write(i, val // 100)             # Most-significant digit
        self.ram.write(i + 1, (val // 10) % 10)   # Middle digit
        self.ram.write(i + 2, val % 10)           # Least-significant digit
        self.inc_pc()

    def _Fx55(self, instruction):  # LD [I], Vx
        # Ensure with +1s that the final register is copied
        self.ram.write_block(self.i, self.v[:instruction.start_addr + 1])
        self.inc_pc()

    def _Fx65(self, instruction):  # LD Vx, [I]
        count = instruction.start_addr + 1
        self.v[:count] = self.ram.read_block(self.i, count)
        self.inc_pc()
