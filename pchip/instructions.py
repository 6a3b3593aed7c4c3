#!/usr/bin/env python3

"""
Instruction Set

Every legal CHIP-8 operation as a small immutable variant, plus the table that
maps decoded opcode fields onto them.  The CPU executes variants, never raw
opcodes, so the only place an unrecognised instruction can be caught is here.

Groups 0x1-0xD are selected by their first nibble alone (0x0 additionally
checks the low byte for CLS and RET).  Groups 0x8, 0xE and 0xF sub-dispatch on
the low nibble or low byte, and anything unmatched there is an unknown opcode.

Variants compare by type as well as by operands, so Jump(0x200) is never equal
to Call(0x200), even though both are 1-tuples underneath.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from collections import namedtuple


class InstructionError(Exception):
    pass


class UnknownOpcodeError(InstructionError):
    def __init__(self, opcode):
        self.opcode = opcode
        super().__init__("Unknown opcode 0x{:04x}".format(opcode.raw))


class Instruction:
    __slots__ = ()

    def __eq__(self, other):
        return type(self) is type(other) and tuple.__eq__(self, other)

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((type(self).__name__,) + tuple(self))


def _variant(name, fields=()):
    return type(name, (Instruction, namedtuple(name, fields)), {"__slots__": ()})


JumpToMachineCode = _variant("JumpToMachineCode", ("addr",))
Clear = _variant("Clear")
Return = _variant("Return")
Jump = _variant("Jump", ("addr",))
Call = _variant("Call", ("addr",))
SkipNextEqualLiteral = _variant("SkipNextEqualLiteral", ("reg", "lit"))
SkipNextNotEqualLiteral = _variant("SkipNextNotEqualLiteral", ("reg", "lit"))
SkipNextEqualRegister = _variant("SkipNextEqualRegister", ("left", "right"))
RegisterSetLiteral = _variant("RegisterSetLiteral", ("reg", "lit"))
RegisterAddAssign = _variant("RegisterAddAssign", ("reg", "lit"))
RegisterSetRegister = _variant("RegisterSetRegister", ("left", "right"))
RegisterSetRegisterBitwiseOr = _variant("RegisterSetRegisterBitwiseOr", ("left", "right"))
RegisterSetRegisterBitwiseAnd = _variant("RegisterSetRegisterBitwiseAnd", ("left", "right"))
RegisterSetRegisterBitwiseXor = _variant("RegisterSetRegisterBitwiseXor", ("left", "right"))
RegisterSetRegisterAdd = _variant("RegisterSetRegisterAdd", ("left", "right"))
RegisterSetRegisterSub = _variant("RegisterSetRegisterSub", ("left", "right"))
RegisterSetRegisterShr = _variant("RegisterSetRegisterShr", ("left", "right"))
RegisterSetRegisterSubn = _variant("RegisterSetRegisterSubn", ("left", "right"))
RegisterSetRegisterShl = _variant("RegisterSetRegisterShl", ("reg",))
SkipNextNotEqualRegister = _variant("SkipNextNotEqualRegister", ("left", "right"))
SetIndex = _variant("SetIndex", ("value",))
JumpTo = _variant("JumpTo", ("addr",))
RandBitwiseAnd = _variant("RandBitwiseAnd", ("reg", "lit"))
DrawSprite = _variant("DrawSprite", ("x", "y", "size"))
SkipNextKeyPressed = _variant("SkipNextKeyPressed", ("reg",))
SkipNextKeyNotPressed = _variant("SkipNextKeyNotPressed", ("reg",))
SetDelayTimerValue = _variant("SetDelayTimerValue", ("reg",))
KeyPressWait = _variant("KeyPressWait", ("reg",))
SetDelayTimerRegister = _variant("SetDelayTimerRegister", ("reg",))
SetSoundTimerRegister = _variant("SetSoundTimerRegister", ("reg",))
IndexAddAssignRegister = _variant("IndexAddAssignRegister", ("reg",))
SetIndexToDigitSprite = _variant("SetIndexToDigitSprite", ("reg",))
StoreBCDAtIndex = _variant("StoreBCDAtIndex", ("reg",))
StoreRegistersAtIndex = _variant("StoreRegistersAtIndex", ("start_addr",))
ReadRegistersAtIndex = _variant("ReadRegistersAtIndex", ("start_addr",))

# Conventional assembler mnemonics, used for debug output
MNEMONICS = {
    JumpToMachineCode:             "SYS 0x{addr:03x}",
    Clear:                         "CLS",
    Return:                        "RET",
    Jump:                          "JP 0x{addr:03x}",
    Call:                          "CALL 0x{addr:03x}",
    SkipNextEqualLiteral:          "SE V{reg:01x}, 0x{lit:02x}",
    SkipNextNotEqualLiteral:       "SNE V{reg:01x}, 0x{lit:02x}",
    SkipNextEqualRegister:         "SE V{left:01x}, V{right:01x}",
    RegisterSetLiteral:            "LD V{reg:01x}, 0x{lit:02x}",
    RegisterAddAssign:             "ADD V{reg:01x}, 0x{lit:02x}",
    RegisterSetRegister:           "LD V{left:01x}, V{right:01x}",
    RegisterSetRegisterBitwiseOr:  "OR V{left:01x}, V{right:01x}",
    RegisterSetRegisterBitwiseAnd: "AND V{left:01x}, V{right:01x}",
    RegisterSetRegisterBitwiseXor: "XOR V{left:01x}, V{right:01x}",
    RegisterSetRegisterAdd:        "ADD V{left:01x}, V{right:01x}",
    RegisterSetRegisterSub:        "SUB V{left:01x}, V{right:01x}",
    RegisterSetRegisterShr:        "SHR V{left:01x}",
    RegisterSetRegisterSubn:       "SUBN V{left:01x}, V{right:01x}",
    RegisterSetRegisterShl:        "SHL V{reg:01x}",
    SkipNextNotEqualRegister:      "SNE V{left:01x}, V{right:01x}",
    SetIndex:                      "LD I, 0x{value:03x}",
    JumpTo:                        "JP V0, 0x{addr:03x}",
    RandBitwiseAnd:                "RND V{reg:01x}, 0x{lit:02x}",
    DrawSprite:                    "DRW V{x:01x}, V{y:01x}, 0x{size:01x}",
    SkipNextKeyPressed:            "SKP V{reg:01x}",
    SkipNextKeyNotPressed:         "SKNP V{reg:01x}",
    SetDelayTimerValue:            "LD V{reg:01x}, DT",
    KeyPressWait:                  "LD V{reg:01x}, K",
    SetDelayTimerRegister:         "LD DT, V{reg:01x}",
    SetSoundTimerRegister:         "LD ST, V{reg:01x}",
    IndexAddAssignRegister:        "ADD I, V{reg:01x}",
    SetIndexToDigitSprite:         "LD F, V{reg:01x}",
    StoreBCDAtIndex:               "LD B, V{reg:01x}",
    StoreRegistersAtIndex:         "LD [I], V{start_addr:01x}",
    ReadRegistersAtIndex:          "LD V{start_addr:01x}, [I]"
}

# The closed set of variants.  The CPU must provide a handler for each of these.
INSTRUCTION_TYPES = tuple(MNEMONICS)

# Sub-dispatch tables for the groups which don't decode by first nibble alone
_GROUP_0 = {
    0xE0: lambda op: Clear(),
    0xEE: lambda op: Return()
}

_GROUP_8 = {
    0x0: lambda op: RegisterSetRegister(op.x, op.y),
    0x1: lambda op: RegisterSetRegisterBitwiseOr(op.x, op.y),
    0x2: lambda op: RegisterSetRegisterBitwiseAnd(op.x, op.y),
    0x3: lambda op: RegisterSetRegisterBitwiseXor(op.x, op.y),
    0x4: lambda op: RegisterSetRegisterAdd(op.x, op.y),
    0x5: lambda op: RegisterSetRegisterSub(op.x, op.y),
    0x6: lambda op: RegisterSetRegisterShr(op.x, op.y),
    0x7: lambda op: RegisterSetRegisterSubn(op.x, op.y),
    0xE: lambda op: RegisterSetRegisterShl(op.x)
}

_GROUP_E = {
    0x9E: lambda op: SkipNextKeyPressed(op.x),
    0xA1: lambda op: SkipNextKeyNotPressed(op.x)
}

_GROUP_F = {
    0x07: lambda op: SetDelayTimerValue(op.x),
    0x0A: lambda op: KeyPressWait(op.x),
    0x15: lambda op: SetDelayTimerRegister(op.x),
    0x18: lambda op: SetSoundTimerRegister(op.x),
    0x1E: lambda op: IndexAddAssignRegister(op.x),
    0x29: lambda op: SetIndexToDigitSprite(op.x),
    0x33: lambda op: StoreBCDAtIndex(op.x),
    0x55: lambda op: StoreRegistersAtIndex(op.x),
    0x65: lambda op: ReadRegistersAtIndex(op.x)
}


def _sub_dispatch(table, key, opcode):
    builder = table.get(key)

    if builder is None:
        raise UnknownOpcodeError(opcode)

    return builder(opcode)


def _group_0(op):
    # Machine code routines were never portable, but they still decode
    builder = _GROUP_0.get(op.kk)
    return JumpToMachineCode(op.nnn) if builder is None else builder(op)


_GROUPS = {
    0x0: _group_0,
    0x1: lambda op: Jump(op.nnn),
    0x2: lambda op: Call(op.nnn),
    0x3: lambda op: SkipNextEqualLiteral(op.x, op.kk),
    0x4: lambda op: SkipNextNotEqualLiteral(op.x, op.kk),
    0x5: lambda op: SkipNextEqualRegister(op.x, op.y),
    0x6: lambda op: RegisterSetLiteral(op.x, op.kk),
    0x7: lambda op: RegisterAddAssign(op.x, op.kk),
    0x8: lambda op: _sub_dispatch(_GROUP_8, op.n, op),
    0x9: lambda op: SkipNextNotEqualRegister(op.x, op.y),
    0xA: lambda op: SetIndex(op.nnn),
    0xB: lambda op: JumpTo(op.nnn),
    0xC: lambda op: RandBitwiseAnd(op.x, op.kk),
    0xD: lambda op: DrawSprite(op.x, op.y, op.n),
    0xE: lambda op: _sub_dispatch(_GROUP_E, op.kk, op),
    0xF: lambda op: _sub_dispatch(_GROUP_F, op.kk, op)
}


def to_instruction(opcode):
    # Returns exactly one variant, or raises UnknownOpcodeError
    return _sub_dispatch(_GROUPS, opcode.group, opcode)


def describe(instruction):
    return MNEMONICS[type(instruction)].format(**instruction._asdict())
