"""
P16 Instruction Set Definition
==============================

This module defines the instruction set of the P16, a 16-bit prototype
processor with a word-addressed memory and a 12-bit address space.

Every instruction is exactly one 16-bit word. The top nibble selects the
instruction class; the remaining 12 bits are either an address or, for
ARIT, a packed ALU operation.

Instruction Word Layout
-----------------------
```
 15   12 11                        0
+-------+---------------------------+
| class |   address (12 bits)       |   LDA, STA, JMP, JNZ
+-------+-----+-----+-----+---------+
| 0110  | op  | dst | r1  |  r2     |   ARIT (3 bits each)
+-------+-----+-----+-----+---------+
```

Registers
---------
A, B, C, D are general purpose. R holds the return address and PSW the
status flags; both may appear as ARIT destination or first operand but
have no encoding as the second operand, whose 3-bit field uses its own
code space (top bit set selects A..D, top bit clear is the constant 0).

Reference
---------
- Course handout for the 16-bit prototype machine (EP1)

Copyright (c) 2026 P16 SDK Contributors
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


# =============================================================================
# Field Widths
# =============================================================================

WORD_MASK = 0xFFFF
ADDRESS_MASK = 0x0FFF
OPCODE_MASK = 0xF000

MAX_WORD = WORD_MASK
MAX_ADDRESS = ADDRESS_MASK

ARIT_OPERATION_SHIFT = 9
ARIT_DESTINATION_SHIFT = 6
ARIT_OPERAND1_SHIFT = 3


# =============================================================================
# Operand Kinds
# =============================================================================

class OperandKind(Enum):
    """
    Shape of the operand text an instruction takes.
    """
    NONE = auto()    # nop, ret, hlt
    TARGET = auto()  # address or :label
    ARIT = auto()    # op, dst, r1, r2
    CALC = auto()    # dst = expression (expands to ARIT)

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class InstructionInfo:
    """
    Information about one mnemonic.

    Attributes:
        opcode: Base word; operand bits are OR-ed into it
        operand_kind: What the operand text looks like
    """
    opcode: int
    operand_kind: OperandKind

    def __repr__(self) -> str:
        return f"InstructionInfo(opcode=0x{self.opcode:04x}, operand={self.operand_kind})"


# =============================================================================
# Opcode Table
# =============================================================================
# Key: lowercase mnemonic
# Value: InstructionInfo(base opcode word, operand kind)
# =============================================================================

OPCODE_TABLE: dict[str, InstructionInfo] = {
    "nop": InstructionInfo(0x0000, OperandKind.NONE),
    "lda": InstructionInfo(0x1000, OperandKind.TARGET),   # A <- mem[addr]
    "sta": InstructionInfo(0x2000, OperandKind.TARGET),   # mem[addr] <- A
    "jmp": InstructionInfo(0x3000, OperandKind.TARGET),
    "jnz": InstructionInfo(0x4000, OperandKind.TARGET),   # jump if A != 0
    "ret": InstructionInfo(0x5000, OperandKind.NONE),
    "arit": InstructionInfo(0x6000, OperandKind.ARIT),
    "calc": InstructionInfo(0x6000, OperandKind.CALC),    # macro for arit
    "hlt": InstructionInfo(0xFFFF, OperandKind.NONE),
}

# Instruction class (top nibble) -> mnemonic, for decoding.
# CALC shares ARIT's class and is never produced by the decoder.
CLASS_NAMES: dict[int, str] = {
    info.opcode >> 12: mnemonic
    for mnemonic, info in OPCODE_TABLE.items()
    if info.operand_kind is not OperandKind.CALC
}


# =============================================================================
# Register and ALU Tables
# =============================================================================

REGISTER_CODES: dict[str, int] = {
    "a": 0b000,
    "b": 0b001,
    "c": 0b010,
    "d": 0b011,
    "r": 0b110,
    "psw": 0b111,
}

# Registers that cannot be addressed where only general registers are valid
SPECIAL_REGISTERS: frozenset[str] = frozenset({"r", "psw"})

ARIT_OPERATIONS: dict[str, int] = {
    "0": 0b000,     # dst <- 0
    "f": 0b001,     # dst <- 0xffff
    "not": 0b010,
    "and": 0b011,
    "or": 0b100,
    "xor": 0b101,
    "add": 0b110,
    "sub": 0b111,
}

# Second ARIT operand: top bit set selects A..D, clear means constant zero
SECOND_OPERAND_CODES: dict[str, int] = {
    "0": 0b000,
    "zero": 0b000,
    "a": 0b100,
    "b": 0b101,
    "c": 0b110,
    "d": 0b111,
}

SECOND_OPERAND_SELECT = 0b100

# CALC infix operators -> ARIT operation names
CALC_OPERATORS: dict[str, str] = {
    "&": "and",
    "|": "or",
    "^": "xor",
    "+": "add",
    "-": "sub",
}


# =============================================================================
# Lookup Functions
# =============================================================================

def get_instruction_info(mnemonic: str) -> Optional[InstructionInfo]:
    """
    Look up instruction information by mnemonic.

    Returns:
        InstructionInfo if found, None if the mnemonic is unknown
    """
    return OPCODE_TABLE.get(mnemonic.lower())


def instruction_class(word: int) -> int:
    """Return the top nibble of an instruction word."""
    return (word & OPCODE_MASK) >> 12
