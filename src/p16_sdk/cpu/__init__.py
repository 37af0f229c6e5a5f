"""
P16 SDK CPU Package
===================

This package contains the P16 architecture definitions shared by the
assembler (which encodes instructions), the disassembler (which decodes
them) and the emulator (which executes them), so that all three agree on
every bit field.

Modules:
    p16: Instruction classes, register and ALU operation codes, field
         widths and lookup helpers.

Usage:
    from p16_sdk.cpu import (
        OperandKind,
        OPCODE_TABLE,
        REGISTER_CODES,
        get_instruction_info,
    )
"""

from p16_sdk.cpu.p16 import (
    # Core types
    OperandKind,
    InstructionInfo,
    # Field widths
    WORD_MASK,
    ADDRESS_MASK,
    OPCODE_MASK,
    MAX_WORD,
    MAX_ADDRESS,
    ARIT_OPERATION_SHIFT,
    ARIT_DESTINATION_SHIFT,
    ARIT_OPERAND1_SHIFT,
    # Tables
    OPCODE_TABLE,
    CLASS_NAMES,
    REGISTER_CODES,
    SPECIAL_REGISTERS,
    ARIT_OPERATIONS,
    SECOND_OPERAND_CODES,
    CALC_OPERATORS,
    SECOND_OPERAND_SELECT,
    # Lookup functions
    get_instruction_info,
    instruction_class,
)

__all__ = [
    "OperandKind",
    "InstructionInfo",
    "WORD_MASK",
    "ADDRESS_MASK",
    "OPCODE_MASK",
    "MAX_WORD",
    "MAX_ADDRESS",
    "ARIT_OPERATION_SHIFT",
    "ARIT_DESTINATION_SHIFT",
    "ARIT_OPERAND1_SHIFT",
    "OPCODE_TABLE",
    "CLASS_NAMES",
    "REGISTER_CODES",
    "SPECIAL_REGISTERS",
    "ARIT_OPERATIONS",
    "SECOND_OPERAND_CODES",
    "CALC_OPERATORS",
    "SECOND_OPERAND_SELECT",
    "get_instruction_info",
    "instruction_class",
]
