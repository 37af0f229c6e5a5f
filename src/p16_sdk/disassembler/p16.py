"""
P16 Disassembler
================

Disassembles P16 memory words into assembly language. This is the inverse
operation of the assembler's instruction encoder.

The output uses the assembler's own syntax. Words that no instruction
encodes (unused instruction classes, NOP/RET/HLT with stray operand bits,
an ARIT destination or first operand code with no register) are rendered
as `dw` data.

The ARIT second operand is decoded the way the CPU reads it: bit 2 clear
means the constant 0 whatever bits 1-0 hold, bit 2 set selects A..D. A
word with bit 2 clear and stray bits 1-0 re-assembles with those bits
cleared, so its listing line carries a comment.

Usage:
    disasm = P16Disassembler()

    # Disassemble a memory image
    for instr in disasm.disassemble(words, start=0, count=10):
        print(instr)

    # Disassemble one word
    instr = disasm.disassemble_word(0x6cc0)
    print(instr.text)        # arit add, d, a, 0

Copyright (c) 2026 P16 SDK Contributors
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from p16_sdk.cpu import (
    ADDRESS_MASK,
    ARIT_DESTINATION_SHIFT,
    ARIT_OPERAND1_SHIFT,
    ARIT_OPERATION_SHIFT,
    ARIT_OPERATIONS,
    CLASS_NAMES,
    OPCODE_TABLE,
    OperandKind,
    REGISTER_CODES,
    SECOND_OPERAND_SELECT,
    instruction_class,
)


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DisassembledInstruction:
    """
    A single disassembled P16 word.

    Attributes:
        address: Word offset of the instruction
        word: The raw 16-bit word
        mnemonic: Instruction mnemonic, or "dw" for data
        operand_str: Formatted operand in assembler syntax
        comment: Optional annotation (label name for targets)
    """
    address: int
    word: int
    mnemonic: str
    operand_str: str = ""
    comment: str = ""

    @property
    def text(self) -> str:
        """The instruction in assembler syntax."""
        if self.operand_str:
            return f"{self.mnemonic} {self.operand_str}"
        return self.mnemonic

    @property
    def is_data(self) -> bool:
        return self.mnemonic == "dw"

    def __str__(self) -> str:
        """Format as listing line: ADDRESS: WORD  TEXT ; COMMENT"""
        line = f"{self.address:03x}: {self.word:04x}  {self.text}"
        if self.comment:
            return f"{line:<32} ; {self.comment}"
        return line

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "address": f"0x{self.address:03x}",
            "address_int": self.address,
            "word": f"0x{self.word:04x}",
            "mnemonic": self.mnemonic,
            "operand": self.operand_str,
            "comment": self.comment,
        }


# =============================================================================
# P16 Disassembler
# =============================================================================

class P16Disassembler:
    """
    Disassembler for P16 memory images.

    Attributes:
        _symbol_table: Optional address -> label name map used to
                       annotate target operands
    """

    def __init__(self, symbol_table: Optional[Dict[int, str]] = None):
        self._symbol_table = symbol_table or {}
        self._registers = {code: name for name, code in REGISTER_CODES.items()}
        self._operations = {code: name for name, code in ARIT_OPERATIONS.items()}

    def disassemble_word(self, word: int, address: int = 0) -> DisassembledInstruction:
        """
        Disassemble a single word.

        Raises:
            ValueError: If word is not a 16-bit value
        """
        if not 0 <= word <= 0xFFFF:
            raise ValueError(f"word {word} is not a 16-bit value")

        mnemonic = CLASS_NAMES.get(instruction_class(word))
        if mnemonic is None:
            return self._data(word, address, "unknown instruction class")

        info = OPCODE_TABLE[mnemonic]
        argument = word & ADDRESS_MASK

        if info.operand_kind is OperandKind.NONE:
            if word != info.opcode:
                return self._data(word, address, f"{mnemonic} with operand bits")
            return DisassembledInstruction(address, word, mnemonic)

        if info.operand_kind is OperandKind.TARGET:
            return DisassembledInstruction(
                address, word, mnemonic,
                operand_str=f"0x{argument:03x}",
                comment=self._symbol_table.get(argument, ""),
            )

        operands = self._arit_operands(argument)
        if operands is None:
            return self._data(word, address, "arit with unnamed register")
        comment = ""
        if not argument & SECOND_OPERAND_SELECT and argument & 0b011:
            comment = "second operand bits 1-0 ignored"
        return DisassembledInstruction(
            address, word, mnemonic, operand_str=operands, comment=comment
        )

    def disassemble(
        self,
        words: List[int],
        start: int = 0,
        count: Optional[int] = None,
    ) -> List[DisassembledInstruction]:
        """
        Disassemble a run of words.

        Args:
            words: Memory image (offset 0 first)
            start: First offset to decode
            count: Maximum number of words (default: to the end)
        """
        end = len(words) if count is None else min(len(words), start + count)
        return [
            self.disassemble_word(words[offset], offset)
            for offset in range(start, end)
        ]

    def _arit_operands(self, argument: int) -> Optional[str]:
        operation = self._operations[argument >> ARIT_OPERATION_SHIFT & 0b111]
        destination = self._registers.get(argument >> ARIT_DESTINATION_SHIFT & 0b111)
        reg1 = self._registers.get(argument >> ARIT_OPERAND1_SHIFT & 0b111)
        if destination is None or reg1 is None:
            return None
        if argument & SECOND_OPERAND_SELECT:
            reg2 = self._registers[argument & 0b011]
        else:
            reg2 = "0"
        return f"{operation}, {destination}, {reg1}, {reg2}"

    @staticmethod
    def _data(word: int, address: int, comment: str) -> DisassembledInstruction:
        return DisassembledInstruction(
            address, word, "dw", operand_str=f"0x{word:04x}", comment=comment
        )
