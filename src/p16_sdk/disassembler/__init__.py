"""
P16 SDK Disassembler Module
===========================

Turns P16 memory words back into assembly statements, for listings and
for inspecting images produced by other tools.

Usage:
    from p16_sdk.disassembler import P16Disassembler

    disasm = P16Disassembler(symbol_table={0x010: "loop"})
    for instr in disasm.disassemble(words):
        print(instr)
"""

from .p16 import P16Disassembler, DisassembledInstruction

__all__ = [
    "P16Disassembler",
    "DisassembledInstruction",
]
