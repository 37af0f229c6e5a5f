"""
P16 SDK Command-Line Interface
==============================

This package provides command-line tools for the P16 SDK:

- **p16asm**: P16 assembler
- **p16disasm**: P16 disassembler
- **p16emu**: P16 emulator

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["p16asm", "p16disasm", "p16emu"]
