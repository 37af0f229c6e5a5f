"""
P16 SDK - Toolchain for the P16 16-bit Prototype Processor
==========================================================

This package provides an assembler, a disassembler and an emulator for the
P16. The P16 is a 16-bit teaching processor with a word-addressed memory and
a 12-bit address space, and every instruction is one word.

Main Components
---------------
- **assembler**: P16 assembler (p16asm)
    Converts assembly source files (.asm) into memory images, written as
    flat hex words or as Logisim "v2.0 raw" memory files

- **disassembler**: P16 disassembler (p16disasm)
    Lists the instructions held in a memory image

- **emulator**: P16 emulator (p16emu)
    Runs a memory image with breakpoints and register inspection

- **cpu**: Instruction set definitions shared by all tools

Quick Start
-----------
Assemble a program:
    >>> from p16_sdk import Assembler
    >>> asm = Assembler()
    >>> asm.assemble_file("count.asm")
    >>> asm.write_output("count.img", "bundled")

Or work with a compile context directly:
    >>> from p16_sdk import Compilation
    >>> comp = Compilation()
    >>> if comp.perform(source):
    ...     print(comp.output("flat"))
    ... else:
    ...     for diag in comp.diagnostics:
    ...         print(diag)

Or use the command-line tools:
    $ p16asm count.asm -o count.img
    $ p16disasm count.img
    $ p16emu count.img

Copyright (c) 2026 P16 SDK Contributors
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from p16_sdk.assembler import (
    Assembler,
    Compilation,
    CompilationResult,
    OutputFormat,
    assemble,
    assemble_file,
    compile_source,
    format_bundled,
    format_flat,
    parse_bundled,
    parse_flat,
)
from p16_sdk.config import AssemblerConfig, EmulatorConfig
from p16_sdk.disassembler import P16Disassembler, DisassembledInstruction
from p16_sdk.emulator import Emulator, BreakEvent, BreakReason
from p16_sdk.errors import (
    P16Error,
    AssemblerError,
    AssemblySyntaxError,
    AddressError,
    EncodingError,
    UnresolvedReferenceError,
    DuplicateSymbolError,
    HeadMovementError,
    CompilationStateError,
    EmulatorFault,
    Diagnostic,
    SourceLocation,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "Compilation",
    "CompilationResult",
    "OutputFormat",
    "AssemblerConfig",
    "assemble",
    "assemble_file",
    "compile_source",
    "format_bundled",
    "format_flat",
    "parse_bundled",
    "parse_flat",
    # Disassembler
    "P16Disassembler",
    "DisassembledInstruction",
    # Emulator
    "Emulator",
    "EmulatorConfig",
    "BreakEvent",
    "BreakReason",
    # Exception hierarchy
    "P16Error",
    "AssemblerError",
    "AssemblySyntaxError",
    "AddressError",
    "EncodingError",
    "UnresolvedReferenceError",
    "DuplicateSymbolError",
    "HeadMovementError",
    "CompilationStateError",
    "EmulatorFault",
    "Diagnostic",
    "SourceLocation",
]
