"""
P16 Emulator
============

Runs P16 memory images produced by the assembler.

This package provides:

- **P16CPU**: Instruction execution, PSW status bits and faults
- **Emulator**: Image loading, run/step control, reset, state display
- **Breakpoints**: PC breakpoints with hit budgets

Quick Start
-----------

Basic usage::

    >>> from p16_sdk import assemble_file
    >>> from p16_sdk.emulator import Emulator, BreakReason
    >>> emu = Emulator(assemble_file("count.asm"))
    >>> event = emu.run()
    >>> event.reason is BreakReason.HALT
    True
    >>> emu.registers["a"]
    0

With debugging::

    >>> emu.reset()
    >>> emu.breakpoints.set_breakpoint(0x002, hits=3)
    >>> event = emu.run()
    >>> if event.reason == BreakReason.BREAKPOINT:
    ...     print(emu.format_registers())

Module Structure
----------------

- `emulator.py`: Main Emulator class (high-level API)
- `cpu.py`: P16 CPU implementation
- `breakpoints.py`: Debugging support

Copyright (c) 2026 P16 SDK Contributors
"""

# Main entry point
from .emulator import Emulator

# CPU components
from .cpu import AritOperation, CPUState, InstructionClass, P16CPU, StatusFlag

# Debugging support
from .breakpoints import (
    Breakpoint,
    BreakpointManager,
    BreakEvent,
    BreakReason,
)

__all__ = [
    # Main API
    "Emulator",

    # CPU
    "P16CPU",
    "CPUState",
    "StatusFlag",
    "InstructionClass",
    "AritOperation",

    # Debugging
    "Breakpoint",
    "BreakpointManager",
    "BreakEvent",
    "BreakReason",
]
