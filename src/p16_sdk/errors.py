"""
P16 SDK Error Hierarchy
=======================

Every exception raised by the P16 tools derives from P16Error.

Exception Hierarchy
-------------------
P16Error (base)
├── AssemblerError (domain errors reported as diagnostics)
│   ├── AssemblySyntaxError - malformed statement, unknown mnemonic
│   │   └── AddressError - operand not a valid 12-bit address
│   ├── EncodingError - word value outside 0..0xFFFF
│   ├── UnresolvedReferenceError - labels still pending at end of program
│   └── DuplicateSymbolError - label defined more than once
├── HeadMovementError - write head moved backwards (invariant violation)
├── CompilationStateError - API used out of order
└── EmulatorFault - the emulated CPU hit an instruction it cannot execute

Domain vs. Invariant Errors
---------------------------
The compilation driver catches AssemblerError, stamps it with the current
line and records it as the single diagnostic of the compile.
HeadMovementError and CompilationStateError are not in that branch and
reach the caller unchanged.

A domain error renders as:
    prog.asm:7: error: unknown mnemonic 'ldx'
    hint: ...           (only some errors carry one)

Copyright (c) 2026 P16 SDK Contributors
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class P16Error(Exception):
    """Root of the P16 SDK exceptions."""
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A line in a source file.

    Statements never span lines and there is no column field; a
    diagnostic always refers to a whole line.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
    """
    filename: str
    line: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}"


@dataclass(frozen=True)
class Diagnostic:
    """
    A line-numbered compile diagnostic, ready for external display.

    Attributes:
        line: Line number (1-indexed) where compilation stopped
        message: Human-readable description of the problem
    """
    line: int
    message: str

    def __str__(self) -> str:
        return f"line {self.line}: {self.message}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(P16Error):
    """
    Base exception for all assembler domain errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location and hint.

        Example output:
            prog.asm:12: error: unknown mnemonic 'ldx'
            hint: valid mnemonics are nop, lda, sta, ...
        """
        if self.location:
            parts = [f"{self.location}: error: {self.message}"]
        else:
            parts = [f"error: {self.message}"]

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def with_location(self, location: SourceLocation) -> "AssemblerError":
        """
        Attach a source location after the fact.

        Encoders raise without knowing the line they are working on; the
        driver calls this on the way out so the final message carries it.
        """
        self.location = location
        self.args = (self._format_message(),)
        return self


class AssemblySyntaxError(AssemblerError):
    """
    Syntax error in assembly source code.

    Examples:
        - Unknown mnemonic or directive
        - Missing or extra operand
        - Invalid register or ARIT operation name
        - CALC statement without '='
        - Number literal that does not fit in a word
    """
    pass


class AddressError(AssemblySyntaxError):
    """
    Operand is not a valid 12-bit address.

    Raised when a direct target is not numeric, is negative, or is larger
    than 0xFFF, and when a label sits at an offset that cannot be expressed
    in the 12-bit address field.
    """

    def __init__(
        self,
        operand: str,
        location: Optional[SourceLocation] = None,
        reason: str = "must be an address between 0 and 0xfff",
    ):
        self.operand = operand
        super().__init__(f"bad address '{operand}': {reason}", location=location)


class EncodingError(AssemblerError):
    """
    A word value outside 0..0xFFFF.

    Raised when emitting a value into the memory image and when
    serializing an image that holds an out-of-range word.
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        offset: Optional[int] = None,
    ):
        self.offset = offset
        super().__init__(message, location=location)


class UnresolvedReferenceError(AssemblerError):
    """
    Labels were referenced but never defined.

    Raised once the whole program has been processed and the fixup ledger
    still holds entries. Every instruction may have encoded correctly; the
    compile still fails.
    """

    def __init__(
        self,
        labels: list[str],
        location: Optional[SourceLocation] = None,
    ):
        self.labels = sorted(labels)
        names = ", ".join(f"'{name}'" for name in self.labels)
        super().__init__(
            f"compilation finished with incomplete fixups: undefined label(s) {names}",
            location=location,
        )


class DuplicateSymbolError(AssemblerError):
    """
    Label defined more than once.

    A second definition would leave already-patched words pointing at the
    first offset while later references use the second one, so it is
    rejected outright.
    """

    def __init__(
        self,
        symbol: str,
        original_offset: int,
        location: Optional[SourceLocation] = None,
    ):
        self.symbol = symbol
        self.original_offset = original_offset
        super().__init__(
            f"duplicate label '{symbol}'",
            location=location,
            hint=f"'{symbol}' was first defined at offset 0x{original_offset:03x}",
        )


# =============================================================================
# Programmer Errors
# =============================================================================

class HeadMovementError(P16Error):
    """
    The memory write head was asked to move backwards.

    The image is written strictly in ascending order; this is an invariant
    of the memory image and is never converted into a diagnostic.
    """

    def __init__(self, current: int, requested: int):
        self.current = current
        self.requested = requested
        super().__init__(
            f"write head cannot move backwards (at 0x{current:03x}, requested 0x{requested:03x})"
        )


class CompilationStateError(P16Error):
    """
    Compilation API used out of order.

    Raised by output() before a successful perform(), and by a second
    perform() on the same context.
    """
    pass


# =============================================================================
# Emulator Exceptions
# =============================================================================

class EmulatorFault(P16Error):
    """
    The emulated CPU cannot go on with the current instruction.

    Examples:
        - Instruction class 0x7..0xE
        - ARIT destination or first operand code 4 or 5
        - LDA/STA/JMP/JNZ/RET address past the end of memory
        - Program counter running off the end of memory

    Attributes:
        pc: Address of the instruction that faulted
        word: The instruction word
    """

    def __init__(self, message: str, pc: int, word: int):
        self.message = message
        self.pc = pc
        self.word = word
        super().__init__(f"{message} at 0x{pc:03x} (word 0x{word:04x})")
