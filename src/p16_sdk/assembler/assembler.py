"""
P16 Assembler - Main Interface
==============================

This module holds the compilation driver and the Assembler class, the
primary interface for assembling P16 source code.

Single-Sweep Assembly
---------------------
Source lines are processed once, top to bottom. Forward label references
are handled with fixups instead of a second pass:

1. `jmp :end` with `end` undefined encodes `0x3000 | 0x000` and records the
   word's offset under `end` in the fixup ledger.
2. `end:` defines the label and patches the low 12 bits of every word
   recorded under `end`.
3. If the ledger is not empty when the source ends, the compile fails.

Compilation stops at the first error. Each `Compilation` owns all of its
state, so concurrent compiles never interfere.

Example Usage
-------------
>>> from p16_sdk.assembler import Compilation, OutputFormat
>>> comp = Compilation()
>>> comp.perform('''
...     jmp :end
...     nop
... end:
...     hlt
... ''')
True
>>> comp.output(OutputFormat.FLAT)
'3002 0000 ffff'

>>> from p16_sdk.assembler import Assembler
>>> asm = Assembler()
>>> asm.assemble_file("program.asm")
>>> asm.write_output("program.hex")

Copyright (c) 2026 P16 SDK Contributors
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Union
import logging

from p16_sdk.assembler.encoder import LABEL_PREFIX, InstructionEncoder
from p16_sdk.assembler.formatter import OutputFormat, format_image
from p16_sdk.assembler.lexer import parse_number, source_lines, split_source, tokenize
from p16_sdk.assembler.memory import MemoryImage
from p16_sdk.assembler.symbols import FixupLedger, SymbolTable
from p16_sdk.config import AssemblerConfig
from p16_sdk.cpu import MAX_ADDRESS, MAX_WORD
from p16_sdk.disassembler import P16Disassembler
from p16_sdk.errors import (
    AddressError,
    AssemblerError,
    AssemblySyntaxError,
    CompilationStateError,
    Diagnostic,
    SourceLocation,
    UnresolvedReferenceError,
)

logger = logging.getLogger(__name__)


# Address encoded for a label that is not yet defined; overwritten by the fixup
FIXUP_PLACEHOLDER = 0x000

LABEL_SUFFIX = ":"
LOCATION_PREFIX = "."

FormatSpec = Union[OutputFormat, str, None]


# =============================================================================
# Compilation Context
# =============================================================================

class Compilation:
    """
    State of one compile: symbols, fixups, memory image and position.

    A Compilation is single use: call perform() once, then output() if it
    succeeded.

    Attributes:
        filename: Source name used in error messages
        line_no: Line currently (or last) processed, 1-indexed
        symbols: Defined labels
        fixups: Pending forward references
        memory: The memory image being written
        diagnostics: At most one Diagnostic, set when perform() fails
        error: The AssemblerError that stopped the compile, if any
    """

    def __init__(self, filename: str = "<input>",
                 config: Optional[AssemblerConfig] = None):
        self._config = config or AssemblerConfig()
        self.filename = filename
        self.line_no = 0
        self.symbols = SymbolTable()
        self.fixups = FixupLedger()
        self.memory = MemoryImage(fill_pattern=self._config.fill_pattern)
        self.diagnostics: list[Diagnostic] = []
        self.error: Optional[AssemblerError] = None
        self._encoder = InstructionEncoder(resolve_label=self._resolve_label)
        self._performed = False
        self._succeeded = False

    # =========================================================================
    # Driver
    # =========================================================================

    def perform(self, text: str) -> bool:
        """
        Assemble a whole program.

        Domain errors are caught, recorded as a diagnostic and reported by
        returning False. HeadMovementError is not a domain error and
        propagates.

        Returns:
            True if the program assembled without errors

        Raises:
            CompilationStateError: If called twice on the same context
        """
        if self._performed:
            raise CompilationStateError("perform() can only be called once per Compilation")
        self._performed = True

        try:
            for line_no, statement in split_source(text):
                self.line_no = line_no
                self._process(statement)

            if self.fixups:
                # Reported against the end of the source
                self.line_no = max(self.line_no, len(source_lines(text)), 1)
                raise UnresolvedReferenceError(self.fixups.unresolved())

        except AssemblerError as err:
            err.with_location(SourceLocation(self.filename, self.line_no))
            self.error = err
            self.diagnostics.append(Diagnostic(self.line_no, err.message))
            logger.info(f"Compilation terminated at line {self.line_no}: {err.message}")
            return False

        self._succeeded = True
        logger.info(
            f"Assembled {len(self.memory)} words, {len(self.symbols)} labels"
        )
        return True

    @property
    def succeeded(self) -> bool:
        return self._succeeded

    def output(self, fmt: FormatSpec = None) -> str:
        """
        Serialize the memory image.

        Args:
            fmt: OutputFormat or its name; defaults to the configured format

        Raises:
            CompilationStateError: If perform() has not succeeded
            EncodingError: If a word cannot be represented (bundled format)
        """
        if not self._succeeded:
            raise CompilationStateError("output() requires a successful perform()")
        return format_image(
            self.memory.words, _resolve_format(fmt, self._config),
            header=self._config.bundled_header,
        )

    # =========================================================================
    # Statement Dispatch
    # =========================================================================

    def _process(self, statement: str) -> None:
        """Dispatch one normalized, non-blank statement."""
        tokens = tokenize(statement)
        keyword = tokens[0]

        if statement.endswith(LABEL_SUFFIX):
            self._define_label(statement[:-len(LABEL_SUFFIX)].strip())
        elif keyword.startswith(LOCATION_PREFIX):
            self._set_location(statement[len(LOCATION_PREFIX):].strip())
        elif keyword == "#fill":
            self._set_fill(tokens)
        elif keyword == "dw":
            self._data_directive(tokens)
        elif keyword == "times":
            self._times_directive(tokens)
        else:
            self.memory.emit(self._encoder.encode(statement))

    def _define_label(self, name: str) -> None:
        if not name or any(c.isspace() for c in name) or name.startswith(LABEL_PREFIX):
            raise AssemblySyntaxError(f"invalid label name '{name}'")

        position = self.memory.head
        self.symbols.define(name, position, self.line_no)
        pending = self.fixups.drain(name)
        logger.debug(f"Label '{name}' = 0x{position:03x} ({len(pending)} fixups)")

        if pending and position > MAX_ADDRESS:
            raise AddressError(
                name, reason=f"label offset 0x{position:x} exceeds the 12-bit address range"
            )
        for offset in pending:
            self.memory.patch_address(offset, position)

    def _set_location(self, operand: str) -> None:
        offset = parse_number(operand)
        if offset < 0:
            raise AssemblySyntaxError(f"invalid location '.{operand}'")
        self.memory.move_head_to(offset)

    def _set_fill(self, tokens: list[str]) -> None:
        if len(tokens) != 2:
            raise AssemblySyntaxError("#fill expects one value")
        self.memory.fill_pattern = self._word_literal(tokens[1])

    def _data_directive(self, tokens: list[str]) -> None:
        if len(tokens) != 2:
            raise AssemblySyntaxError("dw expects one value or label")
        self.memory.emit(self._data_word(tokens[1]))

    def _times_directive(self, tokens: list[str]) -> None:
        if len(tokens) < 3:
            raise AssemblySyntaxError("times expects a count and a data directive")
        count = parse_number(tokens[1])
        if count < 0:
            raise AssemblySyntaxError(f"invalid repeat count '{tokens[1]}'")

        directive = tokens[2:]
        if directive[0] != "dw":
            raise AssemblySyntaxError(f"bad data directive '{directive[0]}'")
        if len(directive) != 2:
            raise AssemblySyntaxError("dw expects one value or label")
        if count == 0:
            return

        operand = directive[1]
        if operand.startswith(LABEL_PREFIX):
            # Each copy needs its own fixup at its own offset
            for _ in range(count):
                self.memory.emit(self._data_word(operand))
        else:
            self.memory.emit(self._data_word(operand), times=count)

    # =========================================================================
    # Operand Helpers
    # =========================================================================

    def _data_word(self, operand: str) -> int:
        if operand.startswith(LABEL_PREFIX):
            return self._encoder.resolve_target(operand)
        return self._word_literal(operand)

    @staticmethod
    def _word_literal(token: str) -> int:
        value = parse_number(token)
        if value > MAX_WORD:
            raise AssemblySyntaxError(f"number '{token}' exceeds word size")
        if value < 0:
            raise AssemblySyntaxError(f"number '{token}' is negative")
        return value

    def _resolve_label(self, name: str) -> int:
        """
        Address of a label, or a placeholder plus a fixup at the head.
        """
        position = self.symbols.lookup(name)
        if position is None:
            self.fixups.record(name, self.memory.head)
            logger.debug(f"Fixup for '{name}' at 0x{self.memory.head:03x}")
            return FIXUP_PLACEHOLDER
        if position > MAX_ADDRESS:
            raise AddressError(
                f"{LABEL_PREFIX}{name}",
                reason=f"label offset 0x{position:x} exceeds the 12-bit address range",
            )
        return position

    # =========================================================================
    # Result Access
    # =========================================================================

    def result(self) -> "CompilationResult":
        """Snapshot of this compilation as an immutable result."""
        return CompilationResult(
            success=self._succeeded,
            diagnostics=tuple(self.diagnostics),
            words=tuple(self.memory.words),
            symbols=self.symbols.as_dict(),
            config=self._config,
        )

    def get_listing(self) -> str:
        """
        Listing of the image: offset, word, disassembly, label lines.
        """
        return build_listing(list(self.memory.words), self.symbols.by_position())


# =============================================================================
# Pure Entry Point
# =============================================================================

@dataclass(frozen=True)
class CompilationResult:
    """
    Outcome of compile_source().

    Attributes:
        success: True if assembly succeeded
        diagnostics: Line-numbered errors (empty on success)
        words: The memory image
        symbols: Label name -> offset
    """
    success: bool
    diagnostics: tuple[Diagnostic, ...]
    words: tuple[int, ...]
    symbols: dict[str, int] = field(default_factory=dict)
    config: AssemblerConfig = field(default_factory=AssemblerConfig, repr=False)

    def output(self, fmt: FormatSpec = None) -> str:
        """Serialize the memory image (only valid when success is True)."""
        if not self.success:
            raise CompilationStateError("no output: compilation failed")
        return format_image(
            self.words, _resolve_format(fmt, self.config),
            header=self.config.bundled_header,
        )


def compile_source(text: str, filename: str = "<input>",
                   config: Optional[AssemblerConfig] = None) -> CompilationResult:
    """
    Assemble source text with a fresh context.

    Returns:
        CompilationResult; check `success` and `diagnostics`
    """
    compilation = Compilation(filename, config)
    compilation.perform(text)
    return compilation.result()


def build_listing(words: list[int], labels: dict[int, list[str]]) -> str:
    """
    Format a listing of words with labels on their own lines.
    """
    names = {offset: ", ".join(sorted(group)) for offset, group in labels.items()}
    lines = []
    for instr in P16Disassembler(names).disassemble(words):
        for name in sorted(labels.get(instr.address, [])):
            lines.append(f"{name}:")
        lines.append(f"    {instr}")

    # Labels that point past the last word
    for offset in sorted(o for o in labels if o >= len(words)):
        for name in sorted(labels[offset]):
            lines.append(f"{name}:    ; 0x{offset:03x}")

    return "\n".join(lines)


def _resolve_format(fmt: FormatSpec, config: AssemblerConfig) -> OutputFormat:
    if fmt is None:
        return config.output_format
    if isinstance(fmt, OutputFormat):
        return fmt
    return OutputFormat.from_name(fmt)


# =============================================================================
# Assembler Facade
# =============================================================================

class Assembler:
    """
    Main P16 assembler class.

    Wraps a Compilation with file handling and output writers. Unlike
    Compilation.perform(), assemble_string() raises the first
    AssemblerError instead of returning False.

    Attributes:
        config: Settings applied to every compile
    """

    def __init__(self, config: Optional[AssemblerConfig] = None,
                 fill_pattern: Optional[int] = None,
                 output_format: FormatSpec = None):
        """
        Initialize the assembler.

        Args:
            config: Base settings (default: AssemblerConfig())
            fill_pattern: Override the initial fill pattern
            output_format: Override the default output format
        """
        self.config = replace(config) if config is not None else AssemblerConfig()
        if fill_pattern is not None:
            self.config.fill_pattern = fill_pattern
        if output_format is not None:
            self.config.output_format = _resolve_format(output_format, self.config)
        self._compilation: Optional[Compilation] = None
        self._source_file: Optional[Path] = None

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble(self, source: str, filename: str = "<input>",
                 output_format: FormatSpec = None) -> str:
        """
        Assemble source code and return the formatted image.

        Raises:
            AssemblerError: If assembly fails
        """
        self.assemble_string(source, filename)
        return self.get_output(output_format)

    def assemble_string(self, source: str, filename: str = "<input>") -> list[int]:
        """
        Assemble source code from a string.

        Returns:
            The memory image as a list of words

        Raises:
            AssemblerError: If assembly fails
        """
        logger.debug(f"Assembling {filename}")
        self._compilation = Compilation(filename, self.config)
        if not self._compilation.perform(source):
            raise self._compilation.error
        return self._compilation.memory.words

    def assemble_file(self, filepath: Union[str, Path]) -> list[int]:
        """
        Assemble source code from a file.

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        self._source_file = filepath
        source = filepath.read_text()
        return self.assemble_string(source, str(filepath))

    # =========================================================================
    # Output Methods
    # =========================================================================

    def _require_compilation(self) -> Compilation:
        if self._compilation is None:
            raise CompilationStateError("nothing has been assembled yet")
        return self._compilation

    def get_words(self) -> list[int]:
        return self._require_compilation().memory.words

    def get_symbols(self) -> dict[str, int]:
        """Label name -> offset."""
        return self._require_compilation().symbols.as_dict()

    def get_listing(self) -> str:
        return self._require_compilation().get_listing()

    def get_output(self, output_format: FormatSpec = None) -> str:
        return self._require_compilation().output(output_format)

    def write_output(self, filepath: Union[str, Path],
                     output_format: FormatSpec = None) -> None:
        """Write the formatted image, newline-terminated."""
        text = self.get_output(output_format)
        Path(filepath).write_text(text + "\n")
        logger.info(f"Wrote {filepath}")

    def write_listing(self, filepath: Union[str, Path]) -> None:
        Path(filepath).write_text(self.get_listing() + "\n")
        logger.info(f"Wrote listing to {filepath}")

    def write_symbols(self, filepath: Union[str, Path]) -> None:
        """
        Write the symbol table as `name = 0xOFF` lines, by offset.
        """
        symbols = sorted(self.get_symbols().items(), key=lambda item: (item[1], item[0]))
        lines = [f"{name} = 0x{offset:03x}" for name, offset in symbols]
        Path(filepath).write_text("\n".join(lines) + "\n" if lines else "")
        logger.info(f"Wrote symbols to {filepath}")

    # =========================================================================
    # Error Handling
    # =========================================================================

    def has_errors(self) -> bool:
        return self._compilation is not None and bool(self._compilation.diagnostics)

    def get_diagnostics(self) -> list[Diagnostic]:
        if self._compilation is None:
            return []
        return list(self._compilation.diagnostics)

    def get_error_report(self) -> str:
        """
        Format the diagnostics for display.
        """
        if self._compilation is None or self._compilation.error is None:
            return ""
        return str(self._compilation.error)


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>",
             output_format: FormatSpec = None) -> str:
    """
    Convenience function to assemble source code to formatted text.

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler().assemble(source, filename, output_format)


def assemble_file(filepath: Union[str, Path]) -> list[int]:
    """
    Convenience function to assemble a file to a word list.

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler().assemble_file(filepath)
