"""
P16 Assembler
=============

This module provides the assembler for the P16 16-bit prototype processor.

The assembler converts P16 assembly source into a word-addressed memory
image and serializes it as flat hex words or as the bundled run-length
text loaded by the Logisim memory component.

Main Components
---------------
- **Assembler**: High-level interface with file I/O and output writers
- **Compilation**: Single-use compile context (perform / output)
- **InstructionEncoder**: Encodes one instruction statement to a word
- **MemoryImage**: Word buffer with forward-only write head and gap fill
- **SymbolTable** / **FixupLedger**: Label resolution in a single sweep
- **format_flat** / **format_bundled**: Output encodings

Assembly Process
----------------
Each non-blank line is handled in order:

1. Preprocess: strip ';' comments, trim, lowercase
2. Dispatch: label, location (.N), #fill, dw, times, or instruction
3. Encode: instruction -> 16-bit word, labels resolved or queued as fixups
4. Emit: word written at the head, gaps filled with the fill pattern

When the source ends, any pending fixup is an error.

Example Usage
-------------
>>> from p16_sdk.assembler import compile_source
>>> result = compile_source('''
... loop:
...     calc a = a - b
...     jnz :loop
...     hlt
... ''')
>>> result.success
True
>>> result.output("flat")
'6e05 4000 ffff'

Supported Features
------------------
- Instructions: NOP, LDA, STA, JMP, JNZ, RET, ARIT, CALC, HLT
- Labels with forward references (`:label` operands)
- Directives: `.N` (location), `#fill`, `dw`, `times N dw`
- Flat and bundled (Logisim) output
- Listing and symbol table output

Copyright (c) 2026 P16 SDK Contributors
"""

from p16_sdk.assembler.assembler import (
    Assembler,
    Compilation,
    CompilationResult,
    assemble,
    assemble_file,
    build_listing,
    compile_source,
)
from p16_sdk.assembler.encoder import (
    InstructionEncoder,
    encode_arit,
    encode_calc,
    expand_calc,
    parse_address,
    register_code,
)
from p16_sdk.assembler.formatter import (
    BUNDLED_HEADER,
    OutputFormat,
    format_bundled,
    format_flat,
    format_image,
    parse_bundled,
    parse_flat,
    parse_image,
)
from p16_sdk.assembler.lexer import parse_number, preprocess_line, split_source
from p16_sdk.assembler.memory import MemoryImage
from p16_sdk.assembler.symbols import FixupLedger, Label, SymbolTable

__all__ = [
    # Main class and functions
    "Assembler",
    "Compilation",
    "CompilationResult",
    "assemble",
    "assemble_file",
    "build_listing",
    "compile_source",
    # Encoder
    "InstructionEncoder",
    "encode_arit",
    "encode_calc",
    "expand_calc",
    "parse_address",
    "register_code",
    # Output formats
    "BUNDLED_HEADER",
    "OutputFormat",
    "format_bundled",
    "format_flat",
    "format_image",
    "parse_bundled",
    "parse_flat",
    "parse_image",
    # Preprocessor
    "parse_number",
    "preprocess_line",
    "split_source",
    # Memory and symbols
    "MemoryImage",
    "FixupLedger",
    "Label",
    "SymbolTable",
]
