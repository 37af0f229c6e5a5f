"""
P16 Assembly Line Preprocessor
==============================

The P16 assembly language is strictly line oriented: every non-blank line
holds one label, directive or instruction. This module turns raw source
text into normalized statements and converts numeric tokens.

Normalization
-------------
For every raw line:
1. Cut at the first ';' (comment to end of line)
2. Strip surrounding whitespace
3. Lowercase

A line that is empty after this is skipped entirely.

Number Formats
--------------
| Format      | Prefix | Example | Value |
|-------------|--------|---------|-------|
| Decimal     | (none) | 123     | 123   |
| Hexadecimal | 0x     | 0x7f    | 127   |
| Binary      | 0b     | 0b1010  | 10    |
| Octal       | 0o     | 0o177   | 127   |

Example
-------
>>> from p16_sdk.assembler.lexer import split_source
>>> list(split_source("start:\\n  LDA 0x10  ; load\\n\\n hlt"))
[(1, 'start:'), (2, 'lda 0x10'), (4, 'hlt')]
"""

from typing import Iterator, Optional

from p16_sdk.errors import AssemblySyntaxError


COMMENT_CHAR = ";"

# Prefix -> base for number literals
NUMBER_PREFIXES: dict[str, int] = {
    "0x": 16,
    "0b": 2,
    "0o": 8,
}


def preprocess_line(raw: str) -> Optional[str]:
    """
    Normalize one raw source line.

    Args:
        raw: Line text without its newline

    Returns:
        The normalized statement, or None if nothing is left
    """
    line = raw.split(COMMENT_CHAR, 1)[0].strip().lower()
    return line or None


def source_lines(text: str) -> list[str]:
    """
    Split source text into raw lines.

    Only "\\n" ends a line, with an optional "\\r" before it. Other characters
    that str.splitlines() breaks on stay inside their line.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]


def split_source(text: str) -> Iterator[tuple[int, str]]:
    """
    Yield (line_number, statement) for every non-blank line.

    Line numbers are 1-indexed and count every raw line, including the
    blank and comment-only ones that are skipped.
    """
    for line_no, raw in enumerate(source_lines(text), start=1):
        statement = preprocess_line(raw)
        if statement is not None:
            yield line_no, statement


def tokenize(statement: str) -> list[str]:
    """Split a normalized statement on whitespace."""
    return statement.split()


def parse_number(token: str) -> int:
    """
    Convert a numeric literal to an int.

    Negative literals are accepted here; range checks belong to the caller,
    which knows whether it wants a word, an address or a count.

    Raises:
        AssemblySyntaxError: If the token is not a number
    """
    text = token.strip().lower()
    negative = text.startswith("-")
    if negative:
        text = text[1:]

    base = 10
    for prefix, prefix_base in NUMBER_PREFIXES.items():
        if text.startswith(prefix):
            text = text[len(prefix):]
            base = prefix_base
            break

    # int() would also accept '_' separators and a second sign;
    # isalnum() alone lets non-ASCII digits through
    if not text or not text.isascii() or not text.isalnum():
        raise AssemblySyntaxError(f"invalid number '{token}'")

    try:
        value = int(text, base)
    except ValueError:
        raise AssemblySyntaxError(f"invalid number '{token}'") from None

    return -value if negative else value
