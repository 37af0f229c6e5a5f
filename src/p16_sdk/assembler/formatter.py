"""
Memory Image Text Encodings
===========================

Two text encodings of a memory image are supported:

Flat
----
Every word as four lowercase hex digits, separated by single spaces, in
offset order:

    1005 2006 ffff 0007

Bundled
-------
The format read by the Logisim memory component ("Load Image..."). A fixed
header line is followed by the words, with runs of equal consecutive words
collapsed into `COUNT*WORD` (the count is omitted for single words):

    v2.0 raw
    1005 2006 ffff 3*0000 0007

Every word must be a 16-bit value; the bundled writer refuses anything
else and reports the offending offset.

Both encodings can be read back with parse_flat() and parse_bundled().
"""

from enum import Enum
from typing import Iterable, Iterator
import logging

from p16_sdk.cpu import MAX_WORD
from p16_sdk.errors import EncodingError

logger = logging.getLogger(__name__)


BUNDLED_HEADER = "v2.0 raw"
RUN_SEPARATOR = "*"


class OutputFormat(Enum):
    """Text encodings for a memory image."""
    FLAT = "flat"
    BUNDLED = "bundled"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> "OutputFormat":
        """
        Look up a format by name, case-insensitively.

        Raises:
            ValueError: If the name is not a known format
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            valid = ", ".join(f.value for f in cls)
            raise ValueError(f"unknown output format '{name}' (valid: {valid})") from None


# =============================================================================
# Writers
# =============================================================================

def to_hex_word(value: int) -> str:
    """Render a word as four lowercase hex digits."""
    return f"{value:04x}"


def format_flat(words: Iterable[int]) -> str:
    """Render words as space-separated hex."""
    return " ".join(to_hex_word(word) for word in words)


def iter_runs(words: Iterable[int]) -> Iterator[tuple[int, int]]:
    """
    Yield (value, count) for each run of equal consecutive words.
    """
    current = None
    count = 0
    for word in words:
        if count and word == current:
            count += 1
            continue
        if count:
            yield current, count
        current, count = word, 1
    if count:
        yield current, count


def format_bundled(words: Iterable[int], header: str = BUNDLED_HEADER) -> str:
    """
    Render words in the run-length bundled format.

    Raises:
        EncodingError: If any word is outside 0..0xFFFF
    """
    words = list(words)
    for offset, word in enumerate(words):
        if not 0 <= word <= MAX_WORD:
            raise EncodingError(
                f"word at offset 0x{offset:03x} is out of bounds: {word}",
                offset=offset,
            )

    tokens = []
    for value, count in iter_runs(words):
        if count == 1:
            tokens.append(to_hex_word(value))
        else:
            tokens.append(f"{count}{RUN_SEPARATOR}{to_hex_word(value)}")

    logger.debug(f"Bundled {len(words)} words into {len(tokens)} tokens")
    return f"{header}\n" + " ".join(tokens)


def format_image(words: Iterable[int], fmt: OutputFormat,
                 header: str = BUNDLED_HEADER) -> str:
    """Render words in the requested format."""
    if fmt is OutputFormat.BUNDLED:
        return format_bundled(words, header)
    return format_flat(words)


# =============================================================================
# Readers
# =============================================================================

def _parse_hex_word(token: str) -> int:
    try:
        value = int(token, 16)
    except ValueError:
        raise EncodingError(f"invalid hex word '{token}'") from None
    if not 0 <= value <= MAX_WORD:
        raise EncodingError(f"hex word '{token}' does not fit in 16 bits")
    return value


def _strip_comment(line: str) -> str:
    return line.split("#", 1)[0].strip()


def parse_flat(text: str) -> list[int]:
    """
    Read words written by format_flat().

    Raises:
        EncodingError: If a token is not a 16-bit hex word
    """
    return [_parse_hex_word(token) for token in text.split()]


def parse_bundled(text: str) -> list[int]:
    """
    Expand bundled text back into a word list.

    The header line is optional and '#' starts a comment, as in the files
    the simulator itself writes.

    Raises:
        EncodingError: If a token is malformed
    """
    words: list[int] = []
    lines = text.strip().splitlines()
    if lines and lines[0].strip() == BUNDLED_HEADER:
        lines = lines[1:]

    for line in lines:
        for token in _strip_comment(line).split():
            if RUN_SEPARATOR in token:
                count_str, value_str = token.split(RUN_SEPARATOR, 1)
                if not count_str.isdigit() or int(count_str) < 1:
                    raise EncodingError(f"invalid run count in '{token}'")
                words.extend([_parse_hex_word(value_str)] * int(count_str))
            else:
                words.append(_parse_hex_word(token))

    return words


def parse_image(text: str) -> list[int]:
    """Read either encoding, choosing by the presence of the bundled header."""
    first = text.lstrip().split("\n", 1)[0].strip()
    if first == BUNDLED_HEADER or RUN_SEPARATOR in text:
        return parse_bundled(text)
    return parse_flat(text)
