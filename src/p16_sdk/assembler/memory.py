"""
P16 Memory Image
================

A growable, word-addressed buffer with a forward-only write head.

The image is materialized lazily: it only holds words up to the highest
offset written so far. When the head has been moved past the end of the
image (with a location directive), the next emit first fills the gap with
the fill pattern that is current *at that moment*. Changing the fill
pattern later never rewrites an existing gap.

Example
-------
>>> image = MemoryImage()
>>> image.emit(0x0001)
>>> image.fill_pattern = 0xAAAA
>>> image.move_head_to(3)
>>> image.emit(0x0002)
>>> [f"{w:04x}" for w in image.words]
['0001', 'aaaa', 'aaaa', '0002']
"""

import logging

from p16_sdk.cpu import ADDRESS_MASK, MAX_WORD, OPCODE_MASK
from p16_sdk.errors import EncodingError, HeadMovementError

logger = logging.getLogger(__name__)


class MemoryImage:
    """
    Word buffer plus write head.

    Attributes:
        fill_pattern: Word written into gaps created by forward head moves
    """

    def __init__(self, fill_pattern: int = 0x0000):
        self._words: list[int] = []
        self._head = 0
        self.fill_pattern = fill_pattern

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def head(self) -> int:
        """Offset at which the next word will be written."""
        return self._head

    @property
    def words(self) -> list[int]:
        """Copy of the materialized words, in offset order."""
        return list(self._words)

    def __len__(self) -> int:
        return len(self._words)

    def __getitem__(self, offset: int) -> int:
        return self._words[offset]

    # =========================================================================
    # Head Movement
    # =========================================================================

    def move_head_to(self, offset: int) -> None:
        """
        Move the write head to an absolute offset.

        Raises:
            HeadMovementError: If offset is behind the current head
        """
        if offset < self._head:
            raise HeadMovementError(self._head, offset)
        logger.debug(f"Head 0x{self._head:03x} -> 0x{offset:03x}")
        self._head = offset

    def advance_head(self, increment: int) -> None:
        """
        Move the write head forward by `increment` words.

        Raises:
            HeadMovementError: If increment is negative
        """
        if increment < 0:
            raise HeadMovementError(self._head, self._head + increment)
        self._head += increment

    # =========================================================================
    # Writing
    # =========================================================================

    def emit(self, word: int, times: int = 1) -> None:
        """
        Write `word` at the head `times` times and advance past it.

        Any gap between the end of the image and the head is first filled
        with the current fill pattern.

        Raises:
            EncodingError: If word is not a 16-bit value
            HeadMovementError: If times is negative
        """
        if not 0 <= word <= MAX_WORD:
            raise EncodingError(
                f"value {word} does not fit in a 16-bit word", offset=self._head
            )
        if times < 0:
            raise HeadMovementError(self._head, self._head + times)

        gap = self._head - len(self._words)
        if gap > 0:
            logger.debug(
                f"Filling 0x{len(self._words):03x}..0x{self._head - 1:03x} "
                f"with 0x{self.fill_pattern:04x}"
            )
            self._words.extend([self.fill_pattern] * gap)

        self._words.extend([word] * times)
        self._head += times

    def patch_address(self, offset: int, address: int) -> int:
        """
        Rewrite the 12-bit address field of an already written word.

        The instruction class nibble is preserved.

        Returns:
            The patched word
        """
        word = (self._words[offset] & OPCODE_MASK) | (address & ADDRESS_MASK)
        self._words[offset] = word
        return word
