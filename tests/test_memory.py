# =============================================================================
# test_memory.py - Memory Image Unit Tests
# =============================================================================
# Tests for the write head, gap filling and address patching.
# =============================================================================

import pytest

from p16_sdk.assembler.memory import MemoryImage
from p16_sdk.errors import EncodingError, HeadMovementError


class TestEmit:
    """Writing words at the head."""

    def setup_method(self):
        self.memory = MemoryImage()

    def test_sequential(self):
        self.memory.emit(0x1005)
        self.memory.emit(0xFFFF)
        assert self.memory.words == [0x1005, 0xFFFF]
        assert self.memory.head == 2

    def test_repeat(self):
        self.memory.emit(7, times=3)
        assert self.memory.words == [7, 7, 7]
        assert self.memory.head == 3

    def test_out_of_range(self):
        with pytest.raises(EncodingError) as exc_info:
            self.memory.emit(0x10000)
        assert exc_info.value.offset == 0

    def test_negative_word(self):
        with pytest.raises(EncodingError):
            self.memory.emit(-1)

    def test_words_is_a_copy(self):
        self.memory.emit(1)
        self.memory.words.append(2)
        assert len(self.memory) == 1

    def test_getitem(self):
        self.memory.emit(0x1234)
        assert self.memory[0] == 0x1234


class TestGaps:
    """Gap materialization with the fill pattern."""

    def test_gap_uses_fill_pattern(self):
        memory = MemoryImage(fill_pattern=0xABCD)
        memory.emit(0)
        memory.move_head_to(5)
        memory.emit(1)
        assert memory.words == [0, 0xABCD, 0xABCD, 0xABCD, 0xABCD, 1]

    def test_gap_not_materialized_until_emit(self):
        memory = MemoryImage()
        memory.move_head_to(4)
        assert len(memory) == 0
        assert memory.head == 4

    def test_fill_at_emit_time(self):
        memory = MemoryImage(fill_pattern=0x1111)
        memory.move_head_to(2)
        memory.fill_pattern = 0x2222
        memory.emit(1)
        assert memory.words == [0x2222, 0x2222, 1]

    def test_existing_gap_not_rewritten(self):
        memory = MemoryImage(fill_pattern=0x1111)
        memory.advance_head(2)
        memory.emit(1)
        memory.fill_pattern = 0x2222
        memory.advance_head(1)
        memory.emit(2)
        assert memory.words == [0x1111, 0x1111, 1, 0x2222, 2]


class TestHeadMovement:
    """The head only moves forward."""

    def test_move_to_current(self):
        memory = MemoryImage()
        memory.emit(1)
        memory.move_head_to(1)
        assert memory.head == 1

    def test_move_backwards(self):
        memory = MemoryImage()
        memory.emit(1, times=5)
        with pytest.raises(HeadMovementError) as exc_info:
            memory.move_head_to(2)
        assert exc_info.value.current == 5
        assert exc_info.value.requested == 2
        assert "backwards" in str(exc_info.value)

    def test_advance_negative(self):
        memory = MemoryImage()
        with pytest.raises(HeadMovementError):
            memory.advance_head(-1)


class TestPatch:
    """Address field patching."""

    def test_keeps_class_nibble(self):
        memory = MemoryImage()
        memory.emit(0x3000)
        assert memory.patch_address(0, 0x2A) == 0x302A
        assert memory[0] == 0x302A

    def test_data_word(self):
        memory = MemoryImage()
        memory.emit(0x0000)
        memory.patch_address(0, 0xFFF)
        assert memory[0] == 0x0FFF
