# =============================================================================
# test_cpu.py - ISA Table Tests
# =============================================================================
# Tests for the shared instruction tables and lookup helpers.
# =============================================================================

import pytest

import p16_sdk.cpu
from p16_sdk.cpu import (
    CLASS_NAMES,
    OperandKind,
    SECOND_OPERAND_CODES,
    SECOND_OPERAND_SELECT,
    get_instruction_info,
    instruction_class,
)


class TestLookups:
    """Mnemonic and class lookups."""

    @pytest.mark.parametrize("mnemonic,opcode,kind", [
        ("nop", 0x0000, OperandKind.NONE),
        ("LDA", 0x1000, OperandKind.TARGET),
        ("jnz", 0x4000, OperandKind.TARGET),
        ("calc", 0x6000, OperandKind.CALC),
        ("hlt", 0xFFFF, OperandKind.NONE),
    ])
    def test_get_instruction_info(self, mnemonic, opcode, kind):
        info = get_instruction_info(mnemonic)
        assert info.opcode == opcode
        assert info.operand_kind is kind

    def test_unknown_mnemonic(self):
        assert get_instruction_info("ldx") is None

    @pytest.mark.parametrize("word,cls", [
        (0x0000, 0x0),
        (0x3fff, 0x3),
        (0x6c0e, 0x6),
        (0x7000, 0x7),
        (0xffff, 0xF),
    ])
    def test_instruction_class(self, word, cls):
        assert instruction_class(word) == cls

    def test_class_names_decode_only_real_mnemonics(self):
        assert CLASS_NAMES == {
            0x0: "nop", 0x1: "lda", 0x2: "sta", 0x3: "jmp",
            0x4: "jnz", 0x5: "ret", 0x6: "arit", 0xF: "hlt",
        }


class TestTables:
    """Consistency between code spaces."""

    def test_register_operands_have_select_bit(self):
        for name, code in SECOND_OPERAND_CODES.items():
            if name in ("0", "zero"):
                assert not code & SECOND_OPERAND_SELECT
            else:
                assert code & SECOND_OPERAND_SELECT

    def test_exports_resolve(self):
        for name in p16_sdk.cpu.__all__:
            assert hasattr(p16_sdk.cpu, name), name
