# =============================================================================
# test_encoder.py - Instruction Encoder Unit Tests
# =============================================================================
# Tests for the P16 instruction encoder.
#
# Test coverage includes:
#   - Fixed encodings (NOP, RET, HLT)
#   - Address targets and the 12-bit bound
#   - Register, ARIT operation and second-operand code spaces
#   - CALC expansion and its equivalence with hand-written ARIT
#   - Error conditions
# =============================================================================

import pytest

from p16_sdk.assembler.encoder import (
    InstructionEncoder,
    encode_arit,
    encode_calc,
    expand_calc,
    parse_address,
    register_code,
    second_operand_code,
)
from p16_sdk.errors import AddressError, AssemblySyntaxError


def encode(statement: str) -> int:
    return InstructionEncoder().encode(statement)


# =============================================================================
# Inherent Instructions
# =============================================================================

class TestInherentInstructions:
    """Instructions without operands."""

    def test_nop(self):
        assert encode("nop") == 0x0000

    def test_ret(self):
        assert encode("ret") == 0x5000

    def test_hlt(self):
        assert encode("hlt") == 0xFFFF

    def test_operand_rejected(self):
        with pytest.raises(AssemblySyntaxError):
            encode("nop 5")

    def test_unknown_mnemonic(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            encode("ldx 5")
        assert "unknown mnemonic 'ldx'" in str(exc_info.value)


# =============================================================================
# Target Instructions
# =============================================================================

class TestTargetInstructions:
    """LDA, STA, JMP, JNZ with direct addresses."""

    def test_class_nibbles(self):
        assert encode("lda 5") == 0x1005
        assert encode("sta 5") == 0x2005
        assert encode("jmp 5") == 0x3005
        assert encode("jnz 5") == 0x4005

    def test_hex_address(self):
        assert encode("sta 0x10") == 0x2010

    def test_highest_address(self):
        assert encode("lda 4095") == 0x1FFF

    def test_address_too_large(self):
        with pytest.raises(AddressError):
            encode("lda 4096")

    def test_address_error_is_syntax_error(self):
        with pytest.raises(AssemblySyntaxError):
            encode("lda 0x1000")

    def test_negative_address(self):
        with pytest.raises(AddressError):
            encode("jmp -1")

    def test_non_numeric_address(self):
        with pytest.raises(AddressError):
            encode("jmp start")

    def test_missing_operand(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            encode("jmp")
        assert "missing" in str(exc_info.value)

    def test_extra_operand(self):
        with pytest.raises(AssemblySyntaxError):
            encode("lda 1 2")

    def test_label_without_resolver(self):
        with pytest.raises(AssemblySyntaxError):
            encode("jmp :loop")

    def test_label_uses_resolver(self):
        seen = []

        def resolve(name):
            seen.append(name)
            return 0x123

        encoder = InstructionEncoder(resolve_label=resolve)
        assert encoder.encode("jnz :loop") == 0x4123
        assert seen == ["loop"]

    def test_empty_label_name(self):
        encoder = InstructionEncoder(resolve_label=lambda name: 0)
        with pytest.raises(AssemblySyntaxError):
            encoder.encode("jmp :")

    def test_parse_address(self):
        assert parse_address("0") == 0
        assert parse_address("0xfff") == 0xFFF


# =============================================================================
# Register Codes
# =============================================================================

class TestRegisterCodes:
    """General register and second-operand code spaces."""

    def test_general_registers(self):
        assert register_code("a") == 0b000
        assert register_code("b") == 0b001
        assert register_code("c") == 0b010
        assert register_code("d") == 0b011
        assert register_code("r") == 0b110
        assert register_code("psw") == 0b111

    def test_case_insensitive(self):
        assert register_code("PSW") == 0b111

    def test_special_registers_not_addressable(self):
        with pytest.raises(AssemblySyntaxError):
            register_code("r", addressable_only=True)
        with pytest.raises(AssemblySyntaxError):
            register_code("psw", addressable_only=True)
        assert register_code("d", addressable_only=True) == 0b011

    def test_unknown_register(self):
        with pytest.raises(AssemblySyntaxError):
            register_code("x")

    def test_second_operand_codes(self):
        assert second_operand_code("0") == 0b000
        assert second_operand_code("zero") == 0b000
        assert second_operand_code("a") == 0b100
        assert second_operand_code("b") == 0b101
        assert second_operand_code("c") == 0b110
        assert second_operand_code("d") == 0b111

    def test_second_operand_has_no_special_registers(self):
        with pytest.raises(AssemblySyntaxError):
            second_operand_code("r")
        with pytest.raises(AssemblySyntaxError):
            second_operand_code("psw")


# =============================================================================
# ARIT
# =============================================================================

class TestArit:
    """ARIT field packing."""

    def test_add(self):
        # 0110 110 000 001 110
        assert encode("arit add, a, b, c") == 0x6C0E

    def test_without_spaces(self):
        assert encode("arit add,a,b,c") == 0x6C0E

    def test_all_operations(self):
        expected = {
            "0": 0x6000, "f": 0x6200, "not": 0x6400, "and": 0x6600,
            "or": 0x6800, "xor": 0x6A00, "add": 0x6C00, "sub": 0x6E00,
        }
        for op, word in expected.items():
            assert encode_arit(f"{op}, a, a, 0") == word, op

    def test_special_registers_as_destination_and_first_operand(self):
        # 0110 111 110 111 100
        assert encode("arit sub, r, psw, a") == 0x6FBC

    def test_zero_second_operand(self):
        assert encode("arit not, d, b, zero") == encode("arit not, d, b, 0")

    def test_invalid_operation(self):
        with pytest.raises(AssemblySyntaxError):
            encode("arit mul, a, b, c")

    def test_invalid_second_operand(self):
        with pytest.raises(AssemblySyntaxError):
            encode("arit add, a, b, r")

    def test_wrong_operand_count(self):
        with pytest.raises(AssemblySyntaxError):
            encode("arit add, a, b")
        with pytest.raises(AssemblySyntaxError):
            encode("arit")

    def test_empty_field(self):
        with pytest.raises(AssemblySyntaxError):
            encode("arit add, , b, c")


# =============================================================================
# CALC
# =============================================================================

class TestCalc:
    """CALC expansion into ARIT."""

    def test_expand_binary(self):
        assert expand_calc("a = b + c") == "arit add, a, b, c"

    def test_expand_not(self):
        assert expand_calc("d = ~b") == "arit not, d, b, 0"

    def test_expand_zero(self):
        assert expand_calc("c = 0") == "arit 0, c, a, 0"

    def test_expand_fill(self):
        assert expand_calc("b = f") == "arit f, b, a, 0"

    def test_expand_copy(self):
        assert expand_calc("a = d") == "arit add, a, d, 0"

    def test_operators(self):
        assert expand_calc("a = a & b") == "arit and, a, a, b"
        assert expand_calc("a = b | c") == "arit or, a, b, c"
        assert expand_calc("d = c ^ d") == "arit xor, d, c, d"
        assert expand_calc("a = b - c") == "arit sub, a, b, c"

    def test_calc_matches_arit(self):
        pairs = [
            ("calc a = b + c", "arit add, a, b, c"),
            ("calc d = ~b", "arit not, d, b, 0"),
            ("calc c = 0", "arit 0, c, a, 0"),
            ("calc b = f", "arit f, b, a, 0"),
            ("calc a = d", "arit add, a, d, 0"),
            ("calc a = a & b", "arit and, a, a, b"),
            ("calc a = b | c", "arit or, a, b, c"),
            ("calc d = c ^ d", "arit xor, d, c, d"),
            ("calc r = psw - a", "arit sub, r, psw, a"),
        ]
        for calc, arit in pairs:
            assert encode(calc) == encode(arit), calc

    def test_known_words(self):
        assert encode_calc("d = ~b") == 0x64C8
        assert encode_calc("c = 0") == 0x6080
        assert encode_calc("b = f") == 0x6240
        assert encode_calc("a = d") == 0x6C18
        assert encode_calc("d = c ^ d") == 0x6AD7

    def test_missing_equals(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            encode("calc a b")
        assert "equals" in str(exc_info.value)

    def test_equals_without_spaces(self):
        with pytest.raises(AssemblySyntaxError):
            encode("calc a=b+c")

    def test_invalid_operator(self):
        with pytest.raises(AssemblySyntaxError):
            encode("calc a = b * c")

    def test_malformed_expression(self):
        with pytest.raises(AssemblySyntaxError):
            encode("calc a = b +")
        with pytest.raises(AssemblySyntaxError):
            encode("calc a =")

    def test_second_operand_restriction_applies(self):
        with pytest.raises(AssemblySyntaxError):
            encode("calc a = b + psw")

    def test_invalid_not_register(self):
        with pytest.raises(AssemblySyntaxError):
            encode("calc a = ~x")
