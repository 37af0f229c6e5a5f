# =============================================================================
# test_lexer.py - Source Preprocessing Unit Tests
# =============================================================================
# Tests for line normalization, source splitting and number literals.
# =============================================================================

import pytest

from p16_sdk.assembler.lexer import (
    parse_number,
    preprocess_line,
    source_lines,
    split_source,
    tokenize,
)
from p16_sdk.errors import AssemblySyntaxError


# =============================================================================
# Line Normalization
# =============================================================================

class TestPreprocessLine:
    """Comment stripping, trimming and case folding."""

    def test_comment_and_case(self):
        assert preprocess_line("  LDA 5 ; load") == "lda 5"

    def test_comment_only(self):
        assert preprocess_line("   ; nothing here") is None

    def test_blank(self):
        assert preprocess_line("") is None
        assert preprocess_line(" \t ") is None

    def test_tabs(self):
        assert preprocess_line("\tHLT\t") == "hlt"

    def test_only_first_semicolon_matters(self):
        assert preprocess_line("nop ; a ; b") == "nop"

    def test_label_kept(self):
        assert preprocess_line("Loop:") == "loop:"


class TestSplitSource:
    """Statement extraction with source line numbers."""

    def test_line_numbers_count_skipped_lines(self):
        text = "start:\n\n; comment\nhlt"
        assert list(split_source(text)) == [(1, "start:"), (4, "hlt")]

    def test_empty_source(self):
        assert list(split_source("")) == []

    def test_crlf(self):
        assert list(split_source("nop\r\nhlt\r\n")) == [(1, "nop"), (2, "hlt")]

    def test_only_newline_ends_a_line(self):
        text = "nop\n\x0c\njmp 0x1\x0b\nhlt"
        assert list(split_source(text)) == [(1, "nop"), (3, "jmp 0x1"), (4, "hlt")]

    def test_unicode_separator_stays_in_line(self):
        assert source_lines("nop\u2028hlt\n") == ["nop\u2028hlt"]

    def test_source_lines_trailing_newline(self):
        assert source_lines("nop\r\nhlt\r\n") == ["nop", "hlt"]
        assert source_lines("nop\n\n") == ["nop", ""]
        assert source_lines("") == []

    def test_tokenize(self):
        assert tokenize("times 3 dw 0x10") == ["times", "3", "dw", "0x10"]


# =============================================================================
# Number Literals
# =============================================================================

class TestParseNumber:
    """Decimal, hex, binary and octal literals."""

    def test_decimal(self):
        assert parse_number("12") == 12
        assert parse_number("0") == 0

    def test_hex(self):
        assert parse_number("0x1F") == 31
        assert parse_number("0xffff") == 0xFFFF

    def test_binary(self):
        assert parse_number("0b101") == 5

    def test_octal(self):
        assert parse_number("0o17") == 15

    def test_negative(self):
        assert parse_number("-3") == -3
        assert parse_number("-0x10") == -16

    def test_not_a_number(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            parse_number("abc")
        assert "invalid number 'abc'" in str(exc_info.value)

    def test_empty(self):
        with pytest.raises(AssemblySyntaxError):
            parse_number("")

    def test_prefix_only(self):
        with pytest.raises(AssemblySyntaxError):
            parse_number("0x")

    def test_bad_digit(self):
        with pytest.raises(AssemblySyntaxError):
            parse_number("0xg1")
        with pytest.raises(AssemblySyntaxError):
            parse_number("0b102")

    def test_underscore_rejected(self):
        with pytest.raises(AssemblySyntaxError):
            parse_number("1_000")

    def test_double_sign_rejected(self):
        with pytest.raises(AssemblySyntaxError):
            parse_number("--1")

    def test_non_ascii_digits_rejected(self):
        # Arabic-Indic twelve
        with pytest.raises(AssemblySyntaxError):
            parse_number("\u0661\u0662")
        # Fullwidth digits after a hex prefix
        with pytest.raises(AssemblySyntaxError):
            parse_number("0x\uff11")
