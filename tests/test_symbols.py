# =============================================================================
# test_symbols.py - Symbol Table and Fixup Ledger Unit Tests
# =============================================================================

import pytest

from p16_sdk.assembler.symbols import FixupLedger, Label, SymbolTable
from p16_sdk.errors import DuplicateSymbolError


class TestSymbolTable:
    """Label definition and lookup."""

    def setup_method(self):
        self.table = SymbolTable()

    def test_define_and_lookup(self):
        label = self.table.define("loop", 3, line=7)
        assert label == Label("loop", 3, 7)
        assert self.table.lookup("loop") == 3

    def test_lookup_undefined(self):
        assert self.table.lookup("nowhere") is None

    def test_case_insensitive(self):
        self.table.define("Start", 0)
        assert "START" in self.table
        assert self.table.get("start").name == "start"

    def test_duplicate(self):
        self.table.define("loop", 1)
        with pytest.raises(DuplicateSymbolError) as exc_info:
            self.table.define("loop", 5)
        assert exc_info.value.symbol == "loop"
        assert exc_info.value.original_offset == 1
        assert self.table.lookup("loop") == 1

    def test_as_dict(self):
        self.table.define("a", 0)
        self.table.define("b", 2)
        assert self.table.as_dict() == {"a": 0, "b": 2}
        assert len(self.table) == 2

    def test_by_position(self):
        self.table.define("x", 4)
        self.table.define("y", 4)
        self.table.define("z", 0)
        grouped = self.table.by_position()
        assert sorted(grouped[4]) == ["x", "y"]
        assert grouped[0] == ["z"]


class TestFixupLedger:
    """Pending forward references."""

    def setup_method(self):
        self.ledger = FixupLedger()

    def test_empty(self):
        assert not self.ledger
        assert len(self.ledger) == 0
        assert self.ledger.unresolved() == []

    def test_record_and_drain(self):
        self.ledger.record("end", 0)
        self.ledger.record("end", 4)
        assert "end" in self.ledger
        assert self.ledger.drain("end") == [0, 4]
        assert not self.ledger

    def test_drain_unknown(self):
        assert self.ledger.drain("nothing") == []

    def test_pending_for_is_a_copy(self):
        self.ledger.record("end", 2)
        self.ledger.pending_for("end").append(9)
        assert self.ledger.pending_for("end") == [2]

    def test_unresolved_sorted(self):
        self.ledger.record("zeta", 0)
        self.ledger.record("alpha", 1)
        assert self.ledger.unresolved() == ["alpha", "zeta"]
        assert len(self.ledger) == 2

    def test_case_insensitive(self):
        self.ledger.record("End", 1)
        assert self.ledger.drain("END") == [1]
