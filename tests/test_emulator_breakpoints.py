# =============================================================================
# test_emulator_breakpoints.py - Breakpoint Manager Tests
# =============================================================================
# Tests for the breakpoint list, hit budgets and break events.
# =============================================================================

import pytest

from p16_sdk.emulator import Breakpoint, BreakpointManager, BreakEvent, BreakReason


class TestBreakpointList:
    """Adding, updating and removing breakpoints."""

    def setup_method(self):
        self.mgr = BreakpointManager()

    def test_set_defaults_to_unlimited(self):
        bp = self.mgr.set_breakpoint(0x010)
        assert bp == Breakpoint(0x010, -1)
        assert self.mgr.has_breakpoint(0x010)
        assert self.mgr.breakpoint_count == 1

    def test_set_existing_updates_hits(self):
        first = self.mgr.set_breakpoint(0x010, hits=3)
        second = self.mgr.set_breakpoint(0x010, hits=1)
        assert first is second
        assert second.hits == 1
        assert self.mgr.breakpoint_count == 1

    def test_zero_hits_is_disabled(self):
        self.mgr.set_breakpoint(0x010, hits=0)
        assert not self.mgr.has_breakpoint(0x010)
        assert self.mgr.get_breakpoint(0x010) is not None

    def test_remove(self):
        self.mgr.set_breakpoint(0x010)
        assert self.mgr.remove_breakpoint(0x010) is True
        assert self.mgr.remove_breakpoint(0x010) is False
        assert self.mgr.breakpoint_count == 0

    def test_clear(self):
        self.mgr.set_breakpoint(1)
        self.mgr.set_breakpoint(2)
        self.mgr.clear_breakpoints()
        assert self.mgr.list_breakpoints() == []

    def test_list_sorted_by_address(self):
        for address in (0x300, 0x010, 0x0FF):
            self.mgr.set_breakpoint(address)
        assert [bp.address for bp in self.mgr.list_breakpoints()] == [0x010, 0x0FF, 0x300]

    @pytest.mark.parametrize("address", [-1, 0x1000])
    def test_address_out_of_range(self, address):
        with pytest.raises(ValueError, match="outside"):
            self.mgr.set_breakpoint(address)

    def test_negative_hits_below_unlimited(self):
        with pytest.raises(ValueError, match="hit count"):
            self.mgr.set_breakpoint(0x010, hits=-2)


class TestCheckInstruction:
    """Hit counting in check_instruction()."""

    def setup_method(self):
        self.mgr = BreakpointManager()

    def test_no_breakpoint_continues(self):
        assert self.mgr.check_instruction(0x005, 0x0000) is True
        assert self.mgr.last_event is None

    def test_unlimited_breakpoint_always_stops(self):
        self.mgr.set_breakpoint(0x005)
        for _ in range(3):
            assert self.mgr.check_instruction(0x005, 0x1234) is False
        assert self.mgr.get_breakpoint(0x005).hits == -1
        event = self.mgr.last_event
        assert event.reason is BreakReason.BREAKPOINT
        assert event.address == 0x005
        assert event.value == 0x1234
        assert str(event) == "Breakpoint at 0x005"

    def test_counted_breakpoint_runs_out(self):
        self.mgr.set_breakpoint(0x005, hits=2)

        assert self.mgr.check_instruction(0x005, 0) is False
        assert str(self.mgr.last_event) == "Breakpoint at 0x005, 1 hit(s) left"

        assert self.mgr.check_instruction(0x005, 0) is False
        assert str(self.mgr.last_event) == "Breakpoint at 0x005, now disabled"

        self.mgr.clear_last_event()
        assert self.mgr.check_instruction(0x005, 0) is True
        assert self.mgr.last_event is None
        assert self.mgr.breakpoint_count == 1

    def test_disabled_breakpoint_can_be_rearmed(self):
        self.mgr.set_breakpoint(0x005, hits=0)
        assert self.mgr.check_instruction(0x005, 0) is True
        self.mgr.set_breakpoint(0x005, hits=1)
        assert self.mgr.check_instruction(0x005, 0) is False


class TestDisplay:
    """String forms of breakpoints and events."""

    @pytest.mark.parametrize("hits,expected", [
        (-1, "0x020 (always)"),
        (0, "0x020 (disabled)"),
        (4, "0x020 (4 hit(s) left)"),
    ])
    def test_breakpoint_str(self, hits, expected):
        assert str(Breakpoint(0x020, hits)) == expected

    @pytest.mark.parametrize("event,expected", [
        (BreakEvent(BreakReason.BREAKPOINT, address=0x7), "Breakpoint at 0x007"),
        (BreakEvent(BreakReason.BREAKPOINT), "Breakpoint"),
        (BreakEvent(BreakReason.HALT), "CPU halted"),
        (BreakEvent(BreakReason.MAX_STEPS), "Maximum steps reached"),
        (BreakEvent(BreakReason.NONE), "Unknown"),
        (BreakEvent(BreakReason.FAULT, message="Fault: x"), "Fault: x"),
    ])
    def test_event_str(self, event, expected):
        assert str(event) == expected
