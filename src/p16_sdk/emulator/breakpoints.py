"""
Breakpoints for the P16 Emulator
================================

A breakpoint stops execution before the instruction at its address runs.
Each breakpoint carries a hit budget:

| hits | Behavior                                   |
|------|--------------------------------------------|
| -1   | Stops every time (default)                 |
| 0    | Disabled; kept in the list                 |
| N>0  | Stops N more times, then becomes disabled  |

Setting a breakpoint on an address that already has one only replaces its
hit budget.

Example usage:

    >>> from p16_sdk.emulator import Emulator, BreakReason
    >>> emu = Emulator(words)
    >>> emu.breakpoints.set_breakpoint(0x004, hits=2)
    >>> event = emu.run()
    >>> if event.reason == BreakReason.BREAKPOINT:
    ...     print(f"Hit breakpoint at 0x{event.address:03x}")
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, List, Optional

from p16_sdk.cpu import MAX_ADDRESS


class BreakReason(Enum):
    """
    Enumeration of reasons why execution stopped.

    Used in BreakEvent to indicate what triggered the break.
    """
    NONE = auto()        # No specific reason
    BREAKPOINT = auto()  # PC reached an active breakpoint
    STEP = auto()        # Single step completed
    HALT = auto()        # HLT executed
    FAULT = auto()       # Instruction could not be executed
    MAX_STEPS = auto()   # Step budget used up


@dataclass
class BreakEvent:
    """
    Information about why execution stopped.

    Attributes:
        reason: Why execution stopped
        address: PC when execution stopped (if applicable)
        value: Instruction word at that address (if applicable)
        message: Human-readable description
    """
    reason: BreakReason
    address: Optional[int] = None
    value: Optional[int] = None
    message: str = ""

    def __str__(self) -> str:
        """Return human-readable description."""
        if self.message:
            return self.message
        match self.reason:
            case BreakReason.BREAKPOINT:
                return f"Breakpoint at 0x{self.address:03x}" if self.address is not None else "Breakpoint"
            case BreakReason.STEP:
                return "Single step"
            case BreakReason.HALT:
                return "CPU halted"
            case BreakReason.FAULT:
                return "Execution fault"
            case BreakReason.MAX_STEPS:
                return "Maximum steps reached"
            case _:
                return "Unknown"


@dataclass
class Breakpoint:
    """
    A PC breakpoint.

    Attributes:
        address: Instruction address (0..0xFFF)
        hits: Remaining stops; -1 for unlimited, 0 when disabled
    """
    address: int
    hits: int = -1

    @property
    def active(self) -> bool:
        return self.hits != 0

    def __str__(self) -> str:
        if self.hits < 0:
            budget = "always"
        elif self.hits == 0:
            budget = "disabled"
        else:
            budget = f"{self.hits} hit(s) left"
        return f"0x{self.address:03x} ({budget})"


class BreakpointManager:
    """
    Holds the emulator's breakpoints and decides when to stop.

    The emulator wires check_instruction() into the CPU's instruction
    hook, so it runs before every instruction executed by run().

    Example:
        >>> mgr = BreakpointManager()
        >>> mgr.set_breakpoint(0x010)
        >>> mgr.set_breakpoint(0x020, hits=3)
        >>> cpu.on_instruction = mgr.check_instruction
    """

    def __init__(self):
        self._breakpoints: Dict[int, Breakpoint] = {}
        self._last_event: Optional[BreakEvent] = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def last_event(self) -> Optional[BreakEvent]:
        """Get the last break event that occurred."""
        return self._last_event

    @property
    def breakpoint_count(self) -> int:
        """Number of breakpoints, disabled ones included."""
        return len(self._breakpoints)

    def clear_last_event(self) -> None:
        self._last_event = None

    # =========================================================================
    # Breakpoint List
    # =========================================================================

    def set_breakpoint(self, address: int, hits: int = -1) -> Breakpoint:
        """
        Add a breakpoint, or change the hit budget of an existing one.

        Args:
            address: Instruction address (0..0xFFF)
            hits: Number of stops; -1 for unlimited, 0 to disable

        Raises:
            ValueError: If address is outside the address space or hits < -1
        """
        if not 0 <= address <= MAX_ADDRESS:
            raise ValueError(f"breakpoint address 0x{address:x} outside 0x000-0x{MAX_ADDRESS:03x}")
        if hits < -1:
            raise ValueError(f"hit count must be -1 or more, got {hits}")

        existing = self._breakpoints.get(address)
        if existing:
            existing.hits = hits
            return existing
        bp = Breakpoint(address, hits)
        self._breakpoints[address] = bp
        return bp

    def remove_breakpoint(self, address: int) -> bool:
        """
        Remove the breakpoint at address.

        Returns:
            True if there was one
        """
        return self._breakpoints.pop(address, None) is not None

    def get_breakpoint(self, address: int) -> Optional[Breakpoint]:
        return self._breakpoints.get(address)

    def has_breakpoint(self, address: int) -> bool:
        """Check for an active breakpoint at address."""
        bp = self._breakpoints.get(address)
        return bp is not None and bp.active

    def clear_breakpoints(self) -> None:
        """Remove all breakpoints."""
        self._breakpoints.clear()

    def list_breakpoints(self) -> List[Breakpoint]:
        """All breakpoints sorted by address."""
        return [self._breakpoints[address] for address in sorted(self._breakpoints)]

    # =========================================================================
    # Check Function (called by the CPU hook)
    # =========================================================================

    def check_instruction(self, pc: int, word: int) -> bool:
        """
        Decide whether the instruction at pc may run.

        A hit on a breakpoint with a positive budget consumes one hit.

        Returns:
            True to continue execution, False to break
        """
        bp = self._breakpoints.get(pc)
        if bp is None or not bp.active:
            return True

        if bp.hits > 0:
            bp.hits -= 1

        message = f"Breakpoint at 0x{pc:03x}"
        if bp.hits > 0:
            message += f", {bp.hits} hit(s) left"
        elif bp.hits == 0:
            message += ", now disabled"

        self._last_event = BreakEvent(
            BreakReason.BREAKPOINT,
            address=pc,
            value=word,
            message=message,
        )
        return False
