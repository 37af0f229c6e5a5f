"""
P16 Emulator - Main Orchestrator
================================

This module provides the `Emulator` class that ties the CPU, its memory
and the breakpoint manager together behind a small API for running and
inspecting programs.

The Emulator class:
- Loads a word image (as produced by the assembler) into memory
- Runs until HLT, a breakpoint, a fault or a step budget
- Restores the loaded image on reset()
- Formats registers, memory rows and disassembly for display

Example usage:
    >>> from p16_sdk import assemble_file
    >>> from p16_sdk.emulator import Emulator
    >>> emu = Emulator(assemble_file("count.asm"))
    >>> event = emu.run()
    >>> print(event)
    CPU halted at 0x007
    >>> print(emu.format_registers())

Faults do not propagate out of run() and step(); they come back as a
BreakEvent with reason FAULT and are kept in `last_fault`.

Copyright (c) 2026 P16 SDK Contributors
"""

import logging
from typing import List, Optional

from p16_sdk.config import EmulatorConfig
from p16_sdk.cpu import MAX_WORD
from p16_sdk.disassembler import P16Disassembler
from p16_sdk.errors import EmulatorFault

from .breakpoints import BreakEvent, BreakpointManager, BreakReason
from .cpu import P16CPU, StatusFlag

logger = logging.getLogger(__name__)

WORDS_PER_ROW = 8


class Emulator:
    """
    P16 emulator with breakpoint support.

    Attributes:
        config: The EmulatorConfig used to initialize this instance
        cpu: The P16CPU instance (accessible for low-level control)
        breakpoints: The breakpoint manager
        last_fault: The fault that ended the last run or step, if any

    Example:
        >>> emu = Emulator([0x1003, 0x2004, 0xFFFF, 0x002A])
        >>> emu.run().reason
        <BreakReason.HALT: 4>
        >>> emu.read_word(4)
        42
    """

    def __init__(self, image: List[int], config: Optional[EmulatorConfig] = None):
        """
        Load an image into a fresh emulator.

        Args:
            image: Memory words from offset 0
            config: Memory size and step budget (default: EmulatorConfig())

        Raises:
            ValueError: If the image does not fit in memory or holds a
                        value that is not a 16-bit word
        """
        self.config = config or EmulatorConfig()
        size = self.config.memory_size

        if len(image) > size:
            raise ValueError(f"image of {len(image)} words does not fit in {size} words of memory")
        for offset, word in enumerate(image):
            if not 0 <= word <= MAX_WORD:
                raise ValueError(f"value {word} at 0x{offset:03x} is not a 16-bit word")

        self._snapshot = list(image) + [0] * (size - len(image))
        self.cpu = P16CPU(list(self._snapshot))
        self.breakpoints = BreakpointManager()
        self.cpu.on_instruction = self._instruction_hook
        self.last_fault: Optional[EmulatorFault] = None

        # Address of a breakpoint just reported; the next run() executes it
        self._resume_at: Optional[int] = None

        logger.debug(f"Loaded {len(image)} words into {size} words of memory")

    def _instruction_hook(self, pc: int, word: int) -> bool:
        if self._resume_at == pc:
            self._resume_at = None
            return True
        self._resume_at = None
        return self.breakpoints.check_instruction(pc, word)

    # =========================================================================
    # Execution Control
    # =========================================================================

    def reset(self) -> None:
        """
        Restore the loaded image and clear the registers.

        Breakpoints and their remaining hit counts are kept.
        """
        self.cpu.memory[:] = self._snapshot
        self.cpu.reset()
        self.breakpoints.clear_last_event()
        self.last_fault = None
        self._resume_at = None

    def step(self) -> BreakEvent:
        """
        Execute a single instruction, ignoring breakpoints.

        Returns:
            BreakEvent with reason STEP, HALT or FAULT
        """
        if self.cpu.halted:
            return self._halt_event()

        self._resume_at = None
        try:
            self.cpu.step()
        except EmulatorFault as fault:
            return self._fault_event(fault)

        if self.cpu.halted:
            return self._halt_event()
        return BreakEvent(
            BreakReason.STEP,
            address=self.cpu.pc,
            message=f"Step to 0x{self.cpu.pc:03x}",
        )

    def run(self, max_steps: Optional[int] = None) -> BreakEvent:
        """
        Run until something stops execution.

        Execution continues until:
        - HLT is executed
        - An active breakpoint is reached
        - An instruction faults
        - max_steps instructions have run

        Running again after a breakpoint executes the instruction under it
        first instead of stopping on it a second time.

        Args:
            max_steps: Step budget (default: config.max_steps)

        Returns:
            BreakEvent describing why execution stopped
        """
        budget = self.config.max_steps if max_steps is None else max_steps
        if self.cpu.halted:
            return self._halt_event()

        self.breakpoints.clear_last_event()
        try:
            executed = self.cpu.execute(budget)
        except EmulatorFault as fault:
            return self._fault_event(fault)

        if self.cpu.halted:
            return self._halt_event()

        event = self.breakpoints.last_event
        if event is not None:
            self._resume_at = event.address
            logger.debug(str(event))
            return event

        return BreakEvent(
            BreakReason.MAX_STEPS,
            address=self.cpu.pc,
            message=f"Stopped after {executed} steps at 0x{self.cpu.pc:03x}",
        )

    def _halt_event(self) -> BreakEvent:
        return BreakEvent(
            BreakReason.HALT,
            address=self.cpu.pc,
            value=self.cpu.state.ri,
            message=f"CPU halted at 0x{self.cpu.pc:03x}",
        )

    def _fault_event(self, fault: EmulatorFault) -> BreakEvent:
        self.last_fault = fault
        logger.warning(f"Fault: {fault}")
        return BreakEvent(
            BreakReason.FAULT,
            address=fault.pc,
            value=fault.word,
            message=f"Fault: {fault}",
        )

    # =========================================================================
    # Memory Access
    # =========================================================================

    def read_word(self, address: int) -> int:
        """
        Read a memory word.

        Raises:
            IndexError: If address is outside memory
        """
        self._check_address(address)
        return self.cpu.memory[address]

    def write_word(self, address: int, value: int) -> None:
        """
        Write a memory word. The loaded image used by reset() is unchanged.

        Raises:
            IndexError: If address is outside memory
            ValueError: If value is not a 16-bit word
        """
        self._check_address(address)
        if not 0 <= value <= MAX_WORD:
            raise ValueError(f"value {value} is not a 16-bit word")
        self.cpu.memory[address] = value

    def _check_address(self, address: int) -> None:
        if not 0 <= address < self.cpu.memory_size:
            raise IndexError(
                f"address 0x{address:x} outside memory of {self.cpu.memory_size} words"
            )

    # =========================================================================
    # State Inspection
    # =========================================================================

    @property
    def registers(self) -> dict:
        """
        Get current register values and PSW bits as a dictionary.

        Returns:
            Dictionary with keys: pc, ri, a, b, c, d, r, psw, ov, un, le, eq, gr
        """
        state = self.cpu.state
        return {
            "pc": state.pc,
            "ri": state.ri,
            "a": state.a,
            "b": state.b,
            "c": state.c,
            "d": state.d,
            "r": state.r,
            "psw": state.psw,
            "ov": self.cpu.flag(StatusFlag.OV),
            "un": self.cpu.flag(StatusFlag.UN),
            "le": self.cpu.flag(StatusFlag.LE),
            "eq": self.cpu.flag(StatusFlag.EQ),
            "gr": self.cpu.flag(StatusFlag.GR),
        }

    @property
    def total_steps(self) -> int:
        """Instructions completed since the last reset."""
        return self.cpu.steps

    @property
    def is_halted(self) -> bool:
        return self.cpu.halted

    def format_registers(self) -> str:
        """Register dump, one register per line."""
        regs = self.registers
        bits = " ".join(
            f"{name.upper()}={int(regs[name])}" for name in ("ov", "un", "le", "eq", "gr")
        )
        return "\n".join([
            f"PC:  0x{regs['pc']:04x}",
            f"RI:  0x{regs['ri']:04x}",
            f"PSW: 0x{regs['psw']:04x}  {bits}",
            f"R:   0x{regs['r']:04x}",
            f"A:   0x{regs['a']:04x}",
            f"B:   0x{regs['b']:04x}",
            f"C:   0x{regs['c']:04x}",
            f"D:   0x{regs['d']:04x}",
        ])

    def dump_memory(self, address: int, count: int = WORDS_PER_ROW) -> List[str]:
        """
        Format memory as rows of eight words.

        Rows are clipped to the end of memory.

        Raises:
            IndexError: If address is outside memory
        """
        self._check_address(address)
        end = min(address + count, self.cpu.memory_size)
        rows = []
        for row in range(address, end, WORDS_PER_ROW):
            words = self.cpu.memory[row:min(row + WORDS_PER_ROW, end)]
            rows.append(f"{row:03x}: " + " ".join(f"{word:04x}" for word in words))
        return rows

    def disassemble_at(self, address: int, count: int = 10) -> List[str]:
        """
        Disassemble memory starting at address.

        Returns:
            Listing lines, the one at the current PC marked with '>'
        """
        lines = []
        for instr in P16Disassembler().disassemble(self.cpu.memory, address, count):
            marker = ">" if instr.address == self.cpu.pc else " "
            lines.append(f"{marker} {instr}")
        return lines

    def __repr__(self) -> str:
        """Return string representation of emulator state."""
        return (
            f"Emulator(memory={self.cpu.memory_size}, "
            f"pc=0x{self.cpu.pc:03x}, steps={self.total_steps})"
        )
