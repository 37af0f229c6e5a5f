"""
P16 CPU Emulator
================

Executes P16 instruction words held in a word-addressed memory.

Registers
---------
RI holds the instruction being executed and PC its address. A, B, C and
D are general purpose. R receives the return address on every taken jump
and PSW collects the ALU status bits. All registers are 16 bits wide and
reset to zero.

Execution Cycle
---------------
1. Fetch: RI <- mem[PC]
2. Execute the class in the top nibble of RI
3. Advance PC by one unless the instruction jumped

HLT stops the CPU with PC still on the HLT word. A PC that steps past the
last memory word wraps to 0 and raises a fault.

PSW Bits
--------
| Bit | Name | Set by        | Meaning               |
|-----|------|---------------|-----------------------|
| 15  | OV   | add           | sum above 0xFFFF      |
| 14  | UN   | sub           | second operand larger |
| 13  | LE   | every ARIT    | op1 < op2             |
| 12  | EQ   | every ARIT    | op1 == op2            |
| 11  | GR   | every ARIT    | op1 > op2             |

OV and UN keep their value across operations that do not compute them.
The comparison bits are written after the destination, so they land in
PSW even when PSW is the destination.

Copyright (c) 2026 P16 SDK Contributors
"""

import logging
from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import Callable, NoReturn, Optional

from p16_sdk.cpu import (
    ADDRESS_MASK,
    ARIT_DESTINATION_SHIFT,
    ARIT_OPERAND1_SHIFT,
    ARIT_OPERATION_SHIFT,
    ARIT_OPERATIONS,
    REGISTER_CODES,
    SECOND_OPERAND_SELECT,
    WORD_MASK,
    instruction_class,
)
from p16_sdk.errors import EmulatorFault

logger = logging.getLogger(__name__)


class StatusFlag(IntFlag):
    """PSW status bits."""
    GR = 1 << 11  # Greater
    EQ = 1 << 12  # Equal
    LE = 1 << 13  # Less
    UN = 1 << 14  # Underflow
    OV = 1 << 15  # Overflow


@dataclass
class CPUState:
    """
    Complete P16 register file.

    Attributes:
        ri: Instruction register
        pc: Program counter
        a, b, c, d: General purpose registers
        r: Return address register
        psw: Program status word
    """
    ri: int = 0
    pc: int = 0
    a: int = 0
    b: int = 0
    c: int = 0
    d: int = 0
    r: int = 0
    psw: int = 0


class InstructionClass(IntEnum):
    """Top nibble of an instruction word. 0x7..0xE are unused."""
    NOP = 0x0
    LDA = 0x1
    STA = 0x2
    JMP = 0x3
    JNZ = 0x4
    RET = 0x5
    ARIT = 0x6
    HLT = 0xF


class AritOperation(IntEnum):
    """ARIT operation field (bits 11-9)."""
    SET0 = ARIT_OPERATIONS["0"]
    SETF = ARIT_OPERATIONS["f"]
    NOT = ARIT_OPERATIONS["not"]
    AND = ARIT_OPERATIONS["and"]
    OR = ARIT_OPERATIONS["or"]
    XOR = ARIT_OPERATIONS["xor"]
    ADD = ARIT_OPERATIONS["add"]
    SUB = ARIT_OPERATIONS["sub"]


# ARIT register code -> CPUState field
REGISTER_FIELDS: dict[int, str] = {code: name for name, code in REGISTER_CODES.items()}


class P16CPU:
    """
    P16 processor core.

    The CPU owns its memory: a list of 16-bit words indexed by address.
    Execution faults raise EmulatorFault; the register file is left as it
    was when the fault was detected.

    Attributes:
        memory: Word list, one entry per address
        state: Register file
        halted: Set by HLT, cleared by reset()
        steps: Instructions completed since reset

    Hooks:
        on_instruction(pc, word) -> bool: called before each instruction
            inside execute(); return False to stop before executing it
    """

    def __init__(self, memory: list[int]):
        if not memory:
            raise ValueError("memory must hold at least one word")
        self.memory = memory
        self.state = CPUState()
        self.halted = False
        self.steps = 0

        self.on_instruction: Optional[Callable[[int, int], bool]] = None

    @property
    def memory_size(self) -> int:
        return len(self.memory)

    @property
    def pc(self) -> int:
        return self.state.pc

    def flag(self, flag: StatusFlag) -> bool:
        """Test one PSW bit."""
        return bool(self.state.psw & flag)

    def _set_flag(self, flag: StatusFlag, value: bool) -> None:
        if value:
            self.state.psw |= flag
        else:
            self.state.psw &= ~flag & WORD_MASK

    # ========================================
    # Reset
    # ========================================

    def reset(self) -> None:
        """Clear every register and leave halt state."""
        self.state = CPUState()
        self.halted = False
        self.steps = 0

    # ========================================
    # Main Execution Loop
    # ========================================

    def execute(self, max_instructions: int) -> int:
        """
        Execute up to max_instructions instructions.

        Execution stops early when the CPU halts or the on_instruction hook
        returns False.

        Returns:
            Number of instructions executed

        Raises:
            EmulatorFault: If an instruction cannot be executed
        """
        executed = 0
        while executed < max_instructions and not self.halted:
            if self.on_instruction:
                if not self.on_instruction(self.pc, self.memory[self.pc]):
                    break
            self.step()
            executed += 1
        return executed

    def step(self) -> None:
        """
        Execute exactly one instruction, bypassing the instruction hook.

        Raises:
            EmulatorFault: If the instruction cannot be executed
        """
        if self.halted:
            return

        state = self.state
        pc = state.pc
        state.ri = word = self.memory[pc]
        argument = word & ADDRESS_MASK
        next_pc = pc + 1

        match instruction_class(word):
            case InstructionClass.NOP:
                pass
            case InstructionClass.LDA:
                self._guard_address(argument)
                state.a = self.memory[argument]
            case InstructionClass.STA:
                self._guard_address(argument)
                self.memory[argument] = state.a
            case InstructionClass.JMP:
                self._guard_address(argument)
                state.r = (pc + 1) & WORD_MASK
                next_pc = argument
            case InstructionClass.JNZ:
                self._guard_address(argument)
                if state.a != 0:
                    state.r = (pc + 1) & WORD_MASK
                    next_pc = argument
            case InstructionClass.RET:
                self._guard_address(state.r)
                next_pc = state.r
                state.r = (pc + 1) & WORD_MASK
            case InstructionClass.ARIT:
                self._arit(argument)
            case InstructionClass.HLT:
                self.halted = True
                self.steps += 1
                logger.debug(f"HLT at 0x{pc:03x}")
                return
            case _:
                raise EmulatorFault("bad instruction", pc, word)

        self.steps += 1
        if next_pc >= self.memory_size:
            state.pc = 0
            raise EmulatorFault("program counter looped around to 0", pc, word)
        state.pc = next_pc

    # ========================================
    # ARIT
    # ========================================

    def _arit(self, argument: int) -> None:
        state = self.state
        operation = argument >> ARIT_OPERATION_SHIFT & 0b111
        destination = REGISTER_FIELDS.get(argument >> ARIT_DESTINATION_SHIFT & 0b111)
        if destination is None:
            self._fault_register("destination", argument >> ARIT_DESTINATION_SHIFT & 0b111)
        operand1 = REGISTER_FIELDS.get(argument >> ARIT_OPERAND1_SHIFT & 0b111)
        if operand1 is None:
            self._fault_register("op1", argument >> ARIT_OPERAND1_SHIFT & 0b111)

        op1 = getattr(state, operand1)
        if argument & SECOND_OPERAND_SELECT:
            op2 = getattr(state, REGISTER_FIELDS[argument & 0b011])
        else:
            op2 = 0

        match operation:
            case AritOperation.SET0:
                result = 0
            case AritOperation.SETF:
                result = WORD_MASK
            case AritOperation.NOT:
                result = ~op1 & WORD_MASK
            case AritOperation.AND:
                result = op1 & op2
            case AritOperation.OR:
                result = op1 | op2
            case AritOperation.XOR:
                result = op1 ^ op2
            case AritOperation.ADD:
                result = (op1 + op2) & WORD_MASK
            case _:
                result = (op1 - op2) & WORD_MASK

        setattr(state, destination, result)

        if operation == AritOperation.ADD:
            self._set_flag(StatusFlag.OV, op1 + op2 > WORD_MASK)
        elif operation == AritOperation.SUB:
            self._set_flag(StatusFlag.UN, op2 > op1)

        self._set_flag(StatusFlag.LE, op1 < op2)
        self._set_flag(StatusFlag.EQ, op1 == op2)
        self._set_flag(StatusFlag.GR, op1 > op2)

    # ========================================
    # Faults
    # ========================================

    def _guard_address(self, address: int) -> None:
        if address >= self.memory_size:
            raise EmulatorFault(
                f"memory access out of bounds 0x{address:04x}",
                self.state.pc, self.state.ri,
            )

    def _fault_register(self, field: str, code: int) -> NoReturn:
        raise EmulatorFault(
            f"invalid arit register {field} code {code}",
            self.state.pc, self.state.ri,
        )

    def __repr__(self) -> str:
        s = self.state
        return (
            f"P16CPU(pc=0x{s.pc:03x}, a=0x{s.a:04x}, b=0x{s.b:04x}, "
            f"c=0x{s.c:04x}, d=0x{s.d:04x}, r=0x{s.r:04x}, psw=0x{s.psw:04x})"
        )
