"""
P16 Instruction Encoder
=======================

Turns one normalized instruction statement into its 16-bit word.

Operand Shapes
--------------
- inherent:  nop, ret, hlt
- target:    lda|sta|jmp|jnz <address> | :<label>
- arit:      arit <op>, <dst>, <r1>, <r2>
- calc:      calc <dst> = <expression>

CALC Expansion
--------------
CALC is a fixed macro: it is rewritten into the equivalent ARIT statement
and that statement is encoded.

| CALC form         | ARIT statement           |
|-------------------|--------------------------|
| calc d = ~r       | arit not, d, r, 0        |
| calc d = 0        | arit 0, d, a, 0          |
| calc d = f        | arit f, d, a, 0          |
| calc d = r        | arit add, d, r, 0        |
| calc d = r & s    | arit and, d, r, s        |
| calc d = r \\| s   | arit or, d, r, s         |
| calc d = r ^ s    | arit xor, d, r, s        |
| calc d = r + s    | arit add, d, r, s        |
| calc d = r - s    | arit sub, d, r, s        |

Label targets are not resolved here: the encoder hands any operand that
starts with ':' to the resolver callback it was built with, which returns
the address to encode (or a placeholder while the label is pending).
"""

from typing import Callable, Optional

from p16_sdk.assembler.lexer import parse_number, tokenize
from p16_sdk.cpu import (
    ARIT_DESTINATION_SHIFT,
    ARIT_OPERAND1_SHIFT,
    ARIT_OPERATION_SHIFT,
    ARIT_OPERATIONS,
    CALC_OPERATORS,
    MAX_ADDRESS,
    OperandKind,
    REGISTER_CODES,
    SECOND_OPERAND_CODES,
    SPECIAL_REGISTERS,
    get_instruction_info,
)
from p16_sdk.errors import AddressError, AssemblySyntaxError


LABEL_PREFIX = ":"

# Resolves a ":label" operand to the address to encode
TargetResolver = Callable[[str], int]


# =============================================================================
# Field Encoders
# =============================================================================

def register_code(name: str, addressable_only: bool = False) -> int:
    """
    Encode a register name as its 3-bit code.

    Args:
        name: Register name (a, b, c, d, r, psw)
        addressable_only: Reject R and PSW

    Raises:
        AssemblySyntaxError: If the register is unknown or not allowed here
    """
    name = name.strip().lower()
    if addressable_only and name in SPECIAL_REGISTERS:
        raise AssemblySyntaxError(f"the register '{name}' cannot be addressed here")
    try:
        return REGISTER_CODES[name]
    except KeyError:
        raise AssemblySyntaxError(f"invalid register '{name}'") from None


def operation_code(name: str) -> int:
    """Encode an ARIT operation name as its 3-bit code."""
    name = name.strip().lower()
    try:
        return ARIT_OPERATIONS[name]
    except KeyError:
        raise AssemblySyntaxError(
            f"invalid arit operation '{name}'",
            hint=f"valid operations: {', '.join(ARIT_OPERATIONS)}",
        ) from None


def second_operand_code(name: str) -> int:
    """
    Encode the second ARIT operand.

    This field has its own code space and cannot name R or PSW.
    """
    name = name.strip().lower()
    try:
        return SECOND_OPERAND_CODES[name]
    except KeyError:
        raise AssemblySyntaxError(
            f"invalid arit second operand '{name}'",
            hint="the second operand must be 0, zero, a, b, c or d",
        ) from None


def parse_address(token: str) -> int:
    """
    Convert a direct address operand.

    Raises:
        AddressError: If the operand is not a number in 0..0xFFF
    """
    try:
        address = parse_number(token)
    except AssemblySyntaxError:
        raise AddressError(token, reason="not a number") from None
    if not 0 <= address <= MAX_ADDRESS:
        raise AddressError(token)
    return address


# =============================================================================
# ARIT and CALC
# =============================================================================

def encode_arit(operands: str) -> int:
    """
    Encode the operand text of an ARIT statement.

    Args:
        operands: Everything after the mnemonic, e.g. "add, a, b, c"
    """
    fields = [field.strip() for field in operands.split(",")]
    if len(fields) != 4 or not all(fields):
        raise AssemblySyntaxError(
            f"arit expects 4 operands, got '{operands.strip()}'",
            hint="arit <op>, <dst>, <r1>, <r2>",
        )
    operation, destination, reg1, reg2 = fields

    return (
        0x6000
        | operation_code(operation) << ARIT_OPERATION_SHIFT
        | register_code(destination) << ARIT_DESTINATION_SHIFT
        | register_code(reg1) << ARIT_OPERAND1_SHIFT
        | second_operand_code(reg2)
    )


def expand_calc(operands: str) -> str:
    """
    Rewrite the operand text of a CALC statement as an ARIT statement.

    Args:
        operands: Everything after the mnemonic, e.g. "a = b + c"

    Returns:
        The equivalent statement, e.g. "arit add, a, b, c"
    """
    args = tokenize(operands)
    if len(args) < 2 or args[1] != "=":
        raise AssemblySyntaxError(
            "calc instruction missing equals sign",
            hint="write spaces around '=', e.g. calc a = b + c",
        )

    destination = args[0]
    rhs = args[2:]
    reg1 = "a"
    reg2 = "0"

    if len(rhs) == 1:
        value = rhs[0]
        if value.startswith("~"):
            operation = "not"
            reg1 = value[1:]
        elif value.startswith("0"):
            operation = "0"
        elif value.startswith("f"):
            operation = "f"
        else:
            # d = r is d = r + 0
            operation = "add"
            reg1 = value
    elif len(rhs) == 3:
        reg1, operator, reg2 = rhs
        operation = CALC_OPERATORS.get(operator)
        if operation is None:
            raise AssemblySyntaxError(
                f"invalid calc operation '{operator}'",
                hint=f"valid operators: {' '.join(CALC_OPERATORS)}",
            )
    else:
        raise AssemblySyntaxError(
            f"malformed calc expression '{' '.join(rhs)}'",
            hint="calc <dst> = <r> [<op> <s>]",
        )

    return f"arit {operation}, {destination}, {reg1}, {reg2}"


def encode_calc(operands: str) -> int:
    """Encode a CALC statement through its ARIT expansion."""
    arit = expand_calc(operands)
    return encode_arit(arit[len("arit"):])


# =============================================================================
# Instruction Encoder
# =============================================================================

class InstructionEncoder:
    """
    Encodes instruction statements to words.

    Attributes:
        resolve_label: Callback used for ':label' operands. When None,
                       label operands are rejected.
    """

    def __init__(self, resolve_label: Optional[TargetResolver] = None):
        self.resolve_label = resolve_label

    def resolve_target(self, token: str) -> int:
        """
        Convert a target operand into the 12-bit address to encode.
        """
        if token.startswith(LABEL_PREFIX):
            name = token[len(LABEL_PREFIX):]
            if not name:
                raise AssemblySyntaxError("missing label name after ':'")
            if self.resolve_label is None:
                raise AssemblySyntaxError(f"label reference '{token}' not allowed here")
            return self.resolve_label(name)
        return parse_address(token)

    def encode(self, statement: str) -> int:
        """
        Encode one normalized instruction statement.

        Raises:
            AssemblySyntaxError: On an unknown mnemonic or malformed operands
        """
        parts = statement.split(None, 1)
        if not parts:
            raise AssemblySyntaxError("empty statement")
        mnemonic = parts[0]
        operands = parts[1] if len(parts) > 1 else ""

        info = get_instruction_info(mnemonic)
        if info is None:
            raise AssemblySyntaxError(f"unknown mnemonic '{mnemonic}'")

        kind = info.operand_kind
        if kind is OperandKind.NONE:
            if operands:
                raise AssemblySyntaxError(f"'{mnemonic}' takes no operand")
            return info.opcode

        if kind is OperandKind.TARGET:
            args = tokenize(operands)
            if not args:
                raise AssemblySyntaxError(f"'{mnemonic}' is missing its target operand")
            if len(args) > 1:
                raise AssemblySyntaxError(f"'{mnemonic}' takes a single target operand")
            return info.opcode | self.resolve_target(args[0])

        if kind is OperandKind.ARIT:
            return encode_arit(operands)

        return encode_calc(operands)
