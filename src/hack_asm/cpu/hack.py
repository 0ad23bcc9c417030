"""
Hack Instruction Set Definition
===============================

This module defines the Hack instruction formats, control-bit flags,
registers and mnemonic tables. The Hack computer is a 16-bit machine with
two instruction formats and a single ALU.

Instruction Formats
-------------------
Every instruction is one 16-bit word, most significant bit first.

1. **Address instruction** (``@value``)

   ```
   bit  15    14..0
        0     value (0..32767)
   ```

   Loads a 15-bit constant into the A register.

2. **Compute instruction** (``dest=comp;jump``)

   ```
   bit  15 14 13   12..6        5..3    2..0
        1  1  1    a zx nx zy   d d d   j j j
                   ny f  no
   ```

   The seven operation bits drive the ALU: ``a`` selects M instead of A as
   the second input, ``zx/nx`` zero and negate the D input, ``zy/ny`` zero
   and negate the A/M input, ``f`` selects add (set) or and (clear), ``no``
   negates the output.

Registers
---------
- D: data register, always the ALU "x" input
- A: address register, the ALU "y" input when ``a`` is clear
- M: memory word at address A, the ALU "y" input when ``a`` is set
"""

from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import Union


# =============================================================================
# Word Layout
# =============================================================================

WORD_BITS = 16
COMPUTE_PREFIX = 0xE000      # 111 in the top three bits
OPERATION_SHIFT = 6
DESTINATION_SHIFT = 3
JUMP_SHIFT = 0
MAX_LITERAL = 0x7FFF         # 15-bit address instruction payload


# =============================================================================
# Control Bit Flags
# =============================================================================

class DestinationFlags(IntFlag):
    """Where the ALU output is stored."""
    NONE = 0
    M = 0b001
    D = 0b010
    A = 0b100


class JumpFlags(IntFlag):
    """Jump condition bits, tested against the ALU output."""
    NONE = 0
    GT = 0b001
    EQ = 0b010
    LT = 0b100


class OperationFlags(IntFlag):
    """The seven ALU control bits of a compute instruction."""
    NONE = 0
    NO = 1 << 0
    F = 1 << 1
    NY = 1 << 2
    ZY = 1 << 3
    NX = 1 << 4
    ZX = 1 << 5
    A = 1 << 6


# =============================================================================
# Operations and Operands
# =============================================================================

class Operation(Enum):
    """Operator symbols of the compute expression grammar."""
    ADD = "+"
    SUBTRACT = "-"
    NOT = "!"
    AND = "&"
    OR = "|"

    def __str__(self) -> str:
        return self.value


OPERATION_SYMBOLS: dict[str, Operation] = {op.value: op for op in Operation}

UNARY_OPERATIONS = frozenset({Operation.NOT, Operation.SUBTRACT})
BINARY_OPERATIONS = frozenset({
    Operation.ADD, Operation.SUBTRACT, Operation.AND, Operation.OR,
})


class Register(Enum):
    D = "D"
    A = "A"
    M = "M"

    def __str__(self) -> str:
        return self.value


# An operand is a register or one of the boolean constants 0 and 1
Operand = Union[Register, int]

BOOLEAN_CONSTANTS = (0, 1)


def is_constant(operand: Operand) -> bool:
    """Return True if the operand is a boolean constant rather than a register."""
    return not isinstance(operand, Register)


def uses_a_bank(operand: Operand) -> bool:
    """Return True if the operand is fed through the A/M ALU input."""
    return operand is Register.A or operand is Register.M


# =============================================================================
# Operation Descriptions
# =============================================================================
# The parser records what it recognised in one of these shapes; the
# operation encoder turns it into OperationFlags.

@dataclass(frozen=True)
class ConstantOperation:
    """A bare operand: ``0``, ``1``, ``D``, ``A`` or ``M``."""
    operand: Operand

    def __str__(self) -> str:
        return str(self.operand)


@dataclass(frozen=True)
class UnaryOperation:
    """A prefix operator applied to one operand: ``-D``, ``!M``."""
    op: Operation
    operand: Operand

    def __str__(self) -> str:
        return f"{self.op}{self.operand}"


@dataclass(frozen=True)
class BinaryOperation:
    """An infix operator between two operands: ``D+A``, ``M-1``."""
    op: Operation
    first: Operand
    second: Operand

    def __str__(self) -> str:
        return f"{self.first}{self.op}{self.second}"


OperationDescription = Union[ConstantOperation, UnaryOperation, BinaryOperation]


# =============================================================================
# Mnemonic Tables
# =============================================================================

DESTINATION_MNEMONICS: dict[str, DestinationFlags] = {
    "M": DestinationFlags.M,
    "D": DestinationFlags.D,
    "MD": DestinationFlags.M | DestinationFlags.D,
    "A": DestinationFlags.A,
    "AM": DestinationFlags.A | DestinationFlags.M,
    "AD": DestinationFlags.A | DestinationFlags.D,
    "AMD": DestinationFlags.A | DestinationFlags.M | DestinationFlags.D,
}

JUMP_MNEMONICS: dict[str, JumpFlags] = {
    "JGT": JumpFlags.GT,
    "JEQ": JumpFlags.EQ,
    "JGE": JumpFlags.EQ | JumpFlags.GT,
    "JLT": JumpFlags.LT,
    "JNE": JumpFlags.LT | JumpFlags.GT,
    "JLE": JumpFlags.LT | JumpFlags.EQ,
    "JMP": JumpFlags.LT | JumpFlags.EQ | JumpFlags.GT,
}

# Reverse lookups for the disassembler
DESTINATION_NAMES: dict[int, str] = {int(v): k for k, v in DESTINATION_MNEMONICS.items()}
JUMP_NAMES: dict[int, str] = {int(v): k for k, v in JUMP_MNEMONICS.items()}


# =============================================================================
# Reserved Symbols
# =============================================================================

# R0..R15 name the sixteen low memory words
REGISTER_SYMBOLS: dict[str, int] = {f"R{i}": i for i in range(16)}

# Aliases defined by the standard Hack platform; enabled through
# AssemblerConfig.platform_symbols
PLATFORM_SYMBOLS: dict[str, int] = {
    "SP": 0,
    "LCL": 1,
    "ARG": 2,
    "THIS": 3,
    "THAT": 4,
    "SCREEN": 0x4000,
    "KBD": 0x6000,
}

FIRST_FREE_ADDRESS = 16
