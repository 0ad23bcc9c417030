"""
Hack CPU Package
================

Architecture definitions shared by the assembler and the disassembler, so
both sides of the encoding use the same flag values and mnemonic tables.

Usage:
    from hack_asm.cpu import (
        DestinationFlags,
        OperationFlags,
        JumpFlags,
        DESTINATION_MNEMONICS,
    )
"""

from hack_asm.cpu.hack import (
    # Word layout
    WORD_BITS,
    COMPUTE_PREFIX,
    OPERATION_SHIFT,
    DESTINATION_SHIFT,
    JUMP_SHIFT,
    MAX_LITERAL,
    # Flags
    DestinationFlags,
    JumpFlags,
    OperationFlags,
    # Operations and operands
    Operation,
    OPERATION_SYMBOLS,
    UNARY_OPERATIONS,
    BINARY_OPERATIONS,
    Register,
    Operand,
    BOOLEAN_CONSTANTS,
    is_constant,
    uses_a_bank,
    ConstantOperation,
    UnaryOperation,
    BinaryOperation,
    OperationDescription,
    # Mnemonic tables
    DESTINATION_MNEMONICS,
    JUMP_MNEMONICS,
    DESTINATION_NAMES,
    JUMP_NAMES,
    # Symbols
    REGISTER_SYMBOLS,
    PLATFORM_SYMBOLS,
    FIRST_FREE_ADDRESS,
)

__all__ = [
    "WORD_BITS",
    "COMPUTE_PREFIX",
    "OPERATION_SHIFT",
    "DESTINATION_SHIFT",
    "JUMP_SHIFT",
    "MAX_LITERAL",
    "DestinationFlags",
    "JumpFlags",
    "OperationFlags",
    "Operation",
    "OPERATION_SYMBOLS",
    "UNARY_OPERATIONS",
    "BINARY_OPERATIONS",
    "Register",
    "Operand",
    "BOOLEAN_CONSTANTS",
    "is_constant",
    "uses_a_bank",
    "ConstantOperation",
    "UnaryOperation",
    "BinaryOperation",
    "OperationDescription",
    "DESTINATION_MNEMONICS",
    "JUMP_MNEMONICS",
    "DESTINATION_NAMES",
    "JUMP_NAMES",
    "REGISTER_SYMBOLS",
    "PLATFORM_SYMBOLS",
    "FIRST_FREE_ADDRESS",
]
