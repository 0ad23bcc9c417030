"""
Hack Assembler Package
======================

Assembles Hack assembly source into ``.hack`` machine code text.

Modules:
    lexer:     Tokenizer producing a lazy token stream
    parser:    Backtracking parser building instructions and symbol tables
    encoder:   ALU control-bit encoder for compute expressions
    resolver:  Second pass assigning label and variable addresses
    codegen:   Binary text and symbol file output
    assembler: The Assembler class tying the stages together

Usage:
    from hack_asm.assembler import Assembler

    asm = Assembler()
    asm.assemble_file("Max.asm")
    asm.write_hack("Max.hack")
"""

from hack_asm.assembler.assembler import Assembler
from hack_asm.assembler.lexer import Lexer, Token, TokenType
from hack_asm.assembler.parser import (
    AInstruction,
    CInstruction,
    Instruction,
    Parser,
    Program,
    TokenCursor,
    parse_source,
)
from hack_asm.assembler.encoder import flags_for_operation
from hack_asm.assembler.resolver import AssemblyResult, resolve_symbols
from hack_asm.assembler.codegen import (
    encode_instruction,
    render_hack,
    to_binary_text,
)

__all__ = [
    "Assembler",
    "Lexer",
    "Token",
    "TokenType",
    "AInstruction",
    "CInstruction",
    "Instruction",
    "Parser",
    "Program",
    "TokenCursor",
    "parse_source",
    "flags_for_operation",
    "AssemblyResult",
    "resolve_symbols",
    "encode_instruction",
    "render_hack",
    "to_binary_text",
]
