"""
hack-asm - Assembler Toolchain for the Hack Computer
====================================================

This package assembles programs for the Hack computer, a 16-bit machine with
a single ALU and two instruction formats, into ``.hack`` machine code text
(one line of 16 ``0``/``1`` characters per instruction).

Main Components
---------------
- **assembler**: Hack assembler (hackasm)
    Converts assembly source files (.asm) into machine code text (.hack)

- **disassembler**: Hack disassembler (hackdis)
    Converts .hack files back into readable assembly

- **cpu**: Instruction set definitions shared by both

Quick Start
-----------
Assemble a program:
    >>> from hack_asm.assembler import Assembler
    >>> asm = Assembler()
    >>> asm.assemble_file("Max.asm")
    >>> asm.write_hack("Max.hack")

Or use the command-line tools:
    $ hackasm Max.asm -o Max.hack
    $ hackdis Max.hack
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from hack_asm.assembler import Assembler
from hack_asm.config import AssemblerConfig
from hack_asm.disassembler import HackDisassembler
from hack_asm.errors import (
    HackError,
    AssemblerError,
    AssemblySyntaxError,
    FatalAssemblyError,
    LexicalError,
    InvalidMnemonicError,
    InvalidOperatorError,
    InvalidOperandError,
    DuplicateSymbolError,
    InternalAssemblerError,
    AssemblyWarning,
    ErrorKind,
    SourceLocation,
)

__all__ = [
    "__version__",
    "Assembler",
    "AssemblerConfig",
    "HackDisassembler",
    "HackError",
    "AssemblerError",
    "AssemblySyntaxError",
    "FatalAssemblyError",
    "LexicalError",
    "InvalidMnemonicError",
    "InvalidOperatorError",
    "InvalidOperandError",
    "DuplicateSymbolError",
    "InternalAssemblerError",
    "AssemblyWarning",
    "ErrorKind",
    "SourceLocation",
]
