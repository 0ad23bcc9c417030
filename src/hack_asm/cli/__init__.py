"""
hack-asm Command-Line Interface
===============================

This package provides command-line tools for the Hack toolchain:

- **hackasm**: Hack assembler
- **hackdis**: Hack disassembler

Each tool is implemented as a Click-based CLI application with
help text and consistent exit codes.
"""

__all__ = ["hackasm", "hackdis"]
