"""
Hack Disassembler Module
========================

Turns ``.hack`` machine code back into Hack assembly, for inspecting
assembler output and checking that encoding round-trips.

Usage:
    from hack_asm.disassembler import HackDisassembler

    disasm = HackDisassembler()
    for instr in disasm.disassemble(hack_text):
        print(instr.text)
"""

from .hack import HackDisassembler, DisassembledInstruction, parse_hack_text

__all__ = [
    "HackDisassembler",
    "DisassembledInstruction",
    "parse_hack_text",
]
