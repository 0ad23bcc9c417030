"""
Hack Binary Encoder
===================

Serialises a resolved instruction list into Hack machine code text, and
writes the accompanying symbol file.

Output Format
-------------
One line per instruction, 16 ASCII ``0``/``1`` characters, most
significant bit first, each followed by ``\\n``:

```
0000000000000010      @2
1110110000010000      D=A
```

Symbol File Format
------------------
```
// Symbol table
// Generated by hackasm
LOOP 4
i 16
```
"""

from pathlib import Path
from typing import Iterable
import logging

from hack_asm.cpu import (
    COMPUTE_PREFIX,
    DESTINATION_SHIFT,
    JUMP_SHIFT,
    MAX_LITERAL,
    OPERATION_SHIFT,
    WORD_BITS,
)
from hack_asm.errors import InternalAssemblerError
from hack_asm.assembler.parser import AInstruction, CInstruction, Instruction
from hack_asm.assembler.resolver import AssemblyResult

logger = logging.getLogger(__name__)


def encode_instruction(instruction: Instruction) -> int:
    """
    Encode one resolved instruction as a 16-bit word.

    Raises:
        InternalAssemblerError: An address instruction still holds a
                                placeholder, or a value that needs bit 15
    """
    if isinstance(instruction, AInstruction):
        if not instruction.is_resolved:
            raise InternalAssemblerError(
                f"unresolved placeholder {instruction.value} reached the encoder",
                instruction.location,
            )
        if instruction.value > MAX_LITERAL:
            raise InternalAssemblerError(
                f"address value {instruction.value} does not fit in 15 bits",
                instruction.location,
            )
        return instruction.value

    if isinstance(instruction, CInstruction):
        return (
            COMPUTE_PREFIX
            | (int(instruction.operation) << OPERATION_SHIFT)
            | (int(instruction.destination) << DESTINATION_SHIFT)
            | (int(instruction.jump) << JUMP_SHIFT)
        )

    raise InternalAssemblerError(f"unknown instruction {instruction!r}")


def to_binary_text(word: int) -> str:
    """Render a word as 16 '0'/'1' characters, most significant bit first."""
    return format(word & 0xFFFF, f"0{WORD_BITS}b")


def binary_lines(instructions: Iterable[Instruction]) -> list[str]:
    """Encode every instruction as a binary text line (without line breaks)."""
    return [to_binary_text(encode_instruction(i)) for i in instructions]


def render_hack(instructions: Iterable[Instruction]) -> str:
    """Return the complete ``.hack`` file contents."""
    return "".join(f"{line}\n" for line in binary_lines(instructions))


def write_hack(instructions: Iterable[Instruction], filepath: str | Path) -> None:
    """
    Write a ``.hack`` file.

    The whole output is encoded before the file is opened, so an encoding
    failure leaves no partial file behind.
    """
    text = render_hack(instructions)
    Path(filepath).write_bytes(text.encode("utf-8"))
    logger.info("wrote %d words to %s", text.count("\n"), filepath)


def render_symbols(result: AssemblyResult) -> str:
    """
    Return the symbol file contents.

    Labels come first in declaration order, then variables in allocation order.
    """
    lines = ["// Symbol table", "// Generated by hackasm"]
    for name, value in result.labels.items():
        lines.append(f"{name} {value}")
    for name, value in result.variables.items():
        lines.append(f"{name} {value}")
    return "\n".join(lines) + "\n"


def write_symbols(result: AssemblyResult, filepath: str | Path) -> None:
    """Write the symbol file."""
    Path(filepath).write_text(render_symbols(result), encoding="utf-8")
