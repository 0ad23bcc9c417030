"""
Hack Disassembler
=================

Decodes Hack machine code back into instructions and assembly text. This is
the inverse of the assembler's binary encoder.

Usage:
    disasm = HackDisassembler()

    # From .hack text
    for instr in disasm.disassemble(Path("Max.hack").read_text()):
        print(instr)

    # Single word
    instruction = disasm.decode(0b1110110000010000)   # CInstruction for D=A
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Union

from hack_asm.cpu import (
    BINARY_OPERATIONS,
    BOOLEAN_CONSTANTS,
    COMPUTE_PREFIX,
    DESTINATION_NAMES,
    DESTINATION_SHIFT,
    JUMP_NAMES,
    JUMP_SHIFT,
    OPERATION_SHIFT,
    UNARY_OPERATIONS,
    WORD_BITS,
    BinaryOperation,
    ConstantOperation,
    DestinationFlags,
    JumpFlags,
    OperationDescription,
    OperationFlags,
    Register,
    UnaryOperation,
)
from hack_asm.errors import InvalidOperandError
from hack_asm.assembler.encoder import flags_for_operation
from hack_asm.assembler.parser import AInstruction, CInstruction, Instruction


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DisassembledInstruction:
    """
    Represents a single disassembled Hack instruction.

    Attributes:
        index: Position in ROM (instruction index)
        word: The 16-bit machine word
        instruction: Decoded AInstruction or CInstruction
        text: Assembly rendering, e.g. ``@21`` or ``AM=M-1;JNE``
        comment: Optional annotation (symbol name for known addresses)
    """
    index: int
    word: int
    instruction: Instruction
    text: str
    comment: str = ""

    def __str__(self) -> str:
        """Format as listing line: INDEX: WORD  TEXT"""
        line = f"{self.index:5d}: {self.word:0{WORD_BITS}b}  {self.text}"
        if self.comment:
            return f"{line:<40} // {self.comment}"
        return line

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "index": self.index,
            "word": f"{self.word:0{WORD_BITS}b}",
            "word_int": self.word,
            "kind": "A" if isinstance(self.instruction, AInstruction) else "C",
            "text": self.text,
            "comment": self.comment,
        }


# =============================================================================
# Hack Disassembler
# =============================================================================

class HackDisassembler:
    """
    Disassembler for Hack machine code.

    The operation reverse table is built by running every expression the
    assembler accepts through the operation encoder, so both directions
    share one source of truth. When two spellings encode identically
    (``D+A`` and ``A+D``) the D-first spelling is kept.

    Attributes:
        _operation_table: Maps operation bits to canonical expression text
        _symbol_table: Optional address -> name map for annotations
    """

    def __init__(self, symbol_table: Optional[Dict[int, str]] = None):
        """
        Args:
            symbol_table: Optional dict mapping addresses to symbol names.
                          Used to annotate address instructions.
        """
        self._symbol_table = symbol_table or {}
        self._operation_table = self._build_operation_table()

    @staticmethod
    def _candidate_operations() -> List[OperationDescription]:
        registers = [Register.D, Register.A, Register.M]
        operands = registers + list(BOOLEAN_CONSTANTS)

        candidates: List[OperationDescription] = [ConstantOperation(o) for o in operands]
        for op in sorted(UNARY_OPERATIONS, key=lambda o: o.value):
            candidates.extend(UnaryOperation(op, r) for r in registers)
        for op in sorted(BINARY_OPERATIONS, key=lambda o: o.value):
            for first in registers:
                candidates.extend(BinaryOperation(op, first, second) for second in operands)
        return candidates

    def _build_operation_table(self) -> Dict[int, str]:
        table: Dict[int, str] = {}
        for description in self._candidate_operations():
            try:
                flags = flags_for_operation(description)
            except InvalidOperandError:
                continue
            table.setdefault(int(flags), str(description))
        return table

    # =========================================================================
    # Decoding
    # =========================================================================

    def decode(self, word: int) -> Instruction:
        """
        Decode one machine word.

        Raises:
            ValueError: The word is out of range or has an invalid prefix
        """
        if not 0 <= word <= 0xFFFF:
            raise ValueError(f"word {word} does not fit in {WORD_BITS} bits")

        if not word & 0x8000:
            return AInstruction(word)

        if word & COMPUTE_PREFIX != COMPUTE_PREFIX:
            raise ValueError(f"invalid compute instruction prefix in {word:0{WORD_BITS}b}")

        return CInstruction(
            destination=DestinationFlags((word >> DESTINATION_SHIFT) & 0b111),
            operation=OperationFlags((word >> OPERATION_SHIFT) & 0x7F),
            jump=JumpFlags((word >> JUMP_SHIFT) & 0b111),
        )

    def format(self, instruction: Instruction) -> str:
        """Render an instruction as Hack assembly text."""
        if isinstance(instruction, AInstruction):
            return f"@{instruction.value}"

        operation = int(instruction.operation)
        text = self._operation_table.get(operation, f"comp?0b{operation:07b}")

        destination = int(instruction.destination)
        if destination:
            text = f"{DESTINATION_NAMES[destination]}={text}"

        jump = int(instruction.jump)
        if jump:
            text = f"{text};{JUMP_NAMES[jump]}"

        return text

    def disassemble_one(self, word: int, index: int = 0) -> DisassembledInstruction:
        """Decode and format a single word."""
        instruction = self.decode(word)
        comment = ""
        if isinstance(instruction, AInstruction):
            comment = self._symbol_table.get(instruction.value, "")
        return DisassembledInstruction(
            index=index,
            word=word,
            instruction=instruction,
            text=self.format(instruction),
            comment=comment,
        )

    def disassemble(
        self,
        data: Union[str, Iterable[int]],
        count: Optional[int] = None,
    ) -> List[DisassembledInstruction]:
        """
        Disassemble a program.

        Args:
            data: ``.hack`` file text, or an iterable of machine words
            count: Maximum number of instructions (None for all)

        Returns:
            DisassembledInstruction per word, in order

        Raises:
            ValueError: Malformed text line or undecodable word
        """
        words = parse_hack_text(data) if isinstance(data, str) else list(data)
        if count is not None:
            words = words[:count]
        return [self.disassemble_one(word, index) for index, word in enumerate(words)]


def parse_hack_text(text: str) -> List[int]:
    """
    Parse ``.hack`` text into machine words.

    Blank lines are skipped; every other line must hold exactly 16
    ``0``/``1`` characters.

    Raises:
        ValueError: A line is not a 16-bit binary word
    """
    words = []
    for number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        if len(line) != WORD_BITS or set(line) - {"0", "1"}:
            raise ValueError(f"line {number}: expected {WORD_BITS} binary digits, found {line!r}")
        words.append(int(line, 2))
    return words
