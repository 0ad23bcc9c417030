"""
Unit Tests for the Disassembler Module
======================================

Tests for the Hack machine code disassembler.

Test coverage includes:
- Address and compute instruction decoding
- Canonical operation spelling
- Round trip from source through machine code and back to flags
- Symbol annotations and listing format
- Edge cases (bad prefix, out of range words, malformed .hack lines)
"""

import pytest
from hack_asm.assembler import Assembler
from hack_asm.assembler.parser import AInstruction, CInstruction, parse_source
from hack_asm.cpu import DestinationFlags, JumpFlags, OperationFlags
from hack_asm.disassembler import (
    DisassembledInstruction,
    HackDisassembler,
    parse_hack_text,
)


ROUND_TRIP_SOURCE = """\
@21
D=A
AM=M-1;JNE
0;JMP
D;JGT
M=!D
AMD=D|M;JLE
MD=D+1
A=-A
D=D-M;JEQ
M=M-D
D=D&A;JGE
D=1;JLT
"""


# =============================================================================
# Decoding Tests
# =============================================================================

class TestDecode:
    """Tests for single-word decoding."""

    def setup_method(self):
        """Create disassembler instance for each test."""
        self.disasm = HackDisassembler()

    def test_address(self):
        assert self.disasm.decode(0b0000000000010101) == AInstruction(21)

    def test_largest_address(self):
        assert self.disasm.decode(0x7FFF) == AInstruction(0x7FFF)

    def test_compute(self):
        instr = self.disasm.decode(0b1110110000010000)
        assert instr == CInstruction(
            destination=DestinationFlags.D,
            operation=OperationFlags.ZX | OperationFlags.NX,
            jump=JumpFlags.NONE,
        )

    def test_bad_prefix(self):
        """Compute words must start with 111."""
        with pytest.raises(ValueError):
            self.disasm.decode(0b1010110000010000)

    @pytest.mark.parametrize("word", [-1, 0x10000])
    def test_out_of_range(self, word):
        with pytest.raises(ValueError):
            self.disasm.decode(word)


# =============================================================================
# Formatting Tests
# =============================================================================

class TestFormat:
    """Tests for assembly text rendering."""

    def setup_method(self):
        self.disasm = HackDisassembler()

    @pytest.mark.parametrize("word,text", [
        (0b0000000000000111, "@7"),
        (0b1110110000010000, "D=A"),
        (0b1111110010101101, "AM=M-1;JNE"),
        (0b1110101010000111, "0;JMP"),
        (0b1110001100000001, "D;JGT"),
        (0b1110000010010000, "D=D+A"),
        (0b1110111111001000, "M=1"),
    ])
    def test_text(self, word, text):
        assert self.disasm.disassemble_one(word).text == text

    def test_commutative_spelling(self):
        """A+D and D+A encode identically; D comes first when disassembled."""
        asm = Assembler()
        asm.assemble_string("D=A+D")
        assert self.disasm.disassemble(asm.get_code())[0].text == "D=D+A"

    def test_unknown_operation(self):
        """Operation bits no expression produces are shown raw."""
        word = 0xE000 | (0b0000001 << 6)
        assert self.disasm.disassemble_one(word).text == "comp?0b0000001"

    def test_listing_line(self):
        instr = self.disasm.disassemble_one(0b1110110000010000, index=3)
        assert str(instr) == "    3: 1110110000010000  D=A"

    def test_symbol_annotation(self):
        disasm = HackDisassembler(symbol_table={16: "i"})
        instr = disasm.disassemble_one(16)
        assert instr.comment == "i"
        assert str(instr).endswith("// i")

    def test_to_dict(self):
        instr = self.disasm.disassemble_one(0b1110110000010000, index=1)
        assert instr.to_dict() == {
            "index": 1,
            "word": "1110110000010000",
            "word_int": 0b1110110000010000,
            "kind": "C",
            "text": "D=A",
            "comment": "",
        }


# =============================================================================
# Program Tests
# =============================================================================

class TestDisassemble:
    """Tests over whole programs."""

    def setup_method(self):
        self.disasm = HackDisassembler()

    def test_round_trip_flags(self):
        """Decoding the encoded program recovers every instruction exactly."""
        asm = Assembler()
        result = asm.assemble_string(ROUND_TRIP_SOURCE)
        decoded = [d.instruction for d in self.disasm.disassemble(asm.get_code())]
        assert decoded == result.instructions

    def test_round_trip_text(self):
        """The disassembled text reassembles to the same machine code."""
        asm = Assembler()
        asm.assemble_string(ROUND_TRIP_SOURCE)
        code = asm.get_code()

        text = "\n".join(d.text for d in self.disasm.disassemble(code))
        again = Assembler()
        again.assemble_string(text)
        assert again.get_code() == code

    def test_from_hack_text(self):
        instructions = self.disasm.disassemble("0000000000000010\n1110110000010000\n")
        assert [i.text for i in instructions] == ["@2", "D=A"]
        assert [i.index for i in instructions] == [0, 1]

    def test_count(self):
        instructions = self.disasm.disassemble([1, 2, 3], count=2)
        assert len(instructions) == 2

    def test_empty(self):
        assert self.disasm.disassemble([]) == []

    def test_returns_disassembled_instructions(self):
        assert isinstance(self.disasm.disassemble([0])[0], DisassembledInstruction)

    def test_every_legal_operation_has_text(self):
        """Every expression the parser accepts has a reverse entry."""
        source = "\n".join([
            "0", "1", "D", "A", "M", "!D", "!A", "!M", "-D", "-A", "-M",
            "D+1", "A+1", "M+1", "D-1", "A-1", "M-1", "D+A", "D+M",
            "D-A", "D-M", "A-D", "M-D", "D&A", "D&M", "D|A", "D|M",
        ])
        program = parse_source(source)
        for instruction in program.instructions:
            assert not self.disasm.format(instruction).startswith("comp?")


class TestParseHackText:
    """Tests for .hack text parsing."""

    def test_blank_lines_skipped(self):
        assert parse_hack_text("\n0000000000000001\n\n") == [1]

    def test_crlf(self):
        assert parse_hack_text("0000000000000001\r\n0000000000000010\r\n") == [1, 2]

    @pytest.mark.parametrize("line", ["101", "00000000000000012", "000000000000000x"])
    def test_malformed(self, line):
        with pytest.raises(ValueError) as exc_info:
            parse_hack_text(f"0000000000000000\n{line}\n")
        assert "line 2" in str(exc_info.value)
