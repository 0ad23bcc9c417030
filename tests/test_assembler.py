# =============================================================================
# test_assembler.py - End-to-End Assembler Tests
# =============================================================================
# Tests the complete pipeline: source -> tokens -> instructions -> resolved
# addresses -> .hack text, through the Assembler facade.
# =============================================================================

import pytest
from hack_asm.assembler import Assembler
from hack_asm.config import AssemblerConfig
from hack_asm.errors import (
    AssemblerError,
    DuplicateSymbolError,
    InvalidOperandError,
    LexicalError,
)


ADD_SOURCE = "@2\nD=A\n@3\nD=D+A\n@0\nM=D\n"

ADD_BINARY = [
    "0000000000000010",  # @2
    "1110110000010000",  # D=A
    "0000000000000011",  # @3
    "1110000010010000",  # D=D+A
    "0000000000000000",  # @0
    "1110001100001000",  # M=D
]

MAX_SOURCE = """\
// Computes R2 = max(R0, R1)
   @R0
   D=M              // D = first number
   @R1
   D=D-M            // D = first number - second number
   @OUTPUT_FIRST
   D;JGT            // if D>0 (first is greater) goto output_first
   @R1
   D=M              // D = second number
   @OUTPUT_D
   0;JMP            // goto output_d
(OUTPUT_FIRST)
   @R0
   D=M              // D = first number
(OUTPUT_D)
   @R2
   M=D              // M[2] = D (greatest number)
(INFINITE_LOOP)
   @INFINITE_LOOP
   0;JMP            // infinite loop
"""

MAX_BINARY = [
    "0000000000000000",
    "1111110000010000",
    "0000000000000001",
    "1111010011010000",
    "0000000000001010",
    "1110001100000001",
    "0000000000000001",
    "1111110000010000",
    "0000000000001100",
    "1110101010000111",
    "0000000000000000",
    "1111110000010000",
    "0000000000000010",
    "1110001100001000",
    "0000000000001110",
    "1110101010000111",
]

SUM_SOURCE = """\
// sum = 1 + 2 + ... + 100
    @i
    M=1
    @sum
    M=0
(LOOP)
    @i
    D=M
    @100
    D=D-A
    @END
    D;JGT
    @i
    D=M
    @sum
    M=D+M
    @i
    M=M+1
    @LOOP
    0;JMP
(END)
    @END
    0;JMP
"""


class TestEndToEnd:
    """Complete programs."""

    def test_add(self):
        """@2, D=A, @3, D=D+A, @0, M=D."""
        asm = Assembler()
        asm.assemble_string(ADD_SOURCE)
        assert asm.get_binary().splitlines() == ADD_BINARY
        assert asm.get_binary().endswith("\n")

    def test_add_words(self):
        asm = Assembler()
        asm.assemble_string(ADD_SOURCE)
        assert asm.get_code() == [int(line, 2) for line in ADD_BINARY]

    def test_forward_label(self):
        """LOOP resolves to instruction 2, not to a variable address."""
        asm = Assembler()
        asm.assemble_string("@LOOP\n0;JMP\n(LOOP)\n@0\nM=1\n")
        lines = asm.get_binary().splitlines()
        assert lines[0] == "0000000000000010"
        assert asm.get_symbols() == {"LOOP": 2}

    def test_max(self):
        asm = Assembler()
        asm.assemble_string(MAX_SOURCE, "Max.asm")
        assert asm.get_binary().splitlines() == MAX_BINARY
        assert asm.get_symbols() == {"OUTPUT_FIRST": 10, "OUTPUT_D": 12, "INFINITE_LOOP": 14}

    def test_sum_variables(self):
        asm = Assembler()
        result = asm.assemble_string(SUM_SOURCE)
        assert result.variables == {"i": 16, "sum": 17}
        assert result.labels == {"LOOP": 4, "END": 18}
        lines = asm.get_binary().splitlines()
        assert len(lines) == 20
        assert lines[0] == "0000000000010000"   # @i
        assert lines[2] == "0000000000010001"   # @sum
        assert lines[13] == "1111000010001000"  # M=D+M
        assert lines[15] == "1111110111001000"  # M=M+1

    def test_literal_overflow(self):
        """Large literals are masked, warned about and still assembled."""
        asm = Assembler()
        asm.assemble_string("@32768\n@65535\n@40000\n")
        assert asm.get_code() == [0, 0x7FFF, 40000 & 0x7FFF]
        assert len(asm.get_warnings()) == 3

    def test_smaller_literal_limit(self):
        """A lower literal limit masks and warns at that limit."""
        asm = Assembler(AssemblerConfig(max_literal=0x3FFF))
        asm.assemble_string("@20000\n")
        assert asm.get_code() == [20000 & 0x3FFF]
        assert "exceeds the maximum allowed 16383" in str(asm.get_warnings()[0])

    def test_literal_limit_cannot_reach_bit_15(self):
        with pytest.raises(ValueError):
            Assembler(AssemblerConfig(max_literal=0xFFFF))

    def test_code_matches_binary(self):
        """get_code() and get_binary() describe the same words."""
        asm = Assembler()
        asm.assemble_string(SUM_SOURCE)
        words = asm.get_code()
        assert asm.get_binary().splitlines() == [format(w, "016b") for w in words]

    def test_get_code_is_copy(self):
        asm = Assembler()
        asm.assemble_string(ADD_SOURCE)
        asm.get_code().clear()
        assert len(asm.get_code()) == 6

    def test_no_warnings(self):
        asm = Assembler()
        asm.assemble_string(ADD_SOURCE)
        assert asm.get_warnings() == []

    def test_repeatable(self):
        """Assembling the same source twice gives the same output."""
        asm = Assembler()
        asm.assemble_string(SUM_SOURCE)
        first = asm.get_binary()
        asm.assemble_string(SUM_SOURCE)
        assert asm.get_binary() == first

    def test_platform_symbols(self):
        asm = Assembler(AssemblerConfig(platform_symbols=True))
        asm.assemble_string("@SCREEN\nD=A\n@KBD\n")
        assert asm.get_code()[0] == 16384
        assert asm.get_code()[2] == 24576


class TestErrors:
    """Assembly aborts on the first error."""

    @pytest.mark.parametrize("source,error", [
        ("D=-1\n", InvalidOperandError),
        ("D=D&D\n", InvalidOperandError),
        ("D=A&M\n", InvalidOperandError),
        ("(X)\n(X)\n", DuplicateSymbolError),
        ("D=A\n#\n", LexicalError),
    ])
    def test_fatal(self, source, error):
        with pytest.raises(error):
            Assembler().assemble_string(source)

    def test_error_clears_previous_result(self):
        asm = Assembler()
        asm.assemble_string(ADD_SOURCE)
        with pytest.raises(AssemblerError):
            asm.assemble_string("D=D&D")
        with pytest.raises(AssemblerError):
            asm.get_binary()

    def test_error_message_format(self):
        with pytest.raises(AssemblerError) as exc_info:
            Assembler().assemble_string("@1\nD=M&A\n", "Bad.asm")
        lines = str(exc_info.value).splitlines()
        assert lines[0].startswith("Bad.asm:2:3: error: invalid operation M&A")
        assert lines[1] == "    D=M&A"
        assert lines[2] == "      ^"

    def test_write_before_assembly(self, tmp_path):
        with pytest.raises(AssemblerError) as exc_info:
            Assembler().write_hack(tmp_path / "out.hack")
        assert "nothing assembled yet" in str(exc_info.value)


class TestFiles:
    """File input and output."""

    def test_assemble_file(self, tmp_path):
        source = tmp_path / "Add.asm"
        source.write_text(ADD_SOURCE, encoding="utf-8")
        output = tmp_path / "Add.hack"

        asm = Assembler()
        asm.assemble_file(source)
        asm.write_hack(output)

        assert output.read_text(encoding="utf-8").splitlines() == ADD_BINARY

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Assembler().assemble_file(tmp_path / "missing.asm")

    def test_error_location_uses_path(self, tmp_path):
        source = tmp_path / "Bad.asm"
        source.write_text("DM=A\n", encoding="utf-8")
        with pytest.raises(AssemblerError) as exc_info:
            Assembler().assemble_file(source)
        assert str(source) in str(exc_info.value)

    def test_write_symbols(self, tmp_path):
        output = tmp_path / "Sum.sym"
        asm = Assembler()
        asm.assemble_string(SUM_SOURCE)
        asm.write_symbols(output)
        lines = output.read_text(encoding="utf-8").splitlines()
        assert lines[2:] == ["LOOP 4", "END 18", "i 16", "sum 17"]

    def test_nothing_written_on_error(self, tmp_path):
        source = tmp_path / "Bad.asm"
        source.write_text("@1\nD=D+D\n", encoding="utf-8")
        output = tmp_path / "Bad.hack"
        asm = Assembler()
        with pytest.raises(AssemblerError):
            asm.assemble_file(source)
        with pytest.raises(AssemblerError):
            asm.write_hack(output)
        assert not output.exists()
