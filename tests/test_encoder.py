# =============================================================================
# test_encoder.py - Operation Encoder Tests
# =============================================================================
# Tests that every legal compute expression maps to the documented ALU bits
# and that every expression without an encoding is rejected as fatal.
# =============================================================================

import pytest
from hack_asm.assembler.encoder import flags_for_operation, load_only
from hack_asm.cpu import (
    BinaryOperation,
    ConstantOperation,
    Operation,
    OperationFlags,
    Register,
    UnaryOperation,
)
from hack_asm.errors import ErrorKind, InvalidOperandError

D, A, M = Register.D, Register.A, Register.M
ADD, SUB, NOT, AND, OR = (
    Operation.ADD, Operation.SUBTRACT, Operation.NOT, Operation.AND, Operation.OR,
)


# Standard Hack comp table: expression -> "a c1..c6" bit string
COMP_TABLE = [
    (ConstantOperation(0), "0101010"),
    (ConstantOperation(1), "0111111"),
    (ConstantOperation(D), "0001100"),
    (ConstantOperation(A), "0110000"),
    (ConstantOperation(M), "1110000"),
    (UnaryOperation(NOT, D), "0001101"),
    (UnaryOperation(NOT, A), "0110001"),
    (UnaryOperation(NOT, M), "1110001"),
    (UnaryOperation(SUB, D), "0001111"),
    (UnaryOperation(SUB, A), "0110011"),
    (UnaryOperation(SUB, M), "1110011"),
    (BinaryOperation(ADD, D, 1), "0011111"),
    (BinaryOperation(ADD, A, 1), "0110111"),
    (BinaryOperation(ADD, M, 1), "1110111"),
    (BinaryOperation(SUB, D, 1), "0001110"),
    (BinaryOperation(SUB, A, 1), "0110010"),
    (BinaryOperation(SUB, M, 1), "1110010"),
    (BinaryOperation(ADD, D, A), "0000010"),
    (BinaryOperation(ADD, A, D), "0000010"),
    (BinaryOperation(ADD, D, M), "1000010"),
    (BinaryOperation(ADD, M, D), "1000010"),
    (BinaryOperation(SUB, D, A), "0010011"),
    (BinaryOperation(SUB, D, M), "1010011"),
    (BinaryOperation(SUB, A, D), "0000111"),
    (BinaryOperation(SUB, M, D), "1000111"),
    (BinaryOperation(AND, D, A), "0000000"),
    (BinaryOperation(AND, A, D), "0000000"),
    (BinaryOperation(AND, D, M), "1000000"),
    (BinaryOperation(OR, D, A), "0010101"),
    (BinaryOperation(OR, M, D), "1010101"),
]


class TestLegalOperations:
    """Every legal expression encodes to the standard Hack comp bits."""

    @pytest.mark.parametrize("description,bits", COMP_TABLE, ids=[str(d) for d, _ in COMP_TABLE])
    def test_comp_table(self, description, bits):
        assert int(flags_for_operation(description)) == int(bits, 2)

    def test_d_minus_one_accepted(self):
        """D-1 is a valid subtraction of the constant 1 from D."""
        flags = flags_for_operation(BinaryOperation(SUB, D, 1))
        assert flags == OperationFlags.ZY | OperationFlags.NY | OperationFlags.F

    def test_load_only(self):
        """load_only passes a register through unchanged."""
        assert load_only(D) == OperationFlags.ZY | OperationFlags.NY
        assert load_only(A) == OperationFlags.ZX | OperationFlags.NX
        assert load_only(M) == OperationFlags.ZX | OperationFlags.NX | OperationFlags.A


class TestIllegalOperations:
    """Expressions the ALU cannot compute are fatal."""

    @pytest.mark.parametrize("description", [
        UnaryOperation(SUB, 1),
        UnaryOperation(SUB, 0),
        UnaryOperation(NOT, 0),
        UnaryOperation(NOT, 1),
    ], ids=str)
    def test_negated_constants(self, description):
        """Constants are never valid unary operands."""
        with pytest.raises(InvalidOperandError) as exc_info:
            flags_for_operation(description)
        assert "constants cannot be negated" in str(exc_info.value)

    @pytest.mark.parametrize("description", [
        BinaryOperation(AND, D, D),
        BinaryOperation(ADD, D, D),
        BinaryOperation(SUB, D, D),
        BinaryOperation(OR, D, D),
    ], ids=str)
    def test_d_on_both_sides(self, description):
        with pytest.raises(InvalidOperandError) as exc_info:
            flags_for_operation(description)
        assert "D register on one side" in str(exc_info.value)

    @pytest.mark.parametrize("description", [
        BinaryOperation(AND, A, M),
        BinaryOperation(AND, M, A),
        BinaryOperation(ADD, A, A),
        BinaryOperation(SUB, M, M),
        BinaryOperation(OR, A, M),
    ], ids=str)
    def test_a_bank_on_both_sides(self, description):
        """A and M share one ALU input."""
        with pytest.raises(InvalidOperandError) as exc_info:
            flags_for_operation(description)
        assert "A/M group on one side" in str(exc_info.value)

    def test_constant_first_operand(self):
        with pytest.raises(InvalidOperandError) as exc_info:
            flags_for_operation(BinaryOperation(ADD, 1, D))
        err = exc_info.value
        assert "constants are not allowed as first operand" in err.message
        assert err.hint == "write it as D+1"

    def test_constant_first_operand_no_hint_for_subtraction(self):
        """1-D has no rewrite, so no hint is offered."""
        with pytest.raises(InvalidOperandError) as exc_info:
            flags_for_operation(BinaryOperation(SUB, 1, D))
        assert exc_info.value.hint is None

    def test_literal_only_subtraction(self):
        """1-1 is fatal."""
        with pytest.raises(InvalidOperandError):
            flags_for_operation(BinaryOperation(SUB, 1, 1))

    @pytest.mark.parametrize("description", [
        BinaryOperation(ADD, D, 0),
        BinaryOperation(SUB, A, 0),
        BinaryOperation(AND, D, 1),
        BinaryOperation(OR, M, 1),
    ], ids=str)
    def test_unsupported_constant_second_operand(self, description):
        """Only X+1 and X-1 take a constant."""
        with pytest.raises(InvalidOperandError) as exc_info:
            flags_for_operation(description)
        assert "only +1 and -1 take a constant operand" in str(exc_info.value)

    def test_errors_are_fatal(self):
        with pytest.raises(InvalidOperandError) as exc_info:
            flags_for_operation(BinaryOperation(AND, D, D))
        assert exc_info.value.kind is ErrorKind.FATAL

    def test_not_a_description(self):
        with pytest.raises(TypeError):
            flags_for_operation("D+A")
