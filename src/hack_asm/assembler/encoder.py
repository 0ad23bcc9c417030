"""
Hack Operation Encoder
======================

Maps a parsed compute expression (constant, unary or binary operation) to
the seven ALU control bits of a compute instruction.

The Hack ALU computes ``out = f(x', y')`` where ``x`` is always D and ``y``
is A or M (selected by the ``a`` bit). Each input can be zeroed (zx/zy) and
negated (nx/ny), ``f`` selects ``x+y`` or ``x&y``, and ``no`` negates the
result. Every legal expression is some combination of those bits:

| Expression | Bits                 | Why it works                   |
|------------|----------------------|--------------------------------|
| ``0``      | zx zy f              | 0 + 0                          |
| ``1``      | zx nx zy ny f no     | !(-1 + -1) = 1                 |
| ``D``      | zy ny                | D & -1                         |
| ``A``      | zx nx                | -1 & A                         |
| ``-D``     | zy ny f no           | !(D + -1) = -D                 |
| ``D+1``    | nx zy ny f no        | !(!D + -1) = D + 1             |
| ``D-A``    | nx f no              | !(!D + A) = D - A              |
| ``D&A``    | (none)               | D & A                          |

Any expression without such a combination raises InvalidOperandError. These
are genuine encoding impossibilities, not parse ambiguities: they are fatal.
"""

from hack_asm.cpu import (
    BinaryOperation,
    ConstantOperation,
    Operand,
    Operation,
    OperationDescription,
    OperationFlags,
    Register,
    UnaryOperation,
    is_constant,
    uses_a_bank,
)
from hack_asm.errors import InvalidOperandError

F = OperationFlags


def flag_if(flag: OperationFlags, include: bool) -> OperationFlags:
    """Return ``flag`` if ``include`` is true, otherwise no bits."""
    return flag if include else F.NONE


def load_only(register: Register) -> OperationFlags:
    """
    Bits that pass ``register`` through the ALU unchanged.

    The other input is forced to all ones (zero then negate) and the two are
    ANDed. M additionally sets the ``a`` bit to read memory instead of A.
    """
    if register is Register.D:
        return F.ZY | F.NY
    return F.ZX | F.NX | flag_if(F.A, register is Register.M)


def flags_for_operation(description: OperationDescription) -> OperationFlags:
    """
    Encode a compute expression as ALU control bits.

    Args:
        description: ConstantOperation, UnaryOperation or BinaryOperation

    Returns:
        The OperationFlags for the expression

    Raises:
        InvalidOperandError: The expression has no encoding
    """
    if isinstance(description, ConstantOperation):
        return _constant_flags(description.operand)
    if isinstance(description, UnaryOperation):
        return _unary_flags(description)
    if isinstance(description, BinaryOperation):
        return _binary_flags(description)
    raise TypeError(f"not an operation description: {description!r}")


def _constant_flags(operand: Operand) -> OperationFlags:
    if operand == 0:
        return F.ZX | F.ZY | F.F
    if operand == 1:
        return F.ZX | F.NX | F.ZY | F.NY | F.F | F.NO
    return load_only(operand)


def _unary_flags(description: UnaryOperation) -> OperationFlags:
    op, operand = description.op, description.operand

    if is_constant(operand):
        raise InvalidOperandError(
            f"invalid operation {description}: constants cannot be negated",
            hint="only D, A and M can follow a unary '-' or '!'",
        )

    if op is Operation.SUBTRACT:
        return load_only(operand) | F.F | F.NO
    if op is Operation.NOT:
        return load_only(operand) | F.NO

    raise InvalidOperandError(f"'{op}' is not a unary operation")


def _binary_flags(description: BinaryOperation) -> OperationFlags:
    op, first, second = description.op, description.first, description.second

    if is_constant(first):
        hint = None
        if op is Operation.ADD and not is_constant(second):
            hint = f"write it as {second}{op}{first}"
        raise InvalidOperandError(
            f"invalid operation {description}: constants are not allowed as "
            f"first operand in binary operations",
            hint=hint,
        )

    if is_constant(second):
        if second != 1 or op not in (Operation.ADD, Operation.SUBTRACT):
            raise InvalidOperandError(
                f"invalid operation {description}: only +1 and -1 take a constant operand",
            )
        if op is Operation.ADD:
            return load_only(first) | F.NX | F.NY | F.F | F.NO
        return load_only(first) | F.F

    if first is Register.D and second is Register.D:
        raise InvalidOperandError(
            f"invalid operation {description}: can only have the D register "
            f"on one side of the operation",
        )
    if uses_a_bank(first) and uses_a_bank(second):
        raise InvalidOperandError(
            f"invalid operation {description}: can only have a register from "
            f"the A/M group on one side of the operation",
        )

    a = flag_if(F.A, first is Register.M or second is Register.M)

    if op is Operation.ADD:
        return a | F.F
    if op is Operation.SUBTRACT:
        return (
            a
            | flag_if(F.NX, first is Register.D)
            | flag_if(F.NY, second is Register.D)
            | F.F
            | F.NO
        )
    if op is Operation.AND:
        # x&y is the ALU's unmodified function
        return a
    if op is Operation.OR:
        return a | F.NX | F.NY | F.NO

    raise InvalidOperandError("negation is not a binary operation")
