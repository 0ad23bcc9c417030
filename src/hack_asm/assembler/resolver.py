"""
Hack Symbol Resolver
====================

Second assembly pass: turns the placeholders left by the parser into real
addresses.

Pass 1 (Collection)
-------------------
Walk the symbol table in insertion order, i.e. the order in which symbols
were first referenced. Reserved symbols (non-negative pointers) are left
alone. For every placeholder:

- a declared label resolves to its instruction index, even when ``@NAME``
  appeared before ``(NAME)``;
- anything else is a variable and gets the next free RAM address, starting
  at ``AssemblerConfig.first_free_address``.

Nothing in the instruction list is touched during this pass.

Pass 2 (Rewrite)
----------------
Replace every placeholder in the address instructions with its resolved
value. A placeholder that pass 1 did not see means the parser and the
resolver disagree, which is an internal error, not a user error.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

from hack_asm.config import AssemblerConfig
from hack_asm.errors import AssemblyWarning, FatalAssemblyError, InternalAssemblerError
from hack_asm.assembler.parser import AInstruction, Instruction, Program

logger = logging.getLogger(__name__)


@dataclass
class AssemblyResult:
    """
    Fully resolved program.

    Attributes:
        instructions: Instructions with every address resolved
        symbols: Final address of every declared label and every variable
        variables: Variable -> allocated RAM address, in allocation order
        labels: Label -> instruction index
        warnings: Non-fatal diagnostics from parsing
        filename: Source filename
    """
    instructions: list[Instruction]
    symbols: dict[str, int]
    variables: dict[str, int]
    labels: dict[str, int]
    warnings: list[AssemblyWarning] = field(default_factory=list)
    filename: str = "<input>"


def resolve_symbols(
    program: Program,
    config: Optional[AssemblerConfig] = None,
) -> AssemblyResult:
    """
    Resolve every symbolic address instruction in ``program``.

    The program's address instructions are updated in place.

    Args:
        program: Parser output
        config: Supplies the first free variable address (default AssemblerConfig())

    Returns:
        AssemblyResult sharing the program's (now resolved) instruction list

    Raises:
        FatalAssemblyError: Variables no longer fit in the address space
        InternalAssemblerError: A placeholder has no resolved value
    """
    config = config or AssemblerConfig()

    resolved: dict[int, int] = {}
    variables: dict[str, int] = {}
    next_address = config.first_free_address

    for name, pointer in program.symbols.items():
        if pointer >= 0:
            continue

        if name in program.labels:
            resolved[pointer] = program.labels[name]
            continue

        if next_address > config.max_literal:
            raise FatalAssemblyError(
                f"out of variable space: cannot allocate '{name}' above "
                f"address {config.max_literal}",
            )
        resolved[pointer] = next_address
        variables[name] = next_address
        logger.debug("variable '%s' -> %d", name, next_address)
        next_address += 1

    for instruction in program.instructions:
        if not isinstance(instruction, AInstruction) or instruction.is_resolved:
            continue
        try:
            instruction.value = resolved[instruction.value]
        except KeyError:
            raise InternalAssemblerError(
                f"symbol table broken, can't find entry {instruction.value}",
                instruction.location,
            ) from None

    logger.info(
        "%s: resolved %d labels, allocated %d variables",
        program.filename, len(program.labels), len(variables),
    )
    return AssemblyResult(
        instructions=program.instructions,
        symbols={**program.labels, **variables},
        variables=variables,
        labels=dict(program.labels),
        warnings=list(program.warnings),
        filename=program.filename,
    )
