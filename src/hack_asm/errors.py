"""
Hack Assembler Error Hierarchy
==============================

This module defines the exception hierarchy for the Hack assembler toolchain.
All exceptions inherit from HackError, allowing callers to catch every
toolchain error with a single except clause if desired.

Exception Hierarchy
-------------------
HackError (base)
└── AssemblerError (assembler-related, tagged with an ErrorKind)
    ├── AssemblySyntaxError - grammar alternative does not apply (SPECULATIVE)
    ├── FatalAssemblyError - construct recognised but invalid (FATAL)
    │   ├── LexicalError - character that cannot start any token
    │   ├── InvalidMnemonicError - unknown destination/jump mnemonic
    │   ├── InvalidOperatorError - operator in the wrong position
    │   ├── InvalidOperandError - bad operand, or combination with no encoding
    │   └── DuplicateSymbolError - label declared twice or over a reserved name
    └── InternalAssemblerError - resolver/parser desynchronisation (INTERNAL)

Error Kinds
-----------
The backtracking parser tries grammar alternatives speculatively. Whether an
error ends the current alternative or the whole compilation is decided by its
``kind``:

- SPECULATIVE errors are swallowed by ``optional()`` and turn into
  "try the next alternative".
- FATAL errors always propagate, whatever the nesting depth.
- INTERNAL errors always propagate and are reported with a distinct tag.

Error messages follow this format:
    filename:line:column: error: description
    source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class HackError(Exception):
    """
    Base exception for all Hack toolchain errors.

        try:
            assembler.assemble_file("Prog.asm")
        except HackError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


class ErrorKind(Enum):
    """How an assembler error propagates through speculative parsing."""
    SPECULATIVE = auto()  # alternative does not apply, try the next one
    FATAL = auto()        # confirmed user error, abort
    INTERNAL = auto()     # defect in the assembler itself, abort


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(HackError):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    kind = ErrorKind.FATAL
    tag = "error"

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            Max.asm:7:3: error: invalid destination mnemonic 'DM'
                DM=D+A
                ^
            hint: valid destinations are M, D, MD, A, AM, AD, AMD
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: {self.tag}: {self.message}")
        else:
            parts.append(f"{self.tag}: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    @property
    def is_speculative(self) -> bool:
        return self.kind is ErrorKind.SPECULATIVE


class AssemblySyntaxError(AssemblerError):
    """
    A grammar alternative does not apply at the current token.

    Raised by the token cursor when the next token has the wrong kind, and by
    ``match()`` when none of its alternatives apply. Inside ``optional()``
    this only means "try something else"; once it escapes the outermost
    alternative it aborts compilation like any other error.
    """
    kind = ErrorKind.SPECULATIVE


class FatalAssemblyError(AssemblerError):
    """
    A construct was recognised but is semantically invalid.

    Never converted into "try the next alternative": it propagates through
    every enclosing ``optional()``/``match()``.
    """
    kind = ErrorKind.FATAL


class LexicalError(FatalAssemblyError):
    """
    Character that cannot begin any token.

    Examples:
        - A lone '/' that does not start a '//' comment
        - Punctuation outside the instruction set ('#', '*', '%')
    """
    pass


class InvalidMnemonicError(FatalAssemblyError):
    """
    Unknown destination or jump mnemonic.

    Raised once ``NAME=`` or ``;NAME`` has been recognised structurally but
    NAME is not in the corresponding mnemonic table.
    """

    def __init__(
        self,
        mnemonic: str,
        category: str,
        location: Optional[SourceLocation] = None,
        valid: Optional[list[str]] = None,
        source_line: Optional[str] = None,
    ):
        self.mnemonic = mnemonic
        self.category = category
        self.valid = valid or []

        hint = None
        if self.valid:
            hint = f"valid {category} mnemonics are {', '.join(self.valid)}"

        super().__init__(
            f"invalid {category} mnemonic '{mnemonic}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class InvalidOperatorError(FatalAssemblyError):
    """
    Operator that cannot appear where it was written.

    Examples:
        D=&A        ; '&' is not a unary operation
        D=D!A       ; '!' is not a binary operation
    """
    pass


class InvalidOperandError(FatalAssemblyError):
    """
    Operand that is not a register or boolean constant, or an operand
    combination that has no machine encoding.

    Examples:
        D=D+2       ; only 0 and 1 are constants
        D=-1        ; constants cannot be negated
        D=D&D       ; the D input is only available on one side
        D=A+M       ; A and M share one ALU input
    """
    pass


class DuplicateSymbolError(FatalAssemblyError):
    """
    Label declared more than once, or declared over a reserved symbol.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        reason: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.symbol = symbol
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{symbol}' was first declared at {original_location}"

        super().__init__(
            reason or f"duplicate label '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class InternalAssemblerError(AssemblerError):
    """
    Internal consistency failure inside the assembler.

    Never caused by malformed input: it signals that the parser and the
    symbol resolver disagree about the placeholders they exchanged.
    """
    kind = ErrorKind.INTERNAL
    tag = "internal error"


# =============================================================================
# Warnings
# =============================================================================

@dataclass(frozen=True)
class AssemblyWarning:
    """
    A non-fatal diagnostic; assembly continues.

    Attributes:
        message: The warning description
        location: Where in the source it was raised (optional)
    """
    message: str
    location: Optional[SourceLocation] = None

    def __str__(self) -> str:
        if self.location:
            return f"{self.location}: warning: {self.message}"
        return f"warning: {self.message}"
