"""
Hack Assembly Language Parser
=============================

This module implements a backtracking parser for Hack assembly language. It
converts the lexer's token stream into an instruction list and the symbol
tables needed by the resolver, in a single traversal.

Line Forms
----------
Every non-blank line is exactly one of:

1. **Address instruction**
   ```asm
   @21             ; literal (masked to 15 bits, with a warning)
   @i              ; symbol reference (label or variable)
   ```

2. **Compute instruction**
   ```asm
   D=D+A           ; dest=comp
   0;JMP           ; comp;jump
   AM=M-1;JNE      ; dest=comp;jump
   ```

3. **Label declaration**
   ```asm
   (LOOP)          ; binds LOOP to the next instruction's index
   ```

Backtracking
------------
The three line forms, and the three shapes of a compute expression
(unary ``-D``, binary ``D+A``, constant ``D``), share token prefixes. Rather
than peeking ahead by hand, the parser tries each alternative in order under
a saved cursor position and rewinds when the alternative does not apply:

| Primitive          | On speculative failure      | On fatal failure |
|--------------------|-----------------------------|------------------|
| ``expect``         | raises AssemblySyntaxError  | raises           |
| ``optional(rule)`` | rewinds, returns False      | propagates       |
| ``match(...)``     | tries next rule, then raises AssemblySyntaxError | propagates |

Saved positions form a stack, so ``optional`` and ``match`` nest freely.
Once a construct is recognised but invalid (an unknown mnemonic, ``D&D``),
a fatal error is raised and no further alternative is tried.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Type, Union
import logging

from hack_asm.config import AssemblerConfig
from hack_asm.cpu import (
    BINARY_OPERATIONS,
    BOOLEAN_CONSTANTS,
    DESTINATION_MNEMONICS,
    JUMP_MNEMONICS,
    UNARY_OPERATIONS,
    BinaryOperation,
    ConstantOperation,
    DestinationFlags,
    JumpFlags,
    Operand,
    OperationDescription,
    OperationFlags,
    Register,
    UnaryOperation,
)
from hack_asm.errors import (
    AssemblerError,
    AssemblySyntaxError,
    AssemblyWarning,
    DuplicateSymbolError,
    ErrorKind,
    FatalAssemblyError,
    InternalAssemblerError,
    InvalidMnemonicError,
    InvalidOperandError,
    InvalidOperatorError,
    SourceLocation,
)
from hack_asm.assembler.lexer import Lexer, Token, TokenType
from hack_asm.assembler.encoder import flags_for_operation

logger = logging.getLogger(__name__)


# =============================================================================
# Instruction Data Classes
# =============================================================================

@dataclass
class AInstruction:
    """
    Address instruction: loads a 15-bit value into A.

    Attributes:
        value: Literal value, or a negative placeholder standing in for a
               symbol until the resolver replaces it
        location: Source location of the ``@`` (not part of equality)
    """
    value: int
    location: Optional[SourceLocation] = field(default=None, compare=False)

    @property
    def is_resolved(self) -> bool:
        return self.value >= 0


@dataclass
class CInstruction:
    """
    Compute instruction: ALU operation with optional store and jump.

    Attributes:
        destination: Registers receiving the ALU output
        operation: ALU control bits
        jump: Jump condition bits
        location: Source location of the first token (not part of equality)
    """
    destination: DestinationFlags = DestinationFlags.NONE
    operation: OperationFlags = OperationFlags.NONE
    jump: JumpFlags = JumpFlags.NONE
    location: Optional[SourceLocation] = field(default=None, compare=False)


Instruction = Union[AInstruction, CInstruction]


@dataclass
class Program:
    """
    Parser output: instructions plus the symbol tables the resolver needs.

    Attributes:
        instructions: Instructions in source order (labels emit none)
        symbols: Identifier -> pointer; reserved symbols are non-negative,
                 everything referenced by ``@NAME`` gets a negative placeholder
        labels: Label -> index of the instruction following its declaration
        warnings: Non-fatal diagnostics raised while parsing
        filename: Source filename for diagnostics
    """
    instructions: list[Instruction]
    symbols: dict[str, int]
    labels: dict[str, int]
    warnings: list[AssemblyWarning] = field(default_factory=list)
    filename: str = "<input>"


# =============================================================================
# Token Cursor
# =============================================================================

_TOKEN_DESCRIPTIONS = {
    TokenType.LOAD_MARKER: "'@'",
    TokenType.OPEN_DECLARATION: "'('",
    TokenType.CLOSE_DECLARATION: "')'",
    TokenType.ASSIGNMENT: "'='",
    TokenType.JUMP_SEPARATOR: "';'",
    TokenType.SEPARATOR: "end of line",
    TokenType.EOF: "end of input",
    TokenType.OPERATOR: "operator",
    TokenType.IDENTIFIER: "identifier",
    TokenType.NUMBER: "number",
}


class TokenCursor:
    """
    Read position over a lazy token stream, with rewindable lookahead.

    Tokens pulled from the lexer are kept in a buffer while any saved
    position might still rewind to them; once the saved-position stack is
    empty, consumed tokens are dropped.

    Usage:
        cursor = TokenCursor(Lexer(source).tokenize(), source=source)
        if cursor.optional(lambda: cursor.expect(TokenType.SEPARATOR)):
            ...
    """

    def __init__(self, tokens: Iterator[Token], source: Optional[str] = None):
        """
        Args:
            tokens: Token iterator ending with an EOF token
            source: Source text, used to quote the offending line in errors
        """
        self._tokens = tokens
        self._source_lines = source.splitlines() if source is not None else []
        self._buffer: list[Token] = []
        self._pos = 0
        self._saved: list[int] = []
        self._last: Optional[Token] = None
        self._eof: Optional[Token] = None

    # =========================================================================
    # Token Access
    # =========================================================================

    def _pull(self) -> Token:
        """Fetch the next token from the lexer; EOF repeats once reached."""
        if self._eof is not None:
            return self._eof
        token = next(self._tokens, None)
        if token is None:
            raise InternalAssemblerError("token stream ended without an EOF token")
        if token.type is TokenType.EOF:
            self._eof = token
        return token

    def _compact(self) -> None:
        """Drop tokens no saved position can rewind to."""
        if not self._saved and self._pos:
            del self._buffer[:self._pos]
            self._pos = 0

    def peek(self) -> Token:
        """Return the next token without consuming it."""
        self._compact()
        if self._pos == len(self._buffer):
            self._buffer.append(self._pull())
        return self._buffer[self._pos]

    def _next_token(self) -> Token:
        token = self.peek()
        self._pos += 1
        self._last = token
        logger.debug("token %r (depth %d)", token, len(self._saved))
        return token

    @property
    def current_location(self) -> Optional[SourceLocation]:
        """Location of the last consumed token."""
        return self._last.location if self._last is not None else None

    def source_line(self, location: Optional[SourceLocation]) -> Optional[str]:
        """Return the text of the source line at ``location``, if known."""
        if location is None or not 0 < location.line <= len(self._source_lines):
            return None
        return self._source_lines[location.line - 1].rstrip("\r")

    # =========================================================================
    # Parsing Primitives
    # =========================================================================

    def expect(
        self,
        kind: TokenType,
        allowed=None,
        message: Optional[Callable[[object], str]] = None,
        error: Type[FatalAssemblyError] = FatalAssemblyError,
    ):
        """
        Consume the next token and return its payload.

        Args:
            kind: Required token type
            allowed: Optional constraint on the payload: a single value, a
                     collection of values, or a predicate
            message: Builds the error text for a rejected payload
            error: Fatal error class raised for a rejected payload

        Raises:
            AssemblySyntaxError: The token has a different type (speculative)
            FatalAssemblyError: The payload is rejected by ``allowed``
        """
        token = self._next_token()
        if token.type is not kind:
            raise AssemblySyntaxError(
                f"expected {_TOKEN_DESCRIPTIONS[kind]}, found '{token.text}'",
                token.location,
                source_line=self.source_line(token.location),
            )

        value = token.value
        if allowed is not None and not _allows(allowed, value):
            text = message(value) if message else f"value '{value}' is not allowed"
            raise self.fatal(text, error=error)
        return value

    def _attempt(self, rule: Callable[[], object]) -> Optional[AssemblerError]:
        """Run ``rule``; on speculative failure rewind and return the error."""
        start = self._pos
        self._saved.append(start)
        try:
            rule()
        except AssemblerError as err:
            if err.kind is not ErrorKind.SPECULATIVE:
                raise
            logger.debug("rolled back %d token(s): %s", self._pos - start, err.message)
            self._pos = start
            return err
        finally:
            self._saved.pop()
        return None

    def optional(self, rule: Callable[[], object]) -> bool:
        """
        Try ``rule`` speculatively.

        Returns:
            True if the rule succeeded (its tokens stay consumed), False if it
            failed speculatively (every token it consumed is put back)

        Raises:
            AssemblerError: Any fatal or internal error raised by the rule
        """
        return self._attempt(rule) is None

    def match(self, name: str, *rules: Callable[[], object]) -> int:
        """
        Try each rule in order and return the index of the first that applies.

        When every rule fails, the error is reported at the furthest token
        any of them reached.

        Args:
            name: What is being looked for, used in the error message

        Raises:
            AssemblySyntaxError: No rule applies (speculative, so an enclosing
                                 ``optional`` or ``match`` may still recover)
        """
        logger.debug("trying match: %s", name)
        deepest: Optional[AssemblerError] = None
        for index, rule in enumerate(rules):
            err = self._attempt(rule)
            if err is None:
                return index
            if deepest is None or _position(err) > _position(deepest):
                deepest = err

        token = self.peek()
        if deepest is not None and _position(deepest) > _position_of(token.location):
            raise deepest

        if token.type is TokenType.EOF:
            text = f"end of input reached while looking for {name}"
        else:
            text = f"found unexpected '{token.text}' while looking for {name}"
        raise AssemblySyntaxError(
            text, token.location, source_line=self.source_line(token.location)
        )

    def fatal(
        self,
        message: str,
        hint: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        error: Type[FatalAssemblyError] = FatalAssemblyError,
    ) -> FatalAssemblyError:
        """
        Create a fatal error at ``location`` or the last consumed token.

        Returns the error rather than raising it, so callers write
        ``raise cursor.fatal(...)``.
        """
        location = location or self.current_location
        return error(
            message, location, hint=hint, source_line=self.source_line(location)
        )


def _position_of(location: Optional[SourceLocation]) -> tuple[int, int]:
    if location is None:
        return (0, 0)
    return (location.line, location.column)


def _position(err: AssemblerError) -> tuple[int, int]:
    return _position_of(err.location)


def _allows(allowed, value) -> bool:
    if callable(allowed):
        return bool(allowed(value))
    if isinstance(allowed, (list, tuple, set, frozenset)):
        return value in allowed
    return value == allowed


# =============================================================================
# Parser Implementation
# =============================================================================

_REGISTER_NAMES = frozenset(r.value for r in Register)


class Parser:
    """
    Parses Hack assembly source into a Program.

    Usage:
        parser = Parser(source, filename)
        program = parser.parse()

    Each ``parse()`` call runs over a fresh token cursor and fresh tables,
    so results never leak between compilations.
    """

    def __init__(
        self,
        source: str,
        filename: str = "<input>",
        config: Optional[AssemblerConfig] = None,
    ):
        """
        Args:
            source: Assembly source text
            filename: Source filename for error reporting
            config: Reserved symbols and literal limit (default AssemblerConfig())
        """
        self._source = source
        self._filename = filename
        self._config = config or AssemblerConfig()

    def parse(self) -> Program:
        """
        Parse the whole source.

        Returns:
            Program with instructions, symbol table, label table and warnings

        Raises:
            AssemblerError: The first syntax, semantic or lexical error
        """
        self._cursor = TokenCursor(Lexer(self._source, self._filename).tokenize(), self._source)
        self._instructions: list[Instruction] = []
        self._symbols = self._config.initial_symbols()
        self._reserved = frozenset(self._symbols)
        self._labels: dict[str, int] = {}
        self._label_locations: dict[str, Optional[SourceLocation]] = {}
        self._warnings: list[AssemblyWarning] = []
        self._next_placeholder = -1

        cursor = self._cursor
        while True:
            # Blank and comment-only lines
            while cursor.optional(lambda: cursor.expect(TokenType.SEPARATOR)):
                pass

            if cursor.optional(lambda: cursor.expect(TokenType.EOF)):
                break

            cursor.match(
                "next instruction",
                self._address_instruction,
                self._compute_instruction,
                self._label_declaration,
            )

            ended = cursor.match(
                "separator or end of input",
                lambda: cursor.expect(TokenType.SEPARATOR),
                lambda: cursor.expect(TokenType.EOF),
            )
            if ended == 1:
                break

        logger.info(
            "%s: parsed %d instructions, %d labels",
            self._filename, len(self._instructions), len(self._labels),
        )
        return Program(
            instructions=self._instructions,
            symbols=self._symbols,
            labels=self._labels,
            warnings=self._warnings,
            filename=self._filename,
        )

    # =========================================================================
    # Address Instructions
    # =========================================================================

    def _address_instruction(self) -> None:
        cursor = self._cursor
        cursor.expect(TokenType.LOAD_MARKER)
        location = cursor.current_location

        cursor.match(
            "label or raw number",
            lambda: self._literal(location),
            lambda: self._symbol_reference(location),
        )

    def _literal(self, location: Optional[SourceLocation]) -> None:
        cursor = self._cursor
        value = cursor.expect(TokenType.NUMBER)
        limit = self._config.max_literal
        masked = value & limit

        if value > limit:
            warning = AssemblyWarning(
                f"value of literal {value} exceeds the maximum allowed {limit}; "
                f"it will overflow to {masked} in the generated machine code",
                cursor.current_location,
            )
            self._warnings.append(warning)
            logger.warning("%s", warning)

        self._instructions.append(AInstruction(masked, location))

    def _symbol_reference(self, location: Optional[SourceLocation]) -> None:
        name = self._cursor.expect(TokenType.IDENTIFIER)

        if name not in self._symbols:
            self._symbols[name] = self._next_placeholder
            logger.debug("symbol '%s' -> placeholder %d", name, self._next_placeholder)
            self._next_placeholder -= 1

        self._instructions.append(AInstruction(self._symbols[name], location))

    # =========================================================================
    # Compute Instructions
    # =========================================================================

    def _compute_instruction(self) -> None:
        cursor = self._cursor
        location = cursor.peek().location
        destination = DestinationFlags.NONE
        jump = JumpFlags.NONE

        def destination_prefix() -> None:
            nonlocal destination
            mnemonic = cursor.expect(TokenType.IDENTIFIER)
            mnemonic_location = cursor.current_location
            cursor.expect(TokenType.ASSIGNMENT)

            if mnemonic not in DESTINATION_MNEMONICS:
                raise InvalidMnemonicError(
                    mnemonic, "destination", mnemonic_location,
                    valid=list(DESTINATION_MNEMONICS),
                    source_line=cursor.source_line(mnemonic_location),
                )
            destination = DESTINATION_MNEMONICS[mnemonic]

        cursor.optional(destination_prefix)

        comp_location = cursor.peek().location
        description = self._operation()
        try:
            operation = flags_for_operation(description)
        except InvalidOperandError as err:
            raise cursor.fatal(
                err.message, hint=err.hint, location=comp_location, error=InvalidOperandError,
            ) from None

        def jump_suffix() -> None:
            nonlocal jump
            cursor.expect(TokenType.JUMP_SEPARATOR)
            mnemonic = cursor.expect(TokenType.IDENTIFIER)

            if mnemonic not in JUMP_MNEMONICS:
                raise InvalidMnemonicError(
                    mnemonic, "jump", cursor.current_location,
                    valid=list(JUMP_MNEMONICS),
                    source_line=cursor.source_line(cursor.current_location),
                )
            jump = JUMP_MNEMONICS[mnemonic]

        cursor.optional(jump_suffix)

        self._instructions.append(CInstruction(destination, operation, jump, location))

    def _operation(self) -> OperationDescription:
        """
        Parse a compute expression.

        Unary is tried before binary so a leading operator is never read as
        an operand, and binary before constant so ``D+A`` is not cut short
        at ``D``.
        """
        cursor = self._cursor
        description: Optional[OperationDescription] = None

        def unary() -> None:
            nonlocal description
            op = cursor.expect(
                TokenType.OPERATOR, UNARY_OPERATIONS,
                lambda op: f"expected a unary operation, but found '{op}'",
                error=InvalidOperatorError,
            )
            description = UnaryOperation(op, self._operand())

        def binary() -> None:
            nonlocal description
            first = self._operand()
            op = cursor.expect(
                TokenType.OPERATOR, BINARY_OPERATIONS,
                lambda op: f"expected a binary operation, but found '{op}'",
                error=InvalidOperatorError,
            )
            description = BinaryOperation(op, first, self._operand())

        def constant() -> None:
            nonlocal description
            description = ConstantOperation(self._operand())

        cursor.match("operation", unary, binary, constant)

        if description is None:
            raise InternalAssemblerError(
                "could not select an operation", cursor.current_location
            )
        return description

    def _operand(self) -> Operand:
        cursor = self._cursor
        operand: Optional[Operand] = None

        def boolean() -> None:
            nonlocal operand
            operand = cursor.expect(
                TokenType.NUMBER, BOOLEAN_CONSTANTS,
                lambda value: f"found {value} where only a 0 or 1 value is allowed",
                error=InvalidOperandError,
            )

        def register() -> None:
            nonlocal operand
            name = cursor.expect(
                TokenType.IDENTIFIER, _REGISTER_NAMES,
                lambda name: f"expected a valid register (D, A or M), but found '{name}'",
                error=InvalidOperandError,
            )
            operand = Register(name)

        cursor.match("register or constant", boolean, register)
        return operand

    # =========================================================================
    # Label Declarations
    # =========================================================================

    def _label_declaration(self) -> None:
        cursor = self._cursor
        cursor.expect(TokenType.OPEN_DECLARATION)
        name = cursor.expect(TokenType.IDENTIFIER)
        location = cursor.current_location
        cursor.expect(TokenType.CLOSE_DECLARATION)

        if name in self._reserved:
            raise DuplicateSymbolError(
                name, location,
                reason=f"cannot declare label '{name}': it is a reserved symbol",
                source_line=cursor.source_line(location),
            )
        if name in self._labels:
            raise DuplicateSymbolError(
                name, location,
                original_location=self._label_locations[name],
                source_line=cursor.source_line(location),
            )

        self._labels[name] = len(self._instructions)
        self._label_locations[name] = location
        logger.debug("label '%s' -> instruction %d", name, self._labels[name])


# =============================================================================
# Convenience Function
# =============================================================================

def parse_source(
    source: str,
    filename: str = "<input>",
    config: Optional[AssemblerConfig] = None,
) -> Program:
    """
    Parse Hack assembly source code.

    Args:
        source: Assembly source text
        filename: Source filename for error reporting
        config: Assembler configuration (default AssemblerConfig())

    Returns:
        Parsed Program
    """
    return Parser(source, filename, config).parse()
