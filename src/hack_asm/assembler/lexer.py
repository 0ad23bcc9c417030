"""
Hack Assembly Language Lexer
============================

This module implements a lexer (tokenizer) for Hack assembly language.
It converts source text into a lazy stream of tokens that the parser
consumes one at a time.

Token Types
-----------
- LOAD_MARKER: ``@`` starting an address instruction
- OPEN_DECLARATION / CLOSE_DECLARATION: ``(`` and ``)`` around a label
- ASSIGNMENT: ``=`` after a destination mnemonic
- JUMP_SEPARATOR: ``;`` before a jump mnemonic
- OPERATOR: ``+ - ! & |``, valued with their Operation
- IDENTIFIER: symbols, registers and mnemonics
- NUMBER: unsigned decimal literals
- SEPARATOR: end of a source line (comments included)
- EOF: end of input

Comments
--------
``//`` starts a comment that runs to the end of the line. The comment and
its line break together produce a single SEPARATOR, so a comment-only line
ends an instruction exactly like an empty one.

Example
-------
>>> from hack_asm.assembler.lexer import Lexer
>>> lexer = Lexer("@i // counter\\nM=M+1", "example.asm")
>>> for token in lexer.tokenize():
...     print(token)
Token(LOAD_MARKER, 1:1)
Token(IDENTIFIER, 'i', 1:2)
Token(SEPARATOR, 1:4)
Token(IDENTIFIER, 'M', 2:1)
Token(ASSIGNMENT, 2:2)
Token(IDENTIFIER, 'M', 2:3)
Token(OPERATOR, +, 2:4)
Token(NUMBER, 1, 2:5)
Token(EOF, 2:6)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import string

from hack_asm.cpu import OPERATION_SYMBOLS, Operation
from hack_asm.errors import LexicalError, SourceLocation


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for the Hack assembly language."""

    # Structural tokens
    LOAD_MARKER = auto()        # @
    OPEN_DECLARATION = auto()   # (
    CLOSE_DECLARATION = auto()  # )
    ASSIGNMENT = auto()         # =
    JUMP_SEPARATOR = auto()     # ;
    SEPARATOR = auto()          # end of line
    EOF = auto()                # end of input

    # Values
    OPERATOR = auto()    # + - ! & |
    IDENTIFIER = auto()  # symbols, registers, mnemonics
    NUMBER = auto()      # unsigned decimal


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    Represents a single token from the source code.

    Attributes:
        type: The TokenType classification
        value: Identifier text, integer value or Operation (None for structural tokens)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: str | int | Operation | None
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        if self.value is None:
            return f"Token({self.type.name}, {self.line}:{self.column})"
        if isinstance(self.value, str):
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.value}, {self.line}:{self.column})"

    __str__ = __repr__

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    @property
    def text(self) -> str:
        """Source-like rendering of the token for diagnostics."""
        if self.type is TokenType.SEPARATOR:
            return "end of line"
        if self.type is TokenType.EOF:
            return "end of input"
        if self.value is None:
            return _STRUCTURAL_TEXT[self.type]
        return str(self.value)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes Hack assembly source code.

    Usage:
        lexer = Lexer(source_text, filename)
        for token in lexer.tokenize():
            ...

    Each call to ``tokenize()`` starts again from the beginning of the
    source, so a Lexer can be replayed.

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    # Characters that can start an identifier
    IDENT_START = string.ascii_letters + "_.$:"

    # Characters that can continue an identifier
    IDENT_CHARS = IDENT_START + string.digits

    # Horizontal whitespace; '\r' is dropped so CRLF files lex like LF ones
    WHITESPACE = " \t\r"

    STRUCTURAL_TOKENS = {
        "@": TokenType.LOAD_MARKER,
        "(": TokenType.OPEN_DECLARATION,
        ")": TokenType.CLOSE_DECLARATION,
        "=": TokenType.ASSIGNMENT,
        ";": TokenType.JUMP_SEPARATOR,
    }

    def __init__(self, source: str, filename: str = "<input>"):
        """
        Initialize the lexer with source code.

        Args:
            source: The assembly source code to tokenize
            filename: Name of the source file (for error messages)
        """
        self.source = source
        self.filename = filename
        self._reset()

    def _reset(self) -> None:
        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source code.

        Yields:
            Token objects, always terminated by a single EOF token

        Raises:
            LexicalError: If a character cannot start any token
        """
        self._reset()

        while not self._at_end():
            if self._skip_whitespace():
                continue

            yield self._scan_token()

        yield self._make_token(TokenType.EOF, None)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """
        Look at character at current position + offset without advancing.

        Returns empty string if past end of source.
        """
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking line and column."""
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: TokenType,
        value: str | int | Operation | None,
        start_line: Optional[int] = None,
        start_column: Optional[int] = None,
    ) -> Token:
        return Token(
            type=token_type,
            value=value,
            line=start_line or self._line,
            column=start_column or self._column,
            filename=self.filename,
        )

    def _error(self, message: str, column: Optional[int] = None) -> LexicalError:
        """Create a lexical error at the current line."""
        location = SourceLocation(self.filename, self._line, column or self._column)
        return LexicalError(message, location, source_line=self.get_current_line())

    # =========================================================================
    # Whitespace Handling
    # =========================================================================

    def _skip_whitespace(self) -> bool:
        """
        Skip horizontal whitespace but not newlines.

        Returns:
            True if any whitespace was skipped
        """
        skipped = False
        # '' in WHITESPACE is True, so the emptiness check comes first
        while self._peek() and self._peek() in self.WHITESPACE:
            self._advance()
            skipped = True
        return skipped

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        """Scan the next token from source."""
        start_line = self._line
        start_column = self._column

        char = self._peek()

        if char in self.STRUCTURAL_TOKENS:
            self._advance()
            return self._make_token(
                self.STRUCTURAL_TOKENS[char], None, start_line, start_column
            )

        if char in OPERATION_SYMBOLS:
            self._advance()
            return self._make_token(
                TokenType.OPERATOR, OPERATION_SYMBOLS[char], start_line, start_column
            )

        if char in self.IDENT_START:
            return self._scan_identifier(start_line, start_column)

        if char in string.digits:
            return self._scan_number(start_line, start_column)

        if char == "/" and self._peek(1) == "/":
            return self._scan_comment(start_line, start_column)

        if char == "\n":
            self._advance()
            return self._make_token(TokenType.SEPARATOR, None, start_line, start_column)

        raise self._error(f"unexpected character {char!r}", start_column)

    def _scan_identifier(self, start_line: int, start_column: int) -> Token:
        chars = []
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())

        return self._make_token(TokenType.IDENTIFIER, "".join(chars), start_line, start_column)

    def _scan_number(self, start_line: int, start_column: int) -> Token:
        chars = []
        while self._peek() and self._peek() in string.digits:
            chars.append(self._advance())

        return self._make_token(TokenType.NUMBER, int("".join(chars)), start_line, start_column)

    def _scan_comment(self, start_line: int, start_column: int) -> Token:
        """
        Consume a ``//`` comment through its line break.

        The whole comment becomes one SEPARATOR, also when the comment is
        on the last line and has no line break after it.
        """
        while not self._at_end() and self._peek() != "\n":
            self._advance()
        self._advance()  # line break, if any
        return self._make_token(TokenType.SEPARATOR, None, start_line, start_column)

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def get_current_line(self) -> str:
        """Get the current line of source text, for error reporting."""
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end].rstrip("\r")


_STRUCTURAL_TEXT = {
    symbol_type: symbol for symbol, symbol_type in Lexer.STRUCTURAL_TOKENS.items()
}
