"""
Hack Assembler - Main Interface
===============================

This module provides the main Assembler class, the primary interface for
assembling Hack source code. It coordinates the parser (lexer, backtracking
parser and operation encoder), the symbol resolver and the binary encoder.

Example Usage
-------------
>>> from hack_asm.assembler import Assembler
>>>
>>> asm = Assembler()
>>> result = asm.assemble_string('''
... @2
... D=A
... @3
... D=D+A
... @0
... M=D
... ''')
>>> print(asm.get_binary(), end="")
0000000000000010
1110110000010000
0000000000000011
1110000010010000
0000000000000000
1110001100001000

Command-Line Usage
------------------
    $ hackasm Add.asm -o Add.hack -s Add.sym
"""

from pathlib import Path
from typing import Optional
import logging

from hack_asm.config import AssemblerConfig
from hack_asm.errors import AssemblerError, AssemblyWarning
from hack_asm.assembler.parser import Parser
from hack_asm.assembler.resolver import AssemblyResult, resolve_symbols
from hack_asm.assembler import codegen

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main Hack assembler class.

    Assembly is all-or-nothing: the first error aborts, and nothing is
    written unless every instruction was parsed, resolved and encoded.

    Attributes:
        config: Reserved symbols, variable base address and literal limit
    """

    def __init__(self, config: Optional[AssemblerConfig] = None):
        """
        Initialize the assembler.

        Args:
            config: Assembler configuration (default AssemblerConfig())
        """
        self.config = config or AssemblerConfig()
        self._result: Optional[AssemblyResult] = None
        self._words: list[int] = []
        self._source_file: Optional[Path] = None

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_string(self, source: str, filename: str = "<input>") -> AssemblyResult:
        """
        Assemble source code from a string.

        The assembly pipeline is:
        1. Parse source into instructions and symbol tables
        2. Resolve labels and variables
        3. Encode to machine words, kept for get_code() and get_binary()

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            The resolved AssemblyResult

        Raises:
            AssemblerError: If assembly fails
        """
        self._result = None
        self._words = []

        program = Parser(source, filename, self.config).parse()
        result = resolve_symbols(program, self.config)
        words = [codegen.encode_instruction(i) for i in result.instructions]

        logger.info("%s: assembled %d words", filename, len(words))
        self._result = result
        self._words = words
        return result

    def assemble_file(self, filepath: str | Path) -> AssemblyResult:
        """
        Assemble source code from a UTF-8 file.

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        self._source_file = filepath
        source = filepath.read_text(encoding="utf-8")
        return self.assemble_string(source, str(filepath))

    # =========================================================================
    # Results
    # =========================================================================

    def _require_result(self) -> AssemblyResult:
        if self._result is None:
            raise AssemblerError("nothing assembled yet")
        return self._result

    def get_code(self) -> list[int]:
        """Return the machine words of the last assembly."""
        self._require_result()
        return list(self._words)

    def get_binary(self) -> str:
        """Return the ``.hack`` text of the last assembly."""
        self._require_result()
        return "".join(f"{codegen.to_binary_text(w)}\n" for w in self._words)

    def get_symbols(self) -> dict[str, int]:
        """Return label and variable addresses of the last assembly."""
        return dict(self._require_result().symbols)

    def get_warnings(self) -> list[AssemblyWarning]:
        """Return warnings raised by the last assembly."""
        if self._result is None:
            return []
        return list(self._result.warnings)

    # =========================================================================
    # Output File Writing
    # =========================================================================

    def write_hack(self, filepath: str | Path) -> None:
        """Write the ``.hack`` machine code file."""
        codegen.write_hack(self._require_result().instructions, filepath)

    def write_symbols(self, filepath: str | Path) -> None:
        """Write the symbol table file."""
        codegen.write_symbols(self._require_result(), filepath)
