"""
Hack Assembler - Configuration
==============================

Assembler configuration: the reserved symbol set, the first address handed
out to variables, and the largest literal an address instruction can hold.
Configuration can come from:
- Default values (defined here)
- Constructor arguments (the CLI passes its options this way)
- Environment variables (``AssemblerConfig.from_env()``)
"""

from dataclasses import dataclass, field
from typing import Dict
import os

from hack_asm.cpu import (
    FIRST_FREE_ADDRESS,
    MAX_LITERAL,
    PLATFORM_SYMBOLS,
    REGISTER_SYMBOLS,
)


@dataclass
class AssemblerConfig:
    """
    Configuration for one assembler instance.

    Attributes:
        reserved_symbols: Identifiers pre-bound to fixed addresses (default R0..R15)
        first_free_address: First address allocated to variables (default: 16)
        max_literal: Largest value an address instruction can hold (default: 0x7FFF)
        platform_symbols: Also reserve SP, LCL, ARG, THIS, THAT, SCREEN and KBD
    """

    reserved_symbols: Dict[str, int] = field(
        default_factory=lambda: dict(REGISTER_SYMBOLS)
    )
    first_free_address: int = FIRST_FREE_ADDRESS
    max_literal: int = MAX_LITERAL
    platform_symbols: bool = False

    def __post_init__(self) -> None:
        # Bit 15 of an address instruction must stay clear
        if not 0 < self.max_literal <= MAX_LITERAL:
            raise ValueError(
                f"max literal {self.max_literal} is outside 1..{MAX_LITERAL}"
            )
        if not 0 <= self.first_free_address <= self.max_literal:
            raise ValueError(
                f"first free address {self.first_free_address} is outside "
                f"0..{self.max_literal}"
            )
        # Platform aliases (SCREEN, KBD) map I/O above the variable area
        # and are not covered here
        if self.reserved_symbols:
            highest = max(self.reserved_symbols.values())
            if self.first_free_address <= highest:
                raise ValueError(
                    f"first free address {self.first_free_address} overlaps "
                    f"reserved address {highest}"
                )

    # =========================================================================
    # Derived Values
    # =========================================================================

    def initial_symbols(self) -> dict[str, int]:
        """
        Return a fresh symbol table seeded with every reserved symbol.

        The returned dict is owned by the caller; the configuration is
        never modified by assembly.
        """
        symbols = dict(self.reserved_symbols)
        if self.platform_symbols:
            for name, address in PLATFORM_SYMBOLS.items():
                symbols.setdefault(name, address)
        return symbols

    # =========================================================================
    # Factory Methods
    # =========================================================================

    @classmethod
    def from_env(cls) -> "AssemblerConfig":
        """
        Create an AssemblerConfig from environment variables.

        Environment variables (all optional):
            HACK_ASM_FIRST_FREE_ADDRESS: First variable address (integer)
            HACK_ASM_PLATFORM_SYMBOLS: "1", "true" or "yes" to reserve platform aliases

        Returns:
            AssemblerConfig with values from environment variables

        Raises:
            ValueError: If a variable holds an unusable value
        """
        kwargs = {}

        if first_free := os.environ.get("HACK_ASM_FIRST_FREE_ADDRESS"):
            try:
                kwargs["first_free_address"] = int(first_free, 0)
            except ValueError:
                raise ValueError(
                    f"HACK_ASM_FIRST_FREE_ADDRESS must be an integer, got {first_free!r}"
                ) from None

        if platform := os.environ.get("HACK_ASM_PLATFORM_SYMBOLS"):
            kwargs["platform_symbols"] = platform.strip().lower() in ("1", "true", "yes")

        return cls(**kwargs)
