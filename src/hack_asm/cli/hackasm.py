"""
hackasm - Hack Assembler Command-Line Interface
===============================================

This module implements the command-line interface for the Hack assembler.

Usage Examples
--------------
Basic assembly:
    $ hackasm Max.asm

With output file:
    $ hackasm Max.asm -o out/Max.hack

With symbol table:
    $ hackasm Max.asm -s Max.sym

Using the platform aliases (SP, LCL, ARG, THIS, THAT, SCREEN, KBD):
    $ hackasm --platform-symbols Pong.asm

Verbose mode:
    $ hackasm -v Max.asm
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

import click

from hack_asm import __version__
from hack_asm.assembler import Assembler
from hack_asm.config import AssemblerConfig
from hack_asm.cli.errors import handle_cli_exception


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output .hack file (default: input.hack)",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "--platform-symbols",
    is_flag=True,
    help="Predefine SP, LCL, ARG, THIS, THAT, SCREEN and KBD",
)
@click.option(
    "--first-free-address",
    type=click.IntRange(0, 0x7FFF),
    default=None,
    help="First RAM address given to variables. Default: 16",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="hackasm")
def main(
    input_file: Path,
    output: Optional[Path],
    symbols: Optional[Path],
    platform_symbols: bool,
    first_free_address: Optional[int],
    verbose: bool,
) -> None:
    """
    Assemble Hack assembly source into machine code.

    INPUT_FILE is the assembly source file (.asm) to assemble.

    The output holds one line of sixteen 0/1 characters per instruction.
    Nothing is written if the source contains any error.

    \b
    Examples:
        hackasm Max.asm              # Outputs Max.hack
        hackasm Max.asm -o out.hack  # Specify output file
        hackasm Max.asm -s Max.sym   # Also write the symbol table

    HACK_ASM_FIRST_FREE_ADDRESS and HACK_ASM_PLATFORM_SYMBOLS provide
    defaults for the matching options.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )

    output_file = output if output is not None else input_file.with_suffix(".hack")

    try:
        config = AssemblerConfig.from_env()
        overrides = {}
        if platform_symbols:
            overrides["platform_symbols"] = True
        if first_free_address is not None:
            overrides["first_free_address"] = first_free_address
        config = replace(config, **overrides)
    except ValueError as e:
        handle_cli_exception(click.BadParameter(str(e)), verbose=verbose)

    asm = Assembler(config=config)

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...")

        asm.assemble_file(input_file)

        for warning in asm.get_warnings():
            click.echo(str(warning), err=True)

        asm.write_hack(output_file)
        if verbose:
            click.echo(f"Wrote {len(asm.get_code())} instructions to {output_file}")

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if verbose:
            click.echo(f"Defined {len(asm.get_symbols())} symbols")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
