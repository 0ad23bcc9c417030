"""
hackdis - Hack Disassembler Command-Line Interface
==================================================

This module implements the command-line interface for the Hack disassembler.

Usage Examples
--------------
Disassemble to stdout:
    $ hackdis Max.hack

Output to file:
    $ hackdis Max.hack -o Max.dis.asm

Plain assembly without index and word columns:
    $ hackdis Max.hack --no-index
"""

import logging
from pathlib import Path
from typing import Optional

import click

from hack_asm import __version__
from hack_asm.disassembler import HackDisassembler, parse_hack_text
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
    help="Output file (default: stdout)",
)
@click.option(
    "--no-index",
    is_flag=True,
    help="Omit instruction index and machine word (show only assembly)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="hackdis")
def main(
    input_file: Path,
    output: Optional[Path],
    no_index: bool,
    verbose: bool,
) -> None:
    """
    Disassemble Hack machine code.

    INPUT_FILE is a .hack file with one 16-digit binary word per line.

    Examples:

        # Listing with index and machine word
        hackdis Max.hack

        # Plain assembly into a file
        hackdis Max.hack --no-index -o Max.dis.asm
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        text = input_file.read_text(encoding="utf-8")
        try:
            words = parse_hack_text(text)
            instructions = HackDisassembler().disassemble(words)
        except ValueError as e:
            raise click.BadParameter(f"{input_file}: {e}") from e

        if verbose:
            click.echo(f"Input file: {input_file} ({len(words)} words)", err=True)

        output_lines = [f"// Disassembly of {input_file.name}"]
        for instr in instructions:
            output_lines.append(instr.text if no_index else str(instr))
        result = "\n".join(output_lines) + "\n"

        if output:
            output.write_text(result, encoding="utf-8")
            if verbose:
                click.echo(f"Output written to: {output}", err=True)
        else:
            click.echo(result, nl=False)

        if verbose:
            click.echo(f"Instructions disassembled: {len(instructions)}", err=True)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Disassembly")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
