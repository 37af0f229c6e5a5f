"""
p16asm - P16 Assembler Command-Line Interface
=============================================

This module implements the command-line interface for the P16 assembler.

Usage Examples
--------------
Basic assembly (writes count.hex in the default format):
    $ p16asm count.asm

Logisim memory image:
    $ p16asm count.asm -f bundled -o count.img

Flat hex words to the terminal:
    $ p16asm count.asm -f flat --stdout

Generate all output files:
    $ p16asm count.asm -o count.img -l count.lst -s count.sym

Environment:
    P16_OUTPUT_FORMAT and P16_FILL_PATTERN set defaults that command-line
    options override.

Copyright (c) 2026 P16 SDK Contributors
"""

from pathlib import Path
from typing import Optional

import click

from p16_sdk import __version__
from p16_sdk.assembler import Assembler, OutputFormat
from p16_sdk.cli.errors import handle_cli_exception, setup_logging
from p16_sdk.config import AssemblerConfig


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
    help="Output image file (default: input.hex)",
)
@click.option(
    "-f", "--format", "output_format",
    type=click.Choice([f.value for f in OutputFormat], case_sensitive=False),
    default=None,
    help="Image encoding: flat hex words or bundled Logisim 'v2.0 raw'. "
         "Default: bundled, or P16_OUTPUT_FORMAT.",
)
@click.option(
    "--fill",
    type=str,
    default=None,
    help="Initial gap fill word (decimal or 0x hex). Default: 0",
)
@click.option(
    "--stdout",
    "to_stdout",
    is_flag=True,
    help="Print the image instead of writing a file",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="p16asm")
def main(
    input_file: Path,
    output: Optional[Path],
    output_format: Optional[str],
    fill: Optional[str],
    to_stdout: bool,
    listing: Optional[Path],
    symbols: Optional[Path],
    verbose: bool,
) -> None:
    """
    Assemble P16 source code into a memory image.

    INPUT_FILE is the assembly source file (.asm) to assemble.

    \b
    Examples:
        p16asm count.asm                 # Outputs count.hex
        p16asm count.asm -o count.img    # Specify output file
        p16asm count.asm -f flat --stdout
    """
    if verbose:
        setup_logging(verbose)

    config = AssemblerConfig.from_env()

    if fill is not None:
        try:
            fill_value = int(fill, 0)
        except ValueError:
            handle_cli_exception(click.BadParameter(f"invalid fill value '{fill}'"))
        if not 0 <= fill_value <= 0xFFFF:
            handle_cli_exception(click.BadParameter(f"fill value '{fill}' is not a 16-bit word"))
        config.fill_pattern = fill_value

    if output_format is not None:
        config.output_format = OutputFormat.from_name(output_format)

    asm = Assembler(config=config)

    if verbose:
        click.echo(f"Output format: {config.output_format}")
        click.echo(f"Fill pattern: 0x{config.fill_pattern:04x}")

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...")

        asm.assemble_file(input_file)
        image = asm.get_output()

        if to_stdout:
            click.echo(image)
        else:
            output_file = output if output is not None else input_file.with_suffix(".hex")
            asm.write_output(output_file)
            if verbose:
                click.echo(f"Wrote {len(asm.get_words())} words to {output_file}")

        if listing:
            asm.write_listing(listing)
            if verbose:
                click.echo(f"Wrote listing to {listing}")

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if verbose:
            click.echo(
                f"Assembly complete: {len(asm.get_words())} words, "
                f"{len(asm.get_symbols())} labels"
            )

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
