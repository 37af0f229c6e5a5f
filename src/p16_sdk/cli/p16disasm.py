"""
p16disasm - P16 Disassembler Command-Line Interface
===================================================

Lists the instructions held in a P16 memory image. Both image encodings
written by p16asm are accepted; the bundled one is recognized by its
"v2.0 raw" header or by run-length tokens.

Usage Examples
--------------
Disassemble an image:
    $ p16disasm count.img

Start at offset 0x10 and show 8 words:
    $ p16disasm count.img --address 0x10 --count 8

Output to file:
    $ p16disasm count.img -o count.lst
"""

from pathlib import Path
from typing import Optional

import click

from p16_sdk import __version__
from p16_sdk.assembler import parse_image
from p16_sdk.cli.errors import ExitCode, handle_cli_exception, setup_logging
from p16_sdk.disassembler import P16Disassembler


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
    "-a", "--address",
    type=str,
    default="0",
    help="First offset to disassemble (hex with 0x prefix or decimal). Default: 0",
)
@click.option(
    "-c", "--count",
    type=click.IntRange(min=0),
    default=None,
    help="Maximum number of words to disassemble (default: all)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="p16disasm")
def main(
    input_file: Path,
    output: Optional[Path],
    address: str,
    count: Optional[int],
    verbose: bool,
) -> None:
    """
    Disassemble a P16 memory image.

    INPUT_FILE is a flat or bundled (Logisim v2.0 raw) image.

    \b
    Examples:
        p16disasm count.img
        p16disasm count.img --address 0x10 --count 8
    """
    if verbose:
        setup_logging(verbose)

    try:
        start = int(address, 0)
    except ValueError:
        handle_cli_exception(click.BadParameter(f"invalid address '{address}'"))

    if not 0 <= start <= 0xFFF:
        handle_cli_exception(click.BadParameter("address must be 0-4095 (0x000-0xfff)"))

    try:
        words = parse_image(input_file.read_text())
    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Image")

    if not words:
        click.echo(f"Error: {input_file} is empty", err=True)
        raise SystemExit(ExitCode.BUILD_ERROR)

    instructions = P16Disassembler().disassemble(words, start=start, count=count)

    output_lines = [
        f"; Disassembly of {input_file.name}",
        f"; Size: {len(words)} words",
        f"; Start: 0x{start:03x}",
        "",
    ]
    output_lines.extend(str(instr) for instr in instructions)
    result = "\n".join(output_lines) + "\n"

    if output:
        try:
            output.write_text(result, encoding="utf-8")
        except OSError as e:
            handle_cli_exception(e, verbose=verbose)
        if verbose:
            click.echo(f"Output written to: {output}", err=True)
    else:
        click.echo(result, nl=False)

    if verbose:
        click.echo(f"Instructions disassembled: {len(instructions)}", err=True)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
