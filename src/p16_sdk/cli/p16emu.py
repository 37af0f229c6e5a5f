"""
p16emu - P16 Emulator Command-Line Interface
============================================

Runs a P16 program until it halts, faults or uses up its step budget,
then prints the registers. The input is either an assembly source file
(.asm, assembled first) or a flat or bundled memory image.

A breakpoint does not pause the run: the registers are printed when it
is hit and execution continues.

Usage Examples
--------------
Run an image and show the final registers:
    $ p16emu count.img

Assemble and run, tracing every instruction:
    $ p16emu count.asm --trace

Break twice at 0x004 and show memory 0x010-0x017 at the end:
    $ p16emu count.img -b 0x004:2 -m 0x010:8

Environment:
    P16_MEMORY_SIZE and P16_MAX_STEPS set defaults that command-line
    options override.
"""

from dataclasses import replace
from pathlib import Path
from typing import Optional

import click

from p16_sdk import __version__
from p16_sdk.assembler import assemble_file, parse_image
from p16_sdk.cli.errors import ExitCode, handle_cli_exception, setup_logging
from p16_sdk.config import EmulatorConfig
from p16_sdk.emulator import BreakReason, Emulator


def parse_pair(text: str, default: int) -> tuple[int, int]:
    """
    Parse "ADDR" or "ADDR:N" with decimal or 0x-prefixed numbers.

    Raises:
        click.BadParameter: If either part is not a number
    """
    address, _, second = text.partition(":")
    try:
        return int(address, 0), (int(second, 0) if second else default)
    except ValueError:
        raise click.BadParameter(f"expected ADDR or ADDR:N, got '{text}'") from None


def load_program(input_file: Path) -> list[int]:
    """Assemble a .asm file or read a memory image."""
    if input_file.suffix.lower() == ".asm":
        return assemble_file(input_file)
    return parse_image(input_file.read_text())


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-b", "--break", "breaks",
    multiple=True,
    metavar="ADDR[:HITS]",
    help="Breakpoint, optionally limited to HITS stops. Repeatable.",
)
@click.option(
    "-m", "--memory", "dumps",
    multiple=True,
    metavar="ADDR[:COUNT]",
    help="Print COUNT memory words (default 8) after the run. Repeatable.",
)
@click.option(
    "-n", "--max-steps",
    type=click.IntRange(min=1),
    default=None,
    help="Stop after this many instructions. Default: 1000000, or P16_MAX_STEPS.",
)
@click.option(
    "--memory-size",
    type=click.IntRange(min=1, max=0x1000),
    default=None,
    help="Memory size in words. Default: 4096, or P16_MEMORY_SIZE.",
)
@click.option(
    "-t", "--trace",
    is_flag=True,
    help="Print each instruction before it executes",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="p16emu")
def main(
    input_file: Path,
    breaks: tuple[str, ...],
    dumps: tuple[str, ...],
    max_steps: Optional[int],
    memory_size: Optional[int],
    trace: bool,
    verbose: bool,
) -> None:
    """
    Run a P16 program in the emulator.

    INPUT_FILE is an assembly source (.asm) or a flat or bundled image.

    \b
    Examples:
        p16emu count.img
        p16emu count.asm --trace
        p16emu count.img -b 0x004:2 -m 0x010:8
    """
    if verbose:
        setup_logging(verbose)

    config = EmulatorConfig.from_env()
    if max_steps is not None:
        config = replace(config, max_steps=max_steps)
    if memory_size is not None:
        config = replace(config, memory_size=memory_size)

    try:
        breakpoints = [parse_pair(text, -1) for text in breaks]
        memory_ranges = [parse_pair(text, 8) for text in dumps]
    except click.BadParameter as e:
        handle_cli_exception(e)

    try:
        words = load_program(input_file)
    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Load")

    if not words:
        click.echo(f"Error: {input_file} is empty", err=True)
        raise SystemExit(ExitCode.BUILD_ERROR)

    try:
        emu = Emulator(words, config)
        for address, hits in breakpoints:
            emu.breakpoints.set_breakpoint(address, hits)
    except ValueError as e:
        handle_cli_exception(click.BadParameter(str(e)))

    if verbose:
        click.echo(f"Loaded {len(words)} words from {input_file}", err=True)

    remaining = config.max_steps
    resuming = False
    while True:
        if trace and not resuming:
            click.echo(emu.disassemble_at(emu.cpu.pc, 1)[0])
        before = emu.total_steps
        event = emu.run(1 if trace else remaining)
        remaining -= emu.total_steps - before
        resuming = False

        if event.reason is BreakReason.BREAKPOINT:
            click.echo(f"{event}")
            click.echo(emu.format_registers())
            resuming = True
            continue
        if event.reason is BreakReason.MAX_STEPS and remaining > 0:
            continue
        break

    if event.reason is BreakReason.MAX_STEPS:
        click.echo(f"Stopped after {config.max_steps} steps at 0x{emu.cpu.pc:03x}")
    else:
        click.echo(f"{event}")
    click.echo(emu.format_registers())

    for address, count in memory_ranges:
        try:
            rows = emu.dump_memory(address, count)
        except IndexError as e:
            handle_cli_exception(click.BadParameter(str(e)))
        for row in rows:
            click.echo(row)

    if verbose:
        click.echo(f"Instructions executed: {emu.total_steps}", err=True)

    if event.reason is not BreakReason.HALT:
        raise SystemExit(ExitCode.RUN_ERROR)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
