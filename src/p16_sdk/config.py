"""
P16 SDK - Configuration
=======================

Assembler and emulator defaults. Configuration can come from:
- Default values (defined here)
- Environment variables
- Command-line options (applied by the CLI on top of the above)
"""

from dataclasses import dataclass
import logging
import os

from p16_sdk.assembler.formatter import BUNDLED_HEADER, OutputFormat
from p16_sdk.cpu import MAX_ADDRESS, MAX_WORD

logger = logging.getLogger(__name__)


@dataclass
class AssemblerConfig:
    """
    Settings for one assembler run.

    Attributes:
        fill_pattern: Word used to fill gaps before the first #fill (default: 0)
        output_format: Encoding used when none is requested (default: bundled)
        bundled_header: First line of bundled output (default: "v2.0 raw")
    """

    fill_pattern: int = 0x0000
    output_format: OutputFormat = OutputFormat.BUNDLED
    bundled_header: str = BUNDLED_HEADER

    # ═══════════════════════════════════════════════════════════════════════════
    # FACTORY METHODS
    # ═══════════════════════════════════════════════════════════════════════════

    @classmethod
    def from_env(cls) -> "AssemblerConfig":
        """
        Create AssemblerConfig from environment variables.

        Environment variables (all optional):
            P16_FILL_PATTERN: Initial fill word (decimal or 0x hex)
            P16_OUTPUT_FORMAT: "flat" or "bundled"

        Invalid values are logged and ignored.

        Returns:
            AssemblerConfig with values from environment variables
        """
        config = cls()

        if fill := os.environ.get("P16_FILL_PATTERN"):
            try:
                value = int(fill, 0)
            except ValueError:
                logger.warning(f"Ignoring P16_FILL_PATTERN={fill!r}: not a number")
            else:
                if 0 <= value <= MAX_WORD:
                    config.fill_pattern = value
                else:
                    logger.warning(f"Ignoring P16_FILL_PATTERN={fill!r}: not a 16-bit word")

        if fmt := os.environ.get("P16_OUTPUT_FORMAT"):
            try:
                config.output_format = OutputFormat.from_name(fmt)
            except ValueError:
                logger.warning(f"Ignoring P16_OUTPUT_FORMAT={fmt!r}: unknown format")

        return config


def _positive_env(name: str, maximum: int) -> int | None:
    """Read an integer in 1..maximum from the environment, or None."""
    raw = os.environ.get(name)
    if not raw:
        return None
    try:
        value = int(raw, 0)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not a number")
        return None
    if not 1 <= value <= maximum:
        logger.warning(f"Ignoring {name}={raw!r}: must be 1-{maximum}")
        return None
    return value


@dataclass(frozen=True)
class EmulatorConfig:
    """
    Settings for an emulator instance.

    Attributes:
        memory_size: Words of memory; the image is zero padded to this
                     size and addresses at or past it fault (default: 4096)
        max_steps: Instructions run() executes before giving up
                   (default: 1,000,000)
    """

    memory_size: int = MAX_ADDRESS + 1
    max_steps: int = 1_000_000

    @classmethod
    def from_env(cls) -> "EmulatorConfig":
        """
        Create EmulatorConfig from environment variables.

        Environment variables (all optional):
            P16_MEMORY_SIZE: Memory size in words, 1-4096
            P16_MAX_STEPS: Step budget for a run

        Invalid values are logged and ignored.
        """
        defaults = cls()
        memory_size = _positive_env("P16_MEMORY_SIZE", MAX_ADDRESS + 1)
        max_steps = _positive_env("P16_MAX_STEPS", 1 << 31)
        return cls(
            memory_size=memory_size or defaults.memory_size,
            max_steps=max_steps or defaults.max_steps,
        )
