"""
Ensure command implementation.

Installs or updates the Go toolchain to the latest stable release.
"""

import logging

from gotoolkit.core.config import load_settings
from gotoolkit.core.exceptions import ConfigurationError
from gotoolkit.toolchain.pipeline import EnsureLatestPipeline

logger = logging.getLogger(__name__)


def _flag(args, name: str):
    """CLI flags only override the environment when given."""
    return True if getattr(args, name, False) else None


def run(args) -> int:
    """
    Run the ensure command.

    Args:
        args: Parsed command-line arguments with:
            - config: Optional YAML configuration file
            - dry_run, force: Switches overriding the environment
            - prefix: Non-privileged install prefix

    Returns:
        Exit code of the install pipeline
    """
    try:
        settings = load_settings(
            config_file=getattr(args, "config", None),
            force=_flag(args, "force"),
            dry_run=_flag(args, "dry_run"),
            prefix=getattr(args, "prefix", None),
        )
    except ConfigurationError as e:
        logger.error(f"Error: {e}")
        return e.exit_code

    result = EnsureLatestPipeline(settings).run()
    logger.debug(f"Pipeline finished in state {result.state.value}")
    return result.exit_code
