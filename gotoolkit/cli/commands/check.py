"""
Check command implementation.

Reports whether the local Go toolchain matches the latest stable release.
"""

import logging

from gotoolkit.core.config import load_settings
from gotoolkit.core.exceptions import ConfigurationError
from gotoolkit.toolchain.checker import (
    EXIT_UNEXPECTED,
    CheckResult,
    VersionChecker,
)
from gotoolkit.toolchain.probe import LocalVersionProbe
from gotoolkit.toolchain.resolver import RemoteVersionResolver

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the check command.

    Args:
        args: Parsed command-line arguments with:
            - config: Optional YAML configuration file

    Returns:
        Exit code of the CheckResult, or 1 for unexpected errors
    """
    try:
        settings = load_settings(config_file=getattr(args, "config", None))
    except ConfigurationError as e:
        logger.error(f"Error: {e}")
        return EXIT_UNEXPECTED

    checker = VersionChecker(
        LocalVersionProbe(), RemoteVersionResolver.from_settings(settings)
    )
    outcome = checker.check(resolve_when_missing=False)

    if outcome.result in (
        CheckResult.NETWORK_ERROR,
        CheckResult.NOT_INSTALLED,
        CheckResult.PARSE_ERROR,
    ):
        logger.error(outcome.status_line())
    else:
        logger.info(outcome.status_line())

    return outcome.result.exit_code
