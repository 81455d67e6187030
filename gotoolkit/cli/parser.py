"""
gotoolkit CLI argument parser.

This module implements the command-line interface for gotoolkit using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from gotoolkit import __version__
from gotoolkit.core.config import env_flag

logger = logging.getLogger(__name__)


class CLI:
    """gotoolkit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="gotoolkit",
            description="gotoolkit - keep the Go toolchain on the latest stable release",
            epilog='Use "gotoolkit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        parser.add_argument(
            "--version", action="version", version=f"gotoolkit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Suppress non-error output (env: QUIET=1)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to YAML configuration file (env: GOTOOLKIT_CONFIG)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_check_command(subparsers)
        self._add_ensure_command(subparsers)

        return parser

    def _add_check_command(self, subparsers):
        """Add 'check' subcommand."""
        subparsers.add_parser(
            "check",
            help="Check if local Go matches the latest stable release",
            description=(
                "Compare the installed Go toolchain with the latest stable release.\n\n"
                "Exit codes:\n"
                "  0  up to date\n"
                "  2  update available\n"
                "  3  local newer than latest stable (or pre-release)\n"
                "  4  network error while determining latest\n"
                "  5  Go not installed\n"
                "  6  could not parse local version\n"
                "  1  unexpected error"
            ),
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

    def _add_ensure_command(self, subparsers):
        """Add 'ensure' subcommand."""
        parser = subparsers.add_parser(
            "ensure",
            help="Install or update to the latest stable Go",
            description=(
                "Download, verify and install the latest stable Go toolchain.\n\n"
                "Exit codes:\n"
                "  0  already up to date or successfully updated\n"
                "  1  environment or usage error\n"
                "  2  network or download error\n"
                "  3  checksum verification failed\n"
                "  4  install error\n"
                "  5  post-install verification mismatch"
            ),
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be done without executing (env: DRY_RUN=1)",
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Install directly even if a package manager owns Go "
            "(env: FORCE_DIRECT_INSTALL=1)",
        )
        parser.add_argument(
            "--prefix",
            type=Path,
            metavar="DIR",
            help="Install prefix when sudo is unavailable (env: GO_PREFIX, "
            "default: ~/.local)",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.error("Operation cancelled by user")
            return 130
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        QUIET=1 in the environment counts as --quiet.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet or env_flag("QUIET"):
            level = logging.ERROR
            format_str = "%(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            stream=sys.stderr,
            force=True,
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "check": "gotoolkit.cli.commands.check",
            "ensure": "gotoolkit.cli.commands.ensure",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
