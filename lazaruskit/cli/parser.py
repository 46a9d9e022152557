"""
LazarusKit CLI argument parser.

This module implements the command-line interface for LazarusKit using argparse.
"""

import argparse
import importlib
import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from lazaruskit.core import actions

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("lazaruskit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """LazarusKit command-line interface."""

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
            prog="lazaruskit",
            description="LazarusKit - install Lazarus and Free Pascal on CI runners",
            epilog='Use "lazaruskit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"LazarusKit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./lazaruskit.yaml)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_resolve_command(subparsers)

        return parser

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Install Lazarus and Free Pascal",
            description=(
                "Install a Lazarus version with its Free Pascal compiler, "
                "then any requested packages"
            ),
        )
        parser.add_argument(
            "--lazarus-version",
            metavar="VERSION",
            help="Lazarus version, 'stable' or 'dist' (default: stable)",
        )
        parser.add_argument(
            "--include-packages",
            metavar="NAMES",
            help="Comma-separated list of Online Package Manager packages",
        )
        parser.add_argument(
            "--with-cache",
            choices=["true", "false"],
            metavar="BOOL",
            help="Cache installer downloads (true|false) [default: true]",
        )
        parser.add_argument(
            "--strict-version",
            action="store_const",
            const=True,
            help="Fail on Lazarus versions that are not recognized",
        )
        parser.add_argument(
            "--cache-dir",
            type=Path,
            metavar="DIR",
            help="Installer cache directory (default: $RUNNER_TOOL_CACHE/lazaruskit)",
        )
        parser.add_argument(
            "--temp-dir",
            type=Path,
            metavar="DIR",
            help="Working directory for downloads (default: $RUNNER_TEMP)",
        )

    def _add_resolve_command(self, subparsers):
        """Add 'resolve' subcommand."""
        parser = subparsers.add_parser(
            "resolve",
            help="Show installer artifacts for a version",
            description=(
                "Print the Free Pascal version, installer file names, download "
                "URLs and cache key for a Lazarus version without installing"
            ),
        )
        parser.add_argument(
            "--lazarus-version",
            metavar="VERSION",
            help="Lazarus version or 'stable' (default: stable)",
        )
        parser.add_argument(
            "--os",
            choices=["linux", "windows", "macos"],
            metavar="OS",
            help="Target OS (linux|windows|macos) [default: host]",
        )
        parser.add_argument(
            "--arch",
            choices=["x64", "x86", "arm64"],
            metavar="ARCH",
            help="Target architecture (x64|x86|arm64) [default: host]",
        )
        parser.add_argument(
            "--strict-version",
            action="store_true",
            help="Fail on Lazarus versions that are not recognized",
        )
        parser.add_argument("--json", action="store_true", help="Print JSON")

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
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            actions.set_failed(str(e))
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            stream=sys.stdout,
            force=True,  # Reconfigure if already configured
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
            "install": "lazaruskit.cli.commands.install",
            "resolve": "lazaruskit.cli.commands.resolve",
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
