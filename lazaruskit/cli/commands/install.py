"""
Install command implementation.

Installs Lazarus, its Free Pascal compiler and any requested packages.
"""

import logging

from lazaruskit.config.parser import build_request
from lazaruskit.toolchain.installer import Installer

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    logger.debug(f"Arguments: {args}")

    request = build_request(
        overrides={
            "lazarus-version": args.lazarus_version,
            "include-packages": args.include_packages,
            "with-cache": args.with_cache,
            "strict-version": args.strict_version,
            "cache-dir": args.cache_dir,
            "temp-dir": args.temp_dir,
        },
        config_file=args.config,
    )

    Installer(request).install()

    logger.info(f"Lazarus {request.version} installed")
    return 0
