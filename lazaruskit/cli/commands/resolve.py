"""
Resolve command implementation.

Shows which installers a Lazarus version maps to, without installing.
"""

import json
import logging

from lazaruskit.core.platform import PlatformInfo, detect_platform
from lazaruskit.toolchain.cache import cache_key
from lazaruskit.toolchain.resolver import (
    artifact_names,
    package_folder_url,
    required_kinds,
    resolve_alias,
)

logger = logging.getLogger(__name__)


def resolve(version: str, platform: PlatformInfo, strict: bool = False) -> dict:
    """
    Describe the artifacts for a version on a platform.

    Returns:
        Dictionary with the concrete version, FPC version, cache key and
        one {name, url} entry per artifact kind
    """
    concrete = resolve_alias(version, platform)
    names = artifact_names(concrete, platform, strict=strict)
    folder = package_folder_url(concrete, platform)

    return {
        "lazarus_version": concrete,
        "fpc_version": names.fpc_version,
        "platform": platform.platform_string(),
        "cache_key": cache_key(concrete, platform),
        "artifacts": {
            kind: {"name": names.get(kind), "url": folder + names.get(kind)}
            for kind in required_kinds(platform)
        },
    }


def run(args) -> int:
    """
    Run the resolve command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    host = detect_platform()
    platform = PlatformInfo(os=args.os or host.os, arch=args.arch or host.arch)
    version = args.lazarus_version or "stable"

    if version == "dist" and platform.os != "windows":
        print(f"Lazarus 'dist' on {platform.os} uses the system package manager")
        return 0

    result = resolve(version, platform, strict=args.strict_version)

    if args.json:
        print(json.dumps(result, indent=2))
        return 0

    print(f"Lazarus:   {result['lazarus_version']}")
    print(f"FPC:       {result['fpc_version']}")
    print(f"Platform:  {result['platform']}")
    print(f"Cache key: {result['cache_key']}")
    for kind, artifact in result["artifacts"].items():
        print(f"  {kind:<7} {artifact['name']}")
        print(f"          {artifact['url']}")
    return 0
