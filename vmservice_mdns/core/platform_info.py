"""
Platform detection for vmservice-mdns.

Detects the host platform once and caches the result. The target-platform
string is what an advertised observation reports for a session running on
this machine.
"""

import platform
import sys
from dataclasses import dataclass
from typing import Optional

from .logging_utils import get_module_logger

logger = get_module_logger("PlatformInfo")

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "i386": "x86",
    "i686": "x86",
}

_OS_NAMES = {
    "linux": "linux",
    "win32": "windows",
    "darwin": "darwin",
}


@dataclass(frozen=True)
class PlatformInfo:
    """Immutable platform information detected at boot.

    Attributes:
        platform: System platform ('linux', 'darwin', 'win32')
        architecture: CPU architecture ('x86_64', 'arm64', 'aarch64', 'armv7l')
        os_release: OS release version string
        python_version: Python version string
    """

    platform: str
    architecture: str
    os_release: str
    python_version: str

    @property
    def target_platform(self) -> str:
        """Return the target-platform identifier, e.g. ``linux-x64``.

        macOS builds are universal, so ``darwin`` carries no architecture.
        """
        os_name = _OS_NAMES.get(self.platform, self.platform)
        if os_name == "darwin":
            return os_name
        arch = _ARCH_ALIASES.get(self.architecture.lower(), self.architecture.lower())
        if not arch:
            return os_name
        return f"{os_name}-{arch}"

    def __str__(self) -> str:
        return f"{self.platform} ({self.architecture})"


def detect_platform() -> PlatformInfo:
    """Detect current platform information.

    Use get_platform_info() to get the cached singleton instance.
    """
    info = PlatformInfo(
        platform=sys.platform,
        architecture=platform.machine(),
        os_release=platform.release(),
        python_version=platform.python_version(),
    )
    logger.debug("Platform detected: %s", info)
    return info


_platform_info: Optional[PlatformInfo] = None


def get_platform_info() -> PlatformInfo:
    """Get cached platform information (singleton)."""
    global _platform_info
    if _platform_info is None:
        _platform_info = detect_platform()
    return _platform_info


def reset_platform_info() -> None:
    """Reset the cached platform info (for testing only)."""
    global _platform_info
    _platform_info = None


__all__ = [
    "PlatformInfo",
    "get_platform_info",
    "detect_platform",
    "reset_platform_info",
]
