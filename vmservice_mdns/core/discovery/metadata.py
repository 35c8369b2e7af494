"""Clock, device and version collaborators consumed by the advertiser."""

from __future__ import annotations

import platform
import socket
import time
from dataclasses import dataclass
from typing import Optional, Protocol

from ..platform_info import PlatformInfo, get_platform_info


class Clock(Protocol):
    def now(self) -> int: ...


class SystemClock:
    """Wall clock in milliseconds since the Unix epoch."""

    def now(self) -> int:
        return int(time.time() * 1000)


class FixedClock:
    def __init__(self, value: int) -> None:
        self._value = value

    def now(self) -> int:
        return self._value


class DeviceInfo(Protocol):
    """The device a session runs on.

    ``target_platform`` is async because some devices must be queried.
    """

    @property
    def name(self) -> str: ...

    @property
    def id(self) -> str: ...

    async def target_platform(self) -> str: ...


class HostDevice:
    """The local machine, for sessions running directly on the host."""

    def __init__(
        self,
        name: Optional[str] = None,
        device_id: Optional[str] = None,
        platform_info: Optional[PlatformInfo] = None,
    ) -> None:
        self._platform_info = platform_info or get_platform_info()
        os_name = self._platform_info.target_platform.split("-", 1)[0]
        self._name = name or socket.gethostname()
        self._id = device_id or os_name

    @property
    def name(self) -> str:
        return self._name

    @property
    def id(self) -> str:
        return self._id

    async def target_platform(self) -> str:
        return self._platform_info.target_platform


@dataclass(frozen=True)
class VersionInfo:
    framework_version: str
    sdk_version: str

    @classmethod
    def current(cls) -> "VersionInfo":
        """Versions of this package and of the running interpreter."""
        from ... import __version__

        return cls(framework_version=__version__, sdk_version=platform.python_version())


__all__ = [
    "Clock",
    "DeviceInfo",
    "FixedClock",
    "HostDevice",
    "SystemClock",
    "VersionInfo",
]
