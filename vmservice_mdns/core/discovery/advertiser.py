"""
Advertises a running session's debugging endpoints over mDNS.

Advertisement is a convenience: every environment- or network-originated
problem is logged and absorbed here so the caller's launch never fails
because of it.
"""

from __future__ import annotations

import os
import socket
from enum import Enum
from typing import Dict, Optional
from urllib.parse import urlsplit

from ..logging_utils import LoggerLike, ensure_structured_logger
from .bot_detector import BotDetector
from .eligibility import is_eligible
from .metadata import Clock, DeviceInfo, SystemClock, VersionInfo
from .observation import MdnsObservation
from .transport import Transport

NO_VM_SERVICE_MESSAGE = "No VM service URI available, not starting mDNS server."


class AdvertiserState(Enum):
    IDLE = "idle"
    GUARD_EVALUATED = "guard_evaluated"
    SUPPRESSED = "suppressed"
    ADVERTISING = "advertising"
    STOPPED = "stopped"


def _port_of(uri: str) -> int:
    try:
        return urlsplit(uri).port or 0
    except ValueError:
        return 0


class MdnsAdvertiser:
    """
    Publishes an ``MdnsObservation`` for each application name.

    State transitions:
    - IDLE -> GUARD_EVALUATED: eligibility guard answered
    - GUARD_EVALUATED -> SUPPRESSED: guard denied, or no VM service yet
    - GUARD_EVALUATED -> ADVERTISING: transport accepted the record
    - GUARD_EVALUATED -> STOPPED: metadata or transport failure
    - ADVERTISING -> STOPPED: stop() / close()

    Usage:
        advertiser = MdnsAdvertiser(
            ZeroconfTransport(),
            EnvironmentBotDetector(),
            device=HostDevice(),
            versions=VersionInfo.current(),
        )
        await advertiser.advertise("my_app", "ws://127.0.0.1:1234/abc=/ws")
        # ... later ...
        await advertiser.close()
    """

    def __init__(
        self,
        transport: Transport,
        bot_detector: BotDetector,
        *,
        device: DeviceInfo,
        versions: VersionInfo,
        enable_local_discovery: bool = True,
        clock: Optional[Clock] = None,
        mode: str = "debug",
        hostname: Optional[str] = None,
        pid: Optional[int] = None,
        logger: LoggerLike = None,
    ) -> None:
        self._transport = transport
        self._bot_detector = bot_detector
        self._device = device
        self._versions = versions
        self._enable_local_discovery = enable_local_discovery
        self._clock = clock or SystemClock()
        self._mode = mode
        self._hostname = hostname or socket.gethostname()
        self._pid = os.getpid() if pid is None else pid
        self.logger = ensure_structured_logger(logger, fallback_name="MdnsAdvertiser")

        self._state = AdvertiserState.IDLE
        self._advertised: Dict[str, MdnsObservation] = {}

    @property
    def state(self) -> AdvertiserState:
        """Outcome of the most recent ``advertise``/``stop`` call.

        This is not per app: a suppressed or failed call for one app leaves
        earlier advertisements live. Use ``is_advertising`` or ``advertised``
        to ask what is currently published.
        """
        return self._state

    @property
    def is_advertising(self) -> bool:
        """True while at least one app's record is published."""
        return bool(self._advertised)

    @property
    def advertised(self) -> Dict[str, MdnsObservation]:
        """Observations currently published (app_name -> observation)."""
        return dict(self._advertised)

    async def advertise(
        self,
        app_name: str,
        vm_service_uri: Optional[str],
        dtd_uri: Optional[str] = None,
    ) -> None:
        """Advertise ``vm_service_uri`` (and ``dtd_uri``) under ``app_name``.

        Calling again for an app that is already advertised replaces its
        record in place.

        Raises:
            ValueError: ``app_name`` is empty.
        """
        if not app_name:
            raise ValueError("app_name must not be empty")

        eligible = await is_eligible(
            self._bot_detector,
            self._enable_local_discovery,
            logger=self.logger,
        )
        self._state = AdvertiserState.GUARD_EVALUATED

        if not eligible:
            self._state = AdvertiserState.SUPPRESSED
            return

        if vm_service_uri is None:
            self.logger.trace(NO_VM_SERVICE_MESSAGE)
            self._state = AdvertiserState.SUPPRESSED
            return

        try:
            observation = await self._build_observation(app_name, str(vm_service_uri), dtd_uri)
        except Exception as e:
            self.logger.error("Could not assemble mDNS observation for %s: %s", app_name, e)
            self._state = AdvertiserState.STOPPED
            return

        try:
            await self._transport.start_responding(
                app_name,
                observation.to_txt(),
                port=_port_of(observation.ws_uri),
            )
        except Exception as e:
            self.logger.warning(
                "Error getting local IPs or starting mDNS; local discovery unavailable: %s", e
            )
            self._state = AdvertiserState.STOPPED
            return

        self._advertised[app_name] = observation
        self._state = AdvertiserState.ADVERTISING
        self.logger.debug("Advertising %s at %s", app_name, observation.ws_uri)

    async def _build_observation(
        self, app_name: str, ws_uri: str, dtd_uri: Optional[str]
    ) -> MdnsObservation:
        target_platform = await self._device.target_platform()
        return MdnsObservation(
            hostname=self._hostname,
            project_name=app_name,
            device_name=self._device.name,
            device_id=self._device.id,
            target_platform=target_platform,
            mode=self._mode,
            ws_uri=ws_uri,
            epoch=self._clock.now(),
            pid=self._pid,
            flutter_version=self._versions.framework_version,
            dart_version=self._versions.sdk_version,
            dtd_uri=dtd_uri,
        )

    async def stop(self, app_name: Optional[str] = None) -> None:
        """Stop advertising ``app_name``, or every app when omitted."""
        names = [app_name] if app_name is not None else list(self._advertised)
        for name in names:
            self._advertised.pop(name, None)
            try:
                await self._transport.stop(name)
            except Exception as e:
                self.logger.warning("Error stopping mDNS advertisement for %s: %s", name, e)

        if not self._advertised:
            self._state = AdvertiserState.STOPPED

    async def close(self) -> None:
        await self.stop()
        try:
            await self._transport.close()
        except Exception as e:
            self.logger.warning("Error closing mDNS transport: %s", e)

    async def __aenter__(self) -> "MdnsAdvertiser":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


__all__ = [
    "AdvertiserState",
    "MdnsAdvertiser",
    "NO_VM_SERVICE_MESSAGE",
]
