"""
Browses the local network for advertised debug sessions.

Follows the same lifecycle as the advertiser's transport: ``start()``,
callbacks while running, ``stop()``.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, List, Optional, Set

from zeroconf import ServiceStateChange, Zeroconf
from zeroconf.asyncio import AsyncServiceBrowser, AsyncServiceInfo, AsyncZeroconf

from ..logging_utils import LoggerLike, ensure_structured_logger
from .observation import MdnsObservation
from .transport import DEFAULT_SERVICE_TYPE

RESOLVE_TIMEOUT_MS = 3000

ObservationFoundCallback = Callable[[str, MdnsObservation], Awaitable[None]]
ObservationLostCallback = Callable[[str], Awaitable[None]]


class ObservationBrowser:
    """
    Keeps a live view of advertised observations keyed by service name.

    Services whose TXT record does not decode to an observation are ignored.

    Usage:
        browser = ObservationBrowser(on_found=handle_found)
        await browser.start()
        # ... later ...
        await browser.stop()
    """

    def __init__(
        self,
        service_type: str = DEFAULT_SERVICE_TYPE,
        on_found: Optional[ObservationFoundCallback] = None,
        on_lost: Optional[ObservationLostCallback] = None,
        logger: LoggerLike = None,
    ):
        self._service_type = service_type
        self._on_found = on_found
        self._on_lost = on_lost
        self._logger = ensure_structured_logger(logger, fallback_name="ObservationBrowser")

        self._observations: Dict[str, MdnsObservation] = {}
        self._zeroconf: Optional[AsyncZeroconf] = None
        self._browser: Optional[AsyncServiceBrowser] = None
        self._pending: Set[asyncio.Task] = set()
        self._running = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def observations(self) -> Dict[str, MdnsObservation]:
        """Currently known observations (service name -> observation)."""
        return dict(self._observations)

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start browsing; a second call is a no-op."""
        if self._running:
            return

        self._running = True
        self._loop = asyncio.get_running_loop()

        try:
            self._zeroconf = AsyncZeroconf()
            self._browser = AsyncServiceBrowser(
                self._zeroconf.zeroconf,
                self._service_type,
                handlers=[self._on_service_state_change],
            )
        except Exception as e:
            self._logger.error("Failed to start mDNS browser: %s", e)
            self._running = False
            raise
        self._logger.info("Browsing for %s", self._service_type)

    async def stop(self) -> None:
        """Stop browsing and report every known observation as lost."""
        if not self._running:
            return

        self._running = False

        try:
            if self._browser:
                await self._browser.async_cancel()
            if self._zeroconf:
                await self._zeroconf.async_close()
        except Exception as e:
            self._logger.error("Error stopping mDNS browser: %s", e)
        finally:
            self._browser = None
            self._zeroconf = None

        for task in list(self._pending):
            task.cancel()
        self._pending.clear()

        for name in list(self._observations):
            await self._handle_service_removed(name)

        self._logger.info("Browser stopped")

    def _on_service_state_change(self, **kwargs) -> None:
        """zeroconf handler; runs on the event loop, so just schedule work.

        zeroconf >= 0.132 passes keyword-only arguments.
        """
        if self._loop is None or not self._running:
            return

        zeroconf = kwargs.get("zeroconf")
        service_type = kwargs.get("service_type", "")
        name = kwargs.get("name", "")
        state_change = kwargs.get("state_change")

        if state_change in (ServiceStateChange.Added, ServiceStateChange.Updated):
            coro = self._handle_service_added(zeroconf, service_type, name)
        elif state_change == ServiceStateChange.Removed:
            coro = self._handle_service_removed(name)
        else:
            return

        task = self._loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _resolve(self, zeroconf: Zeroconf, service_type: str, name: str) -> Optional[AsyncServiceInfo]:
        info = AsyncServiceInfo(service_type, name)
        if not await info.async_request(zeroconf, RESOLVE_TIMEOUT_MS):
            return None
        return info

    async def _handle_service_added(self, zeroconf: Zeroconf, service_type: str, name: str) -> None:
        try:
            info = await self._resolve(zeroconf, service_type, name)
        except Exception as e:
            self._logger.warning("Failed to resolve %s: %s", name, e)
            return

        if info is None:
            self._logger.debug("No service info available for %s", name)
            return

        observation = MdnsObservation.from_properties(info.properties or {})
        if observation is None:
            self._logger.debug("Ignoring malformed observation from %s", name)
            return

        previous = self._observations.get(name)
        self._observations[name] = observation
        if previous == observation:
            return

        self._logger.info("Observed %s at %s", observation.project_name, observation.ws_uri)
        await self._handle_observation_found(name, observation)

    async def _handle_observation_found(self, name: str, observation: MdnsObservation) -> None:
        if self._on_found:
            try:
                await self._on_found(name, observation)
            except Exception as e:
                self._logger.error("Error in observation found callback: %s", e)

    async def _handle_service_removed(self, name: str) -> None:
        observation = self._observations.pop(name, None)
        if observation is None:
            return
        self._logger.info("Observation lost: %s", observation.project_name)
        if self._on_lost:
            try:
                await self._on_lost(name)
            except Exception as e:
                self._logger.error("Error in observation lost callback: %s", e)


async def discover_observations(
    service_type: str = DEFAULT_SERVICE_TYPE,
    timeout: float = 3.0,
    logger: LoggerLike = None,
) -> List[MdnsObservation]:
    """Browse for ``timeout`` seconds and return what was seen."""
    browser = ObservationBrowser(service_type, logger=logger)
    await browser.start()
    try:
        await asyncio.sleep(timeout)
        return list(browser.observations.values())
    finally:
        await browser.stop()


__all__ = [
    "ObservationBrowser",
    "ObservationFoundCallback",
    "ObservationLostCallback",
    "discover_observations",
]
