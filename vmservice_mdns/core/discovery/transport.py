"""
mDNS responder transport.

The advertiser hands an encoded observation to a ``Transport``; the
zeroconf-backed implementation publishes it as the TXT record of a DNS-SD
service named after the application.
"""

from __future__ import annotations

import asyncio
import ipaddress
import os
import socket
from typing import Callable, Dict, List, Optional, Protocol

import ifaddr
from zeroconf import Error as ZeroconfError
from zeroconf import IPVersion
from zeroconf.asyncio import AsyncServiceInfo, AsyncZeroconf

from ..logging_utils import LoggerLike, ensure_structured_logger
from .observation import iter_record_entries

DEFAULT_SERVICE_TYPE = "_flutter-debug._tcp.local."

# DNS labels are limited to 63 bytes.
MAX_INSTANCE_LABEL_BYTES = 63

AddressProvider = Callable[[bool], List[str]]


class TransportError(RuntimeError):
    """The responder could not be started."""


class Transport(Protocol):
    async def start_responding(self, app_name: str, encoded_record: str, *, port: int = 0) -> None: ...

    async def stop(self, app_name: str) -> None: ...

    async def close(self) -> None: ...


def local_addresses(ipv6: bool = False) -> List[str]:
    """Return routable local addresses (loopback and link-local excluded)."""
    addresses: List[str] = []
    for adapter in ifaddr.get_adapters():
        for ip in adapter.ips:
            if ip.is_IPv4:
                candidate = ip.ip
            elif ipv6 and ip.is_IPv6:
                candidate = ip.ip[0]
            else:
                continue
            try:
                address = ipaddress.ip_address(candidate.split("%", 1)[0])
            except ValueError:
                continue
            if address.is_loopback or address.is_link_local:
                continue
            text = str(address)
            if text not in addresses:
                addresses.append(text)
    return addresses


def instance_label(app_name: str, hostname: str, pid: int) -> str:
    """Return the DNS-SD instance label for one session.

    Sessions of the same app on other hosts, or in other processes, must
    not collide, so the host and pid are appended. The app name is cut
    first when the label would exceed one DNS label.
    """
    suffix = f"-{hostname}-{pid}"
    label = f"{app_name}{suffix}"
    while len(label.encode("utf-8")) > MAX_INSTANCE_LABEL_BYTES and app_name:
        app_name = app_name[:-1]
        label = f"{app_name}{suffix}"
    return label


class ZeroconfTransport:
    """Publishes one DNS-SD service per application name.

    The instance name is ``<app>-<host>-<pid>`` so concurrent sessions of
    one app stay distinct on the network.

    Usage:
        transport = ZeroconfTransport()
        await transport.start_responding("my_app", observation.to_txt(), port=1234)
        # ... later ...
        await transport.close()
    """

    def __init__(
        self,
        service_type: str = DEFAULT_SERVICE_TYPE,
        *,
        ipv6: bool = False,
        hostname: Optional[str] = None,
        pid: Optional[int] = None,
        address_provider: Optional[AddressProvider] = None,
        logger: LoggerLike = None,
    ) -> None:
        self._service_type = service_type
        self._ipv6 = ipv6
        # Only the first label; ".local." is appended for the SRV target.
        self._hostname = (hostname or socket.gethostname()).split(".", 1)[0]
        self._pid = os.getpid() if pid is None else pid
        self._address_provider = address_provider or local_addresses
        self._logger = ensure_structured_logger(logger, fallback_name="ZeroconfTransport")

        self._zeroconf: Optional[AsyncZeroconf] = None
        self._services: Dict[str, AsyncServiceInfo] = {}
        self._lock = asyncio.Lock()

    @property
    def service_type(self) -> str:
        return self._service_type

    @property
    def responding(self) -> List[str]:
        """Application names currently being advertised."""
        return list(self._services)

    def _service_name(self, app_name: str) -> str:
        return f"{instance_label(app_name, self._hostname, self._pid)}.{self._service_type}"

    def _ensure_zeroconf(self) -> AsyncZeroconf:
        if self._zeroconf is None:
            ip_version = IPVersion.All if self._ipv6 else IPVersion.V4Only
            self._zeroconf = AsyncZeroconf(ip_version=ip_version)
        return self._zeroconf

    async def start_responding(self, app_name: str, encoded_record: str, *, port: int = 0) -> None:
        """Register (or update) the service for ``app_name``.

        Raises:
            TransportError: no usable interface, or zeroconf refused the service.
        """
        async with self._lock:
            try:
                addresses = self._address_provider(self._ipv6)
                if not addresses:
                    raise TransportError("No usable network interface for mDNS")

                info = AsyncServiceInfo(
                    self._service_type,
                    self._service_name(app_name),
                    port=port,
                    properties=dict(iter_record_entries(encoded_record)),
                    server=f"{self._hostname}.local.",
                    parsed_addresses=addresses,
                )
                zeroconf = self._ensure_zeroconf()
                if app_name in self._services:
                    pending = await zeroconf.async_update_service(info)
                else:
                    pending = await zeroconf.async_register_service(info, allow_name_change=True)
                await pending
            except (OSError, ZeroconfError) as e:
                raise TransportError(f"Failed to start mDNS responder for {app_name}: {e}") from e

            self._services[app_name] = info
            self._logger.info(
                "Responding to %s as %s on %s",
                self._service_type,
                app_name,
                ", ".join(addresses),
            )

    async def stop(self, app_name: str) -> None:
        """Unregister ``app_name``; unknown names are ignored."""
        async with self._lock:
            info = self._services.pop(app_name, None)
            if info is None or self._zeroconf is None:
                return
            try:
                pending = await self._zeroconf.async_unregister_service(info)
                await pending
            except (OSError, ZeroconfError) as e:
                self._logger.warning("Error unregistering %s: %s", app_name, e)
                return
            self._logger.info("Stopped responding as %s", app_name)

    async def close(self) -> None:
        """Unregister every service and release the sockets."""
        async with self._lock:
            self._services.clear()
            if self._zeroconf is None:
                return
            zeroconf, self._zeroconf = self._zeroconf, None
            try:
                await zeroconf.async_unregister_all_services()
                await zeroconf.async_close()
            except (OSError, ZeroconfError) as e:
                self._logger.warning("Error closing mDNS responder: %s", e)


__all__ = [
    "DEFAULT_SERVICE_TYPE",
    "Transport",
    "TransportError",
    "ZeroconfTransport",
    "instance_label",
    "local_addresses",
]
