"""Discovery settings read from a key=value config file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from ..config_manager import ConfigManager, get_config_manager
from ..paths import CONFIG_PATH
from .transport import DEFAULT_SERVICE_TYPE

ENABLE_LOCAL_DISCOVERY_KEY = "enable_local_discovery"
SERVICE_TYPE_KEY = "service_type"
BROWSE_TIMEOUT_KEY = "browse_timeout"
IPV6_KEY = "ipv6"
MODE_KEY = "mode"


@dataclass(frozen=True)
class DiscoverySettings:
    enable_local_discovery: bool = True
    service_type: str = DEFAULT_SERVICE_TYPE
    browse_timeout: float = 3.0
    ipv6: bool = False
    mode: str = "debug"

    @classmethod
    def from_config(cls, config: Dict[str, str], manager: Optional[ConfigManager] = None) -> "DiscoverySettings":
        manager = manager or get_config_manager()
        defaults = cls()
        return cls(
            enable_local_discovery=manager.get_bool(
                config, ENABLE_LOCAL_DISCOVERY_KEY, defaults.enable_local_discovery
            ),
            service_type=manager.get_str(config, SERVICE_TYPE_KEY, defaults.service_type),
            browse_timeout=manager.get_float(config, BROWSE_TIMEOUT_KEY, defaults.browse_timeout),
            ipv6=manager.get_bool(config, IPV6_KEY, defaults.ipv6),
            mode=manager.get_str(config, MODE_KEY, defaults.mode),
        )


async def load_discovery_settings(
    config_path: Optional[Path] = None,
    manager: Optional[ConfigManager] = None,
) -> DiscoverySettings:
    """Load settings from ``config_path`` (default ``CONFIG_PATH``); a missing file yields defaults."""
    manager = manager or get_config_manager()
    config = await manager.read_config_async(config_path or CONFIG_PATH)
    return DiscoverySettings.from_config(config, manager)


__all__ = [
    "DiscoverySettings",
    "load_discovery_settings",
]
