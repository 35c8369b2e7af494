"""mDNS advertisement and discovery of debug sessions."""

from .advertiser import AdvertiserState, MdnsAdvertiser
from .bot_detector import AzureDetector, BotDetector, EnvironmentBotDetector, StaticBotDetector
from .browser import ObservationBrowser, discover_observations
from .eligibility import is_eligible
from .metadata import Clock, DeviceInfo, FixedClock, HostDevice, SystemClock, VersionInfo
from .observation import DTD_URI_KEY, REQUIRED_KEYS, MdnsObservation
from .settings import DiscoverySettings, load_discovery_settings
from .transport import DEFAULT_SERVICE_TYPE, Transport, TransportError, ZeroconfTransport

__all__ = [
    'AdvertiserState',
    'AzureDetector',
    'BotDetector',
    'Clock',
    'DEFAULT_SERVICE_TYPE',
    'DTD_URI_KEY',
    'DeviceInfo',
    'DiscoverySettings',
    'EnvironmentBotDetector',
    'FixedClock',
    'HostDevice',
    'MdnsAdvertiser',
    'MdnsObservation',
    'ObservationBrowser',
    'REQUIRED_KEYS',
    'StaticBotDetector',
    'SystemClock',
    'Transport',
    'TransportError',
    'VersionInfo',
    'ZeroconfTransport',
    'discover_observations',
    'is_eligible',
    'load_discovery_settings',
]
