from .config_manager import ConfigManager, get_config_manager
from .logging_config import configure_logging
from .logging_utils import StructuredLogger, get_module_logger
from .platform_info import PlatformInfo, get_platform_info

__all__ = [
    'ConfigManager',
    'PlatformInfo',
    'StructuredLogger',
    'configure_logging',
    'get_config_manager',
    'get_module_logger',
    'get_platform_info',
]
