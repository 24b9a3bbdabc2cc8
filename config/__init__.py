"""Application configuration utilities."""

from .log import LOGGER_NAMESPACE, configure_logging
from .settings import DEFAULT_LOG_LEVEL, Settings, get_settings

__all__ = [
    "DEFAULT_LOG_LEVEL",
    "LOGGER_NAMESPACE",
    "Settings",
    "configure_logging",
    "get_settings",
]
