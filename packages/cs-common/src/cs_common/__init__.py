"""
cs-common: Shared library for CallSync.

Provides common data models, configuration management, structured
logging, Prometheus metrics and time helpers used by the player service.
"""

from cs_common.config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
