"""Configuration module for redcap-client.

Provides settings loading from the environment, .env and YAML.
"""

from redcap_client.config.settings import (
    Settings,
    get_settings,
    load_settings,
    reload_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "load_settings",
    "reload_settings",
]
