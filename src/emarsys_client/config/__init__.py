"""Configuration for the Emarsys API client."""

from .settings import (
    ENDPOINT_URL,
    MOCK_URL,
    PATH_BASE,
    Settings,
    parse_bool,
    resolve_staging,
)

__all__ = [
    "ENDPOINT_URL",
    "MOCK_URL",
    "PATH_BASE",
    "Settings",
    "parse_bool",
    "resolve_staging",
]
