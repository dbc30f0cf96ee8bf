"""Configuration settings for the Emarsys API client.

Settings are loaded from environment variables and ``.env`` files. They are
only read when a client is built through ``EmarsysClient.from_settings``;
constructing a client directly bypasses them.
"""

import os
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENDPOINT_URL = "https://api.emarsys.net"
MOCK_URL = "https://stoplight.io/mocks/emarsys-sap/emarsys-api/182542"
PATH_BASE = "/api/v2"

_TRUE_VALUES = {"1", "t", "true"}
_FALSE_VALUES = {"0", "f", "false"}


def parse_bool(value: Optional[str]) -> bool:
    """Parse a boolean flag strictly.

    :raises ValueError: If ``value`` is not one of 1/t/true/0/f/false
                        (case-insensitive)
    """
    normalized = (value or "").strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean value: {value!r}")


def resolve_staging(env_var: Optional[str] = None) -> bool:
    """Decide whether requests are flagged as staging traffic.

    Emarsys has no separate test environment; staging traffic goes to
    production and is handled specially there. Without ``env_var`` staging
    is enabled unconditionally. With it, the named variable is parsed as a
    boolean, and an unset or unparsable value disables staging.

    :param env_var: Name of the environment variable holding the flag
    :type env_var: Optional[str]
    :return: Whether staging is enabled
    :rtype: bool
    """
    if env_var is None:
        return True
    try:
        return parse_bool(os.getenv(env_var))
    except ValueError:
        return False


class Settings(BaseSettings):
    """Client settings loaded from environment variables.

    :param user: Emarsys API user name
    :type user: Optional[str]
    :param secret: Emarsys API secret
    :type secret: Optional[str]
    :param api_base_url: Base URL of the Emarsys API
    :type api_base_url: str
    :param use_mock_server: Send requests to the public mock server
    :type use_mock_server: bool
    :param staging: Flag requests as staging traffic
    :type staging: bool
    :param request_timeout: Per-request transport timeout in seconds
    :type request_timeout: float
    :param max_retries: Retries after the first attempt
    :type max_retries: int
    :param log_level: Logging level for the application
    :type log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    user: Optional[str] = Field(
        None, alias="EMARSYS_USER", description="Emarsys API user name"
    )
    secret: Optional[str] = Field(
        None, alias="EMARSYS_SECRET", description="Emarsys API secret"
    )

    use_mock_server: bool = Field(
        False,
        alias="EMARSYS_USE_MOCK_SERVER",
        description="Use the Emarsys mock server instead of the live API",
    )
    api_base_url: str = Field(
        ENDPOINT_URL,
        alias="EMARSYS_API_BASE_URL",
        validate_default=True,
        description="Emarsys API base URL",
    )
    staging: bool = Field(
        False, alias="EMARSYS_STAGING", description="Flag requests as staging traffic"
    )

    request_timeout: float = Field(
        120.0,
        alias="EMARSYS_REQUEST_TIMEOUT",
        gt=0,
        description="Per-request timeout in seconds",
    )
    max_retries: int = Field(
        5,
        alias="EMARSYS_MAX_RETRIES",
        ge=0,
        description="Retries after the first attempt",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", alias="LOG_LEVEL", description="Logging level"
    )

    @field_validator("api_base_url")
    @classmethod
    def select_base_url(cls, v: str, info) -> str:
        """Swap in the mock server URL when ``use_mock_server`` is set."""
        if info.data.get("use_mock_server"):
            return MOCK_URL
        return v.rstrip("/")

    @property
    def has_credentials(self) -> bool:
        return bool(self.user and self.user.strip() and self.secret)
