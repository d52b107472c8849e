"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from ..core.guard.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ATLASSIAN_API_URL = "https://api.atlassian.com"
DEFAULT_PAGE_SIZE = 50
DEFAULT_REQUEST_TIMEOUT = 10
SECRETS_DIR = Path("/run/secrets")


def _read_secret(secret_name: str, env_var: str | None = None) -> str | None:
    """Return the mounted /run/secrets/<secret_name> file if non-empty, else $env_var."""
    secret_file = SECRETS_DIR / secret_name
    if secret_file.is_file():
        try:
            token = secret_file.read_text().strip()
        except OSError as e:
            logger.warning(f"[settings] Cannot read secret {secret_name}: {e}")
            token = ""
        if token:
            logger.info(f"[settings] {secret_name} taken from secrets mount")
            return token

    token = os.getenv(env_var) if env_var else None
    if token:
        logger.info(f"[settings] {secret_name} taken from {env_var}")
    return token or None


def _parse_bool(raw: Optional[str], default: bool = False) -> bool:
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def normalize_ignore_groups(names: Iterable[str]) -> frozenset:
    """Lower-case and de-duplicate group names (displayName is case-insensitive)."""
    return frozenset(name.strip().lower() for name in names if name and name.strip())


@dataclass(frozen=True)
class ConnectorConfig:
    """Immutable connector configuration, passed explicitly to every handler."""
    # Atlassian Guard SCIM directory
    base_url: str = ATLASSIAN_API_URL
    directory_id: str = ""
    api_token: str = field(default="", repr=False)

    # Search
    default_page_size: int = DEFAULT_PAGE_SIZE
    ignore_groups: frozenset = frozenset()

    # Behaviour toggles
    unique_check_group_display_name: bool = False
    strict_schema: bool = False

    # Transport
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self):
        object.__setattr__(self, "ignore_groups", normalize_ignore_groups(self.ignore_groups))

    @property
    def scim_base_url(self) -> str:
        """SCIM endpoint root, e.g. https://api.atlassian.com/scim/directory/{id}."""
        return f"{self.base_url.rstrip('/')}/scim/directory/{self.directory_id}"

    def is_ignored_group(self, display_name: Optional[str]) -> bool:
        return bool(display_name) and display_name.lower() in self.ignore_groups

    def validate(self) -> None:
        """Check the settings needed to talk to the vendor API.

        Raises:
            ConfigurationError: If a required setting is missing or out of range
        """
        if not self.base_url:
            raise ConfigurationError("GUARD_BASE_URL is required")
        if not self.directory_id:
            raise ConfigurationError("GUARD_DIRECTORY_ID is required")
        if not self.api_token:
            raise ConfigurationError("GUARD_API_TOKEN not found in /run/secrets or environment")
        if self.default_page_size < 1:
            raise ConfigurationError("GUARD_DEFAULT_PAGE_SIZE must be positive")
        if self.request_timeout < 1:
            raise ConfigurationError("GUARD_REQUEST_TIMEOUT must be positive")


def load_settings() -> ConnectorConfig:
    """Load connector settings from environment and /run/secrets."""
    try:
        default_page_size = int(os.environ.get("GUARD_DEFAULT_PAGE_SIZE", DEFAULT_PAGE_SIZE))
        request_timeout = int(os.environ.get("GUARD_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT))
    except ValueError as exc:
        raise ConfigurationError(f"Invalid numeric setting: {exc}") from exc

    ignore_groups = os.environ.get("GUARD_IGNORE_GROUPS", "").split(",")

    config = ConnectorConfig(
        base_url=os.environ.get("GUARD_BASE_URL", ATLASSIAN_API_URL),
        directory_id=os.environ.get("GUARD_DIRECTORY_ID", ""),
        api_token=_read_secret("guard_api_token", "GUARD_API_TOKEN") or "",
        default_page_size=default_page_size,
        ignore_groups=normalize_ignore_groups(ignore_groups),
        unique_check_group_display_name=_parse_bool(os.environ.get("GUARD_UNIQUE_CHECK_GROUP_DISPLAY_NAME")),
        strict_schema=_parse_bool(os.environ.get("GUARD_STRICT_SCHEMA")),
        request_timeout=request_timeout,
    )
    config.validate()

    logger.info(
        f"[settings] directory={config.directory_id}; page_size={config.default_page_size}; "
        f"ignored_groups={len(config.ignore_groups)}; token={'***' if config.api_token else 'EMPTY'}"
    )
    return config
