"""Client configuration model."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import urlparse

from .constants import (
    DEFAULT_HEADERS,
    TRIBE_API_BASE_URL,
    TRIBE_API_RENEWAL_TIMEOUT_SECONDS,
    TRIBE_API_TIMEOUT_SECONDS,
    _get_env_float,
    _get_env_str,
)
from .errors.internal import ConfigurationError


def _default_headers() -> dict[str, str]:
    return dict(DEFAULT_HEADERS)


@dataclass(frozen=True)
class ClientConfig:
    """Settings for an AuthenticatedClient.

    Attributes:
        base_url: Backend root URL; request paths are joined onto it.
        timeout_seconds: Total timeout applied to every outgoing request.
        renewal_timeout_seconds: Timeout for the explicit token renewal call.
        default_headers: Headers merged under per-request headers.
    """

    base_url: str = TRIBE_API_BASE_URL
    timeout_seconds: float = TRIBE_API_TIMEOUT_SECONDS
    renewal_timeout_seconds: float = TRIBE_API_RENEWAL_TIMEOUT_SECONDS
    default_headers: Mapping[str, str] = field(default_factory=_default_headers)

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Build a configuration from the current environment.

        Unlike the module constants (read once at import time) this reads the
        environment on every call, which keeps tests and embedding apps in
        control of when settings are captured.

        Returns:
            A validated ClientConfig.

        Raises:
            ConfigurationError: If the resulting settings are invalid.
        """
        config = cls(
            base_url=_get_env_str("TRIBE_API_BASE_URL", TRIBE_API_BASE_URL),
            timeout_seconds=_get_env_float(
                "TRIBE_API_TIMEOUT_SECONDS", TRIBE_API_TIMEOUT_SECONDS
            ),
            renewal_timeout_seconds=_get_env_float(
                "TRIBE_API_RENEWAL_TIMEOUT_SECONDS", TRIBE_API_RENEWAL_TIMEOUT_SECONDS
            ),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Check the settings for consistency.

        Raises:
            ConfigurationError: On a non-http(s) base URL, a non-positive
                timeout, or a renewal timeout longer than the request timeout.
        """
        parsed = urlparse(self.base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(
                f"base_url must be an absolute http(s) URL, got {self.base_url!r}",
                data={"base_url": self.base_url},
            )
        if self.timeout_seconds <= 0:
            raise ConfigurationError(
                f"timeout_seconds must be positive, got {self.timeout_seconds}",
                data={"timeout_seconds": self.timeout_seconds},
            )
        if self.renewal_timeout_seconds <= 0:
            raise ConfigurationError(
                f"renewal_timeout_seconds must be positive, got {self.renewal_timeout_seconds}",
                data={"renewal_timeout_seconds": self.renewal_timeout_seconds},
            )
        if self.renewal_timeout_seconds > self.timeout_seconds:
            raise ConfigurationError(
                "renewal_timeout_seconds must not exceed timeout_seconds",
                data={
                    "timeout_seconds": self.timeout_seconds,
                    "renewal_timeout_seconds": self.renewal_timeout_seconds,
                },
            )
