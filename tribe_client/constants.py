"""
Configuration constants for the Tribe API client

This module contains all configurable constants used throughout the client.
Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_str(name: str, default: str) -> str:
    """Retrieve a non-empty string from an environment variable."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


# Backend location (fixed per process lifetime)
TRIBE_API_BASE_URL = _get_env_str(
    "TRIBE_API_BASE_URL", "https://vibe-tribe-phi.vercel.app"
)

# Request timeouts
TRIBE_API_TIMEOUT_SECONDS = _get_env_float(
    "TRIBE_API_TIMEOUT_SECONDS", 15.0
)  # Generous: serverless backends are slow on cold start
TRIBE_API_RENEWAL_TIMEOUT_SECONDS = _get_env_float(
    "TRIBE_API_RENEWAL_TIMEOUT_SECONDS", 5.0
)  # Explicit token renewal fails fast

# Outgoing headers
APPLICATION_JSON = "application/json"
TRIBE_API_USER_AGENT = _get_env_str("TRIBE_API_USER_AGENT", "TribeClient/1.0")
DEFAULT_HEADERS: dict[str, str] = {
    "Accept": APPLICATION_JSON,
    "Content-Type": APPLICATION_JSON,
    "User-Agent": TRIBE_API_USER_AGENT,
}

# User-facing notification texts
MSG_TIMEOUT = "Request timed out. Please try again."
MSG_NETWORK = "Network error. Please check your connection."
MSG_SESSION_EXPIRED = "Session expired. Please login again."
MSG_GENERIC = "An error occurred"
