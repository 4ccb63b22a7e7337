from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_BASE_URL = "http://192.168.0.32:5000/api"
DEFAULT_TIMEOUT = 15.0
DEFAULT_POLL_INTERVAL = 5.0

# Environment variable names
ENV_BASE_URL = "FITCOIN_BASE_URL"
ENV_TIMEOUT = "FITCOIN_TIMEOUT"
ENV_POLL_INTERVAL = "FITCOIN_POLL_INTERVAL"
ENV_ACCESS_TOKEN = "FITCOIN_ACCESS_TOKEN"
ENV_USER_ID = "FITCOIN_USER_ID"


class ConfigError(RuntimeError):
    """Invalid client configuration."""


def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.environ.get(name)
    return v if v not in (None, "") else default


def _positive_float(raw: Optional[str], what: str, default: float) -> float:
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{what} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{what} must be > 0, got {raw!r}")
    return value


@dataclass(frozen=True)
class ClientSettings:
    """
    Connection settings for `FitcoinService`.

    Environment (all optional)
    - FITCOIN_BASE_URL: service root, e.g. "https://fitcoin.example.com/api"
    - FITCOIN_TIMEOUT: per-request transport timeout in seconds
    - FITCOIN_POLL_INTERVAL: default link-request monitor interval in seconds
    """

    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL

    @classmethod
    def from_env(cls) -> "ClientSettings":
        base_url = _getenv(ENV_BASE_URL, DEFAULT_BASE_URL) or DEFAULT_BASE_URL
        return cls(
            base_url=base_url.rstrip("/"),
            timeout=_positive_float(_getenv(ENV_TIMEOUT), ENV_TIMEOUT, DEFAULT_TIMEOUT),
            poll_interval=_positive_float(
                _getenv(ENV_POLL_INTERVAL), ENV_POLL_INTERVAL, DEFAULT_POLL_INTERVAL
            ),
        )


__all__ = [
    "ClientSettings",
    "ConfigError",
    "DEFAULT_BASE_URL",
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_TIMEOUT",
    "ENV_ACCESS_TOKEN",
    "ENV_BASE_URL",
    "ENV_POLL_INTERVAL",
    "ENV_TIMEOUT",
    "ENV_USER_ID",
]
