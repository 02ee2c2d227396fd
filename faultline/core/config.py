"""Application configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_EXPOSE_DETAILS = True
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_OUTBOUND_BASE_URL = "https://api.example.com"
DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0
DEFAULT_READ_TIMEOUT_SECONDS = 30.0
DEFAULT_RETRY_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 1.0

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    return float(raw)


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    return int(raw)


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def redact_secret(secret: str) -> str:
    """Return a non-recoverable placeholder for sensitive values."""
    if not secret:
        return "<empty>"
    return "<redacted>"


@dataclass(frozen=True)
class FaultSettings:
    """Runtime settings for failure translation."""

    expose_details: bool
    log_level: str


@dataclass(frozen=True)
class OutboundSettings:
    """Runtime settings for outbound REST calls."""

    base_url: str
    api_token: str
    connect_timeout_seconds: float
    read_timeout_seconds: float
    retry_max_attempts: int
    retry_delay_seconds: float

    def safe_for_logging(self) -> dict[str, str | int | float]:
        """Return outbound settings safe for logs."""
        return {
            "base_url": self.base_url,
            "api_token": redact_secret(self.api_token),
            "connect_timeout_seconds": self.connect_timeout_seconds,
            "read_timeout_seconds": self.read_timeout_seconds,
            "retry_max_attempts": self.retry_max_attempts,
            "retry_delay_seconds": self.retry_delay_seconds,
        }


@lru_cache(maxsize=1)
def get_fault_settings() -> FaultSettings:
    """Load failure translation settings from the environment."""
    return FaultSettings(
        expose_details=_get_bool_env("FAULTLINE_EXPOSE_DETAILS", DEFAULT_EXPOSE_DETAILS),
        log_level=os.getenv("FAULTLINE_LOG_LEVEL", DEFAULT_LOG_LEVEL),
    )


@lru_cache(maxsize=1)
def get_outbound_settings() -> OutboundSettings:
    """Load outbound call settings from the environment."""
    return OutboundSettings(
        base_url=os.getenv("FAULTLINE_OUTBOUND_BASE_URL", DEFAULT_OUTBOUND_BASE_URL),
        api_token=os.getenv("FAULTLINE_OUTBOUND_API_TOKEN", ""),
        connect_timeout_seconds=_get_float_env(
            "FAULTLINE_OUTBOUND_CONNECT_TIMEOUT_SECONDS", DEFAULT_CONNECT_TIMEOUT_SECONDS
        ),
        read_timeout_seconds=_get_float_env("FAULTLINE_OUTBOUND_READ_TIMEOUT_SECONDS", DEFAULT_READ_TIMEOUT_SECONDS),
        retry_max_attempts=_get_int_env("FAULTLINE_OUTBOUND_RETRY_MAX_ATTEMPTS", DEFAULT_RETRY_MAX_ATTEMPTS),
        retry_delay_seconds=_get_float_env("FAULTLINE_OUTBOUND_RETRY_DELAY_SECONDS", DEFAULT_RETRY_DELAY_SECONDS),
    )
