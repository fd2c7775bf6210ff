from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dotenv import find_dotenv, load_dotenv

if TYPE_CHECKING:
    from .client import HalClient

ENDPOINT_ENV = "HAL_ENDPOINT"
TIMEOUT_ENV = "HAL_TIMEOUT_SECONDS"
MAX_REDIRECTS_ENV = "HAL_MAX_REDIRECTS"
VERIFY_TLS_ENV = "HAL_VERIFY_TLS"


class MissingEndpointError(ValueError):
    """Raised when no API endpoint is configured."""


def _get_bool_env(name: str, default: bool) -> bool:
    """Parse a boolean environment variable with a safe default."""
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    if val in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if val in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


def _get_number_env(name: str, default, cast):
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}.") from exc


@dataclass(frozen=True)
class HalClientConfig:
    endpoint: str
    timeout_seconds: float = 10.0
    max_redirects: int = 10
    verify_tls: bool = True

    @classmethod
    def from_env(cls, *, use_dotenv: bool = True) -> "HalClientConfig":
        """Load client settings from environment variables (optional .env)."""
        if use_dotenv:
            load_dotenv(find_dotenv(usecwd=True))

        endpoint = os.getenv(ENDPOINT_ENV, "").strip()
        if not endpoint:
            raise MissingEndpointError(f"Missing {ENDPOINT_ENV} in environment.")

        max_redirects = _get_number_env(MAX_REDIRECTS_ENV, cls.max_redirects, int)
        if max_redirects < 0:
            raise ValueError(f"{MAX_REDIRECTS_ENV} must not be negative.")

        return cls(
            endpoint=endpoint,
            timeout_seconds=_get_number_env(TIMEOUT_ENV, cls.timeout_seconds, float),
            max_redirects=max_redirects,
            verify_tls=_get_bool_env(VERIFY_TLS_ENV, cls.verify_tls),
        )


def load_env_config(*, use_dotenv: bool = True) -> HalClientConfig:
    return HalClientConfig.from_env(use_dotenv=use_dotenv)


def create_client_from_env(**kwargs) -> "HalClient":
    """Create a HalClient from environment variables."""
    from .client import HalClient

    return HalClient.from_config(load_env_config(), **kwargs)


__all__ = [
    "HalClientConfig",
    "MissingEndpointError",
    "load_env_config",
    "create_client_from_env",
]
