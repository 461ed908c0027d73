"""API configuration for gsreconcile."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_API_URL: str = "https://api.gridscale.io"


@dataclass(slots=True, frozen=True)
class ApiConfig:
    """
    Connection settings for the remote API.

    Attributes:
        user_uuid: Account user UUID (X-Auth-UserId).
        api_token: API token (X-Auth-Token).
        api_url: Base URL of the API.
        request_timeout_sec: Per-request HTTP timeout.
        delay_interval_sec: Poll interval for async requests and power changes.
        max_retries: Retries for 429/5xx/network errors.
        wait_timeout_sec: Upper bound for async requests and power changes.
        shutdown_timeout_sec: Wait for a graceful shutdown before forcing power off.
    """

    user_uuid: str
    api_token: str
    api_url: str = DEFAULT_API_URL
    request_timeout_sec: float = 30.0
    delay_interval_sec: float = 1.0
    max_retries: int = 3
    wait_timeout_sec: float = 300.0
    shutdown_timeout_sec: float = 120.0

    def __post_init__(self) -> None:
        for key in ("user_uuid", "api_token", "api_url"):
            value = getattr(self, key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"ApiConfig.{key} must be a non-empty string")

        if self.request_timeout_sec <= 0:
            raise ValueError("ApiConfig.request_timeout_sec must be positive")
        if self.delay_interval_sec < 0:
            raise ValueError("ApiConfig.delay_interval_sec must not be negative")
        if self.max_retries < 0:
            raise ValueError("ApiConfig.max_retries must not be negative")
        if self.wait_timeout_sec <= 0:
            raise ValueError("ApiConfig.wait_timeout_sec must be positive")
        if self.shutdown_timeout_sec <= 0:
            raise ValueError("ApiConfig.shutdown_timeout_sec must be positive")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ApiConfig":
        """
        Build config from GRIDSCALE_UUID, GRIDSCALE_TOKEN, GRIDSCALE_URL and
        GRIDSCALE_TIMEOUT.

        Raises:
            ValueError: if credentials are missing.
        """
        env = os.environ if environ is None else environ

        user_uuid = env.get("GRIDSCALE_UUID", "")
        api_token = env.get("GRIDSCALE_TOKEN", "")
        if not user_uuid:
            raise ValueError("User UUID not found. Set GRIDSCALE_UUID environment variable.")
        if not api_token:
            raise ValueError("API token not found. Set GRIDSCALE_TOKEN environment variable.")

        timeout = env.get("GRIDSCALE_TIMEOUT")
        return cls(
            user_uuid=user_uuid,
            api_token=api_token,
            api_url=env.get("GRIDSCALE_URL") or DEFAULT_API_URL,
            request_timeout_sec=float(timeout) if timeout else 30.0,
        )
