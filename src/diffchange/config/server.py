"""Diff server configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from diffchange import __version__

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

SERVER_URL_ENV = "DIFFCHANGE_SERVER_URL"
SERVER_TIMEOUT_SECONDS = 120.0
UPLOAD_PATH = "/upload"
EXPORT_PATH = "/export"


@dataclass(frozen=True, slots=True)
class DiffServerConfig:
    """Holds the location of the diff server and how to talk to it."""

    base_url: str
    resilience: ResilienceConfig
    upload_path: str = UPLOAD_PATH
    export_path: str = EXPORT_PATH


def get_diff_server_config(*, resilience: ResilienceConfig | None = None) -> DiffServerConfig:
    values = require_env_vars((SERVER_URL_ENV,))
    base_url = values[SERVER_URL_ENV].rstrip("/")
    return DiffServerConfig(
        base_url=base_url,
        resilience=resilience
        or ResilienceConfig(
            name="diff-server",
            base_url=base_url,
            timeout_seconds=SERVER_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
            default_headers={"User-Agent": f"diffchange/{__version__}"},
        ),
    )
