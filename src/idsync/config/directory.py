"""Directory API endpoint configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .env import env_float, env_int, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

DIRECTORY_TIMEOUT_SECONDS = 30.0
DEFAULT_PAGE_SIZE = 500

type DomainRole = Literal["source", "target"]


@dataclass(frozen=True)
class DirectoryConfig:
    """Holds connection values for one directory domain."""

    role: DomainRole
    base_url: str
    token: str
    page_size: int
    resilience: ResilienceConfig


def get_directory_config(
    role: DomainRole,
    *,
    resilience: ResilienceConfig | None = None,
) -> DirectoryConfig:
    prefix = f"IDSYNC_{role.upper()}"
    values = require_env_vars((f"{prefix}_URL", f"{prefix}_TOKEN"))
    base_url = values[f"{prefix}_URL"].rstrip("/") + "/"
    token = values[f"{prefix}_TOKEN"]
    return DirectoryConfig(
        role=role,
        base_url=base_url,
        token=token,
        page_size=env_int(f"{prefix}_PAGE_SIZE", DEFAULT_PAGE_SIZE),
        resilience=resilience
        or ResilienceConfig(
            name=f"directory-{role}",
            base_url=base_url,
            timeout_seconds=env_float(f"{prefix}_TIMEOUT", DIRECTORY_TIMEOUT_SECONDS),
            ratelimit=RateLimit(max_calls=20, per_seconds=1.0),
            default_headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            },
        ),
    )
