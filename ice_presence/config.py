"""Configuration constants and dataclasses for ice-presence."""

import os
from dataclasses import dataclass, field

# API constants
API_BASE = "https://iceportal.de/api1/rs"
REFRESH_INTERVAL = 30  # seconds
MAX_RETRIES = 3
RETRY_DELAY = 2  # seconds
REQUEST_TIMEOUT = 10.0  # seconds

# Discord application the presence is published under
DISCORD_CLIENT_ID = "1058750299675824128"

# "Watch" button target, filled with the trip's route identifiers
WATCH_URL = "https://regenbogen-ice.de/trip/{train_type}/{trip_number}"

# Environment overrides
ENV_CLIENT_ID = "ICE_PRESENCE_CLIENT_ID"
ENV_PROJECT_URL = "ICE_PRESENCE_PROJECT_URL"
ENV_API_BASE = "ICE_PORTAL_API_BASE"


@dataclass(frozen=True)
class RetryPolicy:
    """How often a failed fetch is retried and how long to wait in between."""
    max_retries: int = MAX_RETRIES
    retry_delay: float = RETRY_DELAY

    @property
    def attempts(self) -> int:
        # max_retries counts every request, the first one included
        return max(1, self.max_retries)

    def delay_for(self, attempt: int) -> float:
        """Linear backoff: wait longer after each failed attempt."""
        return self.retry_delay * (attempt + 1)


@dataclass
class Config:
    """Runtime configuration built from CLI arguments."""
    destination: str | None = None
    refresh_interval: int = REFRESH_INTERVAL
    client_id: str = DISCORD_CLIENT_ID
    project_url: str | None = None
    api_base: str = API_BASE
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    verbose: bool = False
    once: bool = False


def env_defaults() -> dict[str, str | None]:
    """Read the environment overrides used as CLI defaults."""
    return {
        "client_id": os.environ.get(ENV_CLIENT_ID, DISCORD_CLIENT_ID),
        "project_url": os.environ.get(ENV_PROJECT_URL) or None,
        "api_base": os.environ.get(ENV_API_BASE, API_BASE),
    }
