import os
from dataclasses import dataclass, field
from typing import Callable, Dict, Tuple

from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .keys import RequestContext, default_key_generator

load_dotenv()

"""
Rate Limiter Configuration

Define the limiter configuration type and the default policy for each
protected area of the violations API.
"""

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS

# Default policies: {name: (env_prefix, max_requests, window_ms)}
DEFAULT_POLICIES: Dict[str, Tuple[str, int, int]] = {
    'api': ('RATE_LIMIT_API', 100, HOUR_MS),            # reads of violation zones
    'submission': ('RATE_LIMIT_SUBMIT', 10, HOUR_MS),   # new violation reports
    'auth': ('RATE_LIMIT_AUTH', 5, 15 * MINUTE_MS),
    'form': ('RATE_LIMIT_FORM', 10, MINUTE_MS),
    'search': ('RATE_LIMIT_SEARCH', 30, MINUTE_MS),
}

DEFAULT_MIN_SUBMISSION_INTERVAL_MS = 30 * 1000


@dataclass(frozen=True)
class RateLimitConfig:
    """
    Immutable settings for one RateLimiter.

    skip_successful_requests and skip_failed_requests are stored but not
    consulted: check() runs before the downstream outcome is known, so every
    checked request is counted.
    """
    window_ms: int
    max_requests: int
    key_generator: Callable[[RequestContext], str] = field(default=default_key_generator)
    skip_successful_requests: bool = False
    skip_failed_requests: bool = False

    def __post_init__(self):
        _require_positive_int('window_ms', self.window_ms)
        _require_positive_int('max_requests', self.max_requests)
        if not callable(self.key_generator):
            raise ConfigurationError("key_generator must be callable")


def _require_positive_int(name: str, value) -> None:
    # bool is an int subclass; True as a window length is a mistake
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def load_policy(name: str) -> RateLimitConfig:
    """
    Builds the configuration for a named policy.

    Args:
        name: One of the keys of DEFAULT_POLICIES

    Returns:
        A RateLimitConfig, with <PREFIX>_MAX_REQUESTS and <PREFIX>_WINDOW_MS
        from the environment taking precedence over the defaults
    """
    if name not in DEFAULT_POLICIES:
        raise ConfigurationError(f"Unknown rate limit policy: {name!r}")

    prefix, max_requests, window_ms = DEFAULT_POLICIES[name]
    return RateLimitConfig(
        window_ms=_env_int(f"{prefix}_WINDOW_MS", window_ms),
        max_requests=_env_int(f"{prefix}_MAX_REQUESTS", max_requests),
    )


def load_submission_interval() -> RateLimitConfig:
    """One report per key per MIN_SUBMISSION_INTERVAL_MS."""
    return RateLimitConfig(
        window_ms=_env_int('MIN_SUBMISSION_INTERVAL_MS', DEFAULT_MIN_SUBMISSION_INTERVAL_MS),
        max_requests=1,
    )
