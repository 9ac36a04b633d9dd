"""
Limiter Registry

Builds the set of independent limiters a server holds for its routes.
"""

import logging
from collections.abc import Mapping
from typing import Callable, Dict, Iterable, Iterator, Optional

from .config import DEFAULT_POLICIES, RateLimitConfig, load_policy, load_submission_interval
from .limiter import RateLimiter

logger = logging.getLogger(__name__)

SUBMISSION_INTERVAL = 'submission_interval'


class LimiterRegistry(Mapping):
    """Read-only mapping of policy name to its RateLimiter."""

    def __init__(self, limiters: Dict[str, RateLimiter]):
        self._limiters = dict(limiters)

    def __getitem__(self, name: str) -> RateLimiter:
        return self._limiters[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._limiters)

    def __len__(self) -> int:
        return len(self._limiters)


def build_limiters(policies: Optional[Iterable[str]] = None,
                   clock: Optional[Callable[[], int]] = None,
                   overrides: Optional[Mapping[str, RateLimitConfig]] = None) -> LimiterRegistry:
    """
    Creates one RateLimiter per policy, plus the submission interval guard.

    Args:
        policies: Policy names to build; defaults to every policy in
            DEFAULT_POLICIES
        clock: Optional epoch-milliseconds clock shared by all limiters
        overrides: Configs that replace the environment-derived ones by name

    Returns:
        LimiterRegistry owned by the caller; limiters never share state
    """
    names = list(DEFAULT_POLICIES) if policies is None else list(policies)
    overrides = overrides or {}

    limiters: Dict[str, RateLimiter] = {}
    for name in names:
        config = overrides.get(name) or load_policy(name)
        limiters[name] = RateLimiter(config, clock=clock)
        logger.debug("Rate limit policy %s: %d per %d ms", name, config.max_requests, config.window_ms)

    interval = overrides.get(SUBMISSION_INTERVAL) or load_submission_interval()
    limiters[SUBMISSION_INTERVAL] = RateLimiter(interval, clock=clock)

    return LimiterRegistry(limiters)
