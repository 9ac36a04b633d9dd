"""
Violation Limiter

In-memory fixed-window rate limiting for the violation-zone reporting API.
"""

from .config import RateLimitConfig, load_policy
from .exceptions import ConfigurationError
from .keys import RequestContext, default_key_generator, user_or_ip_key_generator
from .limiter import RateLimitEntry, RateLimitInfo, RateLimitResult, RateLimiter
from .registry import LimiterRegistry, build_limiters

__all__ = [
    'ConfigurationError',
    'LimiterRegistry',
    'RateLimitConfig',
    'RateLimitEntry',
    'RateLimitInfo',
    'RateLimitResult',
    'RateLimiter',
    'RequestContext',
    'build_limiters',
    'default_key_generator',
    'load_policy',
    'user_or_ip_key_generator',
]
