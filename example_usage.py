"""
Example Usage of Rate Limiter

This file shows how the violations API routes use the limiters. The real
server owns the registry; these handlers receive it rather than reaching for
module-level singletons.
"""

import logging
import math
import time
from typing import Optional

from violation_limiter import LimiterRegistry, RateLimiter, RateLimitResult, RequestContext
from violation_limiter.registry import SUBMISSION_INTERVAL

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('lat', 'lng', 'address', 'violationType', 'reasons', 'solutions')

# Maximum stored length per text field
FIELD_LIMITS = {
    'address': 500,
    'violationType': 100,
    'reasons': 1000,
    'solutions': 1000,
}


def rate_limit_headers(limiter: RateLimiter, result: RateLimitResult,
                       now_ms: Optional[int] = None) -> dict:
    """
    Standard rate-limit response headers for a check result.

    Retry-After is only set on denial, in whole seconds and never below 1.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    headers = {
        'X-RateLimit-Limit': str(limiter.config.max_requests),
        'X-RateLimit-Remaining': str(result.remaining),
        'X-RateLimit-Reset': str(math.ceil(result.reset_time / 1000)),
    }
    if not result.allowed:
        retry_after = math.ceil((result.reset_time - now_ms) / 1000)
        headers['Retry-After'] = str(max(1, retry_after))
    return headers


def _too_many_requests(limiter: RateLimiter, result: RateLimitResult, message: str) -> dict:
    return {
        'error': message,
        'status_code': 429,
        'headers': rate_limit_headers(limiter, result),
    }


def handle_list_violations(limiters: LimiterRegistry, request: RequestContext):
    """
    Example: GET /api/violations
    """
    limiter = limiters['api']
    result = limiter.check(request)
    if not result.allowed:
        return _too_many_requests(limiter, result, 'Rate limit exceeded. Please wait before trying again.')

    # Fetch violation zones from the data store here
    return {'data': [], 'status_code': 200, 'headers': rate_limit_headers(limiter, result)}


def handle_create_violation(limiters: LimiterRegistry, request: RequestContext, body: dict):
    """
    Example: POST /api/violations

    Applies the hourly submission quota, then the minimum interval between
    two reports from the same client, then validates the report.
    """
    for name in ('submission', SUBMISSION_INTERVAL):
        limiter = limiters[name]
        result = limiter.check(request)
        if not result.allowed:
            return _too_many_requests(limiter, result, 'Rate limit exceeded. Please wait before submitting again.')

    if any(not body.get(name) for name in REQUIRED_FIELDS):
        return {'error': 'Missing required fields', 'status_code': 400}

    lat, lng = body['lat'], body['lng']
    if isinstance(lat, bool) or isinstance(lng, bool) \
            or not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
        return {'error': 'Invalid coordinates', 'status_code': 400}

    report = {'lat': float(lat), 'lng': float(lng)}
    for name, limit in FIELD_LIMITS.items():
        report[name] = str(body[name])[:limit]

    logger.info("Accepted violation report at %s", report['address'])

    # Store the report here
    return {'data': report, 'status_code': 201}


# Example usage scenarios:

# limiters = build_limiters()
# request = RequestContext(ip="192.168.1.10")
#
# Scenario 1: Browsing the map
# handle_list_violations(limiters, request)  → 200 until 100 reads in the hour
#
# Scenario 2: Submitting two reports back to back
# handle_create_violation(limiters, request, report)  → 201
# handle_create_violation(limiters, request, report)  → 429 (minimum interval)
#
# Scenario 3: Client behind a proxy with no resolved address
# RequestContext(forwarded_for="203.0.113.7, 10.0.0.1")  → key "203.0.113.7"
# RequestContext()  → key "unknown"
