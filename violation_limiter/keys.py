"""
Request Keys

Derives the quota-accounting key for an incoming request.
"""

from dataclasses import dataclass
from typing import Optional

UNKNOWN_KEY = 'unknown'


@dataclass(frozen=True)
class RequestContext:
    """
    The narrow slice of an HTTP request the limiter's key generators see.

    The web layer fills this in from whatever request object it has, so the
    limiter never depends on a specific framework.
    """
    ip: Optional[str] = None
    remote_address: Optional[str] = None
    forwarded_for: Optional[str] = None
    user_id: Optional[str] = None


def default_key_generator(request: RequestContext) -> str:
    """
    Returns the client address for a request.

    Prefers the resolved IP, then the socket peer address, then the first
    hop of X-Forwarded-For. Falls back to 'unknown' so that address-less
    requests share one bucket instead of bypassing the limit.
    """
    if request.ip:
        return request.ip
    if request.remote_address:
        return request.remote_address
    if request.forwarded_for:
        first_hop = request.forwarded_for.split(',')[0].strip()
        if first_hop:
            return first_hop
    return UNKNOWN_KEY


def user_or_ip_key_generator(request: RequestContext) -> str:
    # user:<id> for signed-in reporters, ip:<addr> otherwise
    if request.user_id:
        return f"user:{request.user_id}"
    return f"ip:{default_key_generator(request)}"
