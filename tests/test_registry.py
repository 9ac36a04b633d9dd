"""
Tests for the limiter registry
"""

import pytest

from violation_limiter import RateLimitConfig, RateLimiter, RequestContext, build_limiters
from violation_limiter.config import DEFAULT_POLICIES
from violation_limiter.registry import SUBMISSION_INTERVAL


class TestBuildLimiters:
    """Construction of per-policy limiters"""

    def test_builds_every_policy(self):
        limiters = build_limiters()
        assert set(limiters) == set(DEFAULT_POLICIES) | {SUBMISSION_INTERVAL}
        assert all(isinstance(limiter, RateLimiter) for limiter in limiters.values())

    def test_selected_policies_only(self):
        limiters = build_limiters(policies=['api'])
        assert set(limiters) == {'api', SUBMISSION_INTERVAL}

    def test_limiters_are_independent(self, clock):
        """Exhausting one policy leaves the others untouched."""
        overrides = {
            'api': RateLimitConfig(window_ms=1000, max_requests=1),
            'search': RateLimitConfig(window_ms=1000, max_requests=1),
        }
        limiters = build_limiters(policies=['api', 'search'], clock=clock, overrides=overrides)

        assert limiters['api'].check(_request()).allowed is True
        assert limiters['api'].check(_request()).allowed is False
        assert limiters['search'].check(_request()).allowed is True

    def test_registries_do_not_share_state(self):
        """Two registries never leak counts into each other."""
        first = build_limiters(policies=['auth'])
        second = build_limiters(policies=['auth'])

        for _ in range(5):
            first['auth'].check(_request())

        assert first['auth'].check(_request()).allowed is False
        assert second['auth'].check(_request()).allowed is True

    def test_override_applies(self):
        override = RateLimitConfig(window_ms=10, max_requests=2)
        limiters = build_limiters(policies=['form'], overrides={'form': override})
        assert limiters['form'].config is override

    def test_registry_is_read_only(self):
        limiters = build_limiters(policies=['api'])
        with pytest.raises(TypeError):
            limiters['api'] = None

    def test_unknown_policy_name(self):
        with pytest.raises(KeyError):
            build_limiters(policies=['api'])['search']


def _request():
    return RequestContext(ip="192.168.1.20")
