"""
Rate Limiter Exceptions
"""


class ConfigurationError(ValueError):
    """Raised when a limiter is built with an unusable configuration."""
