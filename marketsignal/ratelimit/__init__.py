"""Rate limiting for vendor API calls."""

from marketsignal.ratelimit.limiter import RateLimiter

__all__ = ["RateLimiter"]
