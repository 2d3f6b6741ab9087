"""fitrec services: caching, rate limiting, HTTP and upstream clients."""

__all__ = ["cache", "catalog", "http", "media", "rate_limiter"]
