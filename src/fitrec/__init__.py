"""fitrec: exercise recommendation assembly.

Fetches exercises from a rate-limited catalog, filters them against health
conditions, repairs broken media links through fallback providers and
memoizes the shaped per-category results.
"""

__version__ = "0.1.0"

__all__ = ["__version__", "cli", "config", "containers", "pipeline", "services", "shared"]
