"""fitrec Shared Module.

Error taxonomy, result values, structured logging and constants used across fitrec.
"""

__all__ = ["constants", "errors", "logging", "result"]
