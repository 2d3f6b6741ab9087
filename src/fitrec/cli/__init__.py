"""fitrec command-line interface."""

__all__ = ["app", "error_handler", "json_formatter"]
