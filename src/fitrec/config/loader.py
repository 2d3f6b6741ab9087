"""Settings loading.

Reads an optional ``.env`` file into the environment, then builds
``Settings`` from the first TOML file found or from the environment alone.
The CLI calls ``load_settings`` once and hands the result to the container.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from fitrec.config.models.settings import Settings
from fitrec.shared.errors import ApplicationError, ErrorCode, ErrorContext

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS: tuple[Path, ...] = (
    Path("config/fitrec.toml"),
    Path("fitrec.toml"),
)


def _load_env_file(env_file: Path = Path(".env")) -> None:
    """Load a .env file into the process environment if it exists.

    Variables already set in the environment win over the file.
    """
    if env_file.exists():
        load_dotenv(env_file, override=False)
        logger.debug("Loaded environment from %s", env_file)


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from a TOML configuration file or the environment.

    Args:
        config_path: Optional path to a TOML file. If None, the default
            locations are tried before falling back to environment variables.

    Returns:
        Settings instance loaded from the first available source

    Raises:
        ApplicationError: If the file cannot be parsed or fails validation
    """
    _load_env_file()

    candidates = [Path(config_path)] if config_path else list(DEFAULT_CONFIG_PATHS)

    try:
        for candidate in candidates:
            if candidate.exists():
                logger.debug("Loading configuration from %s", candidate)
                return Settings.from_toml_file(candidate)

        if config_path:
            msg = f"Configuration file not found: {config_path}"
            raise FileNotFoundError(msg)

        return Settings()

    except FileNotFoundError as e:
        raise ApplicationError(
            code=ErrorCode.MISSING_CONFIG,
            message=str(e),
            context=ErrorContext(
                operation="load_settings",
                additional_data={"config_path": str(config_path)},
            ),
            original_error=e,
        ) from e
    except ValidationError as e:
        raise ApplicationError(
            code=ErrorCode.INVALID_CONFIG,
            message=f"Invalid configuration: {e.error_count()} error(s)",
            context=ErrorContext(
                operation="load_settings",
                additional_data={"config_path": str(config_path or "")},
            ),
            original_error=e,
        ) from e
    except (OSError, ValueError) as e:
        # toml.TomlDecodeError is a ValueError
        raise ApplicationError(
            code=ErrorCode.FILE_READ_ERROR,
            message=f"Failed to read configuration: {e}",
            context=ErrorContext(
                operation="load_settings",
                additional_data={"config_path": str(config_path or "")},
            ),
            original_error=e,
        ) from e



__all__ = [
    "DEFAULT_CONFIG_PATHS",
    "load_settings",
]
