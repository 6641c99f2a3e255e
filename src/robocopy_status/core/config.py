"""Configuration and preset loading for robocopy-status.

Application settings are validated with Pydantic; presets are plain YAML
mappings of raw copy options that are handed to the sanitizer untouched.
Both support ``${VARIABLE_NAME}`` environment variable references.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Final, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from robocopy_status.exceptions import ConfigurationError, EnvironmentVariableError

# Matches ${VARIABLE_NAME} where VARIABLE_NAME contains letters, digits and underscores
ENV_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$\{([A-Z0-9_]+)\}")


class ApplicationConfig(BaseModel):
    """Application-level settings: logging level, format and destination."""

    log_level: Annotated[
        str,
        Field(
            description="Logging level",
            pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        ),
    ] = "INFO"
    log_format: Annotated[
        Literal["text", "json"],
        Field(description="Console/file log format"),
    ] = "text"
    log_file: Annotated[
        Path | None,
        Field(description="Optional rotating log file"),
    ] = None


class RobocopyConfig(BaseModel):
    """How robocopy is invoked."""

    executable: Annotated[
        str,
        Field(min_length=1, description="robocopy executable name or path"),
    ] = "robocopy"
    simulate: Annotated[
        bool,
        Field(description="Echo the command line instead of running robocopy"),
    ] = False


class AppConfig(BaseModel):
    """Top-level configuration schema."""

    application: ApplicationConfig = ApplicationConfig()
    robocopy: RobocopyConfig = RobocopyConfig()


def resolve_env_var(value: str) -> str:
    """Resolve ``${VARIABLE_NAME}`` references in a string.

    Raises:
        EnvironmentVariableError: If a referenced variable is not set

    Examples:
        >>> os.environ["BACKUP_ROOT"] = "D:\\\\Backup"
        >>> resolve_env_var("${BACKUP_ROOT}\\\\Photos")
        'D:\\\\Backup\\\\Photos'
    """

    def replace_match(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            msg = f"Required environment variable '{var_name}' is not set."
            raise EnvironmentVariableError(msg, context={"env_var": var_name})
        return env_value

    return ENV_VAR_PATTERN.sub(replace_match, value)


def resolve_env_vars(value: object) -> object:
    """Recursively resolve environment variables in YAML data.

    Strings are resolved, mappings and lists are walked, everything else is
    preserved as-is.
    """
    if isinstance(value, str):
        return resolve_env_var(value)
    if isinstance(value, Mapping):
        return {str(key): resolve_env_vars(item) for key, item in value.items()}  # pyright: ignore[reportUnknownVariableType]  # YAML boundary
    if isinstance(value, list):
        return [resolve_env_vars(item) for item in value]  # pyright: ignore[reportUnknownVariableType]  # YAML boundary
    return value


def _read_yaml_mapping(path: Path, what: str) -> dict[str, object]:
    """Load a YAML file that must contain a mapping, resolving env references."""
    if not path.exists():
        msg = f"{what} file not found: {path}\nPlease create the file at this location."
        raise ConfigurationError(msg, context={"file_path": str(path)})

    try:
        with path.open("r", encoding="utf-8") as f:
            raw_data: object = yaml.safe_load(f)  # pyright: ignore[reportAny]  # YAML boundary
    except yaml.YAMLError as e:
        msg = f"Failed to parse YAML {what.lower()} file: {path}\nYAML parsing error: {e}"
        raise ConfigurationError(msg, context={"file_path": str(path)}) from e
    except OSError as e:
        msg = f"Failed to read {what.lower()} file: {path}\nError: {e}"
        raise ConfigurationError(msg, context={"file_path": str(path)}) from e

    # An empty file is an empty mapping
    if raw_data is None:
        raw_data = {}

    if not isinstance(raw_data, dict):
        msg = (
            f"Invalid {what.lower()} file format: {path}\n"
            f"Expected YAML dictionary at root level, got: {type(raw_data).__name__}"
        )
        raise ConfigurationError(msg, context={"file_path": str(path)})

    try:
        resolved = resolve_env_vars(raw_data)
    except EnvironmentVariableError as e:
        msg = f"Environment variable resolution failed in: {path}\n{e}"
        raise ConfigurationError(msg, context={"file_path": str(path)}) from e

    return resolved  # pyright: ignore[reportReturnType]  # mapping in, mapping out


def load_config(config_path: Path, *, required: bool = True) -> AppConfig:
    """Load and validate the application configuration.

    Args:
        config_path: Path to the YAML configuration file
        required: When False, a missing file yields the default configuration

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigurationError: If the file cannot be loaded or is invalid
    """
    if not required and not config_path.exists():
        return AppConfig()

    data = _read_yaml_mapping(config_path, "Configuration")

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        error_lines = ["Configuration validation failed:", ""]
        for error in e.errors():
            field_path = " → ".join(str(loc) for loc in error["loc"])
            error_lines.append(f"  Field: {field_path}")
            error_lines.append(f"  Error: {error['msg']}")
            error_lines.append("")
        error_lines.append(f"Configuration file: {config_path}")

        raise ConfigurationError("\n".join(error_lines), context={"file_path": str(config_path)}) from e


def load_preset(preset_path: Path) -> dict[str, object]:
    """Load a preset of raw copy options.

    The returned mapping is unsanitized; pass it to ``sanitize_options``.

    Raises:
        ConfigurationError: If the file cannot be loaded or is not a mapping
    """
    return _read_yaml_mapping(preset_path, "Preset")
