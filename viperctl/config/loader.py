# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Config loader: turns viper.yaml (or an explicit --config file) into a frozen
ViperConfig.

Steps, in order:
  1. Read the file and parse it with yaml.safe_load
  2. Validate the mapping against the pydantic schema
  3. Refuse configs written for a different major schema version

A toolchain run never starts on a half-valid config. Validation errors are
reported one per line as `section.field: problem`, which is easier to act on
than pydantic's default dump.
"""

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from viperctl.config.exceptions import ConfigLoadError, ConfigValidationError
from viperctl.config.schema import CURRENT_CONFIG_VERSION, ViperConfig, default_config
from viperctl.logging.logger import get_logger

DEFAULT_CONFIG_NAME = "viper.yaml"

logger = get_logger(__name__)


def _read_yaml_file(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML file and return the parsed mapping.

    Raises:
        ConfigLoadError: If the file doesn't exist, isn't readable, or isn't a YAML mapping.
    """
    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")
    if not config_path.is_file():
        raise ConfigLoadError(f"Config path is not a file: {config_path}")

    try:
        parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"Config file must contain a YAML mapping (dict), got {type(parsed).__name__}"
        )
    return parsed


def _format_validation_error(err: ValidationError) -> str:
    lines = []
    for problem in err.errors():
        location = ".".join(str(part) for part in problem["loc"]) or "<root>"
        lines.append(f"  {location}: {problem['msg']}")
    return "\n".join(lines)


def _major(version: str) -> str:
    return version.split(".", 1)[0]


def load_config(config_path: Path) -> ViperConfig:
    """
    Load and validate one config file.

    Raises:
        ConfigLoadError: File I/O or YAML parse failures.
        ConfigValidationError: Schema violations (missing fields, wrong types,
            unknown keys) or an incompatible config_version.
    """
    raw_data = _read_yaml_file(config_path)

    try:
        config = ViperConfig.model_validate(raw_data)
    except ValidationError as err:
        raise ConfigValidationError(
            f"Config validation failed for {config_path}:\n{_format_validation_error(err)}"
        ) from err

    version = config.global_config.config_version
    if _major(version) != _major(CURRENT_CONFIG_VERSION):
        raise ConfigValidationError(
            f"Config {config_path} declares config_version {version}, "
            f"but this viperctl reads {CURRENT_CONFIG_VERSION}"
        )

    return config


def resolve_config(config_path: Optional[Path], project_root: Path) -> ViperConfig:
    """
    Pick the config for this invocation.

    An explicit path always wins and must exist. Otherwise viper.yaml in the
    project root is used when present, and the built-in defaults when not.
    """
    if config_path is not None:
        source = config_path
    else:
        source = project_root / DEFAULT_CONFIG_NAME
        if not source.is_file():
            logger.debug("No config file, using defaults", extra={"project_root": str(project_root)})
            return default_config()

    config = load_config(source)
    logger.debug("Config loaded", extra={"path": str(source)})
    return config
