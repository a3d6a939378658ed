"""Load and validate the YAML configuration file."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from db_sync.config.models import AppConfig
from db_sync.errors import ConfigurationError

EXAMPLE_CONFIG_NAME = "config.example.yaml"


def resolve_path(base_path: str | Path, relative_path: str) -> str:
    """Resolve *relative_path* against the directory containing *base_path*.

    Absolute paths are returned unchanged.
    """
    path = Path(relative_path)
    if path.is_absolute():
        return str(path)
    return str(Path(base_path).parent / path)


def parse_config(data: dict[str, Any] | None) -> AppConfig:
    """Validate an already-parsed configuration mapping.

    Args:
        data: Mapping as produced by ``yaml.safe_load``.

    Returns:
        Validated ``AppConfig`` with defaults applied.

    Raises:
        ConfigurationError: If the mapping violates the config schema.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError("configuration root must be a mapping")

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        messages = []
        for err in e.errors():
            location = ".".join(str(part) for part in err["loc"])
            msg = err["msg"].removeprefix("Value error, ")
            messages.append(f"{location}: {msg}" if location else msg)
        raise ConfigurationError(
            "invalid configuration: " + "; ".join(messages)
        ) from e


def load_config(config_path: str | Path = "config.yaml") -> AppConfig:
    """Load configuration from a YAML file.

    A relative ``log.file`` is resolved against the config file's directory.

    Args:
        config_path: Path to the YAML file (default: ``config.yaml``).

    Returns:
        Validated ``AppConfig``.

    Raises:
        ConfigurationError: If the file is missing, unparsable, or invalid.
    """
    path = Path(config_path)
    if not path.exists():
        example = path.parent / EXAMPLE_CONFIG_NAME
        if example.exists():
            raise ConfigurationError(
                f"config file {path} not found, "
                f"create one based on {example}"
            )
        raise ConfigurationError(f"config file {path} not found")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"failed to parse config file {path}: {e}") from e

    config = parse_config(data)
    if config.log.file:
        config.log.file = resolve_path(path, config.log.file)
    return config
