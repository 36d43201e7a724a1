"""Conversion settings.

Settings come from CLI flags, optionally on top of a YAML file such as::

    input: ./my-collection
    folders: [Core, Users]
    keep_folders: true
    remove: [internalToken]
    ignore: ["[WIP]"]
    replace:
      baseUrl: https://api.example.com
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError


class ConfigError(Exception):
    """Raised for an unreadable or malformed configuration."""


class ConvertConfig(BaseModel):
    """Everything the converter needs to know about one run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    input: Path = Path(".")
    folders: list[str] = []  # top-level folders to export, all when empty
    keep_folders: bool = False
    ignore: list[str] = []  # request-name substrings to skip
    remove: list[str] = []  # variables whose requests are dropped
    replace: dict[str, str] = {}  # seeds the collection variables
    verbose: bool = False


def load_config_file(file_path: Path) -> dict:
    """Read a YAML settings file into a dict of ConvertConfig fields."""
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not read config file '{file_path}': {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file '{file_path}' must contain a mapping")

    unknown = set(data) - set(ConvertConfig.model_fields)
    if unknown:
        raise ConfigError(f"Unknown config keys in '{file_path}': {', '.join(sorted(unknown))}")

    # YAML turns ``port: 8080`` into an int
    if isinstance(data.get("replace"), dict):
        data["replace"] = {str(k): "" if v is None else str(v) for k, v in data["replace"].items()}
    return data


def parse_replace_pairs(pairs: tuple[str, ...] | list[str]) -> dict[str, str]:
    """Turn ``key=value`` strings into a dict. Later pairs win."""
    result = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ConfigError(f"Invalid replacement '{pair}', expected key=value")
        result[key] = value
    return result


def build_config(file_values: dict | None = None, **overrides) -> ConvertConfig:
    """Merge file settings with CLI overrides.

    Lists are concatenated (file first), ``replace`` dicts are merged with
    the overrides winning, scalars are replaced when the override is not None.
    """
    merged = dict(file_values or {})
    for key, value in overrides.items():
        if value is None:
            continue
        if key in ("folders", "ignore", "remove"):
            merged[key] = list(merged.get(key) or []) + list(value)
        elif key == "replace":
            merged[key] = {**(merged.get(key) or {}), **value}
        else:
            merged[key] = value

    try:
        return ConvertConfig(**merged)
    except ValidationError as e:
        raise ConfigError(str(e)) from e
