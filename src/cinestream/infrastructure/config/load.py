"""Layered config loading: defaults < YAML < CINESTREAM_* env < CLI."""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

# Flat override key -> (section, key). Env vars and CLI flags arrive flat,
# YAML and defaults arrive sectioned.
_FLAT_KEYS: dict[str, tuple[str, str]] = {
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
    "cinemaos_base_url": ("cinemaos", "base_url"),
    "cinemaos_timeout_seconds": ("cinemaos", "timeout_seconds"),
    "cinemaos_user_agent": ("cinemaos", "user_agent"),
    "cinemeta_base_url": ("cinemeta", "base_url"),
    "cinemeta_timeout_seconds": ("cinemeta", "timeout_seconds"),
    "cinemeta_user_agent": ("cinemeta", "user_agent"),
}
_SECTIONS = frozenset(section for section, _ in _FLAT_KEYS.values())
_TOP_LEVEL_KEYS = ("app_name", "environment")


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *override* into *base* in place; nested mappings merge per key."""
    for key, value in override.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _deep_merge(current, value)
        else:
            base[key] = value
    return base


def _sectioned(layer: Mapping[str, Any]) -> dict[str, Any]:
    """Bring one layer into the logging/cinemaos/cinemeta section shape.

    Unknown keys are dropped. A flat key wins over the same key given
    inside its section.
    """
    out: dict[str, Any] = {
        key: layer[key] for key in _TOP_LEVEL_KEYS if key in layer
    }
    for section in _SECTIONS:
        block = layer.get(section)
        if isinstance(block, Mapping):
            out[section] = dict(block)

    for flat_key, (section, key) in _FLAT_KEYS.items():
        if flat_key in layer:
            out.setdefault(section, {})[key] = layer[flat_key]
    return out


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Build the validated AppConfig for one process.

    A ``.env`` file, when given, is loaded into the environment first and so
    ranks with real env vars (without overwriting them). Nothing is written
    to disk.

    Raises:
        FileNotFoundError: *config_path* or *dotenv_path* does not exist.
        ValueError: The YAML top level is not a mapping.
        pydantic.ValidationError: The merged values are invalid.
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)

    layers: list[Mapping[str, Any]] = [deepcopy(DEFAULT_CONFIG)]
    if config_path is not None:
        layers.append(_read_yaml(config_path))
    layers.append(EnvOverrides().to_update_dict())
    layers.append(cli_overrides or {})

    merged: dict[str, Any] = {}
    for layer in layers:
        _deep_merge(merged, _sectioned(layer))
    return AppConfig.model_validate(merged)
