from __future__ import annotations

from pathlib import Path

import yaml

from stream_conduit.config.validator import ConfigError


def load_yaml_config(path: Path) -> dict[str, object]:
    # Framework-level YAML loader; returns a raw mapping for validation.
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")
    return raw
