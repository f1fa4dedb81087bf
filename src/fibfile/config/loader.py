from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError

from fibfile.usecases.config_models import AppConfig
from stream_conduit.config.loader import load_yaml_config
from stream_conduit.config.validator import ConfigError


def load_config(path: Path) -> AppConfig:
    # YAML -> validated AppConfig; any validation failure surfaces as ConfigError.
    raw = load_yaml_config(path)
    try:
        return AppConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config {path}: {exc}") from exc
