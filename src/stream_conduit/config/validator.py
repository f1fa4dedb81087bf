from __future__ import annotations

from stream_conduit.adapters.file_io import DEFAULT_CHUNK_SIZE
from stream_conduit.observability.domain.logging import LOG_LEVELS


class ConfigError(ValueError):
    # Raised for invalid framework config (fail fast).
    pass


_SUPPORTED_RUNTIME_KEYS = {"chunk_size", "charset", "logging"}
_SUPPORTED_LOG_SINKS = {"log_stdout", "log_jsonl", "log_memory"}
_SUPPORTED_LOG_LEVELS = set(LOG_LEVELS)


def validate_runtime_config(raw: object) -> dict[str, object]:
    """Validate and normalize the ``runtime`` section shared by every pipeline.

    Returns a new mapping with defaults filled in::

        runtime:
          chunk_size: 65536
          charset: utf-8
          logging:
            sink: log_jsonl
            level: info
            settings: {path: run.jsonl}
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("runtime must be a mapping")
    unknown = set(raw) - _SUPPORTED_RUNTIME_KEYS
    if unknown:
        raise ConfigError(f"Unknown runtime keys: {sorted(unknown)}")

    chunk_size = raw.get("chunk_size", DEFAULT_CHUNK_SIZE)
    if not isinstance(chunk_size, int) or isinstance(chunk_size, bool) or chunk_size <= 0:
        raise ConfigError("runtime.chunk_size must be a positive integer")

    charset = raw.get("charset", "utf-8")
    if not isinstance(charset, str) or not charset:
        raise ConfigError("runtime.charset must be a non-empty string")

    return {
        "chunk_size": chunk_size,
        "charset": charset,
        "logging": _normalize_logging(raw.get("logging")),
    }


def _normalize_logging(raw: object) -> dict[str, object]:
    if raw is None:
        return {"sink": "log_stdout", "level": "info", "settings": {}}
    if not isinstance(raw, dict):
        raise ConfigError("runtime.logging must be a mapping when provided")
    sink = raw.get("sink", "log_stdout")
    if sink not in _SUPPORTED_LOG_SINKS:
        raise ConfigError(f"runtime.logging.sink must be one of: {sorted(_SUPPORTED_LOG_SINKS)}")
    level = raw.get("level", "info")
    if level not in _SUPPORTED_LOG_LEVELS:
        raise ConfigError(f"runtime.logging.level must be one of: {sorted(_SUPPORTED_LOG_LEVELS)}")
    settings = raw.get("settings", {})
    if not isinstance(settings, dict):
        raise ConfigError("runtime.logging.settings must be a mapping when provided")
    if sink == "log_jsonl":
        path = settings.get("path")
        if not isinstance(path, str) or not path:
            raise ConfigError("runtime.logging.settings.path is required for log_jsonl")
    return {"sink": sink, "level": level, "settings": dict(settings)}
