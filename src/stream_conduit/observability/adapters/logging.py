from __future__ import annotations

import json
from pathlib import Path

from stream_conduit.adapters.contracts import adapter
from stream_conduit.observability.domain.logging import LOG_LEVELS, LogMessage


def _json_line(message: LogMessage) -> str:
    # Compact JSON object; values json cannot encode (paths, exceptions) are written as strings.
    record = {
        "level": message.level,
        "message": message.message,
        "timestamp": message.timestamp.isoformat().replace("+00:00", "Z"),
        "fields": message.fields,
    }
    return json.dumps(record, separators=(",", ":"), ensure_ascii=False, default=str)


class _LeveledSink:
    # Drops messages below `min_level`; subclasses write the rest.
    def __init__(self, min_level: str = "debug") -> None:
        if min_level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {min_level!r} (known: {sorted(LOG_LEVELS)})")
        self.min_level = min_level

    def emit(self, message: LogMessage) -> None:
        if message.at_least(self.min_level):
            self._write(message)

    def close(self) -> None:
        return None

    def _write(self, message: LogMessage) -> None:
        raise NotImplementedError


class StdoutLogSink(_LeveledSink):
    def _write(self, message: LogMessage) -> None:
        print(_json_line(message))


class JsonlLogSink(_LeveledSink):
    """Appends one JSON line per message to ``path``.

    Parent directories are created and the file is opened on construction;
    every line is flushed so a failing run still leaves its log behind.
    """

    def __init__(self, path: Path, min_level: str = "debug") -> None:
        super().__init__(min_level)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.path = path
        self._file = path.open("a", encoding="utf-8")

    def _write(self, message: LogMessage) -> None:
        self._file.write(_json_line(message) + "\n")
        self._file.flush()

    def close(self) -> None:
        self._file.close()


class MemoryLogSink(_LeveledSink):
    # Keeps messages in arrival order for inspection after a run.
    def __init__(self, min_level: str = "debug") -> None:
        super().__init__(min_level)
        self.messages: list[LogMessage] = []

    def _write(self, message: LogMessage) -> None:
        self.messages.append(message)


def _min_level(settings: dict[str, object], adapter_name: str) -> str:
    level = settings.get("level", "debug")
    if level not in LOG_LEVELS:
        raise ValueError(f"{adapter_name}.settings.level must be one of: {sorted(LOG_LEVELS)}")
    return str(level)


@adapter(name="log_stdout", role="log", consumes=[LogMessage])
def log_stdout(settings: dict[str, object]) -> StdoutLogSink:
    return StdoutLogSink(_min_level(settings, "log_stdout"))


@adapter(name="log_jsonl", role="log", consumes=[LogMessage])
def log_jsonl(settings: dict[str, object]) -> JsonlLogSink:
    path = settings.get("path")
    if not isinstance(path, str) or not path:
        raise ValueError("log_jsonl.settings.path must be a non-empty string")
    return JsonlLogSink(Path(path), _min_level(settings, "log_jsonl"))


@adapter(name="log_memory", role="log", consumes=[LogMessage])
def log_memory(settings: dict[str, object]) -> MemoryLogSink:
    return MemoryLogSink(_min_level(settings, "log_memory"))
