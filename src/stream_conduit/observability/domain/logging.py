from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

# Lowercase level names with their ordering; sinks filter on the numbers.
LOG_LEVELS: dict[str, int] = {"debug": 10, "info": 20, "error": 40}


@dataclass(frozen=True, slots=True)
class LogMessage:
    # One structured event of a pipeline run: resource lifecycle or application progress.
    level: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    fields: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.level!r} (known: {sorted(LOG_LEVELS)})")
        if not self.message:
            raise ValueError("LogMessage requires a non-empty message")

    def at_least(self, level: str) -> bool:
        return LOG_LEVELS[self.level] >= LOG_LEVELS[level]


def log_message(level: str, message: str, **fields: object) -> LogMessage:
    return LogMessage(level=level, message=message, timestamp=datetime.now(tz=UTC), fields=fields)
