from __future__ import annotations

from typing import Protocol, runtime_checkable

from stream_conduit.observability.domain.logging import LogMessage


# Port for structured log output; resource scopes and the application shell emit through it.
@runtime_checkable
class LogSink(Protocol):
    def emit(self, message: LogMessage) -> None:
        """Consume one LogMessage."""
        raise NotImplementedError("LogSink is a port; use a concrete adapter.")

    def close(self) -> None:
        # Release whatever the sink holds open; further emits are not allowed.
        raise NotImplementedError("LogSink is a port; use a concrete adapter.")
