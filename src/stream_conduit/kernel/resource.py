from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from itertools import count
from types import TracebackType
from typing import Generic, Protocol, TypeVar, runtime_checkable

from stream_conduit.kernel.errors import ResourceError, UsageError
from stream_conduit.observability.domain.logging import log_message
from stream_conduit.ports.log_sink import LogSink

H = TypeVar("H")
R = TypeVar("R")

_scope_ids = count(1)


@dataclass(frozen=True, slots=True)
class ReleaseKey:
    # Identifies one allocation inside one scope; keys are never reused.
    scope_id: int
    index: int


@runtime_checkable
class ResourceCapability(Protocol):
    # Anything that can hand out scoped resources. Primitives depend on this, not on ResourceScope.
    def allocate(
        self,
        acquire: Callable[[], H],
        release: Callable[[H], None],
        *,
        name: str = "",
    ) -> tuple[ReleaseKey, H]:
        raise NotImplementedError("ResourceCapability is a port; use ResourceScope.")

    def release(self, key: ReleaseKey) -> None:
        raise NotImplementedError("ResourceCapability is a port; use ResourceScope.")

    def released(self, key: ReleaseKey) -> bool:
        raise NotImplementedError("ResourceCapability is a port; use ResourceScope.")


@dataclass(slots=True)
class _Allocation(Generic[H]):
    name: str
    handle: H
    release: Callable[[H], None]


class ResourceScope:
    """Guaranteed-release block for resources acquired during one pipeline run.

    Each allocation is released exactly once: either explicitly through
    :meth:`release` (a source that hit end of input, a sink that finished) or
    when the scope closes. Closing releases whatever is still held in reverse
    acquisition order, whether the run completed, stopped early or raised.

    Use as a context manager::

        with ResourceScope() as scope:
            result = connect(source, sink, resources=scope)
    """

    def __init__(self, *, log_sink: LogSink | None = None) -> None:
        self._id = next(_scope_ids)
        self._indices = count()
        self._held: dict[int, _Allocation[object]] = {}
        self._closed = False
        self._log_sink = log_sink

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def held(self) -> int:
        # Number of allocations not yet released.
        return len(self._held)

    def allocate(
        self,
        acquire: Callable[[], H],
        release: Callable[[H], None],
        *,
        name: str = "",
    ) -> tuple[ReleaseKey, H]:
        if self._closed:
            raise UsageError("Cannot allocate on a closed ResourceScope")
        try:
            handle = acquire()
        except OSError as exc:
            raise ResourceError(f"Failed to acquire resource {name or '<anonymous>'}: {exc}") from exc
        key = ReleaseKey(scope_id=self._id, index=next(self._indices))
        self._held[key.index] = _Allocation(name=name, handle=handle, release=release)
        self._log("debug", "resource.acquired", key, name)
        return key, handle

    def release(self, key: ReleaseKey) -> None:
        # Releasing an already-released key is a no-op; keys from other scopes are a wiring error.
        if key.scope_id != self._id:
            raise UsageError(f"ReleaseKey {key} does not belong to this scope")
        allocation = self._held.pop(key.index, None)
        if allocation is None:
            return
        self._run_release(key, allocation)

    def released(self, key: ReleaseKey) -> bool:
        if key.scope_id != self._id:
            raise UsageError(f"ReleaseKey {key} does not belong to this scope")
        return key.index not in self._held

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._release_held()

    def _release_held(self) -> None:
        first_error: ResourceError | None = None
        while self._held:
            index = max(self._held)
            allocation = self._held.pop(index)
            try:
                self._run_release(ReleaseKey(scope_id=self._id, index=index), allocation)
            except ResourceError as exc:
                # Keep releasing the rest; report the first failure once everything ran.
                if first_error is None:
                    first_error = exc
            except BaseException as interrupt:
                # Interrupted mid-release: the remaining allocations are still released before it propagates.
                try:
                    self._release_held()
                except ResourceError as exc:
                    if first_error is None:
                        first_error = exc
                if first_error is not None:
                    interrupt.add_note(f"while releasing resources: {first_error}")
                raise
        if first_error is not None:
            raise first_error

    def __enter__(self) -> ResourceScope:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            self.close()
        except ResourceError as release_error:
            if exc is None:
                raise
            # The pipeline failure stays the primary error; the release failure rides along.
            exc.add_note(f"while releasing resources: {release_error}")

    def _run_release(self, key: ReleaseKey, allocation: _Allocation[object]) -> None:
        try:
            allocation.release(allocation.handle)
        except Exception as exc:
            self._log("error", "resource.release_failed", key, allocation.name, error=str(exc))
            raise ResourceError(
                f"Failed to release resource {allocation.name or '<anonymous>'}: {exc}"
            ) from exc
        self._log("debug", "resource.released", key, allocation.name)

    def _log(self, level: str, message: str, key: ReleaseKey, name: str, **extra: object) -> None:
        if self._log_sink is None:
            return
        self._log_sink.emit(log_message(level, message, scope=key.scope_id, key=key.index, resource=name, **extra))


def run_resource(fn: Callable[[ResourceScope], R], *, log_sink: LogSink | None = None) -> R:
    # Run `fn` inside a fresh scope; every allocation is released before this returns or raises.
    with ResourceScope(log_sink=log_sink) as scope:
        return fn(scope)
