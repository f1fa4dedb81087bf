from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

from stream_conduit.kernel.errors import UsageError
from stream_conduit.kernel.resource import ReleaseKey, ResourceCapability
from stream_conduit.kernel.signals import CLOSED, Closed, Open, PullSignal

S = TypeVar("S")
T = TypeVar("T")
H = TypeVar("H")


@dataclass(frozen=True, slots=True)
class Source(Generic[S, T]):
    """Pull-based producer: ``pull(state)`` yields ``Open(state', value)`` or ``CLOSED``.

    ``setup`` builds the state for one run from a resource capability and
    overrides ``initial`` when present; resource-backed sources allocate
    their handle there. ``close`` is called by the driver when the consumer
    stops before the source is exhausted.
    """

    initial: S
    pull: Callable[[S], PullSignal[S, T]]
    setup: Callable[[ResourceCapability], S] | None = None
    close: Callable[[S], None] | None = None

    def start(self, resources: ResourceCapability) -> S:
        if self.setup is None:
            return self.initial
        return self.setup(resources)

    def stop(self, state: S) -> None:
        if self.close is not None:
            self.close(state)


def source_state(initial: S, pull: Callable[[S], PullSignal[S, T]]) -> Source[S, T]:
    # Stateful source from a pure step function.
    return Source(initial=initial, pull=pull)


def source_list(values: Iterable[T]) -> Source[int, T]:
    # State is the index of the next element in an immutable snapshot of `values`.
    items = tuple(values)

    def pull(index: int) -> PullSignal[int, T]:
        if index >= len(items):
            return CLOSED
        return Open(index + 1, items[index])

    return Source(initial=0, pull=pull)


@dataclass(frozen=True, slots=True)
class _HandleState(Generic[H]):
    resources: ResourceCapability
    key: ReleaseKey
    handle: H


def source_io(
    alloc: Callable[[], H],
    release: Callable[[H], None],
    pull: Callable[[H], T | Closed],
    *,
    name: str = "",
) -> Source[_HandleState[H] | None, T]:
    """Source over an external handle owned by the run's resource scope.

    The handle is allocated when the run starts and released as soon as
    ``pull`` reports ``CLOSED``, when the consumer stops early, or when the
    scope ends, whichever comes first. Release happens once.
    """

    def setup(resources: ResourceCapability) -> _HandleState[H]:
        key, handle = resources.allocate(alloc, release, name=name)
        return _HandleState(resources=resources, key=key, handle=handle)

    def pull_handle(state: _HandleState[H] | None) -> PullSignal[_HandleState[H], T]:
        if state is None:
            raise UsageError(f"Source {name or '<io>'} pulled without being started")
        if state.resources.released(state.key):
            raise UsageError(f"Source {name or '<io>'} pulled after it closed")
        value = pull(state.handle)
        if isinstance(value, Closed):
            state.resources.release(state.key)
            return CLOSED
        return Open(state, value)

    def close(state: _HandleState[H] | None) -> None:
        if state is not None:
            state.resources.release(state.key)

    return Source(initial=None, pull=pull_handle, setup=setup, close=close)
