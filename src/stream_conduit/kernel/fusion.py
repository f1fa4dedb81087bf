from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeVar

from stream_conduit.kernel.conduit import Conduit
from stream_conduit.kernel.resource import ResourceCapability, ResourceScope
from stream_conduit.kernel.signals import (
    CLOSED,
    Closed,
    Done,
    Finished,
    Open,
    Processing,
    Producing,
    ProduceSignal,
    PullSignal,
    PushSignal,
)
from stream_conduit.kernel.sink import Sink
from stream_conduit.kernel.source import Source, source_list

T = TypeVar("T")
U = TypeVar("U")
V = TypeVar("V")
R = TypeVar("R")

# Fusion threads each constituent's state explicitly; nothing is shared between stages.


@dataclass(frozen=True, slots=True)
class _Running:
    upstream: Any
    conduit: Any
    pending: tuple[Any, ...] = ()


@dataclass(frozen=True, slots=True)
class _Draining:
    # No more input is read; only already produced outputs remain, then `rest` is handed on.
    pending: tuple[Any, ...]
    rest: Source[Any, Any] | None = None


def _emit(pending: tuple[Any, ...], rest: Source[Any, Any] | None) -> PullSignal[_Draining, Any]:
    if not pending:
        return Closed(rest) if rest is not None else CLOSED
    return Open(_Draining(pending[1:], rest), pending[0])


def _stop_rest(rest: Source[Any, Any] | None) -> None:
    if rest is not None:
        rest.stop(rest.initial)


def fuse_source(source: Source[Any, T], conduit: Conduit[Any, T, U]) -> Source[_Running | _Draining, U]:
    """Fuse a conduit onto a source, giving a source of the conduit's outputs.

    Each pull keeps pulling upstream until the conduit emits something. When
    upstream closes the conduit is flushed. When the conduit finishes, the
    unread upstream (its leftover first) is kept as the ``rest`` of the final
    ``Closed`` so a resuming driver loses nothing; upstream is only stopped
    when that rest is abandoned. Buffered outputs are drained first.
    """

    def pull(state: _Running | _Draining) -> PullSignal[_Running | _Draining, U]:
        if isinstance(state, _Draining):
            return _emit(state.pending, state.rest)
        if state.pending:
            return Open(_Running(state.upstream, state.conduit, state.pending[1:]), state.pending[0])
        upstream, conduit_state = state.upstream, state.conduit
        while True:
            signal = source.pull(upstream)
            if isinstance(signal, Closed):
                return _emit(tuple(conduit.close(conduit_state)), signal.rest)
            produced = conduit.push(conduit_state, signal.value)
            if isinstance(produced, Finished):
                return _emit(tuple(produced.outputs), _resumed(source, signal.state, produced.leftover))
            upstream, conduit_state = signal.state, produced.state
            if produced.outputs:
                return Open(_Running(upstream, conduit_state, tuple(produced.outputs[1:])), produced.outputs[0])

    def close(state: _Running | _Draining) -> None:
        if isinstance(state, _Running):
            source.stop(state.upstream)
        else:
            _stop_rest(state.rest)

    setup = None
    if source.setup is not None or conduit.setup is not None:
        setup = lambda resources: _Running(source.start(resources), conduit.start(resources))

    return Source(
        initial=_Running(source.initial, conduit.initial),
        pull=pull,
        setup=setup,
        close=close,
    )


def fuse_sink(conduit: Conduit[Any, T, U], sink: Sink[Any, U, R]) -> Sink[tuple[Any, Any], T, R]:
    """Fuse a conduit in front of a sink, giving a sink of the conduit's inputs.

    Outputs of every push go into the sink in order. If the sink finishes
    midway the rest of that batch is discarded. If the conduit finishes, the
    sink is closed after its final batch and the conduit's leftover is passed on.
    """

    def push(state: tuple[Any, Any], value: T) -> PushSignal[tuple[Any, Any], R]:
        conduit_state, sink_state = state
        produced = conduit.push(conduit_state, value)
        leftover = produced.leftover if isinstance(produced, Finished) else ()
        for output in produced.outputs:
            pushed = sink.push(sink_state, output)
            if isinstance(pushed, Done):
                return Done(pushed.result, leftover=leftover)
            sink_state = pushed.state
        if isinstance(produced, Finished):
            return Done(sink.close(sink_state), leftover=leftover)
        return Processing((produced.state, sink_state))

    def close(state: tuple[Any, Any]) -> R:
        conduit_state, sink_state = state
        for output in conduit.close(conduit_state):
            pushed = sink.push(sink_state, output)
            if isinstance(pushed, Done):
                return pushed.result
            sink_state = pushed.state
        return sink.close(sink_state)

    setup = None
    if conduit.setup is not None or sink.setup is not None:
        setup = lambda resources: (conduit.start(resources), sink.start(resources))

    return Sink(initial=(conduit.initial, sink.initial), push=push, close=close, setup=setup)


def fuse_conduit(left: Conduit[Any, T, U], right: Conduit[Any, U, V]) -> Conduit[tuple[Any, Any], T, V]:
    # Outputs of `left` feed `right` in order; a Finished on either side finishes the composite.

    def push(state: tuple[Any, Any], value: T) -> ProduceSignal[tuple[Any, Any], V]:
        left_state, right_state = state
        first = left.push(left_state, value)
        leftover = first.leftover if isinstance(first, Finished) else ()
        outputs: list[V] = []
        for middle in first.outputs:
            second = right.push(right_state, middle)
            outputs.extend(second.outputs)
            if isinstance(second, Finished):
                return Finished(tuple(outputs), leftover=leftover)
            right_state = second.state
        if isinstance(first, Finished):
            outputs.extend(right.close(right_state))
            return Finished(tuple(outputs), leftover=leftover)
        return Producing((first.state, right_state), tuple(outputs))

    def close(state: tuple[Any, Any]) -> tuple[V, ...]:
        left_state, right_state = state
        outputs: list[V] = []
        for middle in left.close(left_state):
            second = right.push(right_state, middle)
            outputs.extend(second.outputs)
            if isinstance(second, Finished):
                return tuple(outputs)
            right_state = second.state
        outputs.extend(right.close(right_state))
        return tuple(outputs)

    setup = None
    if left.setup is not None or right.setup is not None:
        setup = lambda resources: (left.start(resources), right.start(resources))

    return Conduit(initial=(left.initial, right.initial), push=push, close=close, setup=setup)


def fuse_conduits(first: Conduit[Any, Any, Any], *rest: Conduit[Any, Any, Any]) -> Conduit[Any, Any, Any]:
    # Left-to-right chain of fuse_conduit.
    fused = first
    for conduit in rest:
        fused = fuse_conduit(fused, conduit)
    return fused


def connect(
    source: Source[Any, T],
    sink: Sink[Any, T, R],
    *,
    resources: ResourceCapability | None = None,
) -> R:
    """Run a source into a sink and return the sink's result.

    Without ``resources`` the run gets its own :class:`ResourceScope`, so every
    handle acquired by either side is released before this returns or raises.
    The source is never pulled again once the sink answers ``Done``.
    """
    if resources is None:
        with ResourceScope() as scope:
            return connect(source, sink, resources=scope)

    source_state = source.start(resources)
    sink_state = sink.start(resources)
    while True:
        signal = source.pull(source_state)
        if isinstance(signal, Closed):
            # Unread upstream of a finished conduit is stopped here.
            _stop_rest(signal.rest)
            return sink.close(sink_state)
        pushed = sink.push(sink_state, signal.value)
        if isinstance(pushed, Done):
            source.stop(signal.state)
            return pushed.result
        source_state, sink_state = signal.state, pushed.state


@dataclass(frozen=True, slots=True)
class _Resumed:
    upstream: Any
    pending: tuple[Any, ...]


def _resumed(source: Source[Any, T], upstream: Any, pending: tuple[Any, ...]) -> Source[_Resumed, T]:
    def pull(state: _Resumed) -> PullSignal[_Resumed, T]:
        if state.pending:
            return Open(_Resumed(state.upstream, state.pending[1:]), state.pending[0])
        signal = source.pull(state.upstream)
        if isinstance(signal, Closed):
            return signal
        return Open(_Resumed(signal.state, ()), signal.value)

    return Source(initial=_Resumed(upstream, pending), pull=pull, close=lambda state: source.stop(state.upstream))


def connect_resume(
    source: Source[Any, T],
    sink: Sink[Any, T, R],
    *,
    resources: ResourceCapability,
) -> tuple[Source[Any, T], R]:
    """Like :func:`connect`, but hand back the rest of the source.

    A leftover returned by the sink is pushed back in front of the remaining
    values. When a fused conduit finished the source early, its unread
    upstream is the remainder, so the result does not depend on whether a
    conduit was fused into the source or into the sink. The remainder keeps
    its handles in ``resources``, so the caller owns that scope and continues
    with ``connect(rest, ..., resources=scope)``.
    """
    source_state = source.start(resources)
    sink_state = sink.start(resources)
    while True:
        signal = source.pull(source_state)
        if isinstance(signal, Closed):
            rest = signal.rest if signal.rest is not None else source_list(())
            return rest, sink.close(sink_state)
        pushed = sink.push(sink_state, signal.value)
        if isinstance(pushed, Done):
            return _resumed(source, signal.state, pushed.leftover), pushed.result
        source_state, sink_state = signal.state, pushed.state
