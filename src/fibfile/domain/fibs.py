from __future__ import annotations

import operator
from collections.abc import Iterable

from stream_conduit.kernel.conduit import Conduit, conduit_state, map_
from stream_conduit.kernel.fusion import connect
from stream_conduit.kernel.signals import Open, Processing, Producing, PullSignal
from stream_conduit.kernel.sink import Sink, fold, sink_state
from stream_conduit.kernel.source import Source, source_list, source_state

FibState = tuple[int, int]


def _next_fib(state: FibState) -> PullSignal[FibState, int]:
    # State holds the next two numbers; the first is emitted. The sequence never closes.
    current, following = state
    return Open((following, current + following), current)


def fibs() -> Source[FibState, int]:
    return source_state((0, 1), _next_fib)


def sum_sink() -> Sink[int, int, int]:
    return fold(operator.add, 0)


def sum_sink_state() -> Sink[int, int, int]:
    # Same fold spelled out with an explicit push/close pair.
    return sink_state(0, lambda acc, value: Processing(acc + value), lambda acc: acc)


def sum_list(values: Iterable[int]) -> int:
    return connect(source_list(values), sum_sink())


def int_to_text(value: int) -> str:
    return str(value)


def textify() -> Conduit[None, int, str]:
    return map_(int_to_text)


def textify_state() -> Conduit[None, int, str]:
    # Stateless conduit written with conduit_state and a dummy state.
    return conduit_state(None, lambda _state, value: Producing(None, (int_to_text(value),)), lambda _state: ())


def unlines() -> Conduit[None, str, str]:
    return map_(lambda text: text + "\n")
