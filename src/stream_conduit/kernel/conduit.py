from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

from stream_conduit.kernel.resource import ResourceCapability
from stream_conduit.kernel.signals import Finished, ProduceSignal, Producing

S = TypeVar("S")
I = TypeVar("I")
O = TypeVar("O")


@dataclass(frozen=True, slots=True)
class Conduit(Generic[S, I, O]):
    """Transformer between two streams.

    ``push`` answers ``Producing(state', outputs)`` or ``Finished(outputs)``;
    ``close`` flushes whatever the state still holds once upstream is exhausted.
    """

    initial: S
    push: Callable[[S, I], ProduceSignal[S, O]]
    close: Callable[[S], tuple[O, ...]]
    setup: Callable[[ResourceCapability], S] | None = None

    def start(self, resources: ResourceCapability) -> S:
        if self.setup is None:
            return self.initial
        return self.setup(resources)


def conduit_state(
    initial: S,
    push: Callable[[S, I], ProduceSignal[S, O]],
    close: Callable[[S], tuple[O, ...]],
) -> Conduit[S, I, O]:
    return Conduit(initial=initial, push=push, close=close)


def _no_flush(_state: object) -> tuple[object, ...]:
    return ()


def map_(fn: Callable[[I], O]) -> Conduit[None, I, O]:
    return Conduit(initial=None, push=lambda _state, value: Producing(None, (fn(value),)), close=_no_flush)


def filter_(pred: Callable[[I], bool]) -> Conduit[None, I, I]:
    return Conduit(
        initial=None,
        push=lambda _state, value: Producing(None, (value,) if pred(value) else ()),
        close=_no_flush,
    )


def concat_map(fn: Callable[[I], Iterable[O]]) -> Conduit[None, I, O]:
    # Zero or more outputs per input, in the order `fn` yields them.
    return Conduit(initial=None, push=lambda _state, value: Producing(None, tuple(fn(value))), close=_no_flush)


def isolate(count: int) -> Conduit[int, I, I]:
    """Forward at most ``count`` values, then finish.

    State is the number of values still allowed through. The value arriving
    once the count is used up is not forwarded: it is returned as leftover so
    a resumable driver can push it back upstream. Downstream therefore sees
    exactly ``min(count, available)`` values.
    """
    if count < 0:
        raise ValueError("isolate count must be >= 0")

    def push(remaining: int, value: I) -> ProduceSignal[int, I]:
        if remaining == 0:
            return Finished(leftover=(value,))
        return Producing(remaining - 1, (value,))

    return Conduit(initial=count, push=push, close=_no_flush)
