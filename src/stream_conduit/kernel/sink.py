from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from stream_conduit.kernel.errors import UsageError
from stream_conduit.kernel.resource import ReleaseKey, ResourceCapability
from stream_conduit.kernel.signals import Done, Processing, PushSignal

S = TypeVar("S")
T = TypeVar("T")
R = TypeVar("R")
A = TypeVar("A")
H = TypeVar("H")

# Accumulated values are kept as an immutable cons list: (newest, older) pairs.
_Stack = Optional[tuple[object, "_Stack"]]


@dataclass(frozen=True, slots=True)
class Sink(Generic[S, T, R]):
    """Push-based consumer folding its input into a result.

    ``push`` answers ``Processing(state')`` or ``Done(result)``; ``close`` turns
    the state into the result when input runs out first.
    """

    initial: S
    push: Callable[[S, T], PushSignal[S, R]]
    close: Callable[[S], R]
    setup: Callable[[ResourceCapability], S] | None = None

    def start(self, resources: ResourceCapability) -> S:
        if self.setup is None:
            return self.initial
        return self.setup(resources)


def sink_state(
    initial: S,
    push: Callable[[S, T], PushSignal[S, R]],
    close: Callable[[S], R],
) -> Sink[S, T, R]:
    return Sink(initial=initial, push=push, close=close)


def fold(combine: Callable[[A, T], A], seed: A) -> Sink[A, T, A]:
    # Never finishes early: the whole input is folded and the result comes from close.
    return Sink(initial=seed, push=lambda acc, value: Processing(combine(acc, value)), close=lambda acc: acc)


def _unwind(stack: _Stack) -> list[object]:
    out: list[object] = []
    while stack is not None:
        value, stack = stack
        out.append(value)
    out.reverse()
    return out


def consume() -> Sink[_Stack, T, list[T]]:
    # Collects every value in arrival order.
    return Sink(
        initial=None,
        push=lambda stack, value: Processing((value, stack)),
        close=_unwind,
    )


def take(count: int) -> Sink[tuple[int, _Stack], T, list[T]]:
    # Collects the first `count` values and finishes on the count-th push.
    # take(0) can only notice it is satisfied on the first push, which it hands back unconsumed.
    if count < 0:
        raise ValueError("take count must be >= 0")

    def push(state: tuple[int, _Stack], value: T) -> PushSignal[tuple[int, _Stack], list[T]]:
        remaining, stack = state
        if remaining == 0:
            return Done(_unwind(stack), leftover=(value,))
        stack = (value, stack)
        if remaining == 1:
            return Done(_unwind(stack))
        return Processing((remaining - 1, stack))

    return Sink(initial=(count, None), push=push, close=lambda state: _unwind(state[1]))


def head() -> Sink[None, T, T | None]:
    # First value, consumed; None on empty input.
    return Sink(initial=None, push=lambda _state, value: Done(value), close=lambda _state: None)


def peek() -> Sink[None, T, T | None]:
    # First value, handed back as leftover so a resumed source yields it again.
    return Sink(
        initial=None,
        push=lambda _state, value: Done(value, leftover=(value,)),
        close=lambda _state: None,
    )


def drop(count: int) -> Sink[int, T, None]:
    if count < 0:
        raise ValueError("drop count must be >= 0")

    def push(remaining: int, value: T) -> PushSignal[int, None]:
        if remaining == 0:
            return Done(None, leftover=(value,))
        if remaining == 1:
            return Done(None)
        return Processing(remaining - 1)

    return Sink(initial=count, push=push, close=lambda _remaining: None)


@dataclass(frozen=True, slots=True)
class _HandleSinkState(Generic[H, A]):
    resources: ResourceCapability
    key: ReleaseKey
    handle: H
    acc: A


def sink_io(
    alloc: Callable[[], H],
    release: Callable[[H], None],
    initial: A,
    push: Callable[[H, A, T], PushSignal[A, R]],
    close: Callable[[H, A], R],
    *,
    name: str = "",
) -> Sink[_HandleSinkState[H, A] | None, T, R]:
    """Sink writing into an external handle owned by the run's resource scope.

    ``push`` and ``close`` receive the handle plus an accumulator. The handle
    is released right after ``close`` or after ``push`` answers ``Done``;
    the scope releases it otherwise.
    """

    def setup(resources: ResourceCapability) -> _HandleSinkState[H, A]:
        key, handle = resources.allocate(alloc, release, name=name)
        return _HandleSinkState(resources=resources, key=key, handle=handle, acc=initial)

    def _checked(state: _HandleSinkState[H, A] | None) -> _HandleSinkState[H, A]:
        if state is None:
            raise UsageError(f"Sink {name or '<io>'} used without being started")
        if state.resources.released(state.key):
            raise UsageError(f"Sink {name or '<io>'} used after it finished")
        return state

    def push_handle(state: _HandleSinkState[H, A] | None, value: T) -> PushSignal[_HandleSinkState[H, A], R]:
        current = _checked(state)
        signal = push(current.handle, current.acc, value)
        if isinstance(signal, Done):
            current.resources.release(current.key)
            return signal
        return Processing(
            _HandleSinkState(resources=current.resources, key=current.key, handle=current.handle, acc=signal.state)
        )

    def close_handle(state: _HandleSinkState[H, A] | None) -> R:
        current = _checked(state)
        result = close(current.handle, current.acc)
        current.resources.release(current.key)
        return result

    return Sink(initial=None, push=push_handle, close=close_handle, setup=setup)
