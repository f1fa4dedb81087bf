from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar, Union

if TYPE_CHECKING:
    from stream_conduit.kernel.source import Source

S = TypeVar("S")
T = TypeVar("T")
R = TypeVar("R")

# Signals are the outcome of a single step call; the driver loop branches on them.
# Leftover tuples hold at most one input value that a step declined to consume.


@dataclass(frozen=True, slots=True)
class Open(Generic[S, T]):
    # Source produced a value and may produce more from `state`.
    state: S
    value: T


@dataclass(frozen=True, slots=True)
class Closed:
    """Source is exhausted; it must not be pulled again.

    A fused source whose conduit finished early still has unread upstream
    input. ``rest`` is that remainder as a source of its own (declined value
    first); drivers either resume from it or stop it.
    """

    rest: Source[Any, Any] | None = None

    def __repr__(self) -> str:
        if self.rest is None:
            return "CLOSED"
        return "Closed(rest=...)"


CLOSED = Closed()


@dataclass(frozen=True, slots=True)
class Processing(Generic[S]):
    # Sink accepted the value and wants more input.
    state: S


@dataclass(frozen=True, slots=True)
class Done(Generic[R]):
    # Sink is satisfied; no further pushes happen.
    result: R
    leftover: tuple[object, ...] = ()

    def __post_init__(self) -> None:
        if len(self.leftover) > 1:
            raise ValueError("Done.leftover holds at most one value")


@dataclass(frozen=True, slots=True)
class Producing(Generic[S, T]):
    # Conduit emitted zero or more outputs and accepts more input.
    state: S
    outputs: tuple[T, ...] = ()


@dataclass(frozen=True, slots=True)
class Finished(Generic[T]):
    # Conduit emits a final batch and accepts no more input.
    outputs: tuple[T, ...] = ()
    leftover: tuple[object, ...] = ()

    def __post_init__(self) -> None:
        if len(self.leftover) > 1:
            raise ValueError("Finished.leftover holds at most one value")


PullSignal = Union[Open[S, T], Closed]
PushSignal = Union[Processing[S], Done[R]]
ProduceSignal = Union[Producing[S, T], Finished[T]]
