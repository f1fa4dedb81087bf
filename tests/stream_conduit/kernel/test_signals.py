from __future__ import annotations

import pytest

from stream_conduit.kernel.signals import CLOSED, Closed, Done, Finished, Open, Processing, Producing
from stream_conduit.kernel.source import source_list


def test_closed_is_a_value_singleton() -> None:
    assert Closed() == CLOSED
    assert repr(CLOSED) == "CLOSED"


def test_signals_compare_by_value() -> None:
    # Deterministic replay relies on signals being plain values.
    assert Open((1, 2), 1) == Open((1, 2), 1)
    assert Processing(3) == Processing(3)
    assert Producing(None, ("a",)) == Producing(None, ("a",))


def test_terminal_signals_default_to_no_leftover() -> None:
    assert Done(5).leftover == ()
    assert Finished().outputs == ()
    assert Finished().leftover == ()


@pytest.mark.parametrize("factory", [lambda: Done(1, leftover=(1, 2)), lambda: Finished(leftover=(1, 2))])
def test_leftover_holds_at_most_one_value(factory) -> None:
    with pytest.raises(ValueError):
        factory()


def test_closed_can_carry_the_unread_rest() -> None:
    rest = source_list([1])
    assert CLOSED.rest is None
    assert Closed(rest).rest is rest
    assert Closed(rest) != CLOSED
    assert repr(Closed(rest)) == "Closed(rest=...)"
