from __future__ import annotations

import pytest

from stream_conduit.kernel.errors import UsageError
from stream_conduit.kernel.resource import ResourceScope
from stream_conduit.kernel.signals import CLOSED, Open
from stream_conduit.kernel.source import Source, source_io, source_list, source_state
from support.fakes import FakeHandle


def _drain(source: Source, state) -> list[object]:
    out: list[object] = []
    signal = source.pull(state)
    while isinstance(signal, Open):
        out.append(signal.value)
        signal = source.pull(signal.state)
    return out


def test_source_list_yields_values_in_order_then_closes() -> None:
    source = source_list(["a", "b", "c"])
    assert _drain(source, source.initial) == ["a", "b", "c"]


def test_source_list_snapshots_its_input() -> None:
    values = [1, 2]
    source = source_list(values)
    values.append(3)
    assert _drain(source, source.initial) == [1, 2]


def test_empty_source_list_closes_immediately() -> None:
    source = source_list([])
    assert source.pull(source.initial) == CLOSED


def test_source_state_is_deterministic_for_equal_states() -> None:
    # Identical state must always give the identical next signal.
    source = source_state(3, lambda n: CLOSED if n == 0 else Open(n - 1, n))
    assert source.pull(2) == source.pull(2) == Open(1, 2)
    assert _drain(source, source.initial) == [3, 2, 1]


def test_plain_source_start_returns_initial_state() -> None:
    source = source_list([1])
    with ResourceScope() as scope:
        assert source.start(scope) == 0


def test_source_io_allocates_on_start_and_releases_on_close() -> None:
    handle = FakeHandle([1, 2])
    source = source_io(lambda: handle, FakeHandle.release, FakeHandle.pull, name="fake")
    with ResourceScope() as scope:
        state = source.start(scope)
        assert scope.held == 1
        assert _drain(source, state) == [1, 2]
        assert handle.releases == 1
        assert scope.held == 0
    assert handle.releases == 1


def test_source_io_pull_after_close_is_a_usage_error() -> None:
    handle = FakeHandle([])
    source = source_io(lambda: handle, FakeHandle.release, FakeHandle.pull)
    with ResourceScope() as scope:
        state = source.start(scope)
        assert source.pull(state) == CLOSED
        with pytest.raises(UsageError):
            source.pull(state)


def test_source_io_stop_releases_early_and_only_once() -> None:
    handle = FakeHandle([1, 2, 3])
    source = source_io(lambda: handle, FakeHandle.release, FakeHandle.pull)
    with ResourceScope() as scope:
        state = source.start(scope)
        first = source.pull(state)
        source.stop(first.state)
        assert handle.releases == 1
    assert handle.releases == 1


def test_source_io_released_by_scope_when_abandoned() -> None:
    handle = FakeHandle([1, 2, 3])
    source = source_io(lambda: handle, FakeHandle.release, FakeHandle.pull)
    with ResourceScope() as scope:
        source.pull(source.start(scope))
        assert handle.releases == 0
    assert handle.releases == 1


def test_source_io_pull_without_start_is_a_usage_error() -> None:
    source = source_io(lambda: FakeHandle(), FakeHandle.release, FakeHandle.pull)
    with pytest.raises(UsageError):
        source.pull(source.initial)
