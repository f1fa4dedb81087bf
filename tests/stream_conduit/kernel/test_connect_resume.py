from __future__ import annotations

import pytest

from stream_conduit.kernel.conduit import isolate, map_
from stream_conduit.kernel.fusion import connect, connect_resume, fuse_conduit, fuse_sink, fuse_source
from stream_conduit.kernel.resource import ResourceScope
from stream_conduit.kernel.sink import consume, drop, peek, take
from stream_conduit.kernel.source import source_io, source_list
from support.fakes import FakeHandle


def test_isolate_boundary_value_is_pushed_back() -> None:
    # The value isolate declines is not lost: the resumed source yields it first.
    with ResourceScope() as scope:
        rest, first = connect_resume(source_list(range(8)), fuse_sink(isolate(3), consume()), resources=scope)
        second = connect(rest, fuse_sink(isolate(3), consume()), resources=scope)
        third = connect(rest, consume(), resources=scope)
    assert first == [0, 1, 2]
    assert second == [3, 4, 5]
    # Sources are values: `rest` replays from where the first run stopped.
    assert third == [3, 4, 5, 6, 7]


def test_peek_does_not_consume() -> None:
    with ResourceScope() as scope:
        rest, value = connect_resume(source_list([7, 8]), peek(), resources=scope)
        assert value == 7
        assert connect(rest, consume(), resources=scope) == [7, 8]


def test_drop_then_consume() -> None:
    with ResourceScope() as scope:
        rest, _ = connect_resume(source_list([1, 2, 3, 4, 5]), drop(2), resources=scope)
        assert connect(rest, consume(), resources=scope) == [3, 4, 5]


def test_exhausted_source_resumes_empty() -> None:
    with ResourceScope() as scope:
        rest, values = connect_resume(source_list([1]), take(5), resources=scope)
        assert values == [1]
        assert connect(rest, consume(), resources=scope) == []


def test_resumed_resource_source_stays_open_until_scope_ends() -> None:
    handle = FakeHandle(["a", "b", "c"])
    source = source_io(lambda: handle, FakeHandle.release, FakeHandle.pull)
    with ResourceScope() as scope:
        rest, first = connect_resume(source, take(1), resources=scope)
        assert first == ["a"]
        assert handle.releases == 0
        assert connect(rest, consume(), resources=scope) == ["b", "c"]
        assert handle.releases == 1
    assert handle.releases == 1


GROUPINGS = {
    "source_fused": lambda source, conduit, sink: (fuse_source(source, conduit), sink),
    "sink_fused": lambda source, conduit, sink: (source, fuse_sink(conduit, sink)),
}


@pytest.mark.parametrize("grouping", sorted(GROUPINGS))
@pytest.mark.parametrize("length", [0, 2, 3, 6])
def test_resume_after_isolate_is_the_same_for_both_groupings(grouping: str, length: int) -> None:
    source, sink = GROUPINGS[grouping](source_list(range(length)), isolate(2), consume())
    with ResourceScope() as scope:
        rest, first = connect_resume(source, sink, resources=scope)
        second = connect(rest, consume(), resources=scope)
    assert first == list(range(min(2, length)))
    assert second == list(range(2, length))


def test_resume_through_nested_fused_sources_skips_the_finished_stages() -> None:
    # Values after the boundary come from the raw upstream, not through the fused conduits.
    source = fuse_source(fuse_source(source_list(range(5)), isolate(2)), map_(str))
    with ResourceScope() as scope:
        rest, first = connect_resume(source, consume(), resources=scope)
        assert first == ["0", "1"]
        assert connect(rest, consume(), resources=scope) == [2, 3, 4]


def test_resume_after_fused_conduit_finishes_inside_a_source() -> None:
    source = fuse_source(source_list("abcde"), fuse_conduit(isolate(3), map_(str.upper)))
    with ResourceScope() as scope:
        rest, first = connect_resume(source, consume(), resources=scope)
        assert first == ["A", "B", "C"]
        assert connect(rest, consume(), resources=scope) == ["d", "e"]


def test_unread_upstream_of_fused_source_is_held_until_resumed() -> None:
    handle = FakeHandle(["a", "b", "c", "d"])
    source = fuse_source(source_io(lambda: handle, FakeHandle.release, FakeHandle.pull), isolate(1))
    with ResourceScope() as scope:
        rest, first = connect_resume(source, consume(), resources=scope)
        assert first == ["a"]
        assert handle.releases == 0
        assert connect(rest, take(1), resources=scope) == ["b"]
        # take stopped early, so the remainder was stopped and the handle released.
        assert handle.releases == 1
    assert handle.releases == 1
