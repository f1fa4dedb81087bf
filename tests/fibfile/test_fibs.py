from __future__ import annotations

import pytest

from fibfile.domain.fibs import fibs, int_to_text, sum_list, sum_sink, sum_sink_state, textify, textify_state, unlines
from fibfile.usecases.pipelines import sum_first_fibs, sum_first_fibs_sink_fused
from stream_conduit.kernel.conduit import isolate
from stream_conduit.kernel.fusion import connect, fuse_source
from stream_conduit.kernel.sink import consume, take
from stream_conduit.kernel.source import source_list

FIRST_TEN = [0, 1, 1, 2, 3, 5, 8, 13, 21, 34]


def test_first_ten_fibs() -> None:
    assert connect(fibs(), take(10)) == FIRST_TEN


def test_fibs_source_is_a_value() -> None:
    source = fibs()
    assert connect(source, take(4)) == connect(source, take(4)) == [0, 1, 1, 2]


@pytest.mark.parametrize("run", [sum_first_fibs, sum_first_fibs_sink_fused])
def test_sum_of_first_ten_fibs(run) -> None:
    assert run(10) == 88


@pytest.mark.parametrize("count", [0, 1, 5, 20])
def test_fused_layouts_agree(count: int) -> None:
    assert sum_first_fibs(count) == sum_first_fibs_sink_fused(count) == sum(connect(fibs(), take(count)))


@pytest.mark.parametrize("k", [0, 1, 4, 100])
def test_sum_sinks_match_closed_form(k: int) -> None:
    values = range(1, k + 1)
    expected = k * (k + 1) // 2
    assert sum_list(values) == expected
    assert connect(source_list(values), sum_sink_state()) == expected
    assert connect(source_list(values), sum_sink()) == expected


def test_int_to_text() -> None:
    assert int_to_text(34) == "34"
    assert int_to_text(-1) == "-1"


@pytest.mark.parametrize("make", [textify, textify_state])
def test_textify_variants_agree(make) -> None:
    source = fuse_source(fuse_source(fibs(), isolate(5)), make())
    assert connect(source, consume()) == ["0", "1", "1", "2", "3"]


def test_unlines_terminates_every_line() -> None:
    assert connect(fuse_source(source_list(["a", "", "b"]), unlines()), consume()) == ["a\n", "\n", "b\n"]
