from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, TypeVar

from fibfile.domain.fibs import fibs, sum_sink, textify, unlines
from stream_conduit.adapters.file_io import ByteStreamIO, sink_file, source_file
from stream_conduit.adapters.text import encode_conduit
from stream_conduit.kernel.conduit import Conduit, isolate
from stream_conduit.kernel.fusion import connect, fuse_conduits, fuse_sink, fuse_source
from stream_conduit.kernel.resource import run_resource
from stream_conduit.kernel.sink import Sink
from stream_conduit.kernel.source import Source
from stream_conduit.ports.log_sink import LogSink

# Pipelines built from the fibonacci domain primitives and the file/text adapters.
# Every variant of a pipeline must produce the same observable result.

WriteLayout = Literal["source_fused", "sink_fused", "conduit"]
WRITE_LAYOUTS: tuple[WriteLayout, ...] = ("source_fused", "sink_fused", "conduit")

R = TypeVar("R")


def sum_first_fibs(count: int = 10) -> int:
    # isolate fused into the source.
    return connect(fuse_source(fibs(), isolate(count)), sum_sink())


def sum_first_fibs_sink_fused(count: int = 10) -> int:
    # isolate fused into the sink instead.
    return connect(fibs(), fuse_sink(isolate(count), sum_sink()))


def int_lines(count: int, charset: str = "utf-8") -> Conduit[object, int, bytes]:
    # isolate, textify, unlines and encode collapsed into one conduit.
    return fuse_conduits(isolate(count), textify(), unlines(), encode_conduit(charset))


def write_fibs_into(
    count: int,
    sink: Sink[Any, bytes, R],
    *,
    layout: WriteLayout = "source_fused",
    charset: str = "utf-8",
    log_sink: LogSink | None = None,
) -> R:
    """Write the first ``count`` fibonacci numbers into a byte sink, one per line.

    ``layout`` picks where the conduits are fused; the bytes reaching ``sink``
    are the same for all of them. Returns the sink's result.
    """
    if layout == "source_fused":
        source = fuse_source(
            fuse_source(fuse_source(fuse_source(fibs(), isolate(count)), textify()), unlines()),
            encode_conduit(charset),
        )
    elif layout == "sink_fused":
        source = fuse_source(fuse_source(fibs(), isolate(count)), textify())
        sink = fuse_sink(unlines(), fuse_sink(encode_conduit(charset), sink))
    elif layout == "conduit":
        source = fuse_source(fibs(), int_lines(count, charset))
    else:
        raise ValueError(f"Unknown write layout: {layout}")
    return run_resource(lambda scope: connect(source, sink, resources=scope), log_sink=log_sink)


def write_fibs(
    count: int,
    dest: Path,
    *,
    layout: WriteLayout = "source_fused",
    charset: str = "utf-8",
    io: ByteStreamIO | None = None,
    log_sink: LogSink | None = None,
) -> int:
    # File form of write_fibs_into; returns the number of bytes written to `dest`.
    return write_fibs_into(count, sink_file(dest, io=io), layout=layout, charset=charset, log_sink=log_sink)


def copy_stream(
    source: Source[Any, bytes],
    sink: Sink[Any, bytes, R],
    *,
    log_sink: LogSink | None = None,
) -> R:
    # Constant-memory copy between any byte source and sink.
    return run_resource(lambda scope: connect(source, sink, resources=scope), log_sink=log_sink)


def copy_file(
    src: Path,
    dest: Path,
    *,
    io: ByteStreamIO | None = None,
    log_sink: LogSink | None = None,
) -> int:
    # Returns the number of bytes written.
    return copy_stream(source_file(src, io=io), sink_file(dest, io=io), log_sink=log_sink)
