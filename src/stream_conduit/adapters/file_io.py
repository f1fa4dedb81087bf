from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Protocol, runtime_checkable

from stream_conduit.adapters.contracts import adapter
from stream_conduit.kernel.errors import ResourceError
from stream_conduit.kernel.signals import CLOSED, Closed, Processing, PushSignal
from stream_conduit.kernel.sink import Sink, sink_io
from stream_conduit.kernel.source import Source, source_io

DEFAULT_CHUNK_SIZE = 64 * 1024


@runtime_checkable
class ByteStreamIO(Protocol):
    # Byte-stream collaborator behind file sources and sinks. read_chunk returns None at end of stream.
    def open_for_read(self, path: Path) -> BinaryIO:
        raise NotImplementedError("ByteStreamIO is a port; use a concrete adapter.")

    def open_for_write(self, path: Path) -> BinaryIO:
        raise NotImplementedError("ByteStreamIO is a port; use a concrete adapter.")

    def read_chunk(self, handle: BinaryIO) -> bytes | None:
        raise NotImplementedError("ByteStreamIO is a port; use a concrete adapter.")

    def write_chunk(self, handle: BinaryIO, data: bytes) -> None:
        raise NotImplementedError("ByteStreamIO is a port; use a concrete adapter.")

    def close(self, handle: BinaryIO) -> None:
        raise NotImplementedError("ByteStreamIO is a port; use a concrete adapter.")


@dataclass(frozen=True, slots=True)
class LocalFileIO:
    # Local filesystem implementation; every OSError surfaces as ResourceError.
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError("LocalFileIO.chunk_size must be > 0")

    def open_for_read(self, path: Path) -> BinaryIO:
        try:
            return path.open("rb")
        except OSError as exc:
            raise ResourceError(f"Cannot open {path} for reading: {exc}") from exc

    def open_for_write(self, path: Path) -> BinaryIO:
        try:
            return path.open("wb")
        except OSError as exc:
            raise ResourceError(f"Cannot open {path} for writing: {exc}") from exc

    def read_chunk(self, handle: BinaryIO) -> bytes | None:
        try:
            data = handle.read(self.chunk_size)
        except OSError as exc:
            raise ResourceError(f"Read failed: {exc}") from exc
        return data or None

    def write_chunk(self, handle: BinaryIO, data: bytes) -> None:
        try:
            handle.write(data)
        except OSError as exc:
            raise ResourceError(f"Write failed: {exc}") from exc

    def close(self, handle: BinaryIO) -> None:
        try:
            handle.close()
        except OSError as exc:
            raise ResourceError(f"Close failed: {exc}") from exc


def source_file(path: Path, *, io: ByteStreamIO | None = None) -> Source[object, bytes]:
    """Stream the bytes of ``path`` chunk by chunk.

    The file is opened when the run starts and closed at end of input, when
    the consumer stops early, or when the run's scope ends.
    """
    file_io = io if io is not None else LocalFileIO()

    def pull(handle: BinaryIO) -> bytes | Closed:
        chunk = file_io.read_chunk(handle)
        if chunk is None:
            return CLOSED
        return chunk

    return source_io(lambda: file_io.open_for_read(path), file_io.close, pull, name=f"read:{path}")


def sink_file(path: Path, *, io: ByteStreamIO | None = None) -> Sink[object, bytes, int]:
    # Writes every chunk to `path`; the result is the number of bytes written.
    file_io = io if io is not None else LocalFileIO()

    def push(handle: BinaryIO, written: int, data: bytes) -> PushSignal[int, int]:
        file_io.write_chunk(handle, data)
        return Processing(written + len(data))

    return sink_io(
        lambda: file_io.open_for_write(path),
        file_io.close,
        0,
        push,
        lambda _handle, written: written,
        name=f"write:{path}",
    )


def _path_setting(settings: dict[str, object], adapter_name: str) -> Path:
    path = settings.get("path")
    if not isinstance(path, str) or not path:
        raise ValueError(f"{adapter_name}.settings.path must be a non-empty string")
    return Path(path)


def _io_setting(settings: dict[str, object], adapter_name: str) -> LocalFileIO:
    chunk_size = settings.get("chunk_size", DEFAULT_CHUNK_SIZE)
    if not isinstance(chunk_size, int) or isinstance(chunk_size, bool) or chunk_size <= 0:
        raise ValueError(f"{adapter_name}.settings.chunk_size must be a positive integer")
    return LocalFileIO(chunk_size=chunk_size)


@adapter(name="file_source", role="source", emits=[bytes])
def file_source(settings: dict[str, object]) -> Source[object, bytes]:
    return source_file(_path_setting(settings, "file_source"), io=_io_setting(settings, "file_source"))


@adapter(name="file_sink", role="sink", consumes=[bytes])
def file_sink(settings: dict[str, object]) -> Sink[object, bytes, int]:
    return sink_file(_path_setting(settings, "file_sink"), io=_io_setting(settings, "file_sink"))
