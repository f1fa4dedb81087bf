from __future__ import annotations

import codecs

from stream_conduit.kernel.conduit import Conduit
from stream_conduit.kernel.errors import EncodingError
from stream_conduit.kernel.signals import ProduceSignal, Producing


def _lookup(charset: str) -> codecs.CodecInfo:
    if not isinstance(charset, str) or not charset:
        raise ValueError("charset must be a non-empty string")
    try:
        info = codecs.lookup(charset)
    except LookupError as exc:
        raise ValueError(f"Unknown charset: {charset}") from exc
    # Bytes-to-bytes and str-to-str codecs such as base64 or rot13 are not charsets.
    if not getattr(info, "_is_text_encoding", True):
        raise ValueError(f"Not a text encoding: {charset}")
    return info


def encode(charset: str, text: str) -> bytes:
    _lookup(charset)
    try:
        return text.encode(charset)
    except UnicodeEncodeError as exc:
        raise EncodingError(charset, str(exc)) from exc


def decode(charset: str, data: bytes) -> str:
    _lookup(charset)
    try:
        return data.decode(charset)
    except UnicodeDecodeError as exc:
        raise EncodingError(charset, str(exc)) from exc


def encode_conduit(charset: str) -> Conduit[int, str, bytes]:
    """Text chunks in, encoded byte chunks out.

    The incremental encoder is rebuilt from its saved state on every push, so
    the conduit state stays a plain value (matters for charsets that write a
    BOM once, such as utf-16).
    """
    info = _lookup(charset)

    def _encoder(state: int) -> codecs.IncrementalEncoder:
        encoder = info.incrementalencoder("strict")
        encoder.setstate(state)
        return encoder

    def push(state: int, text: str) -> ProduceSignal[int, bytes]:
        encoder = _encoder(state)
        try:
            data = encoder.encode(text)
        except UnicodeEncodeError as exc:
            raise EncodingError(charset, str(exc)) from exc
        return Producing(encoder.getstate(), (data,) if data else ())

    def close(state: int) -> tuple[bytes, ...]:
        try:
            data = _encoder(state).encode("", final=True)
        except UnicodeEncodeError as exc:
            raise EncodingError(charset, str(exc)) from exc
        return (data,) if data else ()

    return Conduit(initial=info.incrementalencoder("strict").getstate(), push=push, close=close)


def decode_conduit(charset: str) -> Conduit[tuple[bytes, int], bytes, str]:
    # Multi-byte sequences split across chunk boundaries are carried in the decoder state.
    info = _lookup(charset)

    def _decoder(state: tuple[bytes, int]) -> codecs.IncrementalDecoder:
        decoder = info.incrementaldecoder("strict")
        decoder.setstate(state)
        return decoder

    def push(state: tuple[bytes, int], data: bytes) -> ProduceSignal[tuple[bytes, int], str]:
        decoder = _decoder(state)
        try:
            text = decoder.decode(data)
        except UnicodeDecodeError as exc:
            raise EncodingError(charset, str(exc)) from exc
        return Producing(decoder.getstate(), (text,) if text else ())

    def close(state: tuple[bytes, int]) -> tuple[str, ...]:
        # Truncated trailing sequences fail here.
        try:
            text = _decoder(state).decode(b"", final=True)
        except UnicodeDecodeError as exc:
            raise EncodingError(charset, str(exc)) from exc
        return (text,) if text else ()

    return Conduit(initial=info.incrementaldecoder("strict").getstate(), push=push, close=close)


def lines() -> Conduit[str, str, str]:
    # Re-chunks text into lines without their "\n"; state is the unterminated tail.
    def push(tail: str, text: str) -> ProduceSignal[str, str]:
        parts = (tail + text).split("\n")
        return Producing(parts[-1], tuple(parts[:-1]))

    return Conduit(initial="", push=push, close=lambda tail: (tail,) if tail else ())
