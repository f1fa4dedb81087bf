from .contracts import AdapterMeta, adapter, get_adapter_meta
from .discovery import AdapterDiscoveryError, build_adapter, discover_adapters
from .file_io import ByteStreamIO, LocalFileIO, file_sink, file_source, sink_file, source_file
from .text import decode, decode_conduit, encode, encode_conduit, lines


def discovery_modules() -> list[str]:
    # Modules contributing source and sink adapters for discovery.
    return ["stream_conduit.adapters.file_io"]


__all__ = [
    "AdapterMeta",
    "adapter",
    "get_adapter_meta",
    "AdapterDiscoveryError",
    "build_adapter",
    "discover_adapters",
    "ByteStreamIO",
    "LocalFileIO",
    "source_file",
    "sink_file",
    "file_source",
    "file_sink",
    "encode",
    "decode",
    "encode_conduit",
    "decode_conduit",
    "lines",
    "discovery_modules",
]
