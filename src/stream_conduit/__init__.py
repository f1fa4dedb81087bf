from .kernel import (
    CLOSED,
    Closed,
    Conduit,
    ConduitError,
    Done,
    EncodingError,
    Finished,
    Open,
    Processing,
    Producing,
    ResourceError,
    ResourceScope,
    Sink,
    Source,
    UsageError,
    connect,
    connect_resume,
    fuse_conduit,
    fuse_sink,
    fuse_source,
    isolate,
    run_resource,
)

# Top-level exports cover the common pipeline surface; helpers live in stream_conduit.kernel.
__all__ = [
    "CLOSED",
    "Closed",
    "Open",
    "Processing",
    "Done",
    "Producing",
    "Finished",
    "Source",
    "Sink",
    "Conduit",
    "fuse_source",
    "fuse_sink",
    "fuse_conduit",
    "connect",
    "connect_resume",
    "isolate",
    "ResourceScope",
    "run_resource",
    "ConduitError",
    "ResourceError",
    "EncodingError",
    "UsageError",
]
