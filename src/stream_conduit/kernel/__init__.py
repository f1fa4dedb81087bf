from .conduit import Conduit, concat_map, conduit_state, filter_, isolate, map_
from .errors import ConduitError, EncodingError, ResourceError, UsageError
from .fusion import connect, connect_resume, fuse_conduit, fuse_conduits, fuse_sink, fuse_source
from .resource import ReleaseKey, ResourceCapability, ResourceScope, run_resource
from .signals import CLOSED, Closed, Done, Finished, Open, Processing, Producing
from .sink import Sink, consume, drop, fold, head, peek, sink_io, sink_state, take
from .source import Source, source_io, source_list, source_state

# Kernel exports: signals, the three primitives, fusion and the resource scope.
__all__ = [
    "CLOSED",
    "Closed",
    "Done",
    "Finished",
    "Open",
    "Processing",
    "Producing",
    "Source",
    "source_state",
    "source_list",
    "source_io",
    "Sink",
    "sink_state",
    "sink_io",
    "fold",
    "consume",
    "take",
    "head",
    "peek",
    "drop",
    "Conduit",
    "conduit_state",
    "map_",
    "filter_",
    "concat_map",
    "isolate",
    "fuse_source",
    "fuse_sink",
    "fuse_conduit",
    "fuse_conduits",
    "connect",
    "connect_resume",
    "ReleaseKey",
    "ResourceCapability",
    "ResourceScope",
    "run_resource",
    "ConduitError",
    "ResourceError",
    "EncodingError",
    "UsageError",
]
