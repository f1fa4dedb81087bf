from .logging import JsonlLogSink, MemoryLogSink, StdoutLogSink, log_jsonl, log_memory, log_stdout

__all__ = [
    "StdoutLogSink",
    "JsonlLogSink",
    "MemoryLogSink",
    "log_stdout",
    "log_jsonl",
    "log_memory",
]
