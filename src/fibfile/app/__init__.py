from .cli import apply_fibs_overrides, apply_logging_overrides, build_log_sink, build_parser, parse_args, run

# app package exports CLI helpers for reuse in tests and entrypoints.
__all__ = [
    "apply_fibs_overrides",
    "apply_logging_overrides",
    "build_log_sink",
    "build_parser",
    "parse_args",
    "run",
]
