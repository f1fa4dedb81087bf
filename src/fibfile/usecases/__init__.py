from .pipelines import (
    WRITE_LAYOUTS,
    copy_file,
    int_lines,
    sum_first_fibs,
    sum_first_fibs_sink_fused,
    write_fibs,
)

__all__ = [
    "WRITE_LAYOUTS",
    "copy_file",
    "int_lines",
    "sum_first_fibs",
    "sum_first_fibs_sink_fused",
    "write_fibs",
]
