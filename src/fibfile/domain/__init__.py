from .fibs import fibs, int_to_text, sum_list, sum_sink, sum_sink_state, textify, textify_state, unlines

__all__ = [
    "fibs",
    "int_to_text",
    "sum_list",
    "sum_sink",
    "sum_sink_state",
    "textify",
    "textify_state",
    "unlines",
]
