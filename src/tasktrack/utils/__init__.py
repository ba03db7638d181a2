from .ids import compute_prefixes, derive_task_id, format_timestamp, shortest_unique_prefix
from .formatting import clean_description, format_tree_line, render_tags

__all__ = [
    "compute_prefixes",
    "derive_task_id",
    "format_timestamp",
    "shortest_unique_prefix",
    "clean_description",
    "format_tree_line",
    "render_tags",
]
