from .store_file import (
    TaskRecord,
    format_content,
    format_line,
    parse_content,
    parse_line,
    read_file,
    write_file,
)

__all__ = [
    "TaskRecord",
    "format_content",
    "format_line",
    "parse_content",
    "parse_line",
    "read_file",
    "write_file",
]
