"""Text scanning and source discovery helpers."""

from .files import find_swift_files, read_text
from .text import (
    brace_delta,
    closing_brace_count,
    contains,
    extract_block,
    is_blank_or_comment,
    matches,
    strip_line_comment,
)

__all__ = [
    "brace_delta",
    "closing_brace_count",
    "contains",
    "extract_block",
    "find_swift_files",
    "is_blank_or_comment",
    "matches",
    "read_text",
    "strip_line_comment",
]
