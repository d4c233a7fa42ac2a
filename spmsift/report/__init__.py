"""Report rendering."""

from .render import (
    SEVERITY_GLYPHS,
    ReportRenderer,
    diagnostic_line,
    diagnostics_from_json,
    diagnostics_to_json,
    glyph,
)

__all__ = [
    "ReportRenderer",
    "SEVERITY_GLYPHS",
    "diagnostic_line",
    "diagnostics_from_json",
    "diagnostics_to_json",
    "glyph",
]
