"""Renders reports with Jinja2 templates and serializes diagnostics."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Sequence

from jinja2 import Environment, FileSystemLoader

from ..models import Diagnostic, Severity, severity_from_code

SEVERITY_GLYPHS: Mapping[Severity, str] = {
    Severity.INFO: "ℹ️",
    Severity.WARNING: "⚠️",
    Severity.ERROR: "❌",
    Severity.CRITICAL: "🚨",
}


def glyph(severity: object) -> str:
    return SEVERITY_GLYPHS[severity_from_code(severity)]


def diagnostic_line(item: Diagnostic) -> str:
    line = f"{glyph(item.severity)} [{item.category.value}] {item.message}"
    if item.location is not None:
        line += f" ({item.location})"
    return line


def diagnostics_to_json(diagnostics: Iterable[Diagnostic], *, indent: int | None = 2) -> str:
    return json.dumps([item.to_dict() for item in diagnostics], indent=indent, ensure_ascii=False)


def diagnostics_from_json(text: str) -> List[Diagnostic]:
    """Parse a JSON report back into diagnostics.

    Accepts either a bare list or an object carrying a ``diagnostics`` list.
    """
    payload = json.loads(text)
    if isinstance(payload, Mapping):
        payload = payload.get("diagnostics", [])
    if not isinstance(payload, list):
        raise ValueError("Expected a list of diagnostics")
    return [Diagnostic.from_dict(entry) for entry in payload if isinstance(entry, Mapping)]


class ReportRenderer:
    """Renders the human-readable report shapes."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self._env = self._create_env(templates_dir)

    def render(self, template_name: str, **context: Any) -> str:
        template = self._env.get_template(template_name)
        return template.render(**context).rstrip()

    def diagnostics(self, items: Sequence[Diagnostic]) -> str:
        return self.render("diagnostics.j2", diagnostics=items)

    def analysis(self, report: Any, *, hang_detection: bool = False) -> str:
        return self.render("analysis.j2", report=report, hang=hang_detection)

    def validation(self, result: Any) -> str:
        return self.render("validation.j2", result=result)

    def patterns(self, scan: Any, *, show_positives: bool = False) -> str:
        return self.render("patterns.j2", scan=scan, show_positives=show_positives)

    def reading_plan(self, decision: Any, *, default_plan: str, checklist: Sequence[str]) -> str:
        return self.render(
            "reading_plan.j2",
            decision=decision,
            route=decision.route,
            default_plan=default_plan,
            checklist=checklist,
        )

    def parse_summary(self, result: Any) -> str:
        return self.render("parse_summary.j2", result=result)

    def parse_detailed(self, result: Any) -> str:
        return self.render("parse_detailed.j2", result=result)

    def optimization(self, recommendations: Sequence[str], *, apply: bool = False) -> str:
        return self.render("optimize.j2", recommendations=recommendations, apply=apply)

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        default_dir = str(Path(__file__).with_name("templates"))
        if default_dir not in directories:
            directories.append(default_dir)
        env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        env.filters["glyph"] = glyph
        env.filters["diagnostic_line"] = diagnostic_line
        return env


__all__ = [
    "ReportRenderer",
    "SEVERITY_GLYPHS",
    "diagnostic_line",
    "diagnostics_from_json",
    "diagnostics_to_json",
    "glyph",
]
