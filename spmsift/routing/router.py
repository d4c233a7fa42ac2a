"""Keyword-overlap routing of task descriptions to documentation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from ..logging import get_logger
from ..models import ReadingRoute
from .constants import (
    BUG_FIX_CATEGORY,
    CASE_STUDY_GLOB,
    CASE_STUDY_MIN_WORD,
    ROUTING_TABLE,
    RouteCategory,
)

_logger = get_logger("routing")


@dataclass(frozen=True)
class RoutingDecision:
    """Outcome of routing one task: a category plan, a case study, or neither."""

    task: str
    route: Optional[ReadingRoute]
    case_study: Optional[str] = None
    guidance: tuple[str, ...] = ()

    @property
    def classified(self) -> bool:
        return self.route is not None


def score_category(text: str, category: RouteCategory) -> int:
    normalized = text.lower()
    return sum(1 for keyword in category.keywords if keyword in normalized)


def classify_task(
    text: str, table: Sequence[RouteCategory] = ROUTING_TABLE
) -> Optional[ReadingRoute]:
    """Pick the strictly highest scoring category; ties go to the earlier one."""
    best: Optional[RouteCategory] = None
    best_score = 0
    for category in table:
        score = score_category(text, category)
        if score > best_score:
            best, best_score = category, score

    if best is None:
        return None
    return ReadingRoute(
        category=best.name,
        description=best.description,
        primary_doc=best.primary,
        sections=best.sections,
        time_budget=best.time_budget,
        fallback_doc=best.fallback,
        match_score=best_score,
    )


def search_case_studies(text: str, directory: Path) -> Optional[str]:
    """Return the first case-study file mentioning any significant task word."""
    words = [word for word in text.lower().split() if len(word) >= CASE_STUDY_MIN_WORD]
    if not words:
        return None
    try:
        candidates = sorted(path for path in Path(directory).glob(CASE_STUDY_GLOB) if path.is_file())
    except OSError as exc:
        _logger.debug("Cannot list case studies in %s: %s", directory, exc)
        return None

    for path in candidates:
        try:
            content = path.read_text(encoding="utf-8", errors="replace").lower()
        except OSError as exc:
            _logger.debug("Skipping case study %s: %s", path, exc)
            continue
        if any(word in content for word in words):
            return path.name
    return None


def route_task(
    text: str,
    case_study_dir: Path | None = None,
    table: Sequence[RouteCategory] = ROUTING_TABLE,
) -> RoutingDecision:
    route = classify_task(text, table)
    if route is None:
        _logger.debug("No category matched task %r", text)
        return RoutingDecision(task=text, route=None)

    if route.category == BUG_FIX_CATEGORY:
        case_study = search_case_studies(text, case_study_dir or Path.cwd())
        if case_study is not None:
            _logger.debug("Bug-fix task matched case study %s", case_study)
            return RoutingDecision(task=text, route=route, case_study=case_study)

    guidance = next((category.guidance for category in table if category.name == route.category), ())
    return RoutingDecision(task=text, route=route, guidance=guidance)
