"""Documentation reading router."""

from .constants import DEFAULT_PLAN, ROUTING_TABLE, RouteCategory
from .router import RoutingDecision, classify_task, route_task, search_case_studies

__all__ = [
    "DEFAULT_PLAN",
    "ROUTING_TABLE",
    "RouteCategory",
    "RoutingDecision",
    "classify_task",
    "route_task",
    "search_case_studies",
]
