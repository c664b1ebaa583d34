"""
Resolver: signal set + registry to ordered, reasoned module plan.
"""

from .engine import resolve_modules
from .models import (
    PlanDiff,
    PlanEntry,
    ReasonKind,
    ResolutionPlan,
    SelectionReason,
)
from .ordering import order_selection

__all__ = [
    "resolve_modules",
    "order_selection",
    "PlanDiff",
    "PlanEntry",
    "ReasonKind",
    "ResolutionPlan",
    "SelectionReason",
]
