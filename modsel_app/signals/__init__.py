"""
Signal and predicate model.

Immutable signal snapshots plus the boolean expression grammar module
predicates are written in.
"""

from .models import SignalSet, SignalValue, TRACK_OVERRIDE_PREFIX, track_override_key
from .predicates import (
    ALWAYS,
    NEVER,
    AllOf,
    AnyOf,
    Comparator,
    Comparison,
    Constant,
    Not,
    Predicate,
    all_of,
    any_of,
    comparison,
    evaluate,
    not_,
    parse_predicate,
    referenced_keys,
)

__all__ = [
    "SignalSet",
    "SignalValue",
    "TRACK_OVERRIDE_PREFIX",
    "track_override_key",
    "ALWAYS",
    "NEVER",
    "AllOf",
    "AnyOf",
    "Comparator",
    "Comparison",
    "Constant",
    "Not",
    "Predicate",
    "all_of",
    "any_of",
    "comparison",
    "evaluate",
    "not_",
    "parse_predicate",
    "referenced_keys",
]
