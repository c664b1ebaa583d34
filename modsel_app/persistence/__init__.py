"""Persistence for decision cache entries."""

from .decision_store import DecisionStore, StoredDecision

__all__ = ["DecisionStore", "StoredDecision"]
