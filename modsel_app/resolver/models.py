"""
Resolution plan data models.

Plans are immutable: a later resolution produces a new plan instead of
editing an old one. ``to_json`` is canonical, so resolving the same registry
against the same signals always yields byte-identical output.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ReasonKind(str, Enum):
    """Why a module ended up in a plan."""
    CORE = "core"
    TRACK_MATCH = "track-match"
    TRACK_DEFAULT = "track-default"
    TRACK_OVERRIDE = "track-override"
    FEATURE_PREDICATE = "feature-predicate"
    DEPENDENCY_OF = "dependency-of"


@dataclass(frozen=True)
class SelectionReason:
    """Selection reason; ``source`` names the requiring module for dependencies."""
    kind: ReasonKind
    source: Optional[str] = None

    def __str__(self) -> str:
        if self.kind is ReasonKind.DEPENDENCY_OF:
            return f"{self.kind.value}:{self.source}"
        return self.kind.value

    @classmethod
    def parse(cls, text: str) -> "SelectionReason":
        kind, _, source = text.partition(":")
        reason_kind = ReasonKind(kind)
        if reason_kind is ReasonKind.DEPENDENCY_OF:
            if not source:
                raise ValueError(f"Dependency reason without a source: {text!r}")
            return cls(reason_kind, source)
        return cls(reason_kind)

    @classmethod
    def dependency_of(cls, module_id: str) -> "SelectionReason":
        return cls(ReasonKind.DEPENDENCY_OF, module_id)


CORE = SelectionReason(ReasonKind.CORE)
TRACK_MATCH = SelectionReason(ReasonKind.TRACK_MATCH)
TRACK_DEFAULT = SelectionReason(ReasonKind.TRACK_DEFAULT)
TRACK_OVERRIDE = SelectionReason(ReasonKind.TRACK_OVERRIDE)
FEATURE_PREDICATE = SelectionReason(ReasonKind.FEATURE_PREDICATE)


@dataclass(frozen=True)
class PlanEntry:
    """One selected module and the reason it was selected."""
    module_id: str
    reason: SelectionReason


@dataclass(frozen=True)
class ResolutionPlan:
    """Ordered, reasoned output of a resolution."""

    entries: tuple
    signal_hash: str
    registry_fingerprint: str = ""

    @property
    def module_ids(self) -> list[str]:
        return [entry.module_id for entry in self.entries]

    def reason_for(self, module_id: str) -> Optional[SelectionReason]:
        for entry in self.entries:
            if entry.module_id == module_id:
                return entry.reason
        return None

    def __contains__(self, module_id: object) -> bool:
        return any(entry.module_id == module_id for entry in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def to_dict(self) -> dict[str, Any]:
        return {
            "modules": [
                {"id": entry.module_id, "reason": str(entry.reason)}
                for entry in self.entries
            ],
            "signal_hash": self.signal_hash,
            "registry_fingerprint": self.registry_fingerprint,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResolutionPlan":
        return cls(
            entries=tuple(
                PlanEntry(module_id=item["id"], reason=SelectionReason.parse(item["reason"]))
                for item in data["modules"]
            ),
            signal_hash=data["signal_hash"],
            registry_fingerprint=data.get("registry_fingerprint", ""),
        )

    @classmethod
    def from_json(cls, text: str) -> "ResolutionPlan":
        return cls.from_dict(json.loads(text))


@dataclass(frozen=True)
class PlanDiff:
    """Module-level change between two consecutive plans for a project."""

    added: tuple = ()
    removed: tuple = ()

    @property
    def is_empty(self) -> bool:
        return not self.added and not self.removed

    @classmethod
    def empty(cls) -> "PlanDiff":
        return cls()

    @classmethod
    def between(cls, prior: Optional[ResolutionPlan], new: ResolutionPlan) -> "PlanDiff":
        """Diff two plans; with no prior plan the diff is empty."""
        if prior is None:
            return cls.empty()

        prior_ids = set(prior.module_ids)
        new_ids = set(new.module_ids)
        return cls(
            added=tuple(module_id for module_id in new.module_ids if module_id not in prior_ids),
            removed=tuple(module_id for module_id in prior.module_ids if module_id not in new_ids),
        )

    def to_dict(self) -> dict[str, list[str]]:
        return {"added": list(self.added), "removed": list(self.removed)}
