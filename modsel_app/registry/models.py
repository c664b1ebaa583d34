"""
Module registry data models.

Immutable descriptions of the selectable guidance modules and the track
groups that make some of them mutually exclusive. A Registry is only ever
built through ``registry.loader.build_registry``, which validates the graph.
"""

import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Iterator, Optional

from ..errors import UnknownReference
from ..signals.predicates import Predicate, describe


class ModuleCategory(str, Enum):
    """How a module becomes selected."""
    CORE = "core"            # Always selected
    TRACK = "track"          # Exactly one member of its track group is selected
    FEATURE = "feature"      # Selected iff its predicate holds


@dataclass(frozen=True)
class ModuleNode:
    """One selectable unit of guidance."""

    id: str
    category: ModuleCategory
    predicate: Optional[Predicate] = None
    dependencies: frozenset = field(default_factory=frozenset)
    conflicts: frozenset = field(default_factory=frozenset)
    priority: int = 0                                # Declaration order, set by the loader
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", ModuleCategory(self.category))
        object.__setattr__(self, "dependencies", frozenset(self.dependencies))
        object.__setattr__(self, "conflicts", frozenset(self.conflicts))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category.value,
            "predicate": describe(self.predicate) if self.predicate is not None else None,
            "dependencies": sorted(self.dependencies),
            "conflicts": sorted(self.conflicts),
            "priority": self.priority,
        }


@dataclass(frozen=True)
class TrackGroup:
    """Mutually exclusive alternatives; ``default`` wins when nothing matches."""

    name: str
    members: tuple
    default: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "members", tuple(self.members))

    def to_dict(self) -> dict:
        return {"name": self.name, "members": list(self.members), "default": self.default}


class Registry:
    """Validated, read-only catalog of module nodes and track groups."""

    def __init__(self, nodes: Iterable[ModuleNode], track_groups: Iterable[TrackGroup] = ()):
        ordered = tuple(sorted(nodes, key=lambda node: node.priority))
        self._ordered = ordered
        self._nodes = MappingProxyType({node.id: node for node in ordered})
        self._groups = tuple(track_groups)
        self._group_of = MappingProxyType({
            member: group for group in self._groups for member in group.members
        })

        dependents: dict[str, list[str]] = {node.id: [] for node in ordered}
        for node in ordered:
            for dep in node.dependencies:
                if dep in dependents:
                    dependents[dep].append(node.id)
        self._dependents = MappingProxyType({k: tuple(v) for k, v in dependents.items()})

        self._fingerprint = self._compute_fingerprint()

    def _compute_fingerprint(self) -> str:
        payload = json.dumps(
            {
                "modules": [node.to_dict() for node in self._ordered],
                "tracks": [group.to_dict() for group in self._groups],
            },
            sort_keys=True,
            separators=(",", ":"),
        )
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    @property
    def fingerprint(self) -> str:
        """Stable digest of the registry contents."""
        return self._fingerprint

    def node(self, module_id: str) -> ModuleNode:
        """Look up a node, raising UnknownReference if it is absent."""
        try:
            return self._nodes[module_id]
        except KeyError:
            raise UnknownReference("registry", module_id) from None

    def has_node(self, module_id: str) -> bool:
        return module_id in self._nodes

    def all_nodes(self) -> tuple:
        """All nodes in priority (declaration) order."""
        return self._ordered

    def nodes_by_category(self, category: ModuleCategory) -> tuple:
        category = ModuleCategory(category)
        return tuple(node for node in self._ordered if node.category is category)

    def track_groups(self) -> tuple:
        return self._groups

    def track_group(self, name: str) -> Optional[TrackGroup]:
        for group in self._groups:
            if group.name == name:
                return group
        return None

    def group_of(self, module_id: str) -> Optional[TrackGroup]:
        """Track group a module belongs to, if any."""
        return self._group_of.get(module_id)

    def dependents_of(self, module_id: str) -> tuple:
        """Ids of the nodes that declare ``module_id`` as a dependency."""
        return self._dependents.get(module_id, ())

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._nodes

    def __iter__(self) -> Iterator[ModuleNode]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)

    def __repr__(self) -> str:
        return f"Registry(modules={len(self._ordered)}, tracks={len(self._groups)})"
