"""
Registry construction and validation.

``build_registry`` is the only way to obtain a Registry. It assigns
priorities from declaration order, normalizes predicates and rejects any
catalog the resolver could not handle deterministically. Checks run in a
fixed order (ids, nodes, references, track groups, cycles) so the same bad
catalog always reports the same error.
"""

from dataclasses import replace
from typing import Iterable, Iterator, Sequence

import structlog

from ..errors import (
    CycleDetected,
    DuplicateId,
    InvalidModuleNode,
    InvalidTrackGroup,
    UnknownReference,
)
from ..signals.predicates import ALWAYS, NEVER
from .models import ModuleCategory, ModuleNode, Registry, TrackGroup

logger = structlog.get_logger(__name__)


def build_registry(
    nodes: Iterable[ModuleNode],
    track_groups: Iterable[TrackGroup] = ()
) -> Registry:
    """
    Build an immutable registry from module nodes and track groups.

    Args:
        nodes: Module nodes in declaration order
        track_groups: Track group declarations

    Returns:
        Validated Registry

    Raises:
        DuplicateId: two nodes share an id
        InvalidModuleNode: a node contradicts itself
        UnknownReference: an edge or group names an unknown id
        InvalidTrackGroup: a track group is malformed
        CycleDetected: the dependency graph has a cycle
    """
    prioritized = _assign_priorities(nodes)
    normalized = [_normalize_node(node) for node in prioritized]
    by_id = {node.id: node for node in normalized}

    _check_references(normalized, by_id)
    groups = _check_track_groups(list(track_groups), normalized, by_id)
    _check_cycles(normalized, by_id)

    registry = Registry(normalized, groups)

    logger.info(
        "Module registry built",
        modules=len(registry),
        track_groups=len(groups),
        fingerprint=registry.fingerprint[:12]
    )

    return registry


def _assign_priorities(nodes: Iterable[ModuleNode]) -> list[ModuleNode]:
    seen: set[str] = set()
    prioritized = []
    for index, node in enumerate(nodes):
        if node.id in seen:
            raise DuplicateId(node.id)
        seen.add(node.id)
        prioritized.append(replace(node, priority=index))
    return prioritized


def _normalize_node(node: ModuleNode) -> ModuleNode:
    if node.id in node.conflicts:
        raise InvalidModuleNode(node.id, "module conflicts with itself")

    contradictory = node.dependencies & node.conflicts
    if contradictory:
        raise InvalidModuleNode(
            node.id,
            f"module both depends on and conflicts with {sorted(contradictory)[0]!r}"
        )

    if node.category is ModuleCategory.CORE:
        if node.predicate not in (None, ALWAYS):
            raise InvalidModuleNode(node.id, "core modules cannot declare a predicate")
        return replace(node, predicate=ALWAYS)

    if node.predicate is None:
        return replace(node, predicate=NEVER)
    return node


def _check_references(nodes: Sequence[ModuleNode], by_id: dict[str, ModuleNode]) -> None:
    for node in nodes:
        for target in sorted(node.dependencies) + sorted(node.conflicts):
            if target not in by_id:
                raise UnknownReference(node.id, target)


def _check_track_groups(
    groups: list[TrackGroup],
    nodes: Sequence[ModuleNode],
    by_id: dict[str, ModuleNode]
) -> tuple:
    names: set[str] = set()
    owner: dict[str, str] = {}
    ordered_groups = []

    for group in groups:
        if group.name in names:
            raise InvalidTrackGroup(group.name, "duplicate group name")
        names.add(group.name)

        for member in list(group.members) + [group.default]:
            if member not in by_id:
                raise UnknownReference(group.name, member)

        if len(set(group.members)) != len(group.members):
            raise InvalidTrackGroup(group.name, "members listed more than once")
        if len(group.members) < 2:
            raise InvalidTrackGroup(group.name, "a track group needs at least two members")
        if group.default not in group.members:
            raise InvalidTrackGroup(group.name, f"default {group.default!r} is not a member")

        for member in group.members:
            if by_id[member].category is not ModuleCategory.TRACK:
                raise InvalidTrackGroup(group.name, f"member {member!r} is not a track module")
            if member in owner:
                raise InvalidTrackGroup(
                    group.name, f"member {member!r} already belongs to {owner[member]!r}"
                )
            owner[member] = group.name

        members = tuple(sorted(group.members, key=lambda member: by_id[member].priority))
        ordered_groups.append(TrackGroup(name=group.name, members=members, default=group.default))

    for node in nodes:
        if node.category is ModuleCategory.TRACK and node.id not in owner:
            raise InvalidTrackGroup(None, f"track module {node.id!r} belongs to no group")

    return tuple(ordered_groups)


def _check_cycles(nodes: Sequence[ModuleNode], by_id: dict[str, ModuleNode]) -> None:
    """Depth-first search over dependency edges in priority order."""
    WHITE, GRAY, BLACK = 0, 1, 2
    color = {node.id: WHITE for node in nodes}

    def dependencies_of(module_id: str) -> Iterator[str]:
        return iter(sorted(by_id[module_id].dependencies, key=lambda dep: by_id[dep].priority))

    for node in nodes:
        if color[node.id] != WHITE:
            continue

        color[node.id] = GRAY
        path = [node.id]
        pending = [dependencies_of(node.id)]

        while pending:
            for dep in pending[-1]:
                if color[dep] == GRAY:
                    cycle = path[path.index(dep):]
                    start = min(range(len(cycle)), key=lambda i: by_id[cycle[i]].priority)
                    raise CycleDetected(cycle[start:] + cycle[:start])
                if color[dep] == WHITE:
                    color[dep] = GRAY
                    path.append(dep)
                    pending.append(dependencies_of(dep))
                    break
            else:
                # All dependencies of the path tip are finished
                color[path.pop()] = BLACK
                pending.pop()
