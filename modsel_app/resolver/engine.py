"""
Module selection resolver.

Pure function of (signal set, registry) to resolution plan:

1. select every core module
2. pick one winner per track group (override signal, else first matching
   member in priority order, else the group's declared default)
3. select every feature whose predicate holds
4. add dependencies transitively, regardless of their own predicates
5. fail on any conflicts edge inside the selection
6. order topologically, ties broken by priority
7. stamp the plan with the signal digest and registry fingerprint

Nothing here mutates shared state, so any number of resolutions may run in
parallel against the same registry.
"""

from collections import deque
from typing import Any, Mapping, Union

from ..errors import ConflictUnresolved, UnknownReference
from ..logging.config import get_resolution_logger, log_module_selection
from ..registry.models import ModuleCategory, Registry, TrackGroup
from ..signals.models import TRACK_OVERRIDE_PREFIX, SignalSet, track_override_key
from ..signals.predicates import evaluate
from .models import (
    CORE,
    FEATURE_PREDICATE,
    TRACK_DEFAULT,
    TRACK_MATCH,
    TRACK_OVERRIDE,
    PlanEntry,
    ResolutionPlan,
    SelectionReason,
)
from .ordering import order_selection

logger = get_resolution_logger(__name__)


def resolve_modules(
    registry: Registry,
    signals: Union[SignalSet, Mapping[str, Any]],
    override_prefix: str = TRACK_OVERRIDE_PREFIX
) -> ResolutionPlan:
    """
    Resolve the ordered module plan for a signal set.

    Args:
        registry: Validated module registry
        signals: Observed project signals
        override_prefix: Signal key prefix that forces a track winner

    Returns:
        Immutable ResolutionPlan

    Raises:
        ConflictUnresolved: two selected modules conflict
        UnknownReference: an edge or track override names an unknown module
    """
    signals = SignalSet.from_mapping(signals)
    selected: dict[str, SelectionReason] = {}

    for node in registry.nodes_by_category(ModuleCategory.CORE):
        selected[node.id] = CORE

    for group in registry.track_groups():
        winner, reason = _resolve_track(registry, group, signals, override_prefix)
        selected.setdefault(winner, reason)

    for node in registry.nodes_by_category(ModuleCategory.FEATURE):
        if node.id not in selected and evaluate(node.predicate, signals):
            selected[node.id] = FEATURE_PREDICATE

    _propagate_dependencies(registry, selected)
    _check_conflicts(registry, selected)

    ordered = order_selection(registry, selected)
    plan = ResolutionPlan(
        entries=tuple(PlanEntry(module_id=m, reason=selected[m]) for m in ordered),
        signal_hash=signals.digest,
        registry_fingerprint=registry.fingerprint,
    )

    for entry in plan.entries:
        log_module_selection(logger, entry.module_id, str(entry.reason), signals.digest)

    logger.info(
        "Resolution completed",
        modules=plan.module_ids,
        signal_hash=signals.digest[:12]
    )

    return plan


def _resolve_track(
    registry: Registry,
    group: TrackGroup,
    signals: SignalSet,
    override_prefix: str
) -> tuple[str, SelectionReason]:
    """First-match selection; priority order decides between several matches."""
    override_key = track_override_key(group.name, override_prefix)
    override = signals.get(override_key)
    if isinstance(override, str):
        if override not in group.members:
            raise UnknownReference(override_key, override)
        return override, TRACK_OVERRIDE

    for member in group.members:
        if evaluate(registry.node(member).predicate, signals):
            return member, TRACK_MATCH

    logger.debug(
        "Track group fell back to default",
        group=group.name,
        default=group.default
    )
    return group.default, TRACK_DEFAULT


def _propagate_dependencies(registry: Registry, selected: dict[str, SelectionReason]) -> None:
    """Add dependencies of every selected module, walking requirers in priority order."""
    queue = deque(sorted(selected, key=lambda m: registry.node(m).priority))

    while queue:
        module_id = queue.popleft()
        node = registry.node(module_id)
        for dep in _known_targets(registry, module_id, node.dependencies):
            if dep not in selected:
                selected[dep] = SelectionReason.dependency_of(module_id)
                queue.append(dep)


def _check_conflicts(registry: Registry, selected: dict[str, SelectionReason]) -> None:
    """Raise on the earliest conflicting pair, in priority order."""
    pairs = []
    for module_id in selected:
        node = registry.node(module_id)
        for other in _known_targets(registry, module_id, node.conflicts):
            if other in selected:
                pairs.append(tuple(sorted((module_id, other), key=lambda m: registry.node(m).priority)))

    # Track siblings are mutually exclusive even without declared edges
    for group in registry.track_groups():
        chosen = [member for member in group.members if member in selected]
        if len(chosen) > 1:
            pairs.append((chosen[0], chosen[1]))

    if pairs:
        a, b = min(pairs, key=lambda pair: (registry.node(pair[0]).priority, registry.node(pair[1]).priority))
        raise ConflictUnresolved(a, b)


def _known_targets(registry: Registry, module_id: str, targets: frozenset) -> list[str]:
    for target in targets:
        if not registry.has_node(target):
            raise UnknownReference(module_id, target)
    return sorted(targets, key=lambda m: registry.node(m).priority)
