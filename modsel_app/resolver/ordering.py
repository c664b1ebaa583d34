"""Deterministic ordering of a selection set."""

import heapq
from typing import Iterable

from ..errors import CycleDetected
from ..registry.models import Registry


def order_selection(registry: Registry, selected: Iterable[str]) -> list[str]:
    """
    Topologically sort selected module ids by the dependency relation.

    Every module appears after all of its dependencies; modules that are not
    ordered relative to each other come out by ascending priority. The
    selection must be closed under dependencies and the registry acyclic,
    both of which the resolver and the loader guarantee.
    """
    selected_ids = set(selected)
    pending = {
        module_id: len(registry.node(module_id).dependencies & selected_ids)
        for module_id in selected_ids
    }

    ready = [
        (registry.node(module_id).priority, module_id)
        for module_id, count in pending.items()
        if count == 0
    ]
    heapq.heapify(ready)

    ordered = []
    while ready:
        _, module_id = heapq.heappop(ready)
        ordered.append(module_id)
        for dependent in registry.dependents_of(module_id):
            if dependent in pending:
                pending[dependent] -= 1
                if pending[dependent] == 0:
                    heapq.heappush(ready, (registry.node(dependent).priority, dependent))

    if len(ordered) != len(selected_ids):
        remaining = sorted(selected_ids - set(ordered), key=lambda m: registry.node(m).priority)
        raise CycleDetected(remaining)

    return ordered
