"""
Decision cache: last resolution plan per project, with incremental diffs.

Entries are replaced, never merged. Each project has its own re-entrant
lock, so the read-check-replace sequence for one project is atomic while
different projects never block each other. A cache hit needs both the same
signal digest and the same registry fingerprint; on a hit the resolver is
not invoked and the diff is empty.
"""

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from ..errors import PersistenceError, ResolutionError
from ..logging.config import get_cache_logger, log_cache_decision
from ..persistence.decision_store import DecisionStore
from ..registry.models import Registry
from ..resolver.engine import resolve_modules
from ..resolver.models import PlanDiff, ResolutionPlan
from ..signals.models import TRACK_OVERRIDE_PREFIX, SignalSet

logger = get_cache_logger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """Last known decision for one project."""
    project_id: str
    signal_hash: str
    registry_fingerprint: str
    plan: ResolutionPlan
    updated_at: str

    def matches(self, signals: SignalSet, registry: Registry) -> bool:
        return (self.signal_hash == signals.digest
                and self.registry_fingerprint == registry.fingerprint)


@dataclass(frozen=True)
class CachedResolution:
    """Plan returned by the cache plus its diff against the prior plan."""
    plan: ResolutionPlan
    diff: PlanDiff
    recomputed: bool


class DecisionCache:
    """Keyed store of cache entries with atomic per-project replacement."""

    def __init__(
        self,
        store: Optional[DecisionStore] = None,
        override_prefix: str = TRACK_OVERRIDE_PREFIX
    ):
        self.logger = logger
        self.store = store
        self.override_prefix = override_prefix
        self._entries: dict[str, CacheEntry] = {}
        self._locks: dict[str, list] = {}                # project_id -> [RLock, holders]
        self._locks_guard = threading.Lock()
        self._stats = {"hits": 0, "misses": 0, "failures": 0}
        self._stats_lock = threading.Lock()

    @contextmanager
    def _project_lock(self, project_id: str):
        """Hold the project's lock; the lock is dropped once nobody holds or awaits it."""
        with self._locks_guard:
            slot = self._locks.get(project_id)
            if slot is None:
                slot = self._locks[project_id] = [threading.RLock(), 0]
            slot[1] += 1

        try:
            with slot[0]:
                yield
        finally:
            with self._locks_guard:
                slot[1] -= 1
                if slot[1] == 0:
                    del self._locks[project_id]

    def _count(self, key: str) -> None:
        with self._stats_lock:
            self._stats[key] += 1

    def resolve(
        self,
        registry: Registry,
        signals: Union[SignalSet, Mapping[str, Any]],
        project_id: str
    ) -> CachedResolution:
        """
        Return the plan for a project, recomputing only when inputs changed.

        Raises:
            ResolutionError: the resolver rejected the inputs; the prior
                entry is left in place
            PersistenceError: the write-through failed; the prior entry is
                left in place, so the next call recomputes the same diff
        """
        signals = SignalSet.from_mapping(signals)

        with self._project_lock(project_id):
            prior = self.entry(project_id)

            if prior is not None and prior.matches(signals, registry):
                self._count("hits")
                log_cache_decision(self.logger, project_id, "hit")
                return CachedResolution(plan=prior.plan, diff=PlanDiff.empty(), recomputed=False)

            self._count("misses")
            try:
                plan = resolve_modules(registry, signals, self.override_prefix)
            except ResolutionError:
                self._count("failures")
                raise

            new_entry = CacheEntry(
                project_id=project_id,
                signal_hash=signals.digest,
                registry_fingerprint=registry.fingerprint,
                plan=plan,
                updated_at=datetime.now(timezone.utc).isoformat(),
            )
            try:
                self.compare_and_replace(project_id, prior, new_entry)
            except PersistenceError:
                self._count("failures")
                raise

            diff = PlanDiff.between(prior.plan if prior else None, plan)
            log_cache_decision(
                self.logger,
                project_id,
                "miss",
                added=list(diff.added),
                removed=list(diff.removed),
                context={"had_prior": prior is not None}
            )
            return CachedResolution(plan=plan, diff=diff, recomputed=True)

    def compare_and_replace(
        self,
        project_id: str,
        expected: Optional[CacheEntry],
        new_entry: CacheEntry
    ) -> bool:
        """
        Replace the entry for ``project_id`` only if it is still ``expected``.

        The store is written before memory, so a failed write leaves both
        holding ``expected``.

        Returns:
            True if the entry was replaced

        Raises:
            PersistenceError: the write-through to the store failed
        """
        with self._project_lock(project_id):
            if self._entries.get(project_id) is not expected:
                return False

            if self.store is not None:
                self.store.save_entry(
                    project_id,
                    new_entry.signal_hash,
                    new_entry.registry_fingerprint,
                    new_entry.plan,
                )
            self._entries[project_id] = new_entry
            return True

    def entry(self, project_id: str) -> Optional[CacheEntry]:
        """Current entry for a project, consulting the store on a memory miss."""
        with self._project_lock(project_id):
            current = self._entries.get(project_id)
            if current is None and self.store is not None:
                stored = self.store.load_entry(project_id)
                if stored is not None:
                    current = CacheEntry(
                        project_id=stored.project_id,
                        signal_hash=stored.signal_hash,
                        registry_fingerprint=stored.registry_fingerprint,
                        plan=stored.plan,
                        updated_at=stored.updated_at,
                    )
                    self._entries[project_id] = current
            return current

    def invalidate(self, project_id: str) -> bool:
        """Drop a project's entry. Returns True if one existed."""
        with self._project_lock(project_id):
            existed = self._entries.pop(project_id, None) is not None
            if self.store is not None:
                existed = self.store.delete_entry(project_id) or existed

        log_cache_decision(self.logger, project_id, "invalidated", context={"existed": existed})
        return existed

    def project_ids(self) -> list[str]:
        """Projects with an in-memory entry, sorted."""
        return sorted(list(self._entries))

    def clear(self) -> None:
        """Drop every in-memory entry. Persisted decisions are kept."""
        for project_id in list(self._entries):
            with self._project_lock(project_id):
                self._entries.pop(project_id, None)

    def get_stats(self) -> dict[str, int]:
        with self._stats_lock:
            stats = dict(self._stats)
        stats["entries"] = len(self._entries)
        return stats
