"""Decision cache with per-project atomic replacement and incremental diffs."""

from .decision_cache import CacheEntry, CachedResolution, DecisionCache

__all__ = ["CacheEntry", "CachedResolution", "DecisionCache"]
