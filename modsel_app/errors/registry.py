"""
Registry-time error classifications.

Raised while building a registry from module descriptors. Every error carries
the offending ids so the registry author can fix the catalog.
"""

from typing import Optional, Sequence

from .base import RegistryError, ResolutionError


class DuplicateId(RegistryError):
    """Two module nodes share the same id."""

    def __init__(self, module_id: str, **kwargs):
        super().__init__(f"Duplicate module id: {module_id!r}", **kwargs)
        self.module_id = module_id


class UnknownReference(RegistryError, ResolutionError):
    """A dependency, conflict, track group or override names an unknown id."""

    def __init__(self, from_id: str, to_id: str, **kwargs):
        super().__init__(f"{from_id!r} references unknown module {to_id!r}", **kwargs)
        self.from_id = from_id
        self.to_id = to_id


class InvalidTrackGroup(RegistryError):
    """A track group is malformed (too few members, bad default, ...)."""

    def __init__(self, group: Optional[str], reason: str = "", **kwargs):
        message = f"Invalid track group {group!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, **kwargs)
        self.group = group
        self.reason = reason


class CycleDetected(RegistryError):
    """The dependency graph contains a cycle."""

    def __init__(self, ids: Sequence[str], **kwargs):
        super().__init__(f"Dependency cycle detected: {' -> '.join(list(ids) + list(ids[:1]))}", **kwargs)
        self.ids = list(ids)


class InvalidModuleNode(RegistryError):
    """A single node is self-contradictory."""

    def __init__(self, module_id: str, reason: str, **kwargs):
        super().__init__(f"Invalid module {module_id!r}: {reason}", **kwargs)
        self.module_id = module_id
        self.reason = reason


class MalformedDescriptorError(RegistryError):
    """A module or predicate descriptor does not have the expected shape."""

    def __init__(self, message: str, descriptor: Optional[object] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.descriptor = descriptor
