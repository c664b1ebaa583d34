"""
Error classification for module selection.

Registry-time errors are fatal at load, resolution-time errors are fatal for
a single resolution call. None of them are retried: resolution is
deterministic, so the same inputs reproduce the same error.
"""

from .base import ModuleSelectionError, RegistryError, ResolutionError
from .registry import (
    DuplicateId,
    UnknownReference,
    InvalidTrackGroup,
    CycleDetected,
    InvalidModuleNode,
    MalformedDescriptorError,
)
from .resolution import ConflictUnresolved
from .system_failures import (
    InvalidSignalError,
    PersistenceError,
    ConfigurationError,
)

__all__ = [
    "ModuleSelectionError",
    # Registry-time errors
    "RegistryError",
    "DuplicateId",
    "UnknownReference",
    "InvalidTrackGroup",
    "CycleDetected",
    "InvalidModuleNode",
    "MalformedDescriptorError",
    # Resolution-time errors
    "ResolutionError",
    "ConflictUnresolved",
    # Input and system failures
    "InvalidSignalError",
    "PersistenceError",
    "ConfigurationError",
]
