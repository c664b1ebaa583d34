"""
Input and system failure classifications.

Bad signal values are rejected at the boundary; persistence and
configuration failures require intervention rather than retries.
"""

from typing import Any, Optional

from .base import ModuleSelectionError


class InvalidSignalError(ModuleSelectionError, ValueError):
    """A signal key or value does not fit the signal type model."""

    def __init__(self, message: str, key: Optional[str] = None,
                 value: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.key = key
        self.value = value


class PersistenceError(ModuleSelectionError):
    """Database or file system persistence failures."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target


class ConfigurationError(ModuleSelectionError):
    """Configuration failed validation."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []
