"""Root of the module selection error hierarchy."""

from typing import Any, Dict, Optional


class ModuleSelectionError(Exception):
    """Base class for every error raised by the resolver core."""

    recoverable = False

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class RegistryError(ModuleSelectionError):
    """Base class for errors that prevent a registry from being built."""


class ResolutionError(ModuleSelectionError):
    """Base class for errors that abort a single resolution call."""
