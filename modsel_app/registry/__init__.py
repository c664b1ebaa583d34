"""
Module registry.

Immutable, validated catalog of module nodes and track groups, built once
and shared read-only by every resolution.
"""

from .loader import build_registry
from .models import ModuleCategory, ModuleNode, Registry, TrackGroup
from .parsers import load_registry_file, parse_registry_document

__all__ = [
    "ModuleCategory",
    "ModuleNode",
    "Registry",
    "TrackGroup",
    "build_registry",
    "load_registry_file",
    "parse_registry_document",
]
