"""
Module descriptor parsers.

Converts registry documents (already-decoded dicts, or YAML files) into
ModuleNode and TrackGroup values. The expected document shape is::

    modules:
      - id: core-style
        category: core
      - id: web
        category: feature
        when: {key: hasWebFramework, op: "==", value: true}
        requires: [serde]
        conflicts: [cli-only]
    tracks:
      - name: complexity
        members: [simple, complex]
        default: simple
"""

from pathlib import Path
from typing import Any, Union

import yaml

from ..errors import MalformedDescriptorError
from ..signals.predicates import parse_predicate
from .loader import build_registry
from .models import ModuleCategory, ModuleNode, Registry, TrackGroup

MODULE_FIELDS = {"id", "category", "when", "requires", "conflicts", "description"}


def _id_list(descriptor: dict[str, Any], field: str) -> list[str]:
    value = descriptor.get(field) or []
    if not isinstance(value, list) or not all(isinstance(item, str) and item for item in value):
        raise MalformedDescriptorError(
            f"Module {descriptor.get('id')!r}: '{field}' must be a list of module ids",
            descriptor=descriptor
        )
    return value


def parse_module(descriptor: Any) -> ModuleNode:
    """Parse one module descriptor into a ModuleNode."""
    if not isinstance(descriptor, dict):
        raise MalformedDescriptorError(
            f"Module descriptor must be a mapping, got {type(descriptor).__name__}",
            descriptor=descriptor
        )

    unknown = set(descriptor) - MODULE_FIELDS
    if unknown:
        raise MalformedDescriptorError(
            f"Module {descriptor.get('id')!r} has unknown fields: {sorted(unknown)}",
            descriptor=descriptor
        )

    module_id = descriptor.get("id")
    if not isinstance(module_id, str) or not module_id:
        raise MalformedDescriptorError("Module id must be a non-empty string", descriptor=descriptor)

    try:
        category = ModuleCategory(descriptor.get("category"))
    except ValueError:
        raise MalformedDescriptorError(
            f"Module {module_id!r} has unknown category {descriptor.get('category')!r}",
            descriptor=descriptor
        ) from None

    predicate = None
    if "when" in descriptor:
        predicate = parse_predicate(descriptor["when"])

    return ModuleNode(
        id=module_id,
        category=category,
        predicate=predicate,
        dependencies=_id_list(descriptor, "requires"),
        conflicts=_id_list(descriptor, "conflicts"),
        description=str(descriptor.get("description", "")),
    )


def parse_track_group(descriptor: Any) -> TrackGroup:
    """Parse one track group declaration."""
    if not isinstance(descriptor, dict) or set(descriptor) != {"name", "members", "default"}:
        raise MalformedDescriptorError(
            "Track group must declare exactly 'name', 'members' and 'default'",
            descriptor=descriptor
        )

    members = descriptor["members"]
    if not isinstance(members, list) or not all(isinstance(m, str) for m in members):
        raise MalformedDescriptorError(
            f"Track group {descriptor['name']!r}: 'members' must be a list of module ids",
            descriptor=descriptor
        )

    return TrackGroup(
        name=str(descriptor["name"]),
        members=tuple(members),
        default=str(descriptor["default"]),
    )


def parse_registry_document(document: Any) -> tuple[list[ModuleNode], list[TrackGroup]]:
    """Parse a full registry document into nodes and track groups."""
    if not isinstance(document, dict) or not isinstance(document.get("modules"), list):
        raise MalformedDescriptorError(
            "Registry document must be a mapping with a 'modules' list",
            descriptor=document
        )

    tracks = document.get("tracks") or []
    if not isinstance(tracks, list):
        raise MalformedDescriptorError("'tracks' must be a list", descriptor=document)

    nodes = [parse_module(descriptor) for descriptor in document["modules"]]
    groups = [parse_track_group(descriptor) for descriptor in tracks]
    return nodes, groups


def load_registry_file(path: Union[str, Path]) -> Registry:
    """
    Load and validate a registry from a YAML file.

    Raises:
        MalformedDescriptorError: if the file is not a valid registry document
        RegistryError: if the catalog fails validation
    """
    path = Path(path)
    try:
        with open(path) as f:
            document = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise MalformedDescriptorError(f"Invalid YAML in {path}: {e}") from e

    nodes, groups = parse_registry_document(document)
    return build_registry(nodes, groups)
