"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from modsel_app.registry import ModuleCategory, ModuleNode, Registry, TrackGroup, build_registry
from modsel_app.signals import comparison

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def scenario_nodes() -> list[ModuleNode]:
    """Core C, track {Simple (default), Complex}, feature Web requiring Serde."""
    return [
        ModuleNode("C", ModuleCategory.CORE),
        ModuleNode("Simple", ModuleCategory.TRACK),
        ModuleNode("Complex", ModuleCategory.TRACK,
                   predicate=comparison("locCount", ">", 10000)),
        ModuleNode("Web", ModuleCategory.FEATURE,
                   predicate=comparison("hasWebFramework", "==", True),
                   dependencies={"Serde"}),
        ModuleNode("Serde", ModuleCategory.FEATURE),
    ]


@pytest.fixture
def scenario_groups() -> list[TrackGroup]:
    return [TrackGroup("complexity", ("Simple", "Complex"), default="Simple")]


@pytest.fixture
def scenario_registry(scenario_nodes, scenario_groups) -> Registry:
    return build_registry(scenario_nodes, scenario_groups)


@pytest.fixture
def sample_registry_path() -> Path:
    return PROJECT_ROOT / "config" / "registry.yaml"


@pytest.fixture
def sample_signals() -> dict:
    """Signals for a large web project."""
    return {
        "locCount": 12000,
        "hasWebFramework": True,
    }
