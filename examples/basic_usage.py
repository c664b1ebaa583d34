#!/usr/bin/env python3
"""
Basic Usage Example - Module Selection Resolver

This script resolves the sample registry in config/registry.yaml for a
project that changes over time. It shows how to:
- Build the engine from the shipped registry
- Resolve a project and read the plan with its selection reasons
- Read incremental diffs as signals change
- Force a track with an override signal
- Handle a conflict reported as a failed result

Run: python examples/basic_usage.py
"""

from typing import Any

from modsel_app.engine import ModuleSelectionEngine, ResolutionResult


def print_result(label: str, result: ResolutionResult) -> None:
    """Print a resolution result."""
    print(f"📋 {label}")
    if not result.success:
        print(f"   ❌ {result.error_type}: {result.error}")
        print()
        return

    for entry in result.plan.entries:
        print(f"   • {entry.module_id:<22} {entry.reason}")

    if result.diff.is_empty:
        print("   No module changes" + ("" if result.recomputed else " (cached)"))
    else:
        if result.diff.added:
            print(f"   + {', '.join(result.diff.added)}")
        if result.diff.removed:
            print(f"   - {', '.join(result.diff.removed)}")
    print()


def main():
    """Main demonstration function."""
    print("🚀 Module Selection Resolver - Basic Usage Demo")
    print("=" * 60)

    engine = ModuleSelectionEngine.create(overrides={"logging": {"level": "WARNING"}})
    print(f"Loaded {len(engine.registry)} modules")
    print()

    project = "inventory-service"
    history: list[tuple[str, dict[str, Any]]] = [
        ("Fresh repository", {"locCount": 800}),
        ("Same signals again", {"locCount": 800}),
        ("Web framework added", {"locCount": 3500, "hasWebFramework": True}),
        ("Codebase grew", {"locCount": 14000, "hasWebFramework": True, "asyncRuntime": "asyncio"}),
        ("Pinned to the simple layout", {
            "locCount": 14000,
            "hasWebFramework": True,
            "asyncRuntime": "asyncio",
            "track:architecture": "simple-layout",
        }),
        ("ORM and raw SQL both detected", {"locCount": 14000, "usesOrm": True, "usesRawSql": True}),
    ]

    for label, signals in history:
        print_result(label, engine.resolve(project, signals))

    stats = engine.get_stats()
    print(f"Cache: {stats['hits']} hits, {stats['misses']} misses, {stats['failures']} failures")
    print("✅ Demo completed successfully!")


if __name__ == "__main__":
    main()
