#!/usr/bin/env python3
"""
Registry validation script.

Usage: python scripts/validate_registry.py [registry.yaml] [signals.yaml]

Loads and validates a module registry, then optionally resolves it against
a YAML mapping of signals. Exits 1 on any error.
"""

import sys
from pathlib import Path

import yaml

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from modsel_app.config.loader import ConfigLoader
from modsel_app.config.validation import ConfigValidator
from modsel_app.engine import DEFAULT_REGISTRY_PATH, ModuleSelectionEngine
from modsel_app.errors import ModuleSelectionError
from modsel_app.registry import ModuleCategory, load_registry_file


def validate_settings() -> bool:
    """Validate the merged configuration."""
    print("⚙️  Validating configuration...")
    config = ConfigLoader.create().merge_config()
    errors = ConfigValidator.validate_config(config)

    if errors:
        print(f"❌ Found {len(errors)} configuration errors:")
        for error in errors:
            print(f"  • {error.field}: {error.message} (value: {error.value})")
        return False

    print("✅ Configuration is valid")
    return True


def validate_registry(registry_path: Path) -> bool:
    """Load a registry file and print a summary."""
    print(f"\n📚 Validating registry {registry_path}...")

    try:
        registry = load_registry_file(registry_path)
    except (ModuleSelectionError, OSError) as e:
        print(f"❌ {type(e).__name__}: {e}")
        return False

    for category in ModuleCategory:
        ids = [node.id for node in registry.nodes_by_category(category)]
        print(f"  • {category.value}: {', '.join(ids) or '-'}")
    for group in registry.track_groups():
        print(f"  • track group {group.name}: {', '.join(group.members)} (default {group.default})")

    print(f"✅ Registry is valid (fingerprint {registry.fingerprint[:12]})")
    return True


def resolve_sample(registry_path: Path, signals_path: Path) -> bool:
    """Resolve the registry against a YAML signal file."""
    print(f"\n🧭 Resolving against {signals_path}...")

    with open(signals_path) as f:
        signals = yaml.safe_load(f) or {}

    engine = ModuleSelectionEngine.create(registry_path)
    result = engine.resolve("validate-registry", signals)

    if not result.success:
        print(f"❌ {result.error_type}: {result.error}")
        return False

    for entry in result.plan.entries:
        print(f"  • {entry.module_id} ({entry.reason})")
    print("✅ Resolution succeeded")
    return True


def main():
    """Main validation function."""
    registry_path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_REGISTRY_PATH
    signals_path = Path(sys.argv[2]) if len(sys.argv) > 2 else None

    print("🔍 Validating module selection setup...")

    all_valid = validate_settings()
    registry_valid = validate_registry(registry_path)
    all_valid = registry_valid and all_valid

    if registry_valid and signals_path is not None:
        all_valid = resolve_sample(registry_path, signals_path) and all_valid

    if all_valid:
        print("\n🎉 All validation passed!")
        sys.exit(0)
    else:
        print("\n❌ Validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
