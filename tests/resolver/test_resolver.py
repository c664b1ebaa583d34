"""Tests for the module selection resolver."""

from unittest.mock import patch

import pytest

from modsel_app.errors import ConflictUnresolved, ResolutionError, UnknownReference
from modsel_app.registry import ModuleCategory, ModuleNode, Registry, TrackGroup, build_registry
from modsel_app.resolver import ReasonKind, SelectionReason, resolve_modules
from modsel_app.signals import SignalSet, comparison


def node(module_id, category, **kwargs):
    return ModuleNode(module_id, category, **kwargs)


class TestScenarios:
    """Reference scenarios for the resolver."""

    def test_large_web_project(self, scenario_registry, sample_signals):
        """Dependency before dependent, track before features."""
        plan = resolve_modules(scenario_registry, sample_signals)

        assert plan.module_ids == ["C", "Complex", "Serde", "Web"]
        assert str(plan.reason_for("C")) == "core"
        assert str(plan.reason_for("Complex")) == "track-match"
        assert str(plan.reason_for("Web")) == "feature-predicate"
        assert str(plan.reason_for("Serde")) == "dependency-of:Web"

    def test_small_project_falls_back_to_default(self, scenario_registry):
        plan = resolve_modules(scenario_registry, {"locCount": 500, "hasWebFramework": False})

        assert plan.module_ids == ["C", "Simple"]
        assert plan.reason_for("Simple").kind is ReasonKind.TRACK_DEFAULT

    def test_plan_is_stamped(self, scenario_registry, sample_signals):
        plan = resolve_modules(scenario_registry, sample_signals)

        assert plan.signal_hash == SignalSet(sample_signals).digest
        assert plan.registry_fingerprint == scenario_registry.fingerprint

    def test_empty_signals(self, scenario_registry):
        """Missing signals fall back without errors."""
        plan = resolve_modules(scenario_registry, {})
        assert plan.module_ids == ["C", "Simple"]


class TestTrackResolution:
    """Test track group selection."""

    @pytest.fixture
    def overlapping_registry(self) -> Registry:
        return build_registry(
            [
                node("Base", ModuleCategory.TRACK),
                node("Medium", ModuleCategory.TRACK, predicate=comparison("loc", ">", 1000)),
                node("Large", ModuleCategory.TRACK, predicate=comparison("loc", ">", 10000)),
            ],
            [TrackGroup("size", ("Base", "Medium", "Large"), default="Base")],
        )

    def test_first_match_wins(self, overlapping_registry):
        """Both Medium and Large match; declaration order decides."""
        plan = resolve_modules(overlapping_registry, {"loc": 50000})
        assert plan.module_ids == ["Medium"]

    def test_default_member_can_match(self):
        """A default with a true predicate is a regular match."""
        registry = build_registry(
            [
                node("A", ModuleCategory.TRACK, predicate=comparison("x", "==", 1)),
                node("B", ModuleCategory.TRACK),
            ],
            [TrackGroup("g", ("A", "B"), default="A")],
        )

        assert resolve_modules(registry, {"x": 1}).reason_for("A").kind is ReasonKind.TRACK_MATCH
        assert resolve_modules(registry, {}).reason_for("A").kind is ReasonKind.TRACK_DEFAULT

    def test_override_signal_forces_winner(self, overlapping_registry):
        signals = SignalSet({"loc": 50000}).with_track_override("size", "Base")
        plan = resolve_modules(overlapping_registry, signals)

        assert plan.module_ids == ["Base"]
        assert plan.reason_for("Base").kind is ReasonKind.TRACK_OVERRIDE

    def test_override_with_custom_prefix(self, overlapping_registry):
        plan = resolve_modules(overlapping_registry, {"force/size": "Large"}, override_prefix="force/")
        assert plan.module_ids == ["Large"]

    def test_override_naming_non_member_fails(self, overlapping_registry):
        with pytest.raises(UnknownReference) as exc_info:
            resolve_modules(overlapping_registry, {"track:size": "Huge"})

        assert exc_info.value.from_id == "track:size"
        assert exc_info.value.to_id == "Huge"

    def test_non_string_override_is_ignored(self, overlapping_registry):
        plan = resolve_modules(overlapping_registry, {"track:size": 3, "loc": 5000})
        assert plan.module_ids == ["Medium"]

    def test_default_fallback_is_not_a_warning(self, overlapping_registry):
        """Falling back to the default is policy, logged at debug only."""
        with patch("modsel_app.resolver.engine.logger") as mock_logger:
            resolve_modules(overlapping_registry, {})

        mock_logger.debug.assert_any_call("Track group fell back to default", group="size", default="Base")
        mock_logger.warning.assert_not_called()
        mock_logger.error.assert_not_called()


class TestDependencies:
    """Test dependency propagation."""

    def test_transitive_dependencies(self):
        registry = build_registry([
            node("App", ModuleCategory.FEATURE, predicate=comparison("app", "==", True), dependencies={"Mid"}),
            node("Mid", ModuleCategory.FEATURE, dependencies={"Leaf"}),
            node("Leaf", ModuleCategory.FEATURE),
        ])
        plan = resolve_modules(registry, {"app": True})

        assert plan.module_ids == ["Leaf", "Mid", "App"]
        assert str(plan.reason_for("Mid")) == "dependency-of:App"
        assert str(plan.reason_for("Leaf")) == "dependency-of:Mid"

    def test_dependency_with_false_predicate_is_forced(self):
        """A required module is selected even though its own trigger is false."""
        registry = build_registry([
            node("Web", ModuleCategory.FEATURE, predicate=comparison("web", "==", True), dependencies={"Serde"}),
            node("Serde", ModuleCategory.FEATURE, predicate=comparison("schemas", "==", True)),
        ])
        plan = resolve_modules(registry, {"web": True, "schemas": False})

        assert plan.module_ids == ["Serde", "Web"]
        assert plan.reason_for("Serde") == SelectionReason.dependency_of("Web")

    def test_own_predicate_reason_wins_over_dependency(self):
        registry = build_registry([
            node("Web", ModuleCategory.FEATURE, predicate=comparison("web", "==", True), dependencies={"Serde"}),
            node("Serde", ModuleCategory.FEATURE, predicate=comparison("schemas", "==", True)),
        ])
        plan = resolve_modules(registry, {"web": True, "schemas": True})

        assert plan.reason_for("Serde").kind is ReasonKind.FEATURE_PREDICATE

    def test_dependency_reason_names_earliest_requirer(self):
        registry = build_registry([
            node("A", ModuleCategory.CORE, dependencies={"Shared"}),
            node("B", ModuleCategory.CORE, dependencies={"Shared"}),
            node("Shared", ModuleCategory.FEATURE),
        ])
        plan = resolve_modules(registry, {})

        assert str(plan.reason_for("Shared")) == "dependency-of:A"

    def test_core_dependency_on_track_winner(self, scenario_nodes, scenario_groups):
        nodes = [
            ModuleNode("C", ModuleCategory.CORE, dependencies={"Simple"}),
        ] + scenario_nodes[1:]
        registry = build_registry(nodes, scenario_groups)

        plan = resolve_modules(registry, {})
        assert plan.module_ids == ["Simple", "C"]


class TestConflicts:
    """Test conflict detection."""

    @pytest.fixture
    def conflicting_registry(self) -> Registry:
        return build_registry([
            node("A", ModuleCategory.FEATURE, predicate=comparison("a", "==", True), conflicts={"B"}),
            node("B", ModuleCategory.FEATURE, predicate=comparison("b", "==", True)),
        ])

    def test_conflicting_features_fail(self, conflicting_registry):
        with pytest.raises(ConflictUnresolved) as exc_info:
            resolve_modules(conflicting_registry, {"a": True, "b": True})

        assert exc_info.value.pair == ("A", "B")

    def test_conflict_declared_on_later_node(self):
        """Conflict edges apply in both directions."""
        registry = build_registry([
            node("A", ModuleCategory.FEATURE, predicate=comparison("a", "==", True)),
            node("B", ModuleCategory.FEATURE, predicate=comparison("b", "==", True), conflicts={"A"}),
        ])

        with pytest.raises(ConflictUnresolved) as exc_info:
            resolve_modules(registry, {"a": True, "b": True})
        assert exc_info.value.pair == ("A", "B")

    def test_only_one_side_selected(self, conflicting_registry):
        assert resolve_modules(conflicting_registry, {"a": True}).module_ids == ["A"]

    def test_conflict_through_dependency(self):
        registry = build_registry([
            node("Orm", ModuleCategory.FEATURE, predicate=comparison("orm", "==", True), conflicts={"RawSql"}),
            node("Reports", ModuleCategory.FEATURE, predicate=comparison("reports", "==", True),
                 dependencies={"RawSql"}),
            node("RawSql", ModuleCategory.FEATURE),
        ])

        with pytest.raises(ConflictUnresolved) as exc_info:
            resolve_modules(registry, {"orm": True, "reports": True})
        assert exc_info.value.pair == ("Orm", "RawSql")

    def test_dependency_on_losing_track_member_conflicts(self, scenario_nodes, scenario_groups):
        """Track members are mutually exclusive even without declared edges."""
        nodes = scenario_nodes + [
            ModuleNode("Perf", ModuleCategory.FEATURE,
                       predicate=comparison("profiling", "==", True),
                       dependencies={"Complex"}),
        ]
        registry = build_registry(nodes, scenario_groups)

        with pytest.raises(ConflictUnresolved) as exc_info:
            resolve_modules(registry, {"profiling": True})
        assert exc_info.value.pair == ("Simple", "Complex")

    def test_conflict_is_a_resolution_error(self, conflicting_registry):
        with pytest.raises(ResolutionError):
            resolve_modules(conflicting_registry, {"a": True, "b": True})


class TestResolutionTimeReferenceChecks:
    """Test re-checks against registries that bypassed validation."""

    def test_unknown_dependency_at_resolution_time(self):
        registry = Registry([
            ModuleNode("A", ModuleCategory.CORE, dependencies={"Ghost"}),
        ])

        with pytest.raises(UnknownReference) as exc_info:
            resolve_modules(registry, {})
        assert (exc_info.value.from_id, exc_info.value.to_id) == ("A", "Ghost")


class TestDeterminism:
    """Test output stability."""

    def test_repeated_resolution_is_byte_identical(self, scenario_registry, sample_signals):
        outputs = {resolve_modules(scenario_registry, sample_signals).to_json() for _ in range(20)}
        assert len(outputs) == 1

    def test_unrelated_modules_ordered_by_priority(self):
        registry = build_registry([
            node("Z", ModuleCategory.CORE),
            node("Y", ModuleCategory.CORE),
            node("X", ModuleCategory.CORE),
        ])
        assert resolve_modules(registry, {}).module_ids == ["Z", "Y", "X"]
