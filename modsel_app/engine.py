"""
Module selection engine.

Entry point for callers (CLI, service, editor integration) that need to know
which guidance modules apply to a project. Internals raise typed errors;
this layer turns them into result objects so callers never see an
uncontrolled fault. Errors are not retried: the same inputs would only
reproduce them.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

import structlog

from .cache.decision_cache import DecisionCache
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .errors import ConfigurationError, ModuleSelectionError, RegistryError
from .logging.config import configure_logging
from .persistence.decision_store import DecisionStore
from .registry.loader import build_registry
from .registry.models import ModuleNode, Registry, TrackGroup
from .registry.parsers import load_registry_file
from .resolver.models import PlanDiff, ResolutionPlan
from .signals.models import SignalSet

logger = structlog.get_logger(__name__)

DEFAULT_REGISTRY_PATH = Path(__file__).parent.parent / "config" / "registry.yaml"


def _error_fields(error: ModuleSelectionError) -> dict[str, Any]:
    return {
        "error": str(error),
        "error_type": type(error).__name__,
        "error_context": {key: value for key, value in vars(error).items()
                          if key not in ("message", "context")},
    }


@dataclass
class RegistryLoadResult:
    """Result of building a registry."""
    registry: Optional[Registry] = None
    success: bool = True
    error: Optional[str] = None
    error_type: Optional[str] = None
    error_context: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def loaded(cls, registry: Registry) -> "RegistryLoadResult":
        return cls(registry=registry, success=True)

    @classmethod
    def failed(cls, error: RegistryError) -> "RegistryLoadResult":
        return cls(success=False, **_error_fields(error))


@dataclass
class ResolutionResult:
    """Result of resolving a project: plan and diff, or the error."""
    plan: Optional[ResolutionPlan] = None
    diff: PlanDiff = field(default_factory=PlanDiff.empty)
    recomputed: bool = False
    success: bool = True
    error: Optional[str] = None
    error_type: Optional[str] = None
    error_context: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def resolved(cls, plan: ResolutionPlan, diff: PlanDiff, recomputed: bool) -> "ResolutionResult":
        return cls(plan=plan, diff=diff, recomputed=recomputed, success=True)

    @classmethod
    def failed(cls, error: ModuleSelectionError) -> "ResolutionResult":
        return cls(success=False, **_error_fields(error))

    @property
    def module_ids(self) -> list[str]:
        return self.plan.module_ids if self.plan else []


def _validate_config(config: dict[str, Any]) -> None:
    validation_errors = ConfigValidator.validate_config(config)
    if validation_errors:
        error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in validation_errors]
        raise ConfigurationError("Invalid engine configuration", errors=error_msgs)


def load_registry(
    nodes: Iterable[ModuleNode],
    track_groups: Iterable[TrackGroup] = ()
) -> RegistryLoadResult:
    """Build a registry, reporting validation failures as a result."""
    try:
        return RegistryLoadResult.loaded(build_registry(nodes, track_groups))
    except RegistryError as e:
        logger.error(
            "Registry load failed",
            error=str(e),
            error_type=type(e).__name__
        )
        return RegistryLoadResult.failed(e)


class ModuleSelectionEngine:
    """
    Coordinates registry, resolver and decision cache.

    The registry is injected at construction and never changes for the life
    of the engine; resolutions for any number of projects may run
    concurrently.
    """

    def __init__(
        self,
        registry: Registry,
        config: Optional[dict[str, Any]] = None,
        cache: Optional[DecisionCache] = None
    ) -> None:
        self.logger = logger
        self.registry = registry
        self.config = config if config is not None else ConfigLoader.create().merge_config()

        _validate_config(self.config)

        self.cache = cache if cache is not None else self._build_cache()

        self.logger.info(
            "Module selection engine initialized",
            modules=len(registry),
            track_groups=len(registry.track_groups()),
            persist=self.cache.store is not None
        )

    @classmethod
    def create(
        cls,
        registry_path: Optional[Union[str, Path]] = None,
        config_dir: Optional[Union[str, Path]] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> "ModuleSelectionEngine":
        """
        Build an engine from a YAML registry and layered configuration.

        The merged ``logging`` section configures structlog for the process.

        Raises:
            RegistryError: the registry file is invalid
            ConfigurationError: the merged configuration is invalid
        """
        loader = ConfigLoader.create(Path(config_dir) if config_dir else None)
        config = loader.merge_config(overrides)
        _validate_config(config)

        logging_cfg = config.get("logging", {})
        configure_logging(
            level=logging_cfg.get("level", "INFO"),
            format_json=logging_cfg.get("format_json", False)
        )

        registry = load_registry_file(registry_path or DEFAULT_REGISTRY_PATH)
        return cls(registry, config=config)

    def _build_cache(self) -> DecisionCache:
        resolver_cfg = self.config.get("resolver", {})
        cache_cfg = self.config.get("cache", {})

        store = None
        if cache_cfg.get("persist"):
            store = DecisionStore(cache_cfg.get("db_path", "decisions.db"))

        return DecisionCache(
            store=store,
            override_prefix=resolver_cfg.get("track_override_prefix", "track:")
        )

    def resolve(
        self,
        project_id: str,
        signals: Union[SignalSet, Mapping[str, Any]]
    ) -> ResolutionResult:
        """
        Resolve the module plan for a project.

        Returns:
            ResolutionResult with the plan and the diff against the previous
            plan for this project, or the error that aborted resolution
        """
        try:
            outcome = self.cache.resolve(self.registry, signals, project_id)
        except ModuleSelectionError as e:
            self.logger.warning(
                "Resolution failed",
                project_id=project_id,
                error=str(e),
                error_type=type(e).__name__
            )
            return ResolutionResult.failed(e)

        return ResolutionResult.resolved(outcome.plan, outcome.diff, outcome.recomputed)

    def invalidate(self, project_id: str) -> bool:
        """Forget a project's decision; the next resolve recomputes from scratch."""
        return self.cache.invalidate(project_id)

    def current_plan(self, project_id: str) -> Optional[ResolutionPlan]:
        """Last plan resolved for a project, if any."""
        entry = self.cache.entry(project_id)
        return entry.plan if entry else None

    def get_stats(self) -> dict[str, Any]:
        stats: dict[str, Any] = {"registry_fingerprint": self.registry.fingerprint}
        stats.update(self.cache.get_stats())
        return stats
