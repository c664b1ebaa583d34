"""Default configuration parameters for the module selection resolver."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ResolverParams:
    """Resolver parameters."""
    track_override_prefix: str = "track:"            # Signal key prefix forcing a track winner


@dataclass(frozen=True)
class CacheParams:
    """Decision cache parameters."""
    persist: bool = False                            # Write-through to SQLite
    db_path: str = "decisions.db"


@dataclass(frozen=True)
class LoggingParams:
    """Logging parameters."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    resolver: ResolverParams
    cache: CacheParams
    logging: LoggingParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        resolver=ResolverParams(),
        cache=CacheParams(),
        logging=LoggingParams(),
    )
