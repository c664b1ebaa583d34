"""
Centralized logging configuration for the module selection resolver.

All components log through structlog so resolution decisions and cache
activity share one structured format. Policy fallbacks (a missing signal,
a track falling back to its default) are logged at DEBUG: they are defined
behavior, not failures.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_resolution_logger(name: str) -> FilteringBoundLogger:
    """Get a logger bound for module selection decisions."""
    return get_logger(name).bind(
        subsystem="resolver",
        audit_trail=True
    )


def get_cache_logger(name: str) -> FilteringBoundLogger:
    """Get a logger bound for decision cache activity."""
    return get_logger(name).bind(
        subsystem="cache",
        audit_trail=True
    )


def log_module_selection(
    logger: FilteringBoundLogger,
    module_id: str,
    reason: str,
    signal_hash: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a single module selection with standardized format.

    Args:
        logger: Structlog logger instance
        module_id: Id of the selected module
        reason: Rendered selection reason (``core``, ``dependency-of:x``, ...)
        signal_hash: Digest of the signal set being resolved
        context: Additional context data
    """
    bound_logger = logger.bind(
        module_id=module_id,
        reason=reason,
        signal_hash=signal_hash,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.debug("Module selected")


def log_cache_decision(
    logger: FilteringBoundLogger,
    project_id: str,
    outcome: str,
    added: Optional[list[str]] = None,
    removed: Optional[list[str]] = None,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a decision cache lookup with standardized format.

    Args:
        logger: Structlog logger instance
        project_id: Project identity the lookup was made for
        outcome: ``hit``, ``miss`` or ``invalidated``
        added: Module ids added relative to the prior plan
        removed: Module ids removed relative to the prior plan
        context: Additional context data
    """
    bound_logger = logger.bind(
        project_id=project_id,
        outcome=outcome,
        added=added or [],
        removed=removed or [],
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("Decision cache lookup")
