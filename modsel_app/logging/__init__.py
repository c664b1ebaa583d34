"""
Logging configuration and utilities for the module selection resolver.
"""
from .config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
