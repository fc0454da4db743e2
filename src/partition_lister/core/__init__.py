"""Core utilities and shared components for partition-lister."""

from .config import ExportSettings, load_export_settings, settings
from .exceptions import ConfigurationError, PartitionListerError, ValidationError
from .observability import get_logger, get_tracer

__all__ = [
    "settings",
    "ExportSettings",
    "load_export_settings",
    "PartitionListerError",
    "ConfigurationError",
    "ValidationError",
    "get_logger",
    "get_tracer",
]
