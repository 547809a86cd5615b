"""
Configuration pipeline package.

Holds the shared data models and the process context. The import, export
and test operations live in ``layerconf.pipeline.orchestrator``.
"""

from .context import ConfigContext, get_context, reset_context
from .models import (
    AuditAction, AuditEntry, ConfigFormat, ExitCode, LoadOptions, ValidationResult
)

__all__ = [
    "ConfigContext",
    "get_context",
    "reset_context",
    "AuditAction",
    "AuditEntry",
    "ConfigFormat",
    "ExitCode",
    "LoadOptions",
    "ValidationResult"
]
