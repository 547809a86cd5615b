"""
Data models for the layerconf configuration pipeline.

This module defines the data structures shared by the loader, the
orchestration layer and the CLI, including load options, validation
results and audit entries.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..formats.types import ConfigFormat


DEFAULT_CACHE_TIMEOUT = 300.0
OVERRIDE_FILENAME = "config-override.json"


class ExitCode:
    """Standard exit codes for CLI integration."""
    SUCCESS = 0
    FAILURE = 1


class AuditAction(Enum):
    """Kinds of operations recorded in the audit log."""
    IMPORT = "import"
    EXPORT = "export"


@dataclass(frozen=True)
class LoadOptions:
    """Per-call load options threaded through the manager."""
    expand_environment: bool = True
    validate: bool = True
    cache_enabled: bool = True
    cache_timeout: float = DEFAULT_CACHE_TIMEOUT

    @classmethod
    def from_context(cls, context) -> 'LoadOptions':
        """Snapshot the process-wide knobs held by a ConfigContext."""
        return cls(
            expand_environment=context.expansion_enabled,
            validate=context.validation_enabled,
            cache_enabled=context.cache_enabled,
            cache_timeout=context.cache_timeout
        )


@dataclass
class ValidationResult:
    """Aggregated result of configuration checks."""
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    tests: Dict[str, bool] = field(default_factory=dict)

    @property
    def has_errors(self) -> bool:
        """Check if validation has errors."""
        return len(self.errors) > 0

    @property
    def has_warnings(self) -> bool:
        """Check if validation has warnings."""
        return len(self.warnings) > 0

    def add_error(self, error: str) -> None:
        """Add an error and mark the result invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning to the result."""
        self.warnings.append(warning)

    def record_test(self, name: str, passed: bool) -> None:
        """Record the outcome of a named sub-test."""
        self.tests[name] = passed

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary for serialization."""
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "tests": dict(self.tests)
        }


@dataclass
class AuditEntry:
    """Single append-only record of an import or export."""
    action: AuditAction
    paths: List[str]
    success: bool
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert entry to dictionary for serialization."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "action": self.action.value,
            "paths": list(self.paths),
            "success": self.success,
            "error": self.error
        }
