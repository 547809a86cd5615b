"""
Process-wide configuration context.

ConfigContext records loaded managers, error bookkeeping and the audit log
consumed by the CLI, along with the process knobs that seed LoadOptions.
Every mutation and read goes through a reentrant lock, so one context can be
shared between threads. Pass a context explicitly where isolation is needed;
get_context() returns the shared default instance.
"""

import os
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional

from .models import DEFAULT_CACHE_TIMEOUT, AuditAction, AuditEntry

_TRUTHY = ("1", "true", "yes", "on")


class ConfigContext:
    """Mutable process state with an explicit reset lifecycle."""

    def __init__(self, cache_enabled: bool = True,
                 cache_timeout: float = DEFAULT_CACHE_TIMEOUT,
                 expansion_enabled: bool = True,
                 validation_enabled: bool = True):
        self._lock = threading.RLock()
        self._set_defaults(cache_enabled, cache_timeout, expansion_enabled, validation_enabled)
        self.reset()

    @classmethod
    def from_environment(cls) -> 'ConfigContext':
        """Create a context from LAYERCONF_* environment variables."""
        return cls(**_environment_defaults())

    def _set_defaults(self, cache_enabled: bool, cache_timeout: float,
                      expansion_enabled: bool, validation_enabled: bool) -> None:
        with self._lock:
            self._defaults = {
                "cache_enabled": cache_enabled,
                "cache_timeout": float(cache_timeout),
                "expansion_enabled": expansion_enabled,
                "validation_enabled": validation_enabled,
            }

    def reload_environment(self) -> None:
        """Re-read the LAYERCONF_* defaults and reset to them."""
        with self._lock:
            self._set_defaults(**_environment_defaults())
            self.reset()

    def reset(self) -> None:
        """Return the context to its freshly constructed state."""
        with self._lock:
            self._load_timestamp: Optional[datetime] = None
            self._has_errors = False
            self._managers: Dict[str, Any] = {}
            self._validation_errors: List[str] = []
            self._audit_log: List[AuditEntry] = []
            self._cache_enabled = self._defaults["cache_enabled"]
            self._cache_timeout = self._defaults["cache_timeout"]
            self._expansion_enabled = self._defaults["expansion_enabled"]
            self._validation_enabled = self._defaults["validation_enabled"]

    @property
    def cache_enabled(self) -> bool:
        with self._lock:
            return self._cache_enabled

    @cache_enabled.setter
    def cache_enabled(self, value: bool) -> None:
        with self._lock:
            self._cache_enabled = bool(value)

    @property
    def cache_timeout(self) -> float:
        with self._lock:
            return self._cache_timeout

    @cache_timeout.setter
    def cache_timeout(self, value: float) -> None:
        with self._lock:
            self._cache_timeout = float(value)

    @property
    def expansion_enabled(self) -> bool:
        with self._lock:
            return self._expansion_enabled

    @expansion_enabled.setter
    def expansion_enabled(self, value: bool) -> None:
        with self._lock:
            self._expansion_enabled = bool(value)

    @property
    def validation_enabled(self) -> bool:
        with self._lock:
            return self._validation_enabled

    @validation_enabled.setter
    def validation_enabled(self, value: bool) -> None:
        with self._lock:
            self._validation_enabled = bool(value)

    @property
    def has_errors(self) -> bool:
        with self._lock:
            return self._has_errors

    @property
    def load_timestamp(self) -> Optional[datetime]:
        with self._lock:
            return self._load_timestamp

    def register_manager(self, path: str, manager: Any) -> None:
        with self._lock:
            self._managers[str(path)] = manager

    def get_manager(self, path: str) -> Optional[Any]:
        with self._lock:
            return self._managers.get(str(path))

    @property
    def managers(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._managers)

    def mark_loaded(self) -> None:
        with self._lock:
            self._load_timestamp = datetime.now()

    def record_error(self, message: str) -> None:
        """Record an operation failure and flag the context as errored."""
        with self._lock:
            self._has_errors = True
            self._validation_errors.append(message)

    @property
    def validation_errors(self) -> List[str]:
        with self._lock:
            return list(self._validation_errors)

    def append_audit(self, action: AuditAction, paths: List[str], success: bool,
                     error: Optional[str] = None) -> AuditEntry:
        """Append an audit entry and return it."""
        entry = AuditEntry(
            action=action,
            paths=[str(path) for path in paths],
            success=success,
            error=error
        )
        with self._lock:
            self._audit_log.append(entry)
        return entry

    @property
    def audit_log(self) -> List[AuditEntry]:
        with self._lock:
            return list(self._audit_log)


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def _environment_defaults() -> Dict[str, Any]:
    return {
        "cache_enabled": _env_flag("LAYERCONF_CACHE_ENABLED", True),
        "cache_timeout": float(os.getenv("LAYERCONF_CACHE_TIMEOUT", DEFAULT_CACHE_TIMEOUT)),
        "expansion_enabled": _env_flag("LAYERCONF_EXPAND_ENV", True),
        "validation_enabled": _env_flag("LAYERCONF_VALIDATE", True),
    }


_default_context = ConfigContext.from_environment()


def get_context() -> ConfigContext:
    """Return the shared process-wide context."""
    return _default_context


def reset_context(reload_environment: bool = False) -> None:
    """
    Reset the shared process-wide context to its empty state.

    With reload_environment, the LAYERCONF_* variables are read again first,
    so the knobs pick up changes made since import.
    """
    if reload_environment:
        _default_context.reload_environment()
    else:
        _default_context.reset()
