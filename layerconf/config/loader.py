"""
Configuration manager for hierarchical configuration loading.

This module provides the ConfigurationManager class that composes a base
file, discovered override files and environment bindings into a single
configuration, expands environment references, validates it against an
optional schema, and caches the result for a configurable timeout.
"""

import os
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from ..formats.parsers import parse_file
from ..pipeline.context import ConfigContext, get_context
from ..pipeline.models import OVERRIDE_FILENAME, LoadOptions
from ..utils.helpers import deep_merge, get_by_dot, set_by_dot
from ..utils.logger import get_logger, log_config_error, log_config_operation
from .expander import expand_environment
from .schema import Schema
from .validator import validate


class ConfigurationManager:
    """
    Hierarchical configuration loader with caching.

    Configuration is composed from these layers, each winning over the last:
    1. The base file (skipped when it does not exist)
    2. ``config-override.json`` in each registered search path, in order
    3. Registered environment-variable bindings

    Environment expansion and schema validation then run over the result,
    as selected by the active LoadOptions.
    """

    def __init__(self, base_path: Union[str, Path], schema: Optional[Schema] = None,
                 context: Optional[ConfigContext] = None,
                 options: Optional[LoadOptions] = None,
                 clock: Callable[[], float] = time.time):
        """
        Initialize configuration manager.

        Args:
            base_path: Path to the base configuration file
            schema: Optional schema checked after each load
            context: Context to register with; defaults to the shared context
            options: Fixed load options; when omitted they are read from the
                context on every load
            clock: Wall-clock source used for cache staleness checks

        Example:
            >>> manager = ConfigurationManager(Path("config/app.yaml"))
            >>> config = manager.load_configuration()
        """
        self.base_path = Path(base_path)
        self.schema = schema
        self.context = context if context is not None else get_context()
        self.logger = get_logger(__name__)
        self._options = options
        self._clock = clock

        self._search_paths: List[Path] = []
        self._environment_overrides: Dict[str, str] = {}
        self._configuration: Optional[Dict[str, Any]] = None
        self._last_load_time: Optional[float] = None

        self.context.register_manager(str(self.base_path.resolve()), self)
        log_config_operation(self.logger, "INIT", f"base_path={self.base_path}")

    @property
    def options(self) -> LoadOptions:
        if self._options is not None:
            return self._options
        return LoadOptions.from_context(self.context)

    @property
    def search_paths(self) -> List[Path]:
        return list(self._search_paths)

    @property
    def environment_overrides(self) -> Dict[str, str]:
        return dict(self._environment_overrides)

    @property
    def configuration(self) -> Optional[Dict[str, Any]]:
        """The cached configuration, or None before the first load."""
        return self._configuration

    @property
    def last_load_time(self) -> Optional[float]:
        return self._last_load_time

    @property
    def is_cached(self) -> bool:
        """Whether a non-forced load would be served from the cache now."""
        options = self.options
        return options.cache_enabled and self._cache_is_fresh(options)

    def add_search_path(self, directory: Union[str, Path]) -> None:
        """Register a directory scanned for ``config-override.json``."""
        directory = Path(directory)
        if directory not in self._search_paths:
            self._search_paths.append(directory)
            self.logger.debug(f"Added search path: {directory}")

    def add_environment_override(self, env_var: str, config_path: str) -> None:
        """Bind an environment variable to a dotted configuration path."""
        self._environment_overrides[env_var] = config_path

    def attach_schema(self, schema: Optional[Schema]) -> None:
        self.schema = schema

    def invalidate(self) -> None:
        """Drop the cached configuration so the next load re-reads sources."""
        self._configuration = None
        self._last_load_time = None

    def load_configuration(self, force_reload: bool = False,
                           options: Optional[LoadOptions] = None) -> Dict[str, Any]:
        """
        Load the configuration, serving it from cache while fresh.

        Args:
            force_reload: Ignore the cache and re-read every source
            options: Options for this call; defaults to the manager's options

        Returns:
            The composed configuration dictionary (also kept as the cache)

        Raises:
            ConfigFileNotFoundError, UnsupportedFormatError, MalformedInputError:
                If a source file cannot be read or parsed
            SchemaValidationError: If validation is enabled and fails
        """
        if options is None:
            options = self.options

        if not force_reload and options.cache_enabled and self._cache_is_fresh(options):
            self.logger.debug(f"Cache hit for {self.base_path}")
            return self._configuration

        try:
            config: Dict[str, Any] = {}
            if self.base_path.exists():
                config = parse_file(self.base_path)

            for directory in self._search_paths:
                override_path = directory / OVERRIDE_FILENAME
                if override_path.is_file():
                    config = deep_merge(config, parse_file(override_path))
                    self.logger.debug(f"Merged override: {override_path}")

            self._apply_environment_overrides(config)

            if options.expand_environment:
                config = expand_environment(config)

            if self.schema is not None and options.validate:
                validate(self.schema, config)

        except Exception as e:
            log_config_error(self.logger, "LOAD", e, f"path='{self.base_path}'")
            raise

        self._configuration = config
        self._last_load_time = self._clock()
        self.context.mark_loaded()

        log_config_operation(
            self.logger, "LOAD",
            f"path='{self.base_path}', search_paths={len(self._search_paths)}, "
            f"forced={force_reload}"
        )
        return config

    def get(self, path: str, default: Any = None) -> Any:
        """
        Read a value by dotted path from the cached configuration.

        Example:
            >>> manager.get("Database.Timeout", 30)
        """
        return get_by_dot(self._configuration or {}, path, default)

    def set(self, path: str, value: Any) -> None:
        """Write a value by dotted path into the cached configuration."""
        if self._configuration is None:
            self._configuration = {}
        set_by_dot(self._configuration, path, value)

    def _cache_is_fresh(self, options: LoadOptions) -> bool:
        if self._configuration is None or self._last_load_time is None:
            return False
        return (self._clock() - self._last_load_time) < options.cache_timeout

    def _apply_environment_overrides(self, config: Dict[str, Any]) -> None:
        for env_var, config_path in self._environment_overrides.items():
            value = os.environ.get(env_var)
            if value is None:
                continue
            set_by_dot(config, config_path, value)
            self.logger.debug(f"Applied environment override {env_var} -> {config_path}")
