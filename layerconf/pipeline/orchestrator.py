"""
Top-level configuration operations.

This module provides the ConfigOrchestrator class behind the import,
export, test and convert operations used by the CLI. Import and export
record audit entries and error bookkeeping on the context, then re-raise
failures as ConfigurationError. test_configuration never raises; every
failure becomes an entry in the returned ValidationResult.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from ..config.expander import expand_environment, find_unresolved_references
from ..config.loader import ConfigurationManager
from ..config.schema import Schema
from ..config.validator import collect_violations
from ..exceptions import ConfigFileNotFoundError, ConfigurationError
from ..formats.encoders import encode
from ..formats.parsers import parse_file
from ..utils.helpers import ensure_directory_exists
from ..utils.logger import get_logger, log_config_error, log_config_operation
from .context import ConfigContext, get_context
from .models import AuditAction, ConfigFormat, LoadOptions, ValidationResult

DEFAULT_JSON_INDENT = 2


class ConfigOrchestrator:
    """
    Coordinates loading, exporting and testing configuration files.

    Each call builds its own LoadOptions from its arguments, so concurrent
    imports with different flags never touch the shared context knobs.
    """

    def __init__(self, context: Optional[ConfigContext] = None):
        """
        Initialize orchestrator.

        Args:
            context: Context receiving audit entries and errors; defaults to
                the shared process context

        Example:
            >>> orchestrator = ConfigOrchestrator(ConfigContext())
            >>> config = orchestrator.import_configuration(Path("app.yaml"))
        """
        self.context = context if context is not None else get_context()
        self.logger = get_logger(__name__)

    def import_configuration(self, base_path: Union[str, Path],
                             override_paths: Optional[Iterable[Union[str, Path]]] = None,
                             expand_env: bool = True, validate: bool = True,
                             schema: Optional[Schema] = None,
                             env_overrides: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """
        Load a configuration with its overrides in one forced load.

        The parent directory of each override path is registered as a search
        path, so override files must be named ``config-override.json``.

        Args:
            base_path: Base configuration file
            override_paths: Override file paths, applied in order
            expand_env: Expand environment references in string values
            validate: Validate against schema when one is given
            schema: Optional schema
            env_overrides: Environment variable name to dotted path bindings

        Returns:
            The loaded configuration dictionary

        Raises:
            ConfigFileNotFoundError: If base_path does not exist
            ConfigurationError: If loading, expansion or validation fails
        """
        base_path = Path(base_path)
        override_paths = [Path(path) for path in (override_paths or [])]
        audit_paths = [base_path] + override_paths

        if not base_path.exists():
            error = ConfigFileNotFoundError(base_path)
            log_config_error(self.logger, "IMPORT", error)
            self.context.record_error(str(error))
            self.context.append_audit(AuditAction.IMPORT, audit_paths, False, str(error))
            raise error

        options = LoadOptions(
            expand_environment=expand_env,
            validate=validate,
            cache_enabled=self.context.cache_enabled,
            cache_timeout=self.context.cache_timeout
        )

        try:
            manager = ConfigurationManager(
                base_path, schema=schema, context=self.context, options=options
            )
            for override_path in override_paths:
                manager.add_search_path(override_path.parent)
            for env_var, config_path in (env_overrides or {}).items():
                manager.add_environment_override(env_var, config_path)

            config = manager.load_configuration(force_reload=True)

        except Exception as e:
            log_config_error(self.logger, "IMPORT", e, f"path='{base_path}'")
            self.context.record_error(str(e))
            self.context.append_audit(AuditAction.IMPORT, audit_paths, False, str(e))
            raise ConfigurationError(
                "Failed to import configuration", path=base_path, detail=str(e)
            ) from e

        self.context.append_audit(AuditAction.IMPORT, audit_paths, True)
        log_config_operation(
            self.logger, "IMPORT",
            f"path='{base_path}', overrides={len(override_paths)}, "
            f"expand_env={expand_env}, validate={validate}"
        )
        return config

    def export_configuration(self, config: Dict[str, Any], output_path: Union[str, Path],
                             config_format: Union[ConfigFormat, str] = ConfigFormat.JSON,
                             indent: Union[bool, int] = False) -> Path:
        """
        Encode a configuration and write it to a file.

        Missing parent directories are created. The text is written to a
        temporary file beside the target and moved into place, so a failed
        export never leaves a partial file.

        Args:
            config: Configuration dictionary
            output_path: Destination file
            config_format: Output format, chosen explicitly by the caller
            indent: Pretty-print JSON (True for the default width, or a width)

        Returns:
            The written path

        Raises:
            ConfigurationError: If encoding or writing fails
        """
        output_path = Path(output_path)

        try:
            if not isinstance(config_format, ConfigFormat):
                config_format = ConfigFormat.from_name(config_format)

            if config_format is ConfigFormat.JSON and indent:
                width = DEFAULT_JSON_INDENT if indent is True else int(indent)
                text = encode(config_format, json.loads(json.dumps(config)), indent=width)
            else:
                text = encode(config_format, config)

            ensure_directory_exists(output_path.parent)
            _atomic_write(output_path, text)

        except Exception as e:
            log_config_error(self.logger, "EXPORT", e, f"path='{output_path}'")
            self.context.record_error(str(e))
            self.context.append_audit(AuditAction.EXPORT, [output_path], False, str(e))
            raise ConfigurationError(
                "Failed to export configuration", path=output_path, detail=str(e)
            ) from e

        self.context.append_audit(AuditAction.EXPORT, [output_path], True)
        log_config_operation(
            self.logger, "EXPORT", f"path='{output_path}', format={config_format.value}"
        )
        return output_path

    def convert_configuration(self, input_path: Union[str, Path], output_path: Union[str, Path],
                              config_format: Union[ConfigFormat, str],
                              indent: Union[bool, int] = False) -> Path:
        """Re-encode a configuration file in another format, without expansion or validation."""
        config = self.import_configuration(input_path, expand_env=False, validate=False)
        return self.export_configuration(config, output_path, config_format, indent)

    def test_configuration(self, path: Union[str, Path], schema: Optional[Schema] = None,
                           test_expansion: bool = False) -> ValidationResult:
        """
        Check a configuration file and report every finding.

        Runs, in order: existence check, format parse check, schema
        validation (when a schema is given) and an environment expansion
        check (when requested). A missing or unparsable file stops the run;
        all other checks always run. Expansion problems are warnings only.

        Returns:
            ValidationResult with errors, warnings and named sub-test outcomes

        Example:
            >>> result = orchestrator.test_configuration(Path("app.json"), schema)
            >>> if not result.is_valid:
            ...     print(result.errors)
        """
        path = Path(path)
        result = ValidationResult()

        if not path.is_file():
            result.record_test("file_exists", False)
            result.add_error(f"Configuration file not found: '{path}'")
            return self._finish_test(path, result)
        result.record_test("file_exists", True)

        try:
            config = parse_file(path)
            result.record_test("format_parse", True)
        except Exception as e:
            result.record_test("format_parse", False)
            result.add_error(f"Format parse failed: {e}")
            return self._finish_test(path, result)

        if schema is not None:
            try:
                violations = collect_violations(schema, config)
                for message in violations:
                    result.add_error(message)
                for rule in schema.properties:
                    if rule.name in config and not rule.property_type.matches(config[rule.name]):
                        result.add_warning(
                            f"Property '{rule.name}' expected type "
                            f"{rule.property_type.value}, got {type(config[rule.name]).__name__}"
                        )
                result.record_test("schema_validation", not violations)
            except Exception as e:
                result.record_test("schema_validation", False)
                result.add_error(f"Schema validation error: {e}")

        if test_expansion:
            try:
                expand_environment(config)
                for name in find_unresolved_references(config):
                    result.add_warning(f"Environment variable '{name}' is not set")
                result.record_test("environment_expansion", True)
            except Exception as e:
                result.record_test("environment_expansion", False)
                result.add_warning(f"Environment expansion failed: {e}")

        return self._finish_test(path, result)

    def _finish_test(self, path: Path, result: ValidationResult) -> ValidationResult:
        for error in result.errors:
            self.context.record_error(error)
        log_config_operation(
            self.logger, "TEST",
            f"path='{path}', valid={result.is_valid}, errors={len(result.errors)}, "
            f"warnings={len(result.warnings)}"
        )
        return result


def _atomic_write(path: Path, text: str) -> None:
    handle, temp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(handle, 'w', encoding='utf-8') as file:
            file.write(text)
        os.replace(temp_name, path)
    except BaseException:
        if os.path.exists(temp_name):
            os.unlink(temp_name)
        raise


def import_configuration(base_path: Union[str, Path],
                         override_paths: Optional[Iterable[Union[str, Path]]] = None,
                         expand_env: bool = True, validate: bool = True,
                         schema: Optional[Schema] = None,
                         env_overrides: Optional[Dict[str, str]] = None,
                         context: Optional[ConfigContext] = None) -> Dict[str, Any]:
    """Import a configuration using the given or shared context."""
    return ConfigOrchestrator(context).import_configuration(
        base_path, override_paths, expand_env, validate, schema, env_overrides
    )


def export_configuration(config: Dict[str, Any], output_path: Union[str, Path],
                         config_format: Union[ConfigFormat, str] = ConfigFormat.JSON,
                         indent: Union[bool, int] = False,
                         context: Optional[ConfigContext] = None) -> Path:
    """Export a configuration using the given or shared context."""
    return ConfigOrchestrator(context).export_configuration(
        config, output_path, config_format, indent
    )


def test_configuration(path: Union[str, Path], schema: Optional[Schema] = None,
                       test_expansion: bool = False,
                       context: Optional[ConfigContext] = None) -> ValidationResult:
    """Test a configuration file using the given or shared context."""
    return ConfigOrchestrator(context).test_configuration(path, schema, test_expansion)


test_configuration.__test__ = False


def convert_configuration(input_path: Union[str, Path], output_path: Union[str, Path],
                          config_format: Union[ConfigFormat, str],
                          indent: Union[bool, int] = False,
                          context: Optional[ConfigContext] = None) -> Path:
    """Convert a configuration file using the given or shared context."""
    return ConfigOrchestrator(context).convert_configuration(
        input_path, output_path, config_format, indent
    )
