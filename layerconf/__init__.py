"""
layerconf: layered configuration loading.

Reads JSON, TOML, YAML and INI configuration files, merges override layers,
expands environment references, validates against a schema and writes
configurations back out in any supported format.
"""

from .config import (
    ConfigurationManager, PropertyType, Schema, SchemaManager,
    collect_violations, expand_environment, validate
)
from .exceptions import (
    ConfigFileNotFoundError, ConfigurationError, LayerconfException,
    MalformedInputError, MissingRequiredPropertyError, SchemaDocumentError,
    SchemaValidationError, UnsupportedFormatError, ValidatorFailedError
)
from .formats import ConfigFormat, detect_format, encode, parse_file, parse_text
from .pipeline import (
    AuditAction, AuditEntry, ConfigContext, LoadOptions, ValidationResult,
    get_context, reset_context
)
from .pipeline.orchestrator import (
    ConfigOrchestrator, convert_configuration, export_configuration,
    import_configuration, test_configuration
)
from .utils.helpers import deep_merge

__version__ = "1.0.0"

__all__ = [
    "ConfigurationManager",
    "PropertyType",
    "Schema",
    "SchemaManager",
    "collect_violations",
    "expand_environment",
    "validate",
    "ConfigFileNotFoundError",
    "ConfigurationError",
    "LayerconfException",
    "MalformedInputError",
    "MissingRequiredPropertyError",
    "SchemaDocumentError",
    "SchemaValidationError",
    "UnsupportedFormatError",
    "ValidatorFailedError",
    "ConfigFormat",
    "detect_format",
    "encode",
    "parse_file",
    "parse_text",
    "AuditAction",
    "AuditEntry",
    "ConfigContext",
    "LoadOptions",
    "ValidationResult",
    "get_context",
    "reset_context",
    "ConfigOrchestrator",
    "convert_configuration",
    "export_configuration",
    "import_configuration",
    "test_configuration",
    "deep_merge"
]
