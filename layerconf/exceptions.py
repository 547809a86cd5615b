"""
Exception hierarchy for the layerconf configuration library.

Low-level parsers and the fast-fail schema validator raise these directly;
the orchestration layer wraps failures in ConfigurationError.
"""

from typing import Optional


class LayerconfException(Exception):
    """Base exception for configuration errors."""
    pass


class ConfigFileNotFoundError(LayerconfException, FileNotFoundError):
    """Exception for a configuration file that does not exist."""

    def __init__(self, path, message: Optional[str] = None):
        self.path = str(path)
        super().__init__(message or f"Configuration file not found: '{self.path}'")


class UnsupportedFormatError(LayerconfException, ValueError):
    """Exception for a file extension or format name with no parser."""

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(
            f"Unsupported configuration format: '{extension}'. "
            f"Supported formats are json, toml, yaml, yml and ini."
        )


class MalformedInputError(LayerconfException, ValueError):
    """Exception for configuration text that fails to parse."""

    def __init__(self, format_name: str, detail: str, source: str = "<string>",
                 line: Optional[int] = None):
        self.format = format_name
        self.detail = detail
        self.source = source
        self.line = line
        location = f"{source}, line {line}" if line is not None else source
        super().__init__(f"Malformed {format_name.upper()} input ({location}): {detail}")


class SchemaValidationError(LayerconfException):
    """Base exception for schema check failures."""

    def __init__(self, property_name: str, message: str):
        self.property_name = property_name
        super().__init__(message)


class MissingRequiredPropertyError(SchemaValidationError):
    """Exception for a required property absent from the configuration."""

    def __init__(self, property_name: str):
        super().__init__(property_name, f"Missing required property: '{property_name}'")


class ValidatorFailedError(SchemaValidationError):
    """Exception for a property whose validator predicate returned False."""

    def __init__(self, property_name: str, validator_name: Optional[str] = None):
        self.validator_name = validator_name
        suffix = f" ({validator_name})" if validator_name else ""
        super().__init__(
            property_name,
            f"Validation failed for property '{property_name}'{suffix}"
        )


class SchemaDocumentError(LayerconfException):
    """Exception for a schema document that is not a valid JSON Schema."""
    pass


class ConfigurationError(LayerconfException):
    """Exception raised by the import/export operations, carrying the offending path."""

    def __init__(self, message: str, path=None, detail: Optional[str] = None):
        self.path = str(path) if path is not None else None
        self.detail = detail
        self.message = message
        text = message
        if self.path:
            text = f"{text} [path: {self.path}]"
        if detail:
            text = f"{text}: {detail}"
        super().__init__(text)
