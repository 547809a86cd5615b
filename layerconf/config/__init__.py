"""
Configuration management module.

Provides the configuration manager, environment expansion, schema
definitions and schema validation.
"""

from .expander import expand_environment
from .loader import ConfigurationManager
from .schema import PropertyRule, PropertyType, Schema, SchemaManager
from .validator import collect_violations, validate

__all__ = [
    "ConfigurationManager",
    "PropertyRule",
    "PropertyType",
    "Schema",
    "SchemaManager",
    "collect_violations",
    "expand_environment",
    "validate"
]
