"""
Configuration format module.

Provides parsers and encoders for the JSON, TOML, YAML and INI subsets.
"""

from .encoders import encode
from .parsers import detect_format, parse_file, parse_text
from .types import ConfigFormat

__all__ = ["ConfigFormat", "encode", "detect_format", "parse_file", "parse_text"]
