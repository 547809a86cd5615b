"""Format identifiers shared by the parsers and encoders."""

from enum import Enum

from ..exceptions import UnsupportedFormatError


class ConfigFormat(Enum):
    """Supported configuration file formats."""
    JSON = "json"
    TOML = "toml"
    YAML = "yaml"
    INI = "ini"

    @classmethod
    def from_name(cls, name: str) -> 'ConfigFormat':
        """Resolve a format name or extension (with or without the dot)."""
        normalized = (name or "").strip().lower().lstrip(".")
        if normalized == "yml":
            normalized = "yaml"
        for member in cls:
            if member.value == normalized:
                return member
        raise UnsupportedFormatError(name)
