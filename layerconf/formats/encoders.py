"""
Configuration format encoders.

Encoders are the inverse of the parser subsets in ``parsers``. INI and TOML
output carries one level of sections; top-level scalars are written under
the ``Global`` section the parsers read them back into, and anything nested
deeper, and any sequence, is written as compact JSON text. YAML output nests
mappings by indentation, quotes strings with JSON escapes where a plain
scalar would not read back, and writes sequences as quoted JSON text.
These are accepted lossy boundaries: sequences do not round-trip through
INI, TOML or YAML, and top-level INI/TOML scalars come back inside
``Global``.
"""

import json
import re
from typing import Any, Dict, List, Optional, Union

from .parsers import DEFAULT_INI_SECTION
from .types import ConfigFormat

_YAML_INDENT = "  "
_YAML_PLAIN_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def encode(config_format: Union[ConfigFormat, str], value: Dict[str, Any],
           indent: Optional[int] = None) -> str:
    """
    Encode a configuration dictionary as text.

    Args:
        config_format: ConfigFormat member or format name
        value: Configuration dictionary
        indent: JSON indentation width; ignored by the other formats

    Returns:
        Encoded text ending with a newline

    Raises:
        UnsupportedFormatError: If the format is unknown
    """
    if not isinstance(config_format, ConfigFormat):
        config_format = ConfigFormat.from_name(config_format)

    if config_format is ConfigFormat.JSON:
        return encode_json(value, indent)
    if config_format is ConfigFormat.TOML:
        return encode_toml(value)
    if config_format is ConfigFormat.YAML:
        return encode_yaml(value)
    return encode_ini(value)


def encode_json(value: Dict[str, Any], indent: Optional[int] = None) -> str:
    return json.dumps(value, indent=indent, ensure_ascii=False) + "\n"


def encode_ini(value: Dict[str, Any]) -> str:
    return _encode_sections(value, separator="=", scalar=_ini_scalar)


def encode_toml(value: Dict[str, Any]) -> str:
    return _encode_sections(value, separator=" = ", scalar=_toml_scalar)


def encode_yaml(value: Dict[str, Any]) -> str:
    lines: List[str] = []
    _yaml_lines(value, 0, lines)
    return "\n".join(lines) + "\n" if lines else ""


def _encode_sections(value: Dict[str, Any], separator: str, scalar) -> str:
    sections: Dict[str, Dict[str, Any]] = {}
    loose = {key: item for key, item in value.items() if not isinstance(item, dict)}
    if loose:
        sections[DEFAULT_INI_SECTION] = loose

    for key, item in value.items():
        if isinstance(item, dict):
            sections[key] = {**sections.get(key, {}), **item}

    lines: List[str] = []
    for name, entries in sections.items():
        if lines:
            lines.append("")
        lines.append(f"[{name}]")
        for child_key, child in entries.items():
            lines.append(f"{child_key}{separator}{scalar(child)}")

    return "\n".join(lines) + "\n" if lines else ""


def _ini_scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def _toml_scalar(value: Any) -> str:
    if value is None:
        return '""'
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return f'"{value}"'


def _yaml_lines(value: Dict[str, Any], depth: int, lines: List[str]) -> None:
    prefix = _YAML_INDENT * depth
    for key, item in value.items():
        if isinstance(item, dict):
            lines.append(f"{prefix}{_yaml_key(key)}:")
            _yaml_lines(item, depth + 1, lines)
        else:
            lines.append(f"{prefix}{_yaml_key(key)}: {_yaml_scalar(item)}")


def _yaml_key(key: Any) -> str:
    text = str(key)
    if (text == "" or text != text.strip() or ":" in text or "#" in text
            or _has_control_chars(text) or text[0] in "\"'-[{|>&*!?~"):
        return json.dumps(text, ensure_ascii=False)
    return text


def _yaml_scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, (list, tuple)):
        text = json.dumps(value, ensure_ascii=False)
        return "'" + text.replace("'", "''") + "'"

    text = str(value)
    if _yaml_needs_quotes(text):
        return json.dumps(text, ensure_ascii=False)
    return text


def _has_control_chars(text: str) -> bool:
    return any(ord(char) < 32 for char in text)


def _yaml_needs_quotes(text: str) -> bool:
    if text == "" or text != text.strip() or _has_control_chars(text):
        return True
    if text.lower() in ("true", "false", "null", "~"):
        return True
    if _YAML_PLAIN_RE.match(text):
        return True
    if ": " in text or " #" in text or text.endswith(":"):
        return True
    return text[0] in "\"'[{|>&*!#-"
