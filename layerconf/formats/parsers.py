"""
Configuration format parsers.

This module decodes JSON, TOML, YAML and INI text into nested dictionaries.
JSON is delegated to the standard decoder; the TOML and YAML parsers
implement a small line-oriented subset (flat sections for
TOML, indentation-nested ``key: value`` mappings for YAML) and do not
support arrays, multi-line strings, anchors or inline tables.
"""

import json
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple, Union

from ..exceptions import MalformedInputError
from ..utils.helpers import validate_file_exists
from ..utils.logger import get_logger
from .types import ConfigFormat

logger = get_logger(__name__)

DEFAULT_INI_SECTION = "Global"

_SECTION_RE = re.compile(r"^\[(.+)\]$")
_KEY_VALUE_RE = re.compile(r"^([^=]+)=(.*)$")
_YAML_ENTRY_RE = re.compile(
    r"^(?P<key>\"(?:[^\"\\]|\\.)*\"|'(?:[^']|'')*'|[^\s:#\"'][^:]*?)"
    r"\s*:(?:\s+(?P<value>.*?))?\s*$"
)
_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")


def detect_format(path: Union[str, Path]) -> ConfigFormat:
    """
    Determine the configuration format from a file extension.

    Args:
        path: File path; the extension is matched case-insensitively

    Returns:
        The matching ConfigFormat

    Raises:
        UnsupportedFormatError: If the extension has no parser
    """
    return ConfigFormat.from_name(Path(path).suffix)


def parse_text(config_format: Union[ConfigFormat, str], text: str,
               source: str = "<string>") -> Dict[str, Any]:
    """
    Parse configuration text in the given format.

    Args:
        config_format: ConfigFormat member or format name
        text: Raw configuration text
        source: Name used in error messages (usually the file path)

    Returns:
        Nested configuration dictionary

    Raises:
        UnsupportedFormatError: If the format is unknown
        MalformedInputError: If the text cannot be parsed
    """
    if not isinstance(config_format, ConfigFormat):
        config_format = ConfigFormat.from_name(config_format)

    parser = _PARSERS[config_format]
    return parser(text, source)


def parse_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read and parse a configuration file, dispatching on its extension.

    Raises:
        ConfigFileNotFoundError: If the file does not exist
        UnsupportedFormatError: If the extension has no parser
        MalformedInputError: If the content cannot be parsed
    """
    path = Path(path)
    validate_file_exists(path, "Configuration file")
    config_format = detect_format(path)

    with open(path, 'r', encoding='utf-8') as file:
        text = file.read()

    data = parse_text(config_format, text, source=str(path))
    logger.debug(f"Parsed {config_format.value} file: {path}")
    return data


def parse_json(text: str, source: str = "<string>") -> Dict[str, Any]:
    """Parse JSON text; the document must be an object."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedInputError(
            "json", f"{e.msg} (column {e.colno})", source=source, line=e.lineno
        ) from e

    if not isinstance(data, dict):
        raise MalformedInputError(
            "json", f"top-level value must be an object, got {type(data).__name__}",
            source=source
        )
    return data


def parse_ini(text: str, source: str = "<string>") -> Dict[str, Any]:
    """
    Parse INI text into section dictionaries.

    Values are whitespace-trimmed and always kept as strings. Keys that
    appear before any section header land in the ``Global`` section.
    """
    result: Dict[str, Any] = {}
    section = DEFAULT_INI_SECTION

    for line in _iter_lines(text):
        stripped = line.strip()
        if not stripped or stripped[0] in ";#":
            continue

        header = _SECTION_RE.match(stripped)
        if header:
            section = header.group(1).strip()
            result.setdefault(section, {})
            continue

        entry = _KEY_VALUE_RE.match(stripped)
        if entry:
            key = entry.group(1).strip()
            result.setdefault(section, {})[key] = entry.group(2).strip()

    return result


def parse_toml(text: str, source: str = "<string>") -> Dict[str, Any]:
    """
    Parse the flat TOML subset.

    Handles ``[section]`` headers and ``key = value`` lines only. Values are
    coerced: double-quoted text becomes a string, ``true``/``false`` become
    booleans, numeric literals become floats and anything else stays a raw
    string. As with INI, keys before the first header land in the ``Global``
    section.
    """
    result: Dict[str, Any] = {}
    section = DEFAULT_INI_SECTION

    for line in _iter_lines(text):
        stripped = line.strip()
        if not stripped or stripped[0] in ";#":
            continue

        header = _SECTION_RE.match(stripped)
        if header:
            section = header.group(1).strip()
            result.setdefault(section, {})
            continue

        entry = _KEY_VALUE_RE.match(stripped)
        if entry:
            key = entry.group(1).strip()
            result.setdefault(section, {})[key] = _coerce_toml_scalar(entry.group(2).strip())

    return result


def parse_yaml(text: str, source: str = "<string>") -> Dict[str, Any]:
    """
    Parse the minimal YAML subset.

    Each line is either ``key: value`` (a scalar leaf) or ``key:`` (opens a
    nested mapping for the more-indented lines that follow). Keys and values
    may be quoted; double-quoted text takes JSON-style backslash escapes and
    single-quoted text doubles ``''`` for a literal quote. Sequences, flow
    collections and multi-line scalars are rejected.
    """
    result: Dict[str, Any] = {}
    stack: List[Tuple[int, Dict[str, Any]]] = [(-1, result)]

    for line_number, line in enumerate(_iter_lines(text), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or stripped in ("---", "..."):
            continue

        leading = line[:len(line) - len(line.lstrip())]
        if "\t" in leading:
            raise MalformedInputError(
                "yaml", "tabs are not allowed in indentation", source=source, line=line_number
            )
        if stripped.startswith("- ") or stripped == "-":
            raise MalformedInputError(
                "yaml", f"sequences are not supported: '{stripped}'", source=source, line=line_number
            )

        entry = _YAML_ENTRY_RE.match(stripped)
        if not entry:
            raise MalformedInputError(
                "yaml", f"expected 'key: value' or 'key:', got '{stripped}'",
                source=source, line=line_number
            )

        indent = len(leading)
        while stack[-1][0] >= indent:
            stack.pop()
        parent = stack[-1][1]

        key = _unquote(entry.group("key").strip())
        raw_value = _strip_yaml_comment(entry.group("value") or "")

        if raw_value == "":
            child: Dict[str, Any] = {}
            parent[key] = child
            stack.append((indent, child))
            continue

        if raw_value[0] in "[{|>&*!":
            raise MalformedInputError(
                "yaml", f"unsupported value syntax for '{key}': '{raw_value}'",
                source=source, line=line_number
            )
        parent[key] = _coerce_yaml_scalar(raw_value)

    return result


def _iter_lines(text: str) -> List[str]:
    return text.lstrip("\ufeff").splitlines()


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        if value[0] == "'":
            return value[1:-1].replace("''", "'")
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value[1:-1]
    return value


def _quoted_end(value: str) -> int:
    """Return the index just past the closing quote of a leading quoted scalar, or -1."""
    quote = value[0]
    position = 1
    while position < len(value):
        char = value[position]
        if quote == '"' and char == "\\":
            position += 2
            continue
        if char == quote:
            if quote == "'" and value[position + 1:position + 2] == "'":
                position += 2
                continue
            return position + 1
        position += 1
    return -1


def _strip_yaml_comment(value: str) -> str:
    if not value:
        return ""
    if value[0] in "\"'":
        end = _quoted_end(value)
        if end != -1:
            rest = value[end:].strip()
            if not rest or rest.startswith("#"):
                return value[:end]
        return value
    position = value.find(" #")
    if position != -1:
        value = value[:position]
    return value.strip()


def _coerce_toml_scalar(value: str) -> Any:
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    if value == "true":
        return True
    if value == "false":
        return False
    if _NUMBER_RE.match(value):
        return float(value)
    return value


def _coerce_yaml_scalar(value: str) -> Any:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return _unquote(value)
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered in ("null", "~"):
        return None
    if _INTEGER_RE.match(value):
        return int(value)
    if _NUMBER_RE.match(value):
        return float(value)
    return value


_PARSERS: Dict[ConfigFormat, Callable[[str, str], Dict[str, Any]]] = {
    ConfigFormat.JSON: parse_json,
    ConfigFormat.TOML: parse_toml,
    ConfigFormat.YAML: parse_yaml,
    ConfigFormat.INI: parse_ini,
}
