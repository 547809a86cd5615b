"""
Environment variable expansion for configuration values.

String leaves may reference environment variables as ``${NAME}``,
``$NAME`` or ``%NAME%``. Substitution is a single pass: replacement text is
never re-scanned, and an unset variable expands to an empty string. Text
inside ``${...}`` is looked up verbatim, so fallback syntax such as
``${NAME:-default}`` is not interpreted.
"""

import os
import re
from typing import Any, List, Mapping, Optional

_REFERENCE_RE = re.compile(
    r"\$\{(?P<braced>[^}]*)\}"
    r"|\$(?P<bare>[A-Za-z_][A-Za-z0-9_]*)"
    r"|%(?P<windows>[A-Za-z_][A-Za-z0-9_]*)%"
)


def expand_environment(value: Any, environ: Optional[Mapping[str, str]] = None) -> Any:
    """
    Return a copy of value with environment references in string leaves expanded.

    Dictionaries and lists are walked recursively; keys and non-string
    scalars are left untouched.

    Args:
        value: Configuration value of any shape
        environ: Variable mapping; defaults to os.environ

    Returns:
        Expanded value

    Example:
        >>> expand_environment({"home": "${HOME}/app"}, {"HOME": "/root"})
        {'home': '/root/app'}
    """
    if environ is None:
        environ = os.environ

    if isinstance(value, str):
        return expand_string(value, environ)
    if isinstance(value, dict):
        return {key: expand_environment(item, environ) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [expand_environment(item, environ) for item in value]
    return value


def expand_string(text: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Expand every environment reference in a single string."""
    if environ is None:
        environ = os.environ

    def _replace(match: re.Match) -> str:
        return environ.get(_reference_name(match), "")

    return _REFERENCE_RE.sub(_replace, text)


def find_unresolved_references(value: Any, environ: Optional[Mapping[str, str]] = None) -> List[str]:
    """
    List referenced variable names that are not set, in first-seen order.

    Used to report references that would silently expand to empty strings.
    """
    if environ is None:
        environ = os.environ

    missing: List[str] = []
    for text in _iter_strings(value):
        for match in _REFERENCE_RE.finditer(text):
            name = _reference_name(match)
            if name not in environ and name not in missing:
                missing.append(name)
    return missing


def _reference_name(match: re.Match) -> str:
    name = match.group("braced")
    if name is None:
        name = match.group("bare") or match.group("windows")
    return name


def _iter_strings(value: Any):
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from _iter_strings(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _iter_strings(item)
