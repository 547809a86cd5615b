"""
Helper utility functions for configuration management.

This module provides common utility functions used across the configuration
loading system, including deep merge, dotted-path access, YAML loading
and file validation.
"""

import copy
from pathlib import Path
from typing import Any, Dict

import yaml

from ..exceptions import ConfigFileNotFoundError, MalformedInputError


def deep_merge(dict1: Dict[str, Any], dict2: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries, with dict2 values overriding dict1.

    Nested dictionaries are merged recursively rather than replaced. Any
    other value type (scalars, lists, or a dict meeting a non-dict) is
    replaced wholesale by the value from dict2. Neither input is mutated.

    Args:
        dict1: Base dictionary
        dict2: Override dictionary

    Returns:
        New dictionary with merged values

    Example:
        >>> base = {"a": {"x": 1, "y": 2}, "b": 3}
        >>> override = {"a": {"y": 20, "z": 30}, "c": 4}
        >>> deep_merge(base, override)
        {"a": {"x": 1, "y": 20, "z": 30}, "b": 3, "c": 4}
    """
    result = copy.deepcopy(dict1)

    for key, value in dict2.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)

    return result


def get_by_dot(data: Dict[str, Any], path: str, default: Any = None) -> Any:
    """
    Read a nested value using a dot-separated path.

    Args:
        data: Configuration dictionary to walk
        path: Dot-separated key path (e.g. "Database.Timeout")
        default: Value returned as soon as any segment is absent

    Returns:
        The value at the path, or default

    Example:
        >>> get_by_dot({"Database": {}}, "Database.Timeout", 30)
        30
    """
    current = data
    for segment in path.split("."):
        if not isinstance(current, dict) or segment not in current:
            return default
        current = current[segment]
    return current


def set_by_dot(data: Dict[str, Any], path: str, value: Any) -> None:
    """
    Write a nested value using a dot-separated path.

    Missing intermediate dictionaries are created. An intermediate segment
    holding a non-dictionary value is replaced by a new dictionary.

    Args:
        data: Configuration dictionary to modify in place
        path: Dot-separated key path
        value: Value to assign at the leaf

    Raises:
        ValueError: If path is empty
    """
    if not path:
        raise ValueError("Configuration path cannot be empty")

    segments = path.split(".")
    current = data
    for segment in segments[:-1]:
        if not isinstance(current.get(segment), dict):
            current[segment] = {}
        current = current[segment]
    current[segments[-1]] = value


def safe_load_yaml(file_path: Path) -> Dict[str, Any]:
    """
    Safely load YAML file with proper error handling.

    Args:
        file_path: Path to YAML file

    Returns:
        Parsed YAML content as dictionary

    Raises:
        ConfigFileNotFoundError: If file doesn't exist
        MalformedInputError: If YAML is invalid or not a mapping
    """
    validate_file_exists(file_path, "YAML file")

    try:
        with open(file_path, 'r', encoding='utf-8') as file:
            content = yaml.safe_load(file)
    except yaml.YAMLError as e:
        line = None
        mark = getattr(e, "problem_mark", None)
        if mark is not None:
            line = mark.line + 1
        raise MalformedInputError("yaml", str(e), source=str(file_path), line=line) from e

    if content is None:
        raise MalformedInputError("yaml", "file is empty", source=str(file_path))

    if not isinstance(content, dict):
        raise MalformedInputError(
            "yaml",
            f"file must contain a mapping, got {type(content).__name__}",
            source=str(file_path)
        )

    return content


def validate_file_exists(file_path: Path, description: str) -> None:
    """
    Validate that a file exists and provide helpful error message.

    Args:
        file_path: Path to validate
        description: Human-readable description for error message

    Raises:
        ConfigFileNotFoundError: If file doesn't exist with descriptive message
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise ConfigFileNotFoundError(
            file_path,
            f"{description} not found at '{file_path}'. "
            f"Please check the path and ensure the file exists."
        )

    if not file_path.is_file():
        raise ConfigFileNotFoundError(
            file_path,
            f"Expected a file but found directory at '{file_path}'. "
            f"Please check the path."
        )


def ensure_directory_exists(directory: Path) -> None:
    """
    Ensure directory exists, create if it doesn't.

    Args:
        directory: Directory path to ensure exists

    Raises:
        OSError: If directory cannot be created
    """
    try:
        Path(directory).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OSError(f"Failed to create directory {directory}: {str(e)}") from e


def split_paths(value: str) -> list:
    """Split a comma-separated path list, dropping empty entries."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]
