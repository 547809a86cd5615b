"""
Utility functions module.

Provides helper functions for configuration management including
deep merge, dotted-path access, YAML loading, and logging utilities.
"""

from .helpers import (
    deep_merge, ensure_directory_exists, get_by_dot,
    safe_load_yaml, set_by_dot, split_paths, validate_file_exists
)
from .logger import get_logger, setup_logging, log_config_operation, log_config_error

__all__ = [
    "deep_merge",
    "ensure_directory_exists",
    "get_by_dot",
    "safe_load_yaml",
    "set_by_dot",
    "split_paths",
    "validate_file_exists",
    "get_logger",
    "setup_logging",
    "log_config_operation",
    "log_config_error"
]
