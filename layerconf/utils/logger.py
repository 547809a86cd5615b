"""
Logging setup for layerconf.

Library modules only ask for named loggers. The CLI calls setup_logging once,
with rich output on stderr so log records never mix into exported documents
written to stdout. Operation messages share a ``[OPERATION] details`` shape.
"""

import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def get_logger(name: str) -> logging.Logger:
    """
    Return the named logger; handlers come from setup_logging.

    Example:
        >>> logger = get_logger("layerconf.config.loader")
        >>> logger.debug("Cache hit for /etc/app/config.yaml")
    """
    return logging.getLogger(name)


def setup_logging(level: str = "INFO", format_string: Optional[str] = None,
                  rich_output: bool = False) -> None:
    """
    Configure the root logger, replacing any handlers already installed.

    Args:
        level: Level name such as DEBUG, INFO, WARNING or ERROR
        format_string: Record format; defaults depend on rich_output
        rich_output: Route records through a rich handler on stderr
            instead of a plain stdout stream

    Raises:
        ValueError: If level is not a known logging level name

    Example:
        >>> setup_logging("DEBUG", rich_output=True)
        >>> get_logger("layerconf.cli").debug("merging 2 override layers")
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    if rich_output:
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True
        )
        if format_string is None:
            format_string = "%(message)s"
    else:
        handler = logging.StreamHandler(sys.stdout)
        if format_string is None:
            format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=numeric_level,
        format=format_string,
        handlers=[handler],
        force=True
    )

    # Schema document loading pulls these in; their debug output is noise
    logging.getLogger("yaml").setLevel(logging.WARNING)
    logging.getLogger("jsonschema").setLevel(logging.WARNING)


def log_config_operation(logger: logging.Logger, operation: str, details: str) -> None:
    """
    Log a completed step as ``[OPERATION] details`` at INFO.

    Example:
        >>> log_config_operation(logger, "IMPORT", "path='app.yaml', overrides=1")
    """
    logger.info(f"[{operation}] {details}")


def log_config_error(logger: logging.Logger, operation: str, error: Exception, context: str = "") -> None:
    """
    Log a failed step as ``[OPERATION] FAILED (context): error`` at ERROR.

    The parenthesised context is omitted when empty.

    Example:
        >>> try:
        ...     orchestrator.export_configuration(config, "out.toml")
        ... except LayerconfException as e:
        ...     log_config_error(logger, "EXPORT", e, "path='out.toml'")
    """
    context_str = f" ({context})" if context else ""
    logger.error(f"[{operation}] FAILED{context_str}: {error}")
