"""
Schema validation for configuration dictionaries.

Two entry points share one ordered sequence of checks: ``validate`` stops
at and raises the first failure, ``collect_violations`` returns every
failure message. Required-property checks all run before any validator
predicate, each phase in schema declaration order.
"""

from typing import Any, Dict, Iterator, List

from ..exceptions import (
    MissingRequiredPropertyError, SchemaValidationError, ValidatorFailedError
)
from ..utils.logger import get_logger, log_config_error
from .schema import Schema

logger = get_logger(__name__)


def iter_violations(schema: Schema, config: Dict[str, Any]) -> Iterator[SchemaValidationError]:
    """Yield a schema error for each failed check, in check order."""
    for rule in schema.properties:
        if rule.required and rule.name not in config:
            yield MissingRequiredPropertyError(rule.name)

    for rule in schema.properties:
        if rule.name not in config:
            continue
        value = config[rule.name]
        for predicate in rule.validators:
            logger.debug(f"Checking property '{rule.name}'")
            if not predicate(value):
                yield ValidatorFailedError(rule.name, _predicate_name(predicate))


def validate(schema: Schema, config: Dict[str, Any]) -> bool:
    """
    Validate a configuration against a schema, failing fast.

    Args:
        schema: Rule set to apply
        config: Configuration dictionary (only its top level is checked)

    Returns:
        True when every check passes

    Raises:
        MissingRequiredPropertyError: For the first absent required property
        ValidatorFailedError: For the first predicate returning False

    Example:
        >>> schema = Schema().add_property("Url", required=True)
        >>> validate(schema, {"Url": "http://localhost"})
        True
    """
    for violation in iter_violations(schema, config):
        log_config_error(logger, "VALIDATE", violation, f"schema='{schema.name}'")
        raise violation
    logger.debug(f"Schema '{schema.name}' validation passed")
    return True


def collect_violations(schema: Schema, config: Dict[str, Any]) -> List[str]:
    """Run every check and return all failure messages in check order."""
    return [str(violation) for violation in iter_violations(schema, config)]


def _predicate_name(predicate: Any) -> str:
    name = getattr(predicate, "__name__", None) or type(predicate).__name__
    return "" if name == "<lambda>" else name
