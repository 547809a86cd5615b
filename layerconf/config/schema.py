"""
Schema definitions and JSON Schema document loading.

A Schema is an ordered set of property rules: an advisory type, a required
flag and zero or more validator predicates per property. Schemas are built
in code or converted from JSON Schema documents (JSON or YAML files)
by SchemaManager.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import jsonschema
from jsonschema import Draft7Validator

from ..exceptions import MalformedInputError, SchemaDocumentError
from ..utils.helpers import safe_load_yaml, validate_file_exists
from ..utils.logger import get_logger, log_config_operation

Predicate = Callable[[Any], bool]


class PropertyType(Enum):
    """Declared property types; advisory only."""
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    ANY = "any"

    @classmethod
    def from_name(cls, name: Union[str, 'PropertyType', None]) -> 'PropertyType':
        """Resolve a type name, falling back to ANY for unknown names."""
        if isinstance(name, PropertyType):
            return name
        aliases = {"str": "string", "int": "integer", "float": "number",
                   "bool": "boolean", "dict": "object", "list": "array"}
        normalized = (name or "any").lower()
        normalized = aliases.get(normalized, normalized)
        for member in cls:
            if member.value == normalized:
                return member
        return cls.ANY

    def matches(self, value: Any) -> bool:
        """Check whether a value is of this declared type."""
        if self is PropertyType.ANY:
            return True
        if self is PropertyType.BOOLEAN:
            return isinstance(value, bool)
        if self is PropertyType.INTEGER:
            return isinstance(value, int) and not isinstance(value, bool)
        if self is PropertyType.NUMBER:
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        if self is PropertyType.STRING:
            return isinstance(value, str)
        if self is PropertyType.OBJECT:
            return isinstance(value, dict)
        return isinstance(value, (list, tuple))


@dataclass
class PropertyRule:
    """Rule set for a single top-level property."""
    name: str
    property_type: PropertyType = PropertyType.ANY
    required: bool = False
    validators: List[Predicate] = field(default_factory=list)


class Schema:
    """
    Declarative rule set checked against a configuration dictionary.

    Properties keep their declaration order, which is also the order in
    which checks run.

    Example:
        >>> schema = (Schema()
        ...           .add_property("Url", "string", required=True)
        ...           .add_property("Timeout", "number",
        ...                         validators=[lambda v: v > 0]))
    """

    def __init__(self, name: str = "schema"):
        self.name = name
        self._properties: Dict[str, PropertyRule] = {}

    def add_property(self, name: str, property_type: Union[str, PropertyType] = PropertyType.ANY,
                     required: bool = False,
                     validators: Optional[List[Predicate]] = None) -> 'Schema':
        """Declare or redeclare a property rule."""
        self._properties[name] = PropertyRule(
            name=name,
            property_type=PropertyType.from_name(property_type),
            required=required,
            validators=list(validators or [])
        )
        return self

    def add_validator(self, name: str, predicate: Predicate) -> 'Schema':
        """Attach a validator predicate, declaring the property if needed."""
        if name not in self._properties:
            self.add_property(name)
        self._properties[name].validators.append(predicate)
        return self

    @property
    def properties(self) -> List[PropertyRule]:
        return list(self._properties.values())

    @property
    def required_properties(self) -> List[str]:
        return [rule.name for rule in self._properties.values() if rule.required]

    def get_rule(self, name: str) -> Optional[PropertyRule]:
        return self._properties.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._properties

    def __len__(self) -> int:
        return len(self._properties)

    @classmethod
    def from_dict(cls, definition: Dict[str, Any], name: str = "schema") -> 'Schema':
        """
        Build a schema from a plain mapping.

        Each entry maps a property name to a dictionary with optional
        ``type``, ``required`` and ``validators`` keys.
        """
        schema = cls(name)
        for property_name, rule in definition.items():
            rule = rule or {}
            schema.add_property(
                property_name,
                rule.get("type", PropertyType.ANY),
                required=bool(rule.get("required", False)),
                validators=rule.get("validators")
            )
        return schema


class SchemaManager:
    """
    Loads JSON Schema documents and converts them to Schema objects.

    Only the top level of the document drives the rule set: ``required``
    marks required properties, ``properties.<name>.type`` becomes the
    advisory type, and each property sub-schema is enforced as a validator
    predicate through jsonschema.
    """

    def __init__(self):
        self.logger = get_logger(__name__)
        self._schema_cache: Dict[Path, Schema] = {}

    def load_document(self, schema_path: Path) -> Dict[str, Any]:
        """
        Load a schema document from JSON or YAML and check it is valid JSON Schema.

        Raises:
            ConfigFileNotFoundError: If schema file doesn't exist
            MalformedInputError: If the file cannot be parsed
            SchemaDocumentError: If the document is not a valid Draft 7 schema
        """
        schema_path = Path(schema_path)
        validate_file_exists(schema_path, "Schema file")

        if schema_path.suffix.lower() in (".yaml", ".yml"):
            document = safe_load_yaml(schema_path)
        else:
            try:
                with open(schema_path, 'r', encoding='utf-8') as file:
                    document = json.load(file)
            except json.JSONDecodeError as e:
                raise MalformedInputError(
                    "json", f"{e.msg} (column {e.colno})", source=str(schema_path), line=e.lineno
                ) from e

        if not isinstance(document, dict):
            raise SchemaDocumentError(f"Schema document must be an object: {schema_path}")

        try:
            Draft7Validator.check_schema(document)
        except jsonschema.SchemaError as e:
            raise SchemaDocumentError(f"Invalid JSON schema in {schema_path}: {e.message}") from e

        return document

    def load_schema(self, schema_path: Path) -> Schema:
        """
        Load a schema file with caching.

        Example:
            >>> manager = SchemaManager()
            >>> schema = manager.load_schema(Path("schemas/app.schema.json"))
        """
        schema_path = Path(schema_path).resolve()
        if schema_path in self._schema_cache:
            return self._schema_cache[schema_path]

        document = self.load_document(schema_path)
        schema = self.schema_from_document(document, name=schema_path.stem)
        self._schema_cache[schema_path] = schema

        log_config_operation(
            self.logger, "LOAD_SCHEMA",
            f"path={schema_path}, properties={len(schema)}"
        )
        return schema

    def schema_from_document(self, document: Dict[str, Any], name: str = "schema") -> Schema:
        """Convert a JSON Schema document into a Schema."""
        schema = Schema(document.get("title", name))
        required = list(document.get("required", []))
        properties = document.get("properties", {})
        root = Draft7Validator(document)

        for property_name, subschema in properties.items():
            declared = subschema.get("type") if isinstance(subschema, dict) else None
            if isinstance(declared, list):
                declared = None
            schema.add_property(
                property_name,
                declared,
                required=property_name in required,
                validators=[_subschema_predicate(root, subschema)]
            )

        for property_name in required:
            if property_name not in schema:
                schema.add_property(property_name, required=True)

        return schema


def _subschema_predicate(root: Draft7Validator, subschema: Any) -> Predicate:
    # evolve keeps the root document so local $ref pointers resolve
    validator = root.evolve(schema=subschema)

    def predicate(value: Any) -> bool:
        return validator.is_valid(value)

    predicate.__name__ = "json_schema"
    return predicate
