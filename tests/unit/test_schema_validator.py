"""
Unit tests for schemas, schema documents and validation.
"""

import json
import tempfile
import unittest
from pathlib import Path

from layerconf.config.schema import PropertyType, Schema, SchemaManager
from layerconf.config.validator import collect_violations, validate
from layerconf.exceptions import (
    ConfigFileNotFoundError, MissingRequiredPropertyError, SchemaDocumentError,
    SchemaValidationError, ValidatorFailedError
)


class TestSchema(unittest.TestCase):
    """Test cases for building schemas."""

    def test_fluent_declaration_keeps_order(self):
        """Test declaration order and required listing."""
        schema = (Schema("app")
                  .add_property("Url", "string", required=True)
                  .add_property("Timeout", "int")
                  .add_property("Name", required=True))

        self.assertEqual([rule.name for rule in schema.properties], ["Url", "Timeout", "Name"])
        self.assertEqual(schema.required_properties, ["Url", "Name"])
        self.assertIs(schema.get_rule("Timeout").property_type, PropertyType.INTEGER)
        self.assertIn("Url", schema)
        self.assertEqual(len(schema), 3)

    def test_add_validator_declares_property(self):
        """Test that attaching a validator declares an unknown property."""
        schema = Schema().add_validator("Port", lambda v: v > 0)

        self.assertIn("Port", schema)
        self.assertEqual(len(schema.get_rule("Port").validators), 1)
        self.assertFalse(schema.get_rule("Port").required)

    def test_from_dict(self):
        """Test building a schema from a plain mapping."""
        schema = Schema.from_dict({
            "Url": {"type": "string", "required": True},
            "Debug": None
        })

        self.assertEqual(schema.required_properties, ["Url"])
        self.assertIs(schema.get_rule("Debug").property_type, PropertyType.ANY)

    def test_property_type_matching(self):
        """Test advisory type checks, including bool not counting as a number."""
        self.assertTrue(PropertyType.NUMBER.matches(1.5))
        self.assertTrue(PropertyType.NUMBER.matches(3))
        self.assertFalse(PropertyType.INTEGER.matches(True))
        self.assertTrue(PropertyType.OBJECT.matches({}))
        self.assertTrue(PropertyType.ARRAY.matches([]))
        self.assertTrue(PropertyType.ANY.matches(None))
        self.assertIs(PropertyType.from_name("mystery"), PropertyType.ANY)


class TestValidate(unittest.TestCase):
    """Test cases for fail-fast and aggregating validation."""

    def test_missing_required_property(self):
        """Test that an absent required property raises."""
        schema = Schema().add_property("Url", required=True)

        with self.assertRaises(MissingRequiredPropertyError) as cm:
            validate(schema, {"Name": "x"})
        self.assertEqual(cm.exception.property_name, "Url")
        self.assertEqual(str(cm.exception), "Missing required property: 'Url'")

    def test_validator_failure(self):
        """Test that a False predicate raises with the property name."""
        def positive(value):
            return value > 0

        schema = Schema().add_property("Timeout", validators=[positive])

        with self.assertRaises(ValidatorFailedError) as cm:
            validate(schema, {"Timeout": -1})
        self.assertEqual(cm.exception.property_name, "Timeout")
        self.assertEqual(cm.exception.validator_name, "positive")

        self.assertTrue(validate(schema, {"Timeout": 5}))

    def test_validators_skipped_for_absent_properties(self):
        """Test that predicates only run against present properties."""
        schema = Schema().add_property("Timeout", validators=[lambda v: v > 0])
        self.assertTrue(validate(schema, {}))

    def test_required_checks_run_before_validators(self):
        """Test that a missing property is reported before an earlier failing validator."""
        schema = (Schema()
                  .add_property("Timeout", validators=[lambda v: False])
                  .add_property("Url", required=True))

        with self.assertRaises(MissingRequiredPropertyError):
            validate(schema, {"Timeout": 1})

    def test_advisory_types_are_not_enforced(self):
        """Test that a declared type mismatch alone does not fail validation."""
        schema = Schema().add_property("Timeout", "integer", required=True)
        self.assertTrue(validate(schema, {"Timeout": "thirty"}))

    def test_predicate_exception_propagates(self):
        """Test that errors raised by a predicate are not swallowed."""
        schema = Schema().add_property("Timeout", validators=[lambda v: v > 0])

        with self.assertRaises(TypeError):
            validate(schema, {"Timeout": "thirty"})

    def test_collect_violations_reports_everything(self):
        """Test that every failure message is returned in check order."""
        schema = (Schema()
                  .add_property("Timeout", validators=[lambda v: v > 0])
                  .add_property("Url", required=True)
                  .add_property("Name", required=True))

        messages = collect_violations(schema, {"Timeout": 0})

        self.assertEqual(messages, [
            "Missing required property: 'Url'",
            "Missing required property: 'Name'",
            "Validation failed for property 'Timeout'"
        ])
        self.assertEqual(collect_violations(schema, {"Timeout": 1, "Url": "u", "Name": "n"}), [])

    def test_errors_share_base_class(self):
        """Test that both failure kinds are SchemaValidationError."""
        self.assertTrue(issubclass(MissingRequiredPropertyError, SchemaValidationError))
        self.assertTrue(issubclass(ValidatorFailedError, SchemaValidationError))


class TestSchemaManager(unittest.TestCase):
    """Test cases for SchemaManager."""

    def setUp(self):
        """Set up temporary directory and test schemas."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.temp_path = Path(self.temp_dir.name)

        self.document = {
            "title": "app",
            "type": "object",
            "required": ["Url", "Database"],
            "properties": {
                "Url": {"type": "string", "pattern": "^https?://"},
                "Database": {
                    "type": "object",
                    "required": ["Host"],
                    "properties": {"Timeout": {"type": "integer", "minimum": 1}}
                },
                "Debug": {"type": "boolean"}
            }
        }
        self.json_path = self.temp_path / "app.schema.json"
        self.json_path.write_text(json.dumps(self.document))

        self.manager = SchemaManager()

    def tearDown(self):
        """Clean up temporary directory."""
        self.temp_dir.cleanup()

    def test_load_schema_builds_rules(self):
        """Test conversion of a JSON Schema document."""
        schema = self.manager.load_schema(self.json_path)

        self.assertEqual(schema.name, "app")
        self.assertEqual(schema.required_properties, ["Url", "Database"])
        self.assertIs(schema.get_rule("Debug").property_type, PropertyType.BOOLEAN)

    def test_subschemas_enforced_through_jsonschema(self):
        """Test that nested constraints are checked by the property validators."""
        schema = self.manager.load_schema(self.json_path)

        self.assertTrue(validate(schema, {
            "Url": "https://example.com",
            "Database": {"Host": "db", "Timeout": 5}
        }))

        with self.assertRaises(ValidatorFailedError) as cm:
            validate(schema, {"Url": "https://example.com", "Database": {"Timeout": 5}})
        self.assertEqual(cm.exception.property_name, "Database")
        self.assertEqual(cm.exception.validator_name, "json_schema")

    def test_local_refs_resolve_against_document(self):
        """Test that property subschemas can point into the document's definitions."""
        schema = self.manager.schema_from_document({
            "definitions": {"port": {"type": "integer", "minimum": 1, "maximum": 65535}},
            "properties": {"Port": {"$ref": "#/definitions/port"}}
        })

        self.assertTrue(validate(schema, {"Port": 80}))
        with self.assertRaises(ValidatorFailedError) as cm:
            validate(schema, {"Port": 0})
        self.assertEqual(cm.exception.property_name, "Port")

    def test_load_schema_is_cached(self):
        """Test that loading the same path twice returns the same object."""
        first = self.manager.load_schema(self.json_path)
        second = self.manager.load_schema(self.json_path)

        self.assertIs(first, second)

    def test_yaml_schema_document(self):
        """Test loading a schema document written in YAML."""
        yaml_path = self.temp_path / "app.schema.yaml"
        yaml_path.write_text(
            "type: object\n"
            "required:\n"
            "  - Name\n"
            "properties:\n"
            "  Name:\n"
            "    type: string\n"
        )

        schema = self.manager.load_schema(yaml_path)

        self.assertEqual(schema.required_properties, ["Name"])
        with self.assertRaises(ValidatorFailedError):
            validate(schema, {"Name": 42})

    def test_invalid_schema_document(self):
        """Test that documents violating the JSON Schema metaschema are rejected."""
        bad_path = self.temp_path / "bad.json"
        bad_path.write_text(json.dumps({"type": "not-a-type"}))

        with self.assertRaises(SchemaDocumentError):
            self.manager.load_schema(bad_path)

    def test_missing_schema_file(self):
        """Test that a missing schema file raises ConfigFileNotFoundError."""
        with self.assertRaises(ConfigFileNotFoundError):
            self.manager.load_schema(self.temp_path / "missing.json")


if __name__ == "__main__":
    unittest.main()
