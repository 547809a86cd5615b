"""
Unit tests for the command-line interface.
"""

import json
import tempfile
import unittest
from pathlib import Path

from click.testing import CliRunner

from layerconf.cli import cli
from layerconf.formats import parse_file
from layerconf.pipeline.context import reset_context
from layerconf.utils.logger import setup_logging


class TestCli(unittest.TestCase):
    """Test cases for CLI commands."""

    def setUp(self):
        """Set up test fixtures."""
        reset_context()
        self.runner = CliRunner()
        self.temp_dir = tempfile.TemporaryDirectory()
        self.temp_path = Path(self.temp_dir.name)

        self.config_path = self.temp_path / "app.yaml"
        self.config_path.write_text(
            "Url: http://localhost\n"
            "Database:\n"
            "  Host: localhost\n"
            "  Timeout: 30\n",
            encoding='utf-8'
        )

        override_dir = self.temp_path / "prod"
        override_dir.mkdir()
        self.override_path = override_dir / "config-override.json"
        self.override_path.write_text(json.dumps({"Database": {"Timeout": 60}}), encoding='utf-8')

        self.schema_path = self.temp_path / "schema.json"
        self.schema_path.write_text(json.dumps({
            "type": "object",
            "required": ["Url", "Database"],
            "properties": {
                "Url": {"type": "string"},
                "Database": {"type": "object", "required": ["Host"]}
            }
        }), encoding='utf-8')

    def tearDown(self):
        """Clean up test fixtures."""
        self.temp_dir.cleanup()
        reset_context()
        setup_logging("WARNING")

    def test_help(self):
        """Test that every command is listed."""
        result = self.runner.invoke(cli, ['--help'])

        self.assertEqual(result.exit_code, 0)
        for command in ("load", "validate", "convert", "test", "export", "audit", "interactive", "demo"):
            self.assertIn(command, result.output)

    def test_load_with_override(self):
        """Test loading and printing a merged configuration."""
        result = self.runner.invoke(cli, [
            'load', str(self.config_path), '--override', str(self.override_path)
        ])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('"Timeout": 60', result.output)

    def test_load_missing_file(self):
        """Test that a missing file exits with the failure code."""
        result = self.runner.invoke(cli, ['load', str(self.temp_path / "missing.json")])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("not found", result.output)

    def test_validate_success_and_failure(self):
        """Test validation exit codes."""
        ok = self.runner.invoke(cli, ['validate', str(self.config_path), '--schema', str(self.schema_path)])
        self.assertEqual(ok.exit_code, 0, ok.output)
        self.assertIn("valid", ok.output)

        bad_path = self.temp_path / "bad.yaml"
        bad_path.write_text("Database:\n  Timeout: 1\n", encoding='utf-8')
        bad = self.runner.invoke(cli, ['validate', str(bad_path), '--schema', str(self.schema_path)])
        self.assertEqual(bad.exit_code, 1)
        self.assertIn("Validation failed", bad.output)

    def test_convert(self):
        """Test converting YAML to INI."""
        output = self.temp_path / "out" / "app.ini"
        result = self.runner.invoke(cli, [
            'convert', str(self.config_path), '--output', str(output), '--format', 'ini'
        ])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(parse_file(output)["Database"], {"Host": "localhost", "Timeout": "30"})

    def test_test_command_writes_reports(self):
        """Test the test command's exit code and report files."""
        report_dir = self.temp_path / "reports"
        result = self.runner.invoke(cli, [
            'test', str(self.config_path), '--schema', str(self.schema_path),
            '--report-dir', str(report_dir)
        ])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue((report_dir / "app_test.json").is_file())
        self.assertTrue((report_dir / "app_test.md").is_file())
        self.assertTrue((report_dir / "app_test.xml").is_file())

    def test_test_command_failure(self):
        """Test that an invalid file exits with the failure code."""
        bad_path = self.temp_path / "bad.yaml"
        bad_path.write_text("Hosts:\n  - a\n", encoding='utf-8')

        result = self.runner.invoke(cli, ['test', str(bad_path)])

        self.assertEqual(result.exit_code, 1)

    def test_export_with_indent(self):
        """Test exporting a merged configuration as indented JSON."""
        output = self.temp_path / "merged.json"
        result = self.runner.invoke(cli, [
            'export', str(self.config_path), '--output', str(output),
            '--override', str(self.override_path), '--indent'
        ])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(json.loads(output.read_text(encoding='utf-8'))["Database"]["Timeout"], 60)

    def test_audit_after_operations(self):
        """Test that the audit command shows entries and saves reports."""
        self.runner.invoke(cli, ['load', str(self.config_path)])
        report_dir = self.temp_path / "audit"

        result = self.runner.invoke(cli, ['audit', '--report-dir', str(report_dir)])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("import", result.output)
        audit = json.loads((report_dir / "audit_log.json").read_text(encoding='utf-8'))
        self.assertEqual(audit["total_entries"], 1)

    def test_audit_empty(self):
        """Test the audit command with nothing recorded."""
        result = self.runner.invoke(cli, ['audit'])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("No audit entries", result.output)

    def test_interactive_session(self):
        """Test get, set and quit in the interactive shell."""
        result = self.runner.invoke(
            cli, ['interactive', str(self.config_path)],
            input="get Database.Timeout\nset Database.Host db.internal\nget Database.Host\nquit\n"
        )

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("30", result.output)
        self.assertIn("db.internal", result.output)

    def test_demo(self):
        """Test that the demo runs end to end."""
        result = self.runner.invoke(cli, ['demo'])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Audit Log", result.output)


if __name__ == "__main__":
    unittest.main()
