"""
Unit tests for logging utilities.
"""

import logging
import unittest

from rich.logging import RichHandler

from layerconf.utils.logger import (
    get_logger, log_config_error, log_config_operation, setup_logging
)


class TestLogger(unittest.TestCase):
    """Test cases for logging setup and helpers."""

    def tearDown(self):
        """Restore a quiet root logger."""
        setup_logging("WARNING")

    def test_setup_logging_levels(self):
        """Test that the root level follows the requested name."""
        setup_logging("DEBUG")
        self.assertEqual(logging.getLogger().level, logging.DEBUG)
        self.assertEqual(logging.getLogger("jsonschema").level, logging.WARNING)

    def test_setup_logging_rich_handler(self):
        """Test that rich output installs a RichHandler."""
        setup_logging("INFO", rich_output=True)
        self.assertIsInstance(logging.getLogger().handlers[0], RichHandler)

    def test_invalid_level(self):
        """Test that unknown level names are rejected."""
        with self.assertRaises(ValueError):
            setup_logging("LOUD")

    def test_operation_and_error_format(self):
        """Test the bracketed operation message format."""
        logger = get_logger("layerconf.tests")

        with self.assertLogs(logger, level="INFO") as cm:
            log_config_operation(logger, "LOAD", "path='app.json'")
            log_config_error(logger, "LOAD", ValueError("bad"), "path='app.json'")
            log_config_error(logger, "EXPORT", ValueError("worse"))

        self.assertEqual(cm.output, [
            "INFO:layerconf.tests:[LOAD] path='app.json'",
            "ERROR:layerconf.tests:[LOAD] FAILED (path='app.json'): bad",
            "ERROR:layerconf.tests:[EXPORT] FAILED: worse"
        ])


if __name__ == "__main__":
    unittest.main()
