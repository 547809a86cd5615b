"""
Unit tests for environment variable expansion.
"""

import os
import unittest
from unittest.mock import patch

from layerconf.config.expander import (
    expand_environment, expand_string, find_unresolved_references
)


class TestExpandEnvironment(unittest.TestCase):
    """Test cases for reference expansion."""

    def setUp(self):
        """Set up a fixed environment mapping."""
        self.environ = {"HOME": "/home/app", "USER": "svc", "PORT": "8080"}

    def test_all_reference_styles(self):
        """Test braced, bare and percent references."""
        self.assertEqual(expand_string("${HOME}/logs", self.environ), "/home/app/logs")
        self.assertEqual(expand_string("$USER-data", self.environ), "svc-data")
        self.assertEqual(expand_string("%USER%\\tmp", self.environ), "svc\\tmp")

    def test_multiple_references_in_one_string(self):
        """Test that every reference in a string is replaced."""
        self.assertEqual(
            expand_string("http://${USER}:$PORT/%HOME%", self.environ),
            "http://svc:8080//home/app"
        )

    def test_unset_expands_to_empty(self):
        """Test that unset variables become empty strings."""
        self.assertEqual(expand_string("a${NOPE}b$NOPE%NOPE%c", self.environ), "abc")

    def test_single_pass(self):
        """Test that substituted text is not scanned again."""
        environ = {"OUTER": "${INNER}", "INNER": "deep"}
        self.assertEqual(expand_string("${OUTER}", environ), "${INNER}")

    def test_fallback_syntax_is_not_interpreted(self):
        """Test that the whole braced text is used as the variable name."""
        self.assertEqual(expand_string("${MISSING:-x}", self.environ), "")
        self.assertEqual(expand_string("${MISSING:-x}", {"MISSING:-x": "literal"}), "literal")

    def test_text_without_references(self):
        """Test that plain text and lone symbols are unchanged."""
        self.assertEqual(expand_string("100% $ sure", self.environ), "100% $ sure")

    def test_recursive_walk(self):
        """Test that nested dictionaries and lists are expanded, other values kept."""
        config = {
            "Paths": {"Log": "${HOME}/log", "Depth": 3},
            "Hosts": ["$USER.local", "static"],
            "Enabled": True,
            "${HOME}": "key untouched"
        }

        result = expand_environment(config, self.environ)

        self.assertEqual(result["Paths"], {"Log": "/home/app/log", "Depth": 3})
        self.assertEqual(result["Hosts"], ["svc.local", "static"])
        self.assertIs(result["Enabled"], True)
        self.assertEqual(result["${HOME}"], "key untouched")
        self.assertEqual(config["Paths"]["Log"], "${HOME}/log")

    @patch.dict(os.environ, {"LAYERCONF_TEST_VAR": "from-os"}, clear=False)
    def test_defaults_to_process_environment(self):
        """Test that os.environ is used when no mapping is given."""
        self.assertEqual(expand_environment({"v": "${LAYERCONF_TEST_VAR}"}), {"v": "from-os"})


class TestFindUnresolvedReferences(unittest.TestCase):
    """Test cases for unresolved reference discovery."""

    def test_reports_missing_names_once_in_order(self):
        """Test ordering and de-duplication of missing names."""
        config = {"a": "${B_VAR}", "b": {"c": "$A_VAR and ${B_VAR}"}, "d": ["%C_VAR%"]}

        self.assertEqual(
            find_unresolved_references(config, {"A_VAR": "set"}),
            ["B_VAR", "C_VAR"]
        )

    def test_nothing_missing(self):
        """Test an empty result when every reference resolves."""
        self.assertEqual(find_unresolved_references({"a": "$X"}, {"X": "1"}), [])


if __name__ == "__main__":
    unittest.main()
