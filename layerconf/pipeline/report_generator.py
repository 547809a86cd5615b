"""
Report generation for configuration tests and the audit log.

This module renders ValidationResult objects and audit entries as JSON for
automation, JUnit XML for CI test reporting, and Markdown for humans.
"""

import json
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..utils.logger import get_logger, log_config_error, log_config_operation
from .models import AuditEntry, ValidationResult


class ReportGenerator:
    """
    Generates configuration reports.

    Reports are plain dictionaries; the generator builds them from results
    and writes them out in one or more formats.
    """

    def __init__(self, output_dir: Path):
        """
        Initialize report generator.

        Args:
            output_dir: Directory to save generated reports

        Example:
            >>> generator = ReportGenerator(Path("reports"))
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger = get_logger(__name__)

    def validation_report(self, result: ValidationResult, config_path: Path) -> Dict[str, Any]:
        """Build a report dictionary for a configuration test."""
        report = result.to_dict()
        report.update({
            "report_type": "configuration_test",
            "config_path": str(config_path),
            "generated_at": datetime.now().isoformat()
        })
        return report

    def audit_report(self, entries: List[AuditEntry]) -> Dict[str, Any]:
        """Build a report dictionary summarizing audit entries."""
        failed = [entry for entry in entries if not entry.success]
        return {
            "report_type": "audit",
            "generated_at": datetime.now().isoformat(),
            "total_entries": len(entries),
            "failed_entries": len(failed),
            "success": len(failed) == 0,
            "entries": [entry.to_dict() for entry in entries]
        }

    def to_json(self, report: Dict[str, Any]) -> str:
        return json.dumps(report, indent=2, default=str)

    def to_junit_xml(self, result: ValidationResult, test_suite_name: str = "configuration_test") -> str:
        """
        Convert a validation result to JUnit XML.

        Each named sub-test becomes a testcase; failed sub-tests carry a
        failure element listing the result's errors.

        Example:
            >>> generator = ReportGenerator(Path("reports"))
            >>> junit_xml = generator.to_junit_xml(result, "app_config")
        """
        failed_tests = [name for name, passed in result.tests.items() if not passed]

        testsuite = ET.Element("testsuite")
        testsuite.set("name", test_suite_name)
        testsuite.set("tests", str(len(result.tests)))
        testsuite.set("failures", str(len(failed_tests)))
        testsuite.set("time", "0")

        for name, passed in result.tests.items():
            testcase = ET.SubElement(testsuite, "testcase")
            testcase.set("classname", test_suite_name)
            testcase.set("name", name)
            testcase.set("time", "0")

            if not passed:
                failure = ET.SubElement(testcase, "failure")
                failure.set("message", f"{name} failed")
                failure.text = "\n".join(result.errors or result.warnings)

        if result.warnings:
            system_out = ET.SubElement(testsuite, "system-out")
            system_out.text = "\n".join(result.warnings)

        return ET.tostring(testsuite, encoding='unicode')

    def to_markdown(self, report: Dict[str, Any]) -> str:
        """Convert a report to Markdown."""
        lines = []

        title = report.get("report_type", "report").replace("_", " ").title()
        lines.append(f"# {title} Report")
        lines.append("")

        if "config_path" in report:
            lines.append(f"**Configuration:** {report['config_path']}")
        if "generated_at" in report:
            lines.append(f"**Generated:** {report['generated_at']}")
        lines.append("")

        status_key = "is_valid" if "is_valid" in report else "success"
        if status_key in report:
            status = "✅ Valid" if report[status_key] else "❌ Invalid"
            lines.append(f"**Status:** {status}")
            lines.append("")

        if report.get("tests"):
            lines.append("## Checks")
            for name, passed in report["tests"].items():
                mark = "✅" if passed else "❌"
                lines.append(f"- {mark} {name.replace('_', ' ')}")
            lines.append("")

        if report.get("errors"):
            lines.append("## Errors")
            for error in report["errors"]:
                lines.append(f"- ❌ {error}")
            lines.append("")

        if report.get("warnings"):
            lines.append("## Warnings")
            for warning in report["warnings"]:
                lines.append(f"- ⚠️ {warning}")
            lines.append("")

        if report.get("entries"):
            lines.append("## Entries")
            lines.append("| Time | Action | Paths | Result |")
            lines.append("|---|---|---|---|")
            for entry in report["entries"]:
                outcome = "ok" if entry["success"] else f"failed: {entry['error']}"
                lines.append(
                    f"| {entry['timestamp']} | {entry['action']} | "
                    f"{', '.join(entry['paths'])} | {outcome} |"
                )
            lines.append("")

        return "\n".join(lines)

    def save_report(self, report: Dict[str, Any], filename: str,
                    formats: Optional[List[str]] = None,
                    result: Optional[ValidationResult] = None) -> List[Path]:
        """
        Save report in multiple formats.

        Args:
            report: Report dictionary to save
            filename: Base filename (without extension)
            formats: Formats to save ("json", "md", "xml")
            result: Validation result backing the "xml" format

        Returns:
            List of paths to saved files

        Example:
            >>> generator.save_report(report, "app_test", ["json", "xml"], result)
        """
        if formats is None:
            formats = ["json"]

        saved_files = []

        try:
            for format_type in formats:
                if format_type == "json":
                    file_path = self.output_dir / f"{filename}.json"
                    file_path.write_text(self.to_json(report), encoding='utf-8')
                    saved_files.append(file_path)

                elif format_type in ("md", "markdown"):
                    file_path = self.output_dir / f"{filename}.md"
                    file_path.write_text(self.to_markdown(report), encoding='utf-8')
                    saved_files.append(file_path)

                elif format_type == "xml" and result is not None:
                    file_path = self.output_dir / f"{filename}.xml"
                    file_path.write_text(self.to_junit_xml(result, filename), encoding='utf-8')
                    saved_files.append(file_path)

            log_config_operation(
                self.logger, "SAVE_REPORT",
                f"filename={filename}, formats={formats}, files_saved={len(saved_files)}"
            )

        except OSError as e:
            log_config_error(
                self.logger, "SAVE_REPORT", e,
                f"filename={filename}, formats={formats}"
            )
            raise

        return saved_files
