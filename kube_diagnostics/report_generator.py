"""
Report Generator for Kubernetes Diagnostics

This module renders analysis results in two formats:
- JSON output for programmatic consumption (status, problems, results)
- Text output for the console, one block per result
"""

import json
import logging
import os
from typing import List, Optional

from .exceptions import SerializationError
from .models import JsonOutput, Result
from .validators import InputValidator


class ReportGenerator:
    """Generates diagnostic reports in various formats"""

    def __init__(
        self,
        results: List[Result],
        errors: Optional[List[str]] = None,
        provider: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the ReportGenerator

        Args:
            results: Collected results
            errors: Analyzer errors collected during the run
            provider: AI backend that produced the explanations, if any
            logger: Optional logger instance
        """
        self.results = results
        self.errors = errors or []
        self.provider = provider
        self.logger = logger or logging.getLogger("kube_diagnostics.report_generator")

    @classmethod
    def from_run(cls, run, logger: Optional[logging.Logger] = None) -> "ReportGenerator":
        """Build a generator for an AnalysisRun"""
        return cls(run.results, errors=run.errors, provider=run.provider, logger=logger)

    def build_output(self) -> JsonOutput:
        """Snapshot the current results"""
        return JsonOutput.from_results(self.results, provider=self.provider, errors=self.errors)

    def generate(self, mode: str = "text") -> bytes:
        """
        Render the report

        Args:
            mode: "json" or "text"

        Returns:
            Encoded report

        Raises:
            ValidationError: If mode is not supported
            SerializationError: If the report cannot be rendered
        """
        mode = InputValidator.validate_output_mode(mode)
        if mode == "json":
            return self.generate_json_report()
        return self.generate_text_report()

    def generate_json_report(self) -> bytes:
        try:
            return json.dumps(self.build_output().to_dict(), indent=2).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to serialize JSON report: {e}") from e

    def generate_text_report(self) -> bytes:
        output = self.build_output()
        lines = []

        if output.provider:
            lines.append(f"AI Provider: {output.provider}")
            lines.append("")

        if output.errors:
            lines.append(f"{len(output.errors)} error(s) occurred while running analyzers:")
            for error in output.errors:
                lines.append(f"- {error}")
            lines.append("")

        if not output.results:
            lines.append("No problems detected")
            return ("\n".join(lines) + "\n").encode("utf-8")

        lines.append(f"Status: {output.status.value} ({output.problems} problem(s) found)")
        lines.append("")

        for index, result in enumerate(output.results):
            header = f"{index}: {result.kind} {result.name}"
            if result.parent_object:
                header += f"({result.parent_object})"
            lines.append(header)

            for failure in result.error:
                lines.append(f"- Error: {failure.text}")
                if failure.kubernetes_doc:
                    lines.append(f"  Kubernetes Doc: {failure.kubernetes_doc}")

            if result.details:
                lines.append(result.details)
            lines.append("")

        return "\n".join(lines).encode("utf-8")

    def save_report(self, filepath: str, mode: str = "json", file_permissions: int = 0o600) -> bool:
        """
        Save report to file

        Args:
            filepath: Path to save the report
            mode: Report format
            file_permissions: File permissions (default: owner read/write only)

        Returns:
            True if successful, False otherwise
        """
        data = self.generate(mode)
        try:
            with open(filepath, "wb") as f:
                f.write(data)

            os.chmod(filepath, file_permissions)
            self.logger.info(f"[DOC] Report saved to: {filepath}")
            return True

        except OSError as e:
            self.logger.error(f"Failed to save report: {e}")
            return False
