"""CLI output formatting for terminal display.

Provides plain text and JSON renderers for user reports. Text output is
the Telegram card with the MarkdownV2 escapes removed.
"""

from __future__ import annotations

import json
import sys
from enum import Enum
from typing import Any

from app.report import UserReport
from app.utils.formatting import format_not_found, format_user_report, unescape_markdown


class OutputFormat(Enum):
    """Supported output formats."""

    TEXT = "text"
    JSON = "json"


class CLIOutput:
    """Unified output handler for CLI."""

    def __init__(
        self,
        format: OutputFormat = OutputFormat.TEXT,
        verbose: bool = False,
        stream: Any = None,
        err_stream: Any = None,
    ) -> None:
        self.format = format
        self.verbose = verbose
        self.stream = stream or sys.stdout
        self.err_stream = err_stream or sys.stderr

    def report(self, report: UserReport) -> None:
        """Output a user report."""
        if self.format == OutputFormat.JSON:
            print(json.dumps(report.to_dict(), indent=2), file=self.stream)
            return

        if not report.found:
            print(format_not_found(report.account), file=self.stream)
            return
        print(unescape_markdown(format_user_report(report)), file=self.stream)

    def text(self, message: str) -> None:
        """Output a result line that is not a report."""
        if self.format == OutputFormat.JSON:
            print(json.dumps({"message": message}), file=self.stream)
        else:
            print(message, file=self.stream)

    def status(self, message: str) -> None:
        """Output a status message (verbose text mode only)."""
        if self.format == OutputFormat.JSON or not self.verbose:
            return
        print(f"... {message}", file=self.err_stream)

    def error(self, message: str) -> None:
        """Output an error message."""
        if self.format == OutputFormat.JSON:
            print(json.dumps({"error": message}), file=self.err_stream)
            return
        print(f"error: {message}", file=self.err_stream)
