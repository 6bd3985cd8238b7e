"""Render a rebuild's DiffReport for presentation layers."""

from __future__ import annotations

import io
import json
from enum import Enum

from rich.console import Console
from rich.table import Table
from rich.text import Text

from scriptmeta.models.report import DiffReport


class OutputFormat(str, Enum):
    """Supported report formats."""

    TABLE = "table"
    JSON = "json"
    MARKDOWN = "markdown"


class ReportFormatter:
    """Formatter for rebuild diff reports."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize formatter.

        Args:
            console: Rich console for output. If None, creates new instance.
        """
        self.console = console or Console()

    def format(
        self, report: DiffReport, format_type: OutputFormat = OutputFormat.TABLE
    ) -> str:
        """Format a report.

        Args:
            report: Report returned by a rebuild
            format_type: Output format type

        Returns:
            Formatted string
        """
        format_type = OutputFormat(format_type)
        if format_type == OutputFormat.JSON:
            return json.dumps(report.to_dict(), indent=2)
        if format_type == OutputFormat.MARKDOWN:
            return self._format_markdown(report)
        return self._format_table(report)

    def print(
        self, report: DiffReport, format_type: OutputFormat = OutputFormat.TABLE
    ) -> None:
        """Format and print a report to the console."""
        output = self.format(report, format_type)
        if format_type == OutputFormat.JSON:
            self.console.print_json(output)
        else:
            self.console.print(output)

    def _format_table(self, report: DiffReport) -> str:
        table = Table(
            title="Rebuild" + (" (cancelled)" if report.cancelled else ""),
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("Section")
        table.add_column("Added", justify="right", style="green")
        table.add_column("Removed", justify="right", style="red")
        table.add_column("Changed", justify="right", style="yellow")
        for name, diff in report.sections.items():
            table.add_row(
                name, str(len(diff.added)), str(len(diff.removed)), str(len(diff.changed))
            )

        string_io = io.StringIO()
        temp_console = Console(file=string_io, force_terminal=False, width=100)
        temp_console.print(table)
        for warning in report.warnings:
            where = f" [{warning.chapter}]" if warning.chapter else ""
            temp_console.print(
                Text.assemble(
                    ("warning", "yellow"),
                    f" {warning.kind.value}{where}: {warning.message}",
                )
            )
        return string_io.getvalue()

    def _format_markdown(self, report: DiffReport) -> str:
        lines = [
            "| Section | Added | Removed | Changed |",
            "| --- | --- | --- | --- |",
        ]
        for name, diff in report.sections.items():
            lines.append(
                f"| {name} | {', '.join(diff.added)} | {', '.join(diff.removed)} "
                f"| {', '.join(diff.changed)} |"
            )
        if report.warnings:
            lines.append("")
            lines.extend(
                f"- **{w.kind.value}** {w.message}" for w in report.warnings
            )
        if report.cancelled:
            lines.append("")
            lines.append("_Rebuild was cancelled before every section ran._")
        return "\n".join(lines)
