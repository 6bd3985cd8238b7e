"""Tests for DiffReport rendering."""

import json
from io import StringIO

from rich.console import Console

from scriptmeta.models import DiffReport, RebuildWarning, SectionDiff, WarningKind
from scriptmeta.rebuild import OutputFormat, ReportFormatter


def _report(cancelled=False):
    return DiffReport(
        sections={
            "characters": SectionDiff(
                section="characters", added=["GRETA", "MASON"], changed=["SYLVIA"]
            ),
            "voices": SectionDiff(section="voices", removed=["OLD MAN"]),
        },
        warnings=[
            RebuildWarning(
                kind=WarningKind.FILE,
                message="Chapter chapter-2 could not be read: permission denied",
                chapter="chapter-2",
            )
        ],
        cancelled=cancelled,
    )


class TestReportFormatter:
    """Test report output formats."""

    def test_table(self):
        """Test the rich table lists counts per section and warnings."""
        output = ReportFormatter().format(_report())
        assert "characters" in output
        assert "voices" in output
        assert "[chapter-2]" in output
        assert "permission denied" in output

    def test_cancelled_title(self):
        """Test that a cancelled rebuild is marked."""
        assert "(cancelled)" in ReportFormatter().format(_report(cancelled=True))

    def test_json(self):
        """Test JSON output matches to_dict."""
        output = ReportFormatter().format(_report(), OutputFormat.JSON)
        data = json.loads(output)
        assert data["sections"]["characters"]["added"] == ["GRETA", "MASON"]
        assert data["warnings"][0]["kind"] == "file"
        assert data["cancelled"] is False

    def test_markdown(self):
        """Test the markdown table."""
        output = ReportFormatter().format(_report(), "markdown")
        lines = output.split("\n")
        assert lines[0] == "| Section | Added | Removed | Changed |"
        assert "| characters | GRETA, MASON |  | SYLVIA |" in lines
        assert "- **file** Chapter chapter-2 could not be read: permission denied" in lines

    def test_print(self):
        """Test printing to a console."""
        buffer = StringIO()
        formatter = ReportFormatter(console=Console(file=buffer, width=120))
        formatter.print(_report(), OutputFormat.JSON)
        assert '"characters"' in buffer.getvalue()
