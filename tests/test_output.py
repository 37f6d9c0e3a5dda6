"""Tests for output formatting utilities."""

import json

import yaml

from aeonian.core.output import (
    OutputFormat,
    OutputFormatter,
    format_bytes,
    format_duration,
)


class TestFormatBytes:
    """Tests for format_bytes utility."""

    def test_bytes(self):
        assert format_bytes(500) == "500.0 B"

    def test_kilobytes(self):
        assert format_bytes(1536) == "1.5 KB"

    def test_megabytes(self):
        assert format_bytes(1024 * 1024 * 2.5) == "2.5 MB"

    def test_zero(self):
        assert format_bytes(0) == "0.0 B"


class TestFormatDuration:
    """Tests for format_duration utility."""

    def test_seconds(self):
        assert format_duration(0.5) == "0.5s"
        assert format_duration(59.9) == "59.9s"

    def test_minutes(self):
        assert format_duration(90) == "1.5m"

    def test_hours(self):
        assert format_duration(7200) == "2.0h"


class TestOutputFormatter:
    """Tests for OutputFormatter."""

    def test_json(self, capsys):
        formatter = OutputFormatter(format=OutputFormat.JSON, color=False)
        formatter.print_data({"bucket": "proj-staging", "reused": True})
        assert json.loads(capsys.readouterr().out) == {"bucket": "proj-staging", "reused": True}

    def test_yaml(self, capsys):
        formatter = OutputFormatter(format=OutputFormat.YAML, color=False)
        formatter.print_data([{"environment": "staging"}])
        assert yaml.safe_load(capsys.readouterr().out) == [{"environment": "staging"}]

    def test_raw_dict(self, capsys):
        formatter = OutputFormatter(format=OutputFormat.RAW, color=False)
        formatter.print_data({"bucket": "b", "deleted": 0})
        assert capsys.readouterr().out == "bucket: b\ndeleted: 0\n"

    def test_table_empty(self, capsys):
        formatter = OutputFormatter(color=False)
        formatter.print_data([])
        assert "No data to display" in capsys.readouterr().out

    def test_quiet_suppresses_messages(self, capsys):
        formatter = OutputFormatter(color=False, quiet=True)
        formatter.print_info("hello")
        formatter.print_warning("careful")
        assert capsys.readouterr().out == ""

    def test_quiet_confirm_uses_default(self):
        formatter = OutputFormatter(color=False, quiet=True)
        assert formatter.confirm("Proceed?") is False
        assert formatter.confirm("Proceed?", default=True) is True
