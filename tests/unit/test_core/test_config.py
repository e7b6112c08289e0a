"""
Unit tests for settings loading.
"""

import json

import pytest

from achfile.core.config import (
    DEFAULT_SETTINGS,
    ReportConfig,
    Settings,
    WriterConfig,
    load_settings,
)


class TestLoadSettings:
    """Tests for load_settings function."""

    def test_defaults_without_path(self):
        """Test defaults apply when no settings file is given."""
        settings = load_settings()

        assert settings.writer == WriterConfig(crlf=False, renumber=True)
        assert settings.reports.default_format == "xlsx"

    def test_missing_file_falls_back(self, tmp_path):
        """Test a missing settings file yields defaults."""
        settings = load_settings(tmp_path / "missing.json")

        assert settings.writer.crlf is False
        assert settings.writer.renumber is True

    def test_override_writer(self, tmp_path):
        """Test writer switches are read from the file."""
        path = tmp_path / "achfile.json"
        path.write_text(json.dumps({"writer": {"crlf": True, "renumber_batches": False}}))

        settings = load_settings(path)

        assert settings.writer.crlf is True
        assert settings.writer.renumber is False

    def test_partial_override_keeps_defaults(self, tmp_path):
        """Test keys not present in the file keep their default values."""
        path = tmp_path / "achfile.json"
        path.write_text(json.dumps({"reports": {"default_format": "csv"}}))

        settings = load_settings(path)

        assert settings.reports.default_format == "csv"
        assert settings.reports.sheet_title == "Entries"
        assert settings.writer.renumber is True

    def test_unknown_keys_ignored(self, tmp_path):
        """Test unknown top-level keys are dropped."""
        path = tmp_path / "achfile.json"
        path.write_text(json.dumps({"bogus": 1, "writer": {"crlf": True}}))

        settings = load_settings(path)

        assert "bogus" not in settings.raw
        assert settings.writer.crlf is True

    @pytest.mark.parametrize("section", ["writer", "reports"])
    def test_non_object_section_keeps_defaults(self, tmp_path, section):
        """Test a section that is not a JSON object is ignored."""
        path = tmp_path / "achfile.json"
        path.write_text(json.dumps({section: True, "version": "2.0"}))

        settings = load_settings(path)

        assert settings.writer == WriterConfig()
        assert settings.reports == ReportConfig()
        assert settings.raw["version"] == "2.0"

    def test_invalid_json_falls_back(self, tmp_path):
        """Test a corrupt settings file yields defaults."""
        path = tmp_path / "achfile.json"
        path.write_text("{not json")

        settings = load_settings(path)

        assert settings.writer == WriterConfig()

    def test_unsupported_report_format(self):
        """Test an unsupported default format falls back to xlsx."""
        settings = Settings({"reports": {"default_format": "pdf"}})

        assert settings.reports.default_format == "xlsx"

    def test_defaults_not_mutated(self, tmp_path):
        """Test loading an override leaves DEFAULT_SETTINGS untouched."""
        path = tmp_path / "achfile.json"
        path.write_text(json.dumps({"writer": {"crlf": True}}))

        load_settings(path)

        assert DEFAULT_SETTINGS["writer"]["crlf"] is False


class TestReportConfig:
    """Tests for ReportConfig."""

    @pytest.mark.parametrize("name,expected", [
        ("out.csv", "csv"),
        ("out.XLSX", "xlsx"),
        ("out.txt", "xlsx"),
        ("out", "xlsx"),
    ])
    def test_resolve_format(self, tmp_path, name, expected):
        """Test the output format follows the file suffix."""
        assert ReportConfig().resolve_format(tmp_path / name) == expected

    def test_resolve_format_default(self, tmp_path):
        """Test the configured default applies to unknown suffixes."""
        config = ReportConfig(default_format="csv")
        assert config.resolve_format(tmp_path / "report.dat") == "csv"
