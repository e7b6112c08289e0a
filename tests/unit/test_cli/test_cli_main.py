"""
Tests for the achfile command line.
"""

import json

import pytest

from achfile.cli.main import main
from achfile.core.config import CONFIG_ENV_VAR
from achfile.parsers.nacha.file import ACHFile


@pytest.fixture(autouse=True)
def no_env_config(monkeypatch):
    """Keep a developer's settings file out of the tests."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestInfoCommand:
    """Tests for the info command."""

    def test_info(self, sample_path, capsys):
        """Test header fields and totals are printed."""
        assert main(["info", str(sample_path)]) == 0

        out = capsys.readouterr().out
        assert "Created:          2024-01-15 12:30" in out
        assert "Batches:          2" in out
        assert "Total credits:    173.45" in out
        assert "Entry hash:       0018840128" in out
        assert "[2] CCD #0000002 - 1 entries" in out

    def test_missing_file(self, tmp_path, capsys):
        """Test a missing file is an I/O error."""
        assert main(["info", str(tmp_path / "missing.ach")]) == 1
        assert "I/O error" in capsys.readouterr().out

    def test_structural_error(self, tmp_path, records, capsys):
        """Test a malformed file is reported."""
        path = tmp_path / "broken.ach"
        path.write_bytes(records.join([records.file_header(), records.addenda()]))

        assert main(["info", str(path)]) == 1
        assert "Error: Found Entry Detail Addenda Record" in capsys.readouterr().out


class TestValidateCommand:
    """Tests for the validate command."""

    def test_ok(self, sample_path, capsys):
        """Test a consistent file validates."""
        assert main(["validate", str(sample_path)]) == 0
        assert f"{sample_path}: OK" in capsys.readouterr().out

    def test_problems(self, tmp_path, records, sample_records, capsys):
        """Test problems are listed and the exit code is 1."""
        items = list(sample_records)
        items[9] = records.file_control()
        path = tmp_path / "stale.ach"
        path.write_bytes(records.join(items))

        assert main(["validate", str(path)]) == 1

        out = capsys.readouterr().out
        assert f"{path}: 6 problem(s)" in out
        assert "  - File batch count mismatch: stored 0, computed 2" in out


class TestRewriteCommand:
    """Tests for the rewrite command."""

    def test_remove(self, sample_path, tmp_path, capsys):
        """Test entries are removed by identification number."""
        output = tmp_path / "out.ach"

        assert main(["rewrite", str(sample_path), str(output), "--remove", "VENDOR01"]) == 0

        out = capsys.readouterr().out
        assert "Removed 1 entries" in out
        assert f"Wrote 10 records to {output}" in out
        rewritten = ACHFile.load_file(output)
        assert len(rewritten.batches) == 1
        assert rewritten.credit_total() == 50

    def test_remove_repeated(self, sample_path, tmp_path, capsys):
        """Test --remove may be given more than once."""
        output = tmp_path / "out.ach"

        main(["rewrite", str(sample_path), str(output), "-r", "EMP0001", "-r", "EMP0002"])

        assert "Removed 2 entries" in capsys.readouterr().out
        batch = ACHFile.load_file(output).batches[0]
        assert batch.sec_code() == "CCD"
        assert batch.number() == "0000001"

    def test_no_renumber(self, sample_path, tmp_path):
        """Test batch numbers are kept with --no-renumber."""
        output = tmp_path / "out.ach"

        main(["rewrite", str(sample_path), str(output), "-r", "EMP0001", "-r", "EMP0002",
              "--no-renumber"])

        assert ACHFile.load_file(output).batches[0].number() == "0000002"

    def test_crlf_flag(self, sample_path, tmp_path):
        """Test --crlf terminates records with CRLF."""
        output = tmp_path / "out.ach"

        main(["rewrite", str(sample_path), str(output), "--crlf"])

        assert output.read_bytes().count(b"\r\n") == 20

    def test_crlf_from_config(self, sample_path, tmp_path):
        """Test writer settings come from the settings file."""
        config = tmp_path / "achfile.json"
        config.write_text(json.dumps({"writer": {"crlf": True}}))
        output = tmp_path / "out.ach"

        main(["--config", str(config), "rewrite", str(sample_path), str(output)])

        assert output.read_bytes().count(b"\r\n") == 20

    def test_config_from_environment(self, sample_path, tmp_path, monkeypatch):
        """Test the settings file can be named in the environment."""
        config = tmp_path / "achfile.json"
        config.write_text(json.dumps({"writer": {"crlf": True}}))
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config))
        output = tmp_path / "out.ach"

        main(["rewrite", str(sample_path), str(output)])

        assert output.read_bytes().count(b"\r\n") == 20


class TestReportCommand:
    """Tests for the report command."""

    def test_csv_report(self, sample_path, tmp_path, capsys):
        """Test the report is written in the format of its suffix."""
        output = tmp_path / "entries.csv"

        assert main(["report", str(sample_path), str(output)]) == 0

        assert f"Report written to {output}" in capsys.readouterr().out
        assert output.read_text().splitlines()[0].startswith("batch,batch_number")

    def test_report_with_malformed_amount(self, tmp_path, records, sample_records):
        """Test a file with a malformed amount is still reported."""
        items = list(sample_records)
        items[7] = records.entry_detail("22", "02100002", "00000ABCDE", "VENDOR01")
        path = tmp_path / "broken.ach"
        path.write_bytes(records.join(items))
        output = tmp_path / "entries.csv"

        assert main(["report", str(path), str(output)]) == 0
        assert len(output.read_text().splitlines()) == 4


class TestMain:
    """Tests for argument handling."""

    def test_no_command(self, capsys):
        """Test help is printed without a command."""
        assert main([]) == 1
        assert "achfile" in capsys.readouterr().out
