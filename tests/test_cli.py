from __future__ import annotations

import json

from click.testing import CliRunner

from pdfinspectx import __version__
from pdfinspectx.cli import cli


def test_version_option():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_inspect_prints_summary(minimal_pdf):
    result = CliRunner().invoke(cli, ["inspect", str(minimal_pdf)])
    assert result.exit_code == 0, result.output
    assert "PDF Structure" in result.output
    assert "Valid" in result.output


def test_inspect_text_report(minimal_pdf):
    result = CliRunner().invoke(cli, ["inspect", str(minimal_pdf), "--text"])
    assert result.exit_code == 0
    assert result.output.startswith("=== PDF Analysis Report ===")
    assert "  Valid: yes" in result.output


def test_validate_exit_status(minimal_pdf, broken_pdf):
    runner = CliRunner()
    assert runner.invoke(cli, ["validate", str(minimal_pdf)]).exit_code == 0

    result = runner.invoke(cli, ["validate", str(broken_pdf)])
    assert result.exit_code == 1
    assert "PDF structure is invalid" in result.output

    quiet = runner.invoke(cli, ["validate", "-q", str(broken_pdf)])
    assert quiet.exit_code == 1
    assert quiet.output == ""


def test_budget_errors_are_reported(minimal_pdf):
    result = CliRunner().invoke(cli, ["validate", str(minimal_pdf), "--max-bytes", "10"])
    assert result.exit_code == 1
    assert "Error" in result.output


def test_export_writes_file(minimal_pdf, tmp_path):
    output = tmp_path / "structure.json"
    result = CliRunner().invoke(cli, ["export", str(minimal_pdf), "-o", str(output), "--indent", "0"])
    assert result.exit_code == 0, result.output
    assert json.loads(output.read_text(encoding="utf-8"))["summary"]["pages"] == 1


def test_crosscheck_command(sample_pdf):
    result = CliRunner().invoke(cli, ["crosscheck", str(sample_pdf)])
    assert result.exit_code == 0, result.output
    assert "agrees" in result.output


def test_tools_command_lists_registry():
    result = CliRunner().invoke(cli, ["tools"])
    assert result.exit_code == 0
    for name in ("inspect", "validate", "export", "crosscheck"):
        assert name in result.output
