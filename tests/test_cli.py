"""Tests for the command-line interface."""

from typer.testing import CliRunner

from sathi_seva import __version__
from sathi_seva.cli import app

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_duration_table():
    result = runner.invoke(app, ["duration", "3 hours", "Full day", "whenever"])

    assert result.exit_code == 0
    assert "180" in result.stdout
    assert "480" in result.stdout
    assert "60" in result.stdout


def test_offline_tag_suggestion():
    result = runner.invoke(app, ["suggest-tags", "Need a tutor for maths", "--offline"])

    assert result.exit_code == 0
    assert "fallback" in result.stdout
    assert "Tutoring" in result.stdout


def test_config_hides_api_key():
    result = runner.invoke(app, ["config"])

    assert result.exit_code == 0
    assert "Gemini Model" in result.stdout
