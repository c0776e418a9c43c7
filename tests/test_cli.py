"""Tests for the root tfwrap CLI."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from tfwrap import __version__
from tfwrap.cli import cli


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "tfwrap" in result.output
    for command in ("generate", "variables", "resolve"):
        assert command in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_no_args(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


def test_unknown_command(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["wrap"])
    assert result.exit_code == 2


# --- Global flags ---


@pytest.mark.parametrize("flag", ["--json", "-q", "-v", "--log-json"])
def test_global_flag_accepted(cli_runner: CliRunner, flag: str) -> None:
    result = cli_runner.invoke(cli, [flag, "--version"])
    assert result.exit_code == 0


def test_config_flag(
    cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    cfg = tmp_path / "custom.toml"
    cfg.write_text('[source]\ndefault_host = "gitlab.com"\n')
    result = cli_runner.invoke(cli, ["-c", str(cfg), "-q", "resolve", "org/repo"])
    assert result.exit_code == 0
    assert result.output.strip() == "https://gitlab.com/org/repo"


def test_invalid_config_file(
    cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "tfwrap.toml").write_text("[source\n")
    result = cli_runner.invoke(cli, ["resolve", "org/repo"])
    assert result.exit_code == 1
    assert "Invalid TOML" in result.output
