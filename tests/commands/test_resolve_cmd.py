"""Tests for the resolve command."""

from __future__ import annotations

import json

from click.testing import CliRunner

from tfwrap.cli import cli


class TestResolve:
    def test_registry(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["resolve", "terraform-aws-modules/vpc/aws"])
        assert result.exit_code == 0, result.output
        assert "kind: registry" in result.output
        assert "terraform-aws-vpc.git" in result.output
        assert "wrapper_name: vpc" in result.output

    def test_quiet(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "resolve", "github.com/org/repo//modules/db"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "https://github.com/org/repo"

    def test_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["--json", "resolve", "git::https://example.com/infra.git//modules/db"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)["data"]
        assert data == {
            "source": "git::https://example.com/infra.git//modules/db",
            "fetch_location": "https://example.com/infra.git",
            "sub_path": "modules/db",
            "kind": "url",
            "wrapper_name": "db",
        }

    def test_blank_source(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "resolve", " "])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "INPUT_ERROR"
