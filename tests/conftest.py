"""Shared pytest fixtures and test helpers for tfwrap tests."""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from tfwrap.config.settings import TfwrapSettings
from tfwrap.infrastructure.fetcher import LocalFetcher
from tfwrap.infrastructure.formatter import NullFormatter
from tfwrap.services.telemetry import _current_span, disable_telemetry
from tfwrap.services.wrapper import WrapperService

# A small module exercising every kind of default the extractor handles.
SAMPLE_VARIABLES_TF = """\
# Name prefix applied to every resource.
# Must be lowercase.
variable "name" {
  type    = string
  default = "main"
}

variable "cidr" {
  description = "The IPv4 CIDR block for the VPC"
  type        = string
  default     = "10.0.0.0/16"
}

variable "azs" {
  type    = list(string)
  default = ["eu-west-1a", "eu-west-1b"]
}

variable "tags" {
  type = map(string)
  default = {
    Owner = "platform"
  }
}

variable "enable_nat_gateway" {
  type    = bool
  default = false
}

variable "instance_count" {
  default = 5
}

variable "region" {
  default = var.fallback_region
}

variable "vpc_id" {
  description = "Existing VPC to attach to"
  type        = string
}
"""

SAMPLE_VARIABLE_NAMES = [
    "name",
    "cidr",
    "azs",
    "tags",
    "enable_nat_gateway",
    "instance_count",
    "region",
    "vpc_id",
]

needs_git = pytest.mark.skipif(shutil.which("git") is None, reason="git binary not available")


def write_module(root: Path, variables_tf: str = SAMPLE_VARIABLES_TF) -> Path:
    """Write a minimal module (variables.tf + main.tf) under *root*."""
    root.mkdir(parents=True, exist_ok=True)
    (root / "variables.tf").write_text(variables_tf, encoding="utf-8")
    (root / "main.tf").write_text('resource "null_resource" "this" {}\n', encoding="utf-8")
    return root


def run_git(cwd: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=cwd, capture_output=True, check=True)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's TFWRAP_* environment out of the tests."""
    monkeypatch.delenv("TFWRAP_CONFIG", raising=False)
    for var in ("TFWRAP_JSON_OUTPUT", "TFWRAP_QUIET", "TFWRAP_VERBOSE"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    """The -v flag enables telemetry via a ContextVar; reset it per test."""
    yield
    disable_telemetry()
    _current_span.set(None)


@pytest.fixture
def settings(tmp_path: Path) -> TfwrapSettings:
    """Default settings with no config file in scope."""
    return TfwrapSettings.from_cli(search_from=tmp_path)


@pytest.fixture
def module_dir(tmp_path: Path) -> Path:
    """A local module containing the sample variables.tf."""
    return write_module(tmp_path / "modules" / "network")


@pytest.fixture
def service(settings: TfwrapSettings, tmp_path: Path) -> WrapperService:
    """Offline WrapperService: local fetcher, no external formatter."""
    return WrapperService(
        settings,
        fetcher=LocalFetcher(base_dir=tmp_path),
        formatter=NullFormatter(),
    )


@pytest.fixture
def git_module(tmp_path: Path) -> Path:
    """Local git repository with a tagged module and a nested sub-module.

    ``v1.0.0`` declares ``name`` only; the default branch adds ``size``.
    """
    repo = tmp_path / "remote"
    write_module(repo, 'variable "name" {\n  default = "one"\n}\n')
    write_module(repo / "modules" / "child", 'variable "child_only" {}\n')
    run_git(repo, "init", "--quiet")
    run_git(repo, "config", "user.email", "test@test.com")
    run_git(repo, "config", "user.name", "Test")
    run_git(repo, "add", ".")
    run_git(repo, "commit", "--quiet", "-m", "init")
    run_git(repo, "tag", "v1.0.0")

    (repo / "variables.tf").write_text(
        'variable "name" {\n  default = "one"\n}\n\nvariable "size" {\n  default = 3\n}\n',
        encoding="utf-8",
    )
    run_git(repo, "commit", "--quiet", "-am", "add size")
    return repo
