"""Tests for module fetchers."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.conftest import needs_git, write_module
from tfwrap.domain.errors import FetchError
from tfwrap.domain.source import ResolvedLocation, SourceKind, resolve
from tfwrap.infrastructure.fetcher import Fetcher, GitFetcher, LocalFetcher, fetcher_for


def _local(path: Path | str, sub_path: str | None = None) -> ResolvedLocation:
    return ResolvedLocation(fetch_location=str(path), sub_path=sub_path, kind=SourceKind.LOCAL)


class TestFetcherBase:
    def test_download_is_abstract(self, tmp_path: Path) -> None:
        with pytest.raises(NotImplementedError):
            Fetcher().fetch(_local(tmp_path), None, tmp_path)


class TestLocalFetcher:
    def test_copies_module(self, module_dir: Path, tmp_path: Path) -> None:
        workspace = tmp_path / "ws"
        path = LocalFetcher().fetch(_local(module_dir), None, workspace)
        assert path == workspace
        assert (workspace / "variables.tf").read_text() == (module_dir / "variables.tf").read_text()
        assert (workspace / "main.tf").is_file()

    def test_relative_location_uses_base_dir(self, module_dir: Path, tmp_path: Path) -> None:
        workspace = tmp_path / "ws"
        LocalFetcher(base_dir=tmp_path).fetch(_local("./modules/network"), None, workspace)
        assert (workspace / "variables.tf").is_file()

    def test_relative_location_defaults_to_cwd(
        self, module_dir: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        workspace = tmp_path / "ws"
        LocalFetcher().fetch(_local("./modules/network"), None, workspace)
        assert (workspace / "variables.tf").is_file()

    def test_skips_vcs_and_state_dirs(self, module_dir: Path, tmp_path: Path) -> None:
        (module_dir / ".git").mkdir()
        (module_dir / ".git" / "HEAD").write_text("ref")
        (module_dir / ".terraform").mkdir()
        workspace = tmp_path / "ws"
        LocalFetcher().fetch(_local(module_dir), None, workspace)
        assert not (workspace / ".git").exists()
        assert not (workspace / ".terraform").exists()

    def test_version_ignored(self, module_dir: Path, tmp_path: Path) -> None:
        path = LocalFetcher().fetch(_local(module_dir), "v9.9.9", tmp_path / "ws")
        assert (path / "variables.tf").is_file()

    def test_sub_path(self, tmp_path: Path) -> None:
        root = write_module(tmp_path / "repo")
        write_module(root / "modules" / "child", 'variable "c" {}\n')
        workspace = tmp_path / "ws"
        path = LocalFetcher().fetch(_local(root, "modules/child"), None, workspace)
        assert path == workspace / "modules" / "child"

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(FetchError, match="not found"):
            LocalFetcher().fetch(_local(tmp_path / "nope"), None, tmp_path / "ws")

    def test_missing_variables_file(self, tmp_path: Path) -> None:
        src = tmp_path / "empty-module"
        src.mkdir()
        (src / "main.tf").write_text("")
        with pytest.raises(FetchError, match=r"No variables\.tf found at module root"):
            LocalFetcher().fetch(_local(src), None, tmp_path / "ws")

    def test_missing_sub_path(self, module_dir: Path, tmp_path: Path) -> None:
        with pytest.raises(FetchError, match="sub-path 'modules/absent'") as info:
            LocalFetcher().fetch(_local(module_dir, "modules/absent"), None, tmp_path / "ws")
        assert info.value.detail["sub_path"] == "modules/absent"

    def test_sub_path_cannot_escape(self, module_dir: Path, tmp_path: Path) -> None:
        with pytest.raises(FetchError, match="escapes"):
            LocalFetcher().fetch(_local(module_dir, "../.."), None, tmp_path / "ws")

    def test_custom_variables_file(self, tmp_path: Path) -> None:
        src = tmp_path / "mod"
        src.mkdir()
        (src / "inputs.tf").write_text('variable "a" {}\n')
        fetcher = LocalFetcher(variables_file="inputs.tf")
        assert fetcher.fetch(_local(src), None, tmp_path / "ws") == tmp_path / "ws"


class TestGitFetcherArgs:
    def test_clone_args_without_version(self, tmp_path: Path) -> None:
        args = GitFetcher().clone_args("https://x/repo.git", None, tmp_path)
        assert args == [
            "git",
            "clone",
            "--depth",
            "1",
            "--single-branch",
            "--quiet",
            "https://x/repo.git",
            str(tmp_path),
        ]

    def test_clone_args_with_version(self, tmp_path: Path) -> None:
        args = GitFetcher(git_binary="/usr/bin/git").clone_args("u", "v1.2.0", tmp_path)
        assert args[0] == "/usr/bin/git"
        assert args[args.index("--branch") + 1] == "v1.2.0"

    def test_missing_binary(self, tmp_path: Path) -> None:
        fetcher = GitFetcher(git_binary="definitely-not-a-git-binary")
        loc = resolve("https://example.invalid/repo.git")
        with pytest.raises(FetchError, match="git executable not found"):
            fetcher.fetch(loc, None, tmp_path / "ws")


@pytest.mark.git
@needs_git
class TestGitFetcherClone:
    def test_clone_default_branch(self, git_module: Path, tmp_path: Path) -> None:
        workspace = tmp_path / "ws"
        path = GitFetcher().fetch(resolve(git_module.as_uri()), None, workspace)
        assert path == workspace
        assert "size" in (path / "variables.tf").read_text()

    def test_clone_tag(self, git_module: Path, tmp_path: Path) -> None:
        path = GitFetcher().fetch(resolve(git_module.as_uri()), "v1.0.0", tmp_path / "ws")
        assert "size" not in (path / "variables.tf").read_text()

    def test_clone_sub_path(self, git_module: Path, tmp_path: Path) -> None:
        loc = resolve(f"{git_module.as_uri()}//modules/child")
        path = GitFetcher().fetch(loc, None, tmp_path / "ws")
        assert path == tmp_path / "ws" / "modules" / "child"

    def test_unknown_ref(self, git_module: Path, tmp_path: Path) -> None:
        with pytest.raises(FetchError, match="at ref 'v9.9.9'") as info:
            GitFetcher().fetch(resolve(git_module.as_uri()), "v9.9.9", tmp_path / "ws")
        assert info.value.detail["version"] == "v9.9.9"
        assert info.value.detail["returncode"] != 0

    def test_unreachable_repository(self, tmp_path: Path) -> None:
        loc = resolve((tmp_path / "no-such-repo").as_uri())
        with pytest.raises(FetchError, match="Failed to clone"):
            GitFetcher().fetch(loc, None, tmp_path / "ws")


class TestFetcherFor:
    def test_local(self) -> None:
        fetcher = fetcher_for(resolve("./modules/x"), variables_file="in.tf")
        assert isinstance(fetcher, LocalFetcher)
        assert fetcher.variables_file == "in.tf"

    def test_remote(self) -> None:
        fetcher = fetcher_for(resolve("org/repo"), git_binary="g", timeout=5)
        assert isinstance(fetcher, GitFetcher)
        assert fetcher.git_binary == "g"
        assert fetcher.timeout == 5
