"""Module fetchers — materialize a module's source in a local workspace.

Two adapters share one contract:

- :class:`GitFetcher` shallow-clones a single revision with the ``git``
  binary (the production path).
- :class:`LocalFetcher` copies a directory from disk. It serves ``./`` and
  ``../`` sources and doubles as the network-free adapter in tests.

The workspace is owned by the caller, who must remove it on every exit
path. Fetchers only write into it.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

from tfwrap.domain.errors import FetchError
from tfwrap.domain.source import ResolvedLocation

logger = logging.getLogger(__name__)

DEFAULT_VARIABLES_FILE = "variables.tf"

# Directories never copied out of a local module.
_SKIP_DIRS = frozenset({".git", ".terraform", ".tofu"})


class Fetcher:
    """Base class for module fetchers.

    Subclasses implement :meth:`_download`; :meth:`fetch` then checks that
    the variable declaration file exists at the (sub-)module path.
    """

    def __init__(self, *, variables_file: str = DEFAULT_VARIABLES_FILE) -> None:
        self.variables_file = variables_file

    def fetch(self, location: ResolvedLocation, version: str | None, workspace: Path) -> Path:
        """Fetch *location* into *workspace* and return the module directory."""
        self._download(location, version, workspace)
        return self._locate(location, workspace)

    def _download(self, location: ResolvedLocation, version: str | None, workspace: Path) -> None:
        raise NotImplementedError

    def _locate(self, location: ResolvedLocation, workspace: Path) -> Path:
        module_path = workspace
        if location.sub_path:
            module_path = workspace / location.sub_path
            # Guard against ``..`` in a crafted sub-path
            if not module_path.resolve().is_relative_to(workspace.resolve()):
                msg = f"Sub-path escapes the fetched module: {location.sub_path}"
                raise FetchError(msg, sub_path=location.sub_path)

        if not (module_path / self.variables_file).is_file():
            where = f"sub-path {location.sub_path!r}" if location.sub_path else "module root"
            msg = f"No {self.variables_file} found at {where} of {location.fetch_location}"
            raise FetchError(
                msg,
                location=location.fetch_location,
                sub_path=location.sub_path,
            )
        logger.debug("Module located at %s", module_path)
        return module_path


class GitFetcher(Fetcher):
    """Shallow, single-revision ``git clone``.

    *version* is passed to ``--branch`` and may name a tag or a branch;
    without it the remote's default branch is cloned.
    """

    def __init__(
        self,
        *,
        git_binary: str = "git",
        timeout: float | None = 300.0,
        variables_file: str = DEFAULT_VARIABLES_FILE,
    ) -> None:
        super().__init__(variables_file=variables_file)
        self.git_binary = git_binary
        self.timeout = timeout

    def clone_args(self, url: str, version: str | None, workspace: Path) -> list[str]:
        """Build the ``git clone`` argument vector."""
        args = [self.git_binary, "clone", "--depth", "1", "--single-branch", "--quiet"]
        if version:
            args.extend(["--branch", version])
        args.extend([url, str(workspace)])
        return args

    def _download(self, location: ResolvedLocation, version: str | None, workspace: Path) -> None:
        args = self.clone_args(location.fetch_location, version, workspace)
        logger.debug("Cloning %s (ref=%s)", location.fetch_location, version or "default")
        env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}
        try:
            subprocess.run(
                args,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
                env=env,
            )
        except FileNotFoundError as exc:
            msg = f"git executable not found: {self.git_binary}"
            raise FetchError(msg, git_binary=self.git_binary) from exc
        except subprocess.TimeoutExpired as exc:
            msg = f"Timed out after {self.timeout}s cloning {location.fetch_location}"
            raise FetchError(msg, location=location.fetch_location, timeout=self.timeout) from exc
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip()
            ref = f" at ref {version!r}" if version else ""
            msg = f"Failed to clone {location.fetch_location}{ref}"
            if stderr:
                msg = f"{msg}: {stderr}"
            raise FetchError(
                msg,
                location=location.fetch_location,
                version=version,
                returncode=exc.returncode,
            ) from exc
        except OSError as exc:
            msg = f"Failed to run git: {exc}"
            raise FetchError(msg, location=location.fetch_location) from exc


class LocalFetcher(Fetcher):
    """Copy a module directory from the local filesystem.

    Relative locations resolve against *base_dir* (default: CWD). The
    version is ignored: a directory has exactly one revision.
    """

    def __init__(
        self,
        *,
        base_dir: Path | None = None,
        variables_file: str = DEFAULT_VARIABLES_FILE,
    ) -> None:
        super().__init__(variables_file=variables_file)
        self.base_dir = base_dir

    def _download(self, location: ResolvedLocation, version: str | None, workspace: Path) -> None:
        source = Path(location.fetch_location)
        if not source.is_absolute():
            source = (self.base_dir or Path.cwd()) / source
        if not source.is_dir():
            msg = f"Module directory not found: {source}"
            raise FetchError(msg, location=location.fetch_location)
        if version:
            logger.debug("Ignoring version %s for local module %s", version, source)

        try:
            shutil.copytree(
                source,
                workspace,
                dirs_exist_ok=True,
                ignore=shutil.ignore_patterns(*_SKIP_DIRS),
            )
        except (OSError, shutil.Error) as exc:
            msg = f"Failed to copy module from {source}: {exc}"
            raise FetchError(msg, location=location.fetch_location) from exc


def fetcher_for(
    location: ResolvedLocation,
    *,
    git_binary: str = "git",
    timeout: float | None = 300.0,
    variables_file: str = DEFAULT_VARIABLES_FILE,
    base_dir: Path | None = None,
) -> Fetcher:
    """Pick the fetcher that can handle *location*."""
    if location.is_local:
        return LocalFetcher(base_dir=base_dir, variables_file=variables_file)
    return GitFetcher(git_binary=git_binary, timeout=timeout, variables_file=variables_file)
