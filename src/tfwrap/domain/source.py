"""Module source references and their fetchable locations.

Resolution is a pure string transform. It never touches the network, so
a wrong guess only shows up later as a fetch failure.

Supported reference shapes:
- Registry-style ``org/name/provider`` mapped to the conventional
  ``https://<host>/<org>/terraform-<provider>-<name>.git`` repository.
- Scheme-qualified URLs and scp-style ``git@host:path`` addresses.
- Host-qualified paths such as ``github.com/org/repo`` (``https://`` added).
- Local paths starting with ``./``, ``../`` or ``/``.
- Any of the above with a ``//sub/path`` suffix selecting a nested module.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from tfwrap.domain.errors import InputError

DEFAULT_HOST = "github.com"
DEFAULT_SCHEME = "https://"

_FORCED_GETTER = "git::"
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")
_SCP_RE = re.compile(r"^[\w.-]+@[\w.-]+:")
_LOCAL_PREFIXES = ("./", "../", "/")


class SourceKind(StrEnum):
    """How a module reference was interpreted."""

    REGISTRY = "registry"
    SHORTHAND = "shorthand"
    HOST = "host"
    URL = "url"
    SCP = "scp"
    LOCAL = "local"


@dataclass(frozen=True)
class ModuleReference:
    """User-supplied module source plus an optional tag or branch."""

    raw_source: str
    version: str | None = None

    def __post_init__(self) -> None:
        if not self.raw_source or not self.raw_source.strip():
            msg = "A module source reference is required"
            raise InputError(msg)
        if self.version is not None and not self.version.strip():
            object.__setattr__(self, "version", None)


@dataclass(frozen=True)
class ResolvedLocation:
    """Where to fetch a module from, and where it lives inside the checkout."""

    fetch_location: str
    sub_path: str | None = None
    kind: SourceKind = SourceKind.URL

    @property
    def is_local(self) -> bool:
        return self.kind is SourceKind.LOCAL


def split_sub_path(raw_source: str) -> tuple[str, str | None]:
    """Split ``source//sub/path`` into its module source and sub-path.

    The ``//`` of a URL scheme is not a separator. An empty sub-path
    (trailing ``//``) is treated as absent.
    """
    source = raw_source.strip()
    if source.startswith(_FORCED_GETTER):
        source = source[len(_FORCED_GETTER) :]

    start = 0
    scheme = _SCHEME_RE.match(source)
    if scheme:
        start = scheme.end()

    idx = source.find("//", start)
    if idx < 0:
        return source, None
    sub_path = source[idx + 2 :].strip("/")
    return source[:idx], sub_path or None


def classify(module_source: str) -> SourceKind:
    """Classify a module source (without sub-path) by its shape."""
    if _SCHEME_RE.match(module_source):
        return SourceKind.URL
    if _SCP_RE.match(module_source):
        return SourceKind.SCP
    if module_source.startswith(_LOCAL_PREFIXES):
        return SourceKind.LOCAL
    first = module_source.split("/", 1)[0]
    if "." in first or ":" in first:
        return SourceKind.HOST
    if len(module_source.strip("/").split("/")) == 3:
        return SourceKind.REGISTRY
    return SourceKind.SHORTHAND


def registry_repository_url(org: str, name: str, provider: str, *, host: str = DEFAULT_HOST) -> str:
    """Map a registry address onto the conventional repository URL.

    This follows the public registry's naming convention
    (``terraform-<provider>-<name>``); it does not query the registry.
    """
    return f"{DEFAULT_SCHEME}{host}/{org}/terraform-{provider}-{name}.git"


def resolve(raw_source: str, *, default_host: str = DEFAULT_HOST) -> ResolvedLocation:
    """Resolve a module reference into a fetchable location."""
    module_source, sub_path = split_sub_path(raw_source)
    kind = classify(module_source)

    if kind in (SourceKind.URL, SourceKind.SCP, SourceKind.LOCAL):
        location = module_source
    elif kind is SourceKind.HOST:
        location = f"{DEFAULT_SCHEME}{module_source}"
    elif kind is SourceKind.REGISTRY:
        org, name, provider = module_source.strip("/").split("/")
        location = registry_repository_url(org, name, provider, host=default_host)
    else:
        location = f"{DEFAULT_SCHEME}{default_host}/{module_source.strip('/')}"

    return ResolvedLocation(fetch_location=location, sub_path=sub_path, kind=kind)


def default_wrapper_name(raw_source: str) -> str:
    """Derive the wrapper directory name from a source reference.

    Registry references use their ``name`` segment
    (``terraform-aws-modules/vpc/aws`` -> ``vpc``); everything else uses
    the last path segment, minus any ``.git`` suffix or query string.
    """
    module_source, sub_path = split_sub_path(raw_source)
    if sub_path:
        return sub_path.rstrip("/").split("/")[-1]

    if classify(module_source) is SourceKind.REGISTRY:
        return module_source.strip("/").split("/")[1]

    path = module_source.split("?", 1)[0].rstrip("/")
    last = re.split(r"[/:]", path)[-1]
    return last.removesuffix(".git")
