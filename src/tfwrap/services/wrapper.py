"""WrapperService — resolve, fetch, extract, generate, emit.

Stages run strictly in that order. Nothing is written until every earlier
stage has succeeded, so a fetch or parse failure never leaves partial
artifacts behind. The fetch workspace is a temporary directory removed on
every exit path.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

from tfwrap.domain.errors import InputError, WrapperError
from tfwrap.domain.source import ModuleReference, ResolvedLocation, default_wrapper_name, resolve
from tfwrap.domain.variables import VariableSet, extract
from tfwrap.domain.wrapper import WrapperSpec, render_artifacts
from tfwrap.infrastructure.emitter import Emitter
from tfwrap.infrastructure.fetcher import Fetcher, fetcher_for
from tfwrap.infrastructure.formatter import CommandFormatter, Formatter, NullFormatter
from tfwrap.services.base import BaseService
from tfwrap.services.result import ServiceResult
from tfwrap.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from tfwrap.config.settings import TfwrapSettings

logger = logging.getLogger(__name__)


def _location_payload(location: ResolvedLocation) -> dict[str, Any]:
    return {
        "fetch_location": location.fetch_location,
        "sub_path": location.sub_path,
        "kind": str(location.kind),
    }


class WrapperService(BaseService):
    """Generate wrapper modules from remote Terraform modules.

    *fetcher* and *formatter* override the adapters chosen from settings;
    tests pass a :class:`~tfwrap.infrastructure.fetcher.LocalFetcher` and a
    :class:`~tfwrap.infrastructure.formatter.NullFormatter` to stay offline.
    """

    def __init__(
        self,
        settings: TfwrapSettings,
        *,
        fetcher: Fetcher | None = None,
        formatter: Formatter | None = None,
    ) -> None:
        super().__init__(settings)
        self._fetcher = fetcher
        self._formatter = formatter

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @traced
    def resolve_source(self, source: str) -> ServiceResult:
        """Resolve *source* without fetching anything."""
        op = "resolve_source"
        try:
            reference = ModuleReference(source)
        except InputError as exc:
            return self._failure(op, exc)
        location = self._resolve(reference)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "source": reference.raw_source,
                **_location_payload(location),
                "wrapper_name": default_wrapper_name(reference.raw_source),
            },
        )

    @traced
    def list_variables(self, source: str, *, version: str | None = None) -> ServiceResult:
        """Fetch *source* and report its variables in declaration order."""
        op = "list_variables"
        try:
            reference = ModuleReference(source, version)
            location, variables = self._discover(reference)
        except WrapperError as exc:
            return self._failure(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "source": reference.raw_source,
                "version": reference.version,
                **_location_payload(location),
                "count": len(variables),
                "items": [v.to_dict() for v in variables],
            },
        )

    @traced
    def generate(
        self,
        source: str,
        *,
        version: str | None = None,
        name: str | None = None,
        iterable: bool = False,
        collection_key: str | None = None,
        output_dir: Path | None = None,
        format_output: bool = True,
    ) -> ServiceResult:
        """Generate a wrapper module for *source*.

        The wrapper is written to ``<output_dir>/<name>`` where *output_dir*
        defaults to the CWD and *name* to the source's last path segment.
        """
        op = "generate_wrapper"
        try:
            reference = ModuleReference(source, version)
            wrapper_name = self._wrapper_name(reference, name)
            location, variables = self._discover(reference)

            with trace_span("generate") as span:
                spec = WrapperSpec(
                    module_reference=reference,
                    variables=variables,
                    wrapper_name=wrapper_name,
                    iterable=iterable,
                    collection_key=collection_key or self._settings.generate.collection_key,
                    module_label=self._settings.generate.module_label,
                )
                artifacts = render_artifacts(spec)
                if span:
                    span.annotate("variables", len(variables))

            target_dir = (output_dir or Path.cwd()) / wrapper_name
            with trace_span("emit") as span:
                emitter = Emitter(self._select_formatter(format_output))
                emitted = emitter.emit(target_dir, artifacts)
                if span:
                    span.annotate("files", len(emitted))
        except WrapperError as exc:
            return self._failure(op, exc)

        warnings: list[str] = []
        unformatted = [f.path.name for f in emitted if not f.formatted]
        if unformatted and emitter.formatter.enabled:
            warnings.append(
                f"Formatter unavailable or failed; left unformatted: {', '.join(unformatted)}"
            )

        logger.debug("Wrapper %s written to %s", wrapper_name, target_dir)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "wrapper_name": wrapper_name,
                "output_dir": str(target_dir),
                "source": reference.raw_source,
                "version": reference.version,
                **_location_payload(location),
                "iterable": iterable,
                "variable_count": len(variables),
                "variables": variables.names(),
                "files": [str(f.path) for f in emitted],
            },
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------

    def _resolve(self, reference: ModuleReference) -> ResolvedLocation:
        with trace_span("resolve"):
            return resolve(reference.raw_source, default_host=self._settings.source.default_host)

    def _discover(self, reference: ModuleReference) -> tuple[ResolvedLocation, VariableSet]:
        """Resolve and fetch *reference*, then extract its variables."""
        location = self._resolve(reference)
        fetcher = self._fetcher or fetcher_for(
            location,
            git_binary=self._settings.fetch.git_binary,
            timeout=self._settings.fetch.timeout_seconds,
            variables_file=self._settings.fetch.variables_file,
        )

        with tempfile.TemporaryDirectory(prefix="tfwrap-") as tmp:
            with trace_span("fetch") as span:
                module_path = fetcher.fetch(location, reference.version, Path(tmp))
                if span:
                    span.annotate("location", location.fetch_location)
            with trace_span("extract") as span:
                variables = extract(module_path / fetcher.variables_file)
                if span:
                    span.annotate("variables", len(variables))

        logger.debug("Discovered %d variables in %s", len(variables), location.fetch_location)
        return location, variables

    def _wrapper_name(self, reference: ModuleReference, name: str | None) -> str:
        wrapper_name = name or default_wrapper_name(reference.raw_source)
        if not wrapper_name or wrapper_name in (".", "..") or "/" in wrapper_name:
            msg = f"Cannot use {wrapper_name!r} as a wrapper name; pass --name"
            raise InputError(msg, source=reference.raw_source)
        return wrapper_name

    def _select_formatter(self, format_output: bool) -> Formatter:
        if self._formatter is not None:
            return self._formatter
        fmt = self._settings.format
        if not (format_output and fmt.enabled):
            return NullFormatter()
        return CommandFormatter(fmt.command, timeout=fmt.timeout_seconds)
