"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from tfwrap.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from tfwrap.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    if result.op == "list_variables":
        return "\n".join(item["name"] for item in result.data.get("items", []))
    if result.op == "generate_wrapper":
        return str(result.data.get("output_dir", ""))
    if result.op == "resolve_source":
        return str(result.data.get("fetch_location", ""))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="tfw.ok")
    op = Text(f"  {result.op}", style="tfw.op")
    console.print(label, op, sep="", end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="tfw.key")
    if key in ("wrapper_name", "name"):
        v = Text(str(value), style="tfw.name")
    elif key in ("output_dir", "fetch_location") or key.endswith("path"):
        v = Text(str(value), style="tfw.path")
    else:
        v = Text(str(value))
    console.print(k, v, sep="", end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(Text(f"    {k}: {v}"))


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = Text(prefix)
    line.append(f"{duration:>8.2f}ms", style=style)
    line.append(f"  {name}")

    extras = [f"{ak}={av}" for ak, av in span_data.get("annotations", {}).items()]
    if extras:
        line.append(f"  ({', '.join(extras)})")

    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="tfw.error")
    op = Text(f"  {result.op}", style="tfw.op")
    dash = Text(" — ")
    console.print(label, op, dash, Text(msg), sep="")

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Operation renderers ───────────────────────────────────────────────


def _render_generate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render generate_wrapper results with the output path and files."""
    _status_line(console, result)
    d = result.data
    for key in ("wrapper_name", "output_dir", "source", "version", "iterable", "variable_count"):
        if key in d and d[key] is not None:
            _field(console, key, d[key])
    files = d.get("files", [])
    _field(console, "files", len(files))
    if verbose:
        for f in files:
            console.print(Text(f"    {f}", style="tfw.path"))
        _field(console, "fetch_location", d.get("fetch_location"))
        if d.get("sub_path"):
            _field(console, "sub_path", d["sub_path"])
        _render_meta(console, result)


def _variables_table(items: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    """Build a Rich Table of discovered variables in declaration order."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name", style="tfw.name", no_wrap=True)
    table.add_column("Default", style="tfw.default")
    if verbose:
        table.add_column("Documentation", style="tfw.doc")

    for item in items:
        row = [
            Text(str(item.get("ordinal", ""))),
            Text(str(item.get("name", ""))),
            Text(str(item.get("default", ""))),
        ]
        if verbose:
            row.append(Text(item.get("documentation") or ""))
        table.add_row(*row)
    return table


def _render_variables(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render list_variables results as a table."""
    _status_line(console, result)
    d = result.data
    _field(console, "source", d.get("source"))
    if d.get("version"):
        _field(console, "version", d["version"])
    _field(console, "count", d.get("count", 0))
    items = d.get("items", [])
    if items:
        console.print()
        console.print(_variables_table(items, verbose=verbose))
    if verbose:
        _render_meta(console, result)


def _render_resolve(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render resolve_source results."""
    _status_line(console, result)
    d = result.data
    for key in ("source", "kind", "fetch_location", "sub_path", "wrapper_name"):
        if d.get(key) is not None:
            _field(console, key, d[key])
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "generate_wrapper": _render_generate,
    "list_variables": _render_variables,
    "resolve_source": _render_resolve,
}
