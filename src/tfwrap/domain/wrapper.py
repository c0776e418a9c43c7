"""Wrapper module rendering.

A wrapper module exposes a single JSON-encoded ``config`` input and a
single ``output`` object. Three of its four files are fixed text; only
``main.tf`` depends on the wrapped module's variables.

INVARIANT: rendering is a pure function of :class:`WrapperSpec`. Variable
order always follows ``ordinal``, so identical specs render byte-identical
text.
"""

from __future__ import annotations

from dataclasses import dataclass

from tfwrap.domain.source import ModuleReference
from tfwrap.domain.variables import VariableSet

LOCALS_FILE = "locals.tf"
VARIABLES_FILE = "variables.tf"
MAIN_FILE = "main.tf"
OUTPUTS_FILE = "outputs.tf"

# Emission order.
ARTIFACT_FILES: tuple[str, ...] = (LOCALS_FILE, VARIABLES_FILE, MAIN_FILE, OUTPUTS_FILE)

DEFAULT_COLLECTION_KEY = "instances"
DEFAULT_MODULE_LABEL = "this"
UNCONSTRAINED_VERSION = "latest (unconstrained)"

_INDENT = "  "


@dataclass(frozen=True)
class WrapperSpec:
    """Everything needed to render a wrapper module."""

    module_reference: ModuleReference
    variables: VariableSet
    wrapper_name: str
    iterable: bool = False
    collection_key: str = DEFAULT_COLLECTION_KEY
    module_label: str = DEFAULT_MODULE_LABEL


@dataclass(frozen=True)
class GeneratedWrapper:
    """Rendered ``main.tf`` text."""

    entry_point_text: str


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _indent_block(text: str) -> list[str]:
    return [f"{_INDENT}{line}" if line.strip() else "" for line in text.splitlines()]


def lookup_prefix(spec: WrapperSpec) -> str:
    """Expression prefix each variable lookup reads from."""
    return "each.value." if spec.iterable else "local.config."


def generate(spec: WrapperSpec) -> GeneratedWrapper:
    """Render the wrapper's entry point (``main.tf``)."""
    ref = spec.module_reference
    version = ref.version or UNCONSTRAINED_VERSION

    lines = [
        f"# Wrapper for module {_quote(ref.raw_source)}",
        f"# Version: {version}",
        "",
        f"module {_quote(spec.module_label)} {{",
        f"{_INDENT}source = {_quote(ref.raw_source)}",
    ]
    if ref.version:
        lines.append(f"{_INDENT}version = {_quote(ref.version)}")

    if spec.iterable:
        lines.append("")
        lines.append(f"{_INDENT}for_each = try(local.config.{spec.collection_key}, {{}})")

    prefix = lookup_prefix(spec)
    if len(spec.variables):
        lines.append("")
    for var in sorted(spec.variables, key=lambda v: v.ordinal):
        if var.documentation:
            lines.extend(_indent_block(var.documentation))
        lookup = f"{_INDENT}{var.name} = try({prefix}{var.name}, {var.default_literal}"
        if "\n" in var.default_literal:
            # A heredoc terminator must end its line, so the paren gets its own.
            lines.append(f"{lookup}\n{_INDENT})")
        else:
            lines.append(f"{lookup})")

    lines.append("}")
    return GeneratedWrapper(entry_point_text="\n".join(lines) + "\n")


def render_locals() -> str:
    """Fixed ``locals.tf``: decode the JSON ``config`` input once."""
    return "locals {\n  config = jsondecode(var.config)\n}\n"


def render_config_variable(wrapper_name: str) -> str:
    """Fixed ``variables.tf``: the single ``config`` input."""
    description = f"A JSON encoded object that contains the full {wrapper_name} config"
    return (
        'variable "config" {\n'
        "  type        = any\n"
        f"  description = {_quote(description)}\n"
        '  default     = "{}"\n'
        "}\n"
    )


def render_outputs(module_label: str = DEFAULT_MODULE_LABEL) -> str:
    """Fixed ``outputs.tf``: re-export the whole module result."""
    return f'output "output" {{\n  value = module.{module_label}\n}}\n'


def render_artifacts(spec: WrapperSpec) -> dict[str, str]:
    """Render all four wrapper files, keyed by file name in emission order."""
    return {
        LOCALS_FILE: render_locals(),
        VARIABLES_FILE: render_config_variable(spec.wrapper_name),
        MAIN_FILE: generate(spec).entry_point_text,
        OUTPUTS_FILE: render_outputs(spec.module_label),
    }
