"""Input-variable discovery for Terraform/OpenTofu modules.

Parses a declaration file with python-hcl2 and returns every top-level
``variable`` block in textual order, along with:

- a default literal that can be pasted back into HCL,
- the comment block sitting directly above the declaration,
- its 0-based declaration ordinal.

Defaults that reference other symbols (``var.x``, ``local.y``, function
calls, interpolated strings) cannot be evaluated without context, so their
source text is copied byte-for-byte from the parse tree's span. Literal
aggregates are collapsed to ``{}`` / ``[]``: this is a known fidelity
limitation of the generated wrapper, not a parsing bug.
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, overload

import hcl2
from lark import Token, Tree
from lark.exceptions import LarkError

from tfwrap.domain.errors import ParseError

NO_DEFAULT = "null"

_COMMENT_PREFIXES = ("#", "//", "/*")


@dataclass(frozen=True)
class Variable:
    """One declared module input."""

    name: str
    default_literal: str = NO_DEFAULT
    documentation: str | None = None
    ordinal: int = 0

    @property
    def has_default(self) -> bool:
        return self.default_literal != NO_DEFAULT

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "default": self.default_literal,
            "documentation": self.documentation,
            "ordinal": self.ordinal,
        }


class VariableSet(Sequence[Variable]):
    """Immutable, declaration-ordered collection of variables.

    INVARIANT: names are unique and ordinals run ``0..N-1`` in order.
    """

    def __init__(self, variables: Sequence[Variable] = ()) -> None:
        seen: set[str] = set()
        for index, var in enumerate(variables):
            if var.name in seen:
                msg = f"Duplicate variable declaration: {var.name!r}"
                raise ParseError(msg, variable=var.name)
            if var.ordinal != index:
                msg = f"Variable {var.name!r} has ordinal {var.ordinal}, expected {index}"
                raise ValueError(msg)
            seen.add(var.name)
        self._variables: tuple[Variable, ...] = tuple(variables)

    @overload
    def __getitem__(self, index: int) -> Variable: ...
    @overload
    def __getitem__(self, index: slice) -> tuple[Variable, ...]: ...
    def __getitem__(self, index: int | slice) -> Variable | tuple[Variable, ...]:
        return self._variables[index]

    def __len__(self) -> int:
        return len(self._variables)

    def __iter__(self) -> Iterator[Variable]:
        return iter(self._variables)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, VariableSet):
            return self._variables == other._variables
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._variables)

    def __repr__(self) -> str:
        return f"VariableSet({list(self.names())!r})"

    def names(self) -> list[str]:
        return [v.name for v in self._variables]

    def get(self, name: str) -> Variable | None:
        for var in self._variables:
            if var.name == name:
                return var
        return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract(path: Path) -> VariableSet:
    """Read *path* and extract its variable declarations."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Cannot read {path}: {exc}"
        raise ParseError(msg, path=str(path)) from exc
    return extract_text(text, filename=str(path))


def extract_text(text: str, *, filename: str = "<string>") -> VariableSet:
    """Extract variable declarations from HCL source *text*."""
    if not text.endswith("\n"):
        # The grammar requires a terminating newline.
        text += "\n"

    try:
        tree = hcl2.parses(text)
        spans = _default_spans(tree, text)
        data = hcl2.transform(tree, with_meta=True)
    except (LarkError, ValueError, KeyError) as exc:
        msg = f"Invalid HCL in {filename}: {exc}"
        raise ParseError(msg, path=filename) from exc

    lines = text.splitlines()

    variables: list[Variable] = []
    for ordinal, (name, body) in enumerate(_variable_blocks(data)):
        start_line = body.get("__start_line__")
        if "default" not in body:
            literal = NO_DEFAULT
        elif _is_literal(body["default"]):
            literal = _serialize(body["default"], spans.get(start_line))
        else:
            span_text = spans.get(start_line)
            if span_text is None:
                msg = f"Cannot locate default expression of variable {name!r} in {filename}"
                raise ParseError(msg, path=filename, variable=name)
            literal = span_text
        documentation = _leading_comments(lines, start_line) if start_line else None
        variables.append(
            Variable(
                name=name,
                default_literal=literal,
                documentation=documentation,
                ordinal=ordinal,
            )
        )
    return VariableSet(variables)


# ---------------------------------------------------------------------------
# Block selection
# ---------------------------------------------------------------------------


def _unquote(value: str) -> str:
    """Strip one pair of enclosing double quotes, if present."""
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    return value


def _variable_blocks(data: dict[str, Any]) -> Iterator[tuple[str, dict[str, Any]]]:
    """Yield ``(name, body)`` for every variable block, in textual order."""
    for block in data.get("variable", []):
        for label, body in block.items():
            yield _unquote(label), body if isinstance(body, dict) else {}


def _node_text(node: Tree | Token) -> str:
    if isinstance(node, Token):
        return str(node)
    return "".join(_node_text(child) for child in node.children if child is not None)


def _span(node: Tree | Token, text: str) -> str:
    """Return the exact source text covered by *node*."""
    if isinstance(node, Token):
        start, end = node.start_pos, node.end_pos
    else:
        start, end = node.meta.start_pos, node.meta.end_pos
    return text[start:end]


def _default_spans(tree: Tree, text: str) -> dict[int, str]:
    """Map each top-level block's start line to its ``default`` expression text."""
    spans: dict[int, str] = {}
    for block in tree.find_data("block"):
        body = next(
            (c for c in reversed(block.children) if isinstance(c, Tree) and c.data == "body"),
            None,
        )
        if body is None:
            continue
        for child in body.children:
            if not (isinstance(child, Tree) and child.data == "attribute"):
                continue
            identifier = child.children[0]
            if _node_text(identifier).strip() != "default":
                continue
            spans.setdefault(block.meta.line, _span(child.children[-1], text).strip())
            break
    return spans


# ---------------------------------------------------------------------------
# Default values
# ---------------------------------------------------------------------------


def _is_literal(value: Any) -> bool:
    """True when *value* needs no evaluation context.

    python-hcl2 renders anything it cannot evaluate (references, function
    calls, template interpolations) as a ``${...}`` string.
    """
    if isinstance(value, str):
        return "${" not in value
    if isinstance(value, dict):
        return all(_is_literal(k) and _is_literal(v) for k, v in value.items())
    if isinstance(value, list):
        return all(_is_literal(v) for v in value)
    return True


def _serialize(value: Any, source_text: str | None) -> str:
    """Re-serialize an evaluated literal in canonical HCL form."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, str):
        if source_text is not None and source_text.startswith('"'):
            return source_text
        return json.dumps(_unquote(value))
    if isinstance(value, dict):
        return "{}"
    if isinstance(value, list):
        return "[]"
    return NO_DEFAULT


# ---------------------------------------------------------------------------
# Documentation
# ---------------------------------------------------------------------------


def _leading_comments(lines: list[str], start_line: int) -> str | None:
    """Collect the comment run directly above the block starting at *start_line*.

    *start_line* is 1-based. Blank lines inside the run are kept; blank
    lines at either edge are dropped.

    The walk runs upward, so a ``*/`` line opens a ``/* ... */`` comment
    and every line is taken verbatim until its ``/*`` opener. A block
    comment that shares its opening line with code is left out whole.
    """
    collected: list[str] = []
    block_from: int | None = None  # len(collected) when the current /* */ began
    index = start_line - 2
    while index >= 0:
        line = lines[index]
        stripped = line.strip()
        if block_from is not None:
            if "/*" in stripped:
                if not stripped.startswith("/*"):
                    del collected[block_from:]
                    block_from = None
                    break
                block_from = None
        elif stripped.endswith("*/") and not stripped.startswith("/*"):
            if "/*" in stripped:
                break
            block_from = len(collected)
        elif stripped and not stripped.startswith(_COMMENT_PREFIXES):
            break
        collected.append(line.rstrip())
        index -= 1
    if block_from is not None:
        del collected[block_from:]

    collected.reverse()
    while collected and not collected[0].strip():
        collected.pop(0)
    while collected and not collected[-1].strip():
        collected.pop()
    if not collected:
        return None
    return "\n".join(collected)
