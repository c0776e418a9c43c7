"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, tfwrap.toml only contains overrides.
No config file is needed at all for the common case.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- tfwrap.toml sections ---


class SourceConfig(BaseModel):
    """[source] section."""

    model_config = {"frozen": True}

    default_host: str = "github.com"


class FetchConfig(BaseModel):
    """[fetch] section."""

    model_config = {"frozen": True}

    git_binary: str = "git"
    timeout_seconds: float = Field(default=300.0, gt=0)
    variables_file: str = "variables.tf"


class FormatConfig(BaseModel):
    """[format] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    command: list[str] = Field(default_factory=lambda: ["tofu", "fmt", "-"], min_length=1)
    timeout_seconds: float = Field(default=60.0, gt=0)


class GenerateConfig(BaseModel):
    """[generate] section."""

    model_config = {"frozen": True}

    collection_key: str = "instances"
    module_label: str = "this"
