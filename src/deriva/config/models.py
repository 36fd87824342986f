"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, deriva.toml only contains overrides.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class DeriveConfig(BaseModel):
    """[derive] section."""

    model_config = {"frozen": True}

    verify_laws: bool = True
    install: bool = True


class LawsConfig(BaseModel):
    """[laws] section.

    ``seed`` makes law checking reproducible; set it to None for fresh
    random examples on every run.
    """

    model_config = {"frozen": True}

    max_examples: int = Field(default=50, ge=1)
    seed: int | None = 0


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    builtins: bool = True
    discover: bool = True
    local_dir: str = ".deriva/plugins"


class DerivaConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    derive: DeriveConfig = Field(default_factory=DeriveConfig)
    laws: LawsConfig = Field(default_factory=LawsConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
