"""Tests for configuration section models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from deriva.config.models import DerivaConfig, DeriveConfig, LawsConfig, PluginsConfig


class TestDefaults:
    def test_derive(self) -> None:
        config = DeriveConfig()
        assert config.verify_laws is True
        assert config.install is True

    def test_laws(self) -> None:
        config = LawsConfig()
        assert config.max_examples == 50
        assert config.seed == 0

    def test_plugins(self) -> None:
        config = PluginsConfig()
        assert config.builtins is True
        assert config.discover is True
        assert config.local_dir == ".deriva/plugins"

    def test_root_composes_sections(self) -> None:
        config = DerivaConfig()
        assert config.derive == DeriveConfig()
        assert config.laws == LawsConfig()
        assert config.plugins == PluginsConfig()


class TestValidation:
    def test_sparse_override(self) -> None:
        config = DerivaConfig.model_validate({"laws": {"max_examples": 200}})
        assert config.laws.max_examples == 200
        assert config.laws.seed == 0

    def test_seed_may_be_disabled(self) -> None:
        assert LawsConfig(seed=None).seed is None

    def test_max_examples_positive(self) -> None:
        with pytest.raises(ValidationError):
            LawsConfig(max_examples=0)

    def test_frozen(self) -> None:
        config = DeriveConfig()
        with pytest.raises(ValidationError):
            config.install = False  # type: ignore[misc]
