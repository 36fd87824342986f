"""Shared pytest fixtures and test helpers for deriva tests."""

from __future__ import annotations

import tomllib
from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner

from deriva.config.models import LawsConfig, PluginsConfig
from deriva.config.settings import DerivaSettings
from deriva.domain.types import Constructor, Field, TCon, TVar, TypeDecl
from deriva.infrastructure.declarations import parse_declarations
from deriva.infrastructure.registry import InstanceRegistry
from deriva.infrastructure.workspace import Workspace
from deriva.plugins.builtins.containers import BUILTIN_CAPABILITIES

SAMPLE_TYPES = """\
[[types]]
name = "Pair"
  [[types.constructors]]
  name = "mk"
  fields = ["a", "a"]

[[types]]
name = "Box"
  [[types.constructors]]
  name = "mk"
  fields = ["a", { name = "count", type = "Nat" }]

[[types]]
name = "Rose"
  [[types.constructors]]
  name = "leaf"
  [[types.constructors]]
  name = "node"
  fields = ["a", { name = "kids", type = "List (Option a)" }]
"""


def _declare(source: str) -> list[TypeDecl]:
    return parse_declarations(tomllib.loads(source))


def _declare_one(source: str) -> TypeDecl:
    (decl,) = _declare(source)
    return decl


@pytest.fixture
def declare() -> Callable[[str], TypeDecl]:
    """Parse TOML source holding exactly one declaration."""
    return _declare_one


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def instances() -> InstanceRegistry:
    """Instance registry holding the built-in List, Option and Prod capabilities."""
    registry = InstanceRegistry()
    for capability in BUILTIN_CAPABILITIES:
        registry.install(capability)
    return registry


@pytest.fixture
def pair_decl() -> TypeDecl:
    """``Pair a = mk a a``."""
    return TypeDecl("Pair", (Constructor("mk", (Field(TVar("a")), Field(TVar("a")))),))


@pytest.fixture
def box_decl() -> TypeDecl:
    """``Box a = mk a (count : Nat)``."""
    return TypeDecl("Box", (Constructor("mk", (Field(TVar("a")), Field(TCon("Nat"), "count"))),))


@pytest.fixture
def settings(tmp_path: Path) -> DerivaSettings:
    """Settings with a small example budget and no external plugin discovery."""
    return DerivaSettings(
        project_root=tmp_path,
        laws=LawsConfig(max_examples=25, seed=1234),
        plugins=PluginsConfig(discover=False),
    )


@pytest.fixture
def make_workspace(settings: DerivaSettings) -> Callable[..., Workspace]:
    """Factory for a workspace over TOML declaration source, plugins installed."""

    def factory(source: str = SAMPLE_TYPES, *, config: DerivaSettings | None = None) -> Workspace:
        ws = Workspace(config or settings, _declare(source))
        ws.init_plugins()
        return ws

    return factory


@pytest.fixture
def workspace(make_workspace: Callable[..., Workspace]) -> Workspace:
    return make_workspace()


@pytest.fixture
def types_file(tmp_path: Path) -> Path:
    """A declaration file with Pair, Box and Rose."""
    path = tmp_path / "types.toml"
    path.write_text(SAMPLE_TYPES, encoding="utf-8")
    return path


@pytest.fixture
def _isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp project with a small deriva.toml.

    Use via ``@pytest.mark.usefixtures("_isolated_project")`` on command test
    classes.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DERIVA_CONFIG", raising=False)
    (tmp_path / "deriva.toml").write_text(
        "[laws]\nmax_examples = 10\n\n[plugins]\ndiscover = false\n", encoding="utf-8"
    )


@pytest.fixture
def sample_decls() -> dict[str, TypeDecl]:
    """Pair, Box and Rose keyed by name."""
    return {decl.name: decl for decl in _declare(SAMPLE_TYPES)}
