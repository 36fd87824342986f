"""Tests for PluginManager: registration, capability collection, hook relay."""

from __future__ import annotations

import logging

import pluggy
import pytest

from deriva.domain.capability import Capability
from deriva.infrastructure.registry import InstanceRegistry
from deriva.plugins.builtins.containers import ContainersPlugin
from deriva.plugins.manager import PluginManager

hookimpl = pluggy.HookimplMarker("deriva")


def _ident_map(fn, value):
    return fn(value)


def _ident_traverse(app, fn, value):
    return fn(value)


class _DummyPlugin:
    """Minimal plugin for registration tests."""

    @hookimpl
    def post_derive(self, type_name: str, operations: list[str], equations: int, lawful: bool):
        pass


class _RecordingPlugin:
    def __init__(self) -> None:
        self.calls: list[dict] = []

    @hookimpl
    def post_derive(self, type_name: str, operations: list[str], equations: int, lawful: bool):
        self.calls.append({"type_name": type_name, "operations": operations, "lawful": lawful})


class _IdentPlugin:
    @hookimpl
    def register_capabilities(self) -> list[Capability]:
        return [Capability("Ident", _ident_map, _ident_traverse)]


class _ExplodingPlugin:
    @hookimpl
    def register_capabilities(self) -> list[Capability]:
        raise RuntimeError("boom")

    @hookimpl
    def post_derive(self, type_name: str, operations: list[str], equations: int, lawful: bool):
        raise RuntimeError("boom")


class _NotAListPlugin:
    @hookimpl
    def register_capabilities(self):
        return {"Ident": "nope"}


class _MixedPlugin:
    @hookimpl
    def register_capabilities(self):
        return ["not a capability", Capability("Ident", _ident_map, _ident_traverse)]


class TestPluginManager:
    def test_hook_relay_accessible(self):
        pm = PluginManager()
        assert hasattr(pm.hook, "register_capabilities")
        assert hasattr(pm.hook, "post_derive")

    def test_register_plugin(self):
        pm = PluginManager()
        pm.register_plugin(_DummyPlugin(), name="dummy")
        assert "dummy" in pm.list_plugin_names()

    def test_register_plugin_default_name(self):
        pm = PluginManager()
        pm.register_plugin(_DummyPlugin())
        assert "_DummyPlugin" in pm.list_plugin_names()

    def test_unregister_plugin(self):
        pm = PluginManager()
        plugin = _DummyPlugin()
        pm.register_plugin(plugin, name="dummy")
        pm.unregister(plugin)
        assert "dummy" not in pm.list_plugin_names()
        assert pm.get_plugins() == []

    def test_discover_sets_loaded(self, tmp_path):
        pm = PluginManager()
        assert not pm.is_loaded
        pm.discover_and_load(local_dir=tmp_path)
        assert pm.is_loaded


class TestInstallCapabilities:
    def test_builtins(self):
        pm = PluginManager()
        pm.register_plugin(ContainersPlugin(), name="containers-builtin")
        registry = InstanceRegistry()
        assert pm.install_capabilities(registry) == ["List", "Option", "Prod"]
        assert registry.lookup_capability("List").lawful

    def test_plugin_capability(self):
        pm = PluginManager()
        pm.register_plugin(_IdentPlugin())
        registry = InstanceRegistry()
        assert pm.install_capabilities(registry) == ["Ident"]
        cap = registry.lookup_capability("Ident")
        assert cap.map(abs, -3) == 3
        assert cap.lawful is False

    @pytest.mark.parametrize("plugin_cls", [_ExplodingPlugin, _NotAListPlugin])
    def test_bad_plugin_skipped_with_warning(self, plugin_cls, caplog):
        pm = PluginManager()
        pm.register_plugin(plugin_cls(), name="bad")
        pm.register_plugin(_IdentPlugin(), name="good")
        registry = InstanceRegistry()
        with caplog.at_level(logging.WARNING, logger="deriva.plugins.manager"):
            installed = pm.install_capabilities(registry)
        assert installed == ["Ident"]
        assert any("bad" in r.getMessage() for r in caplog.records)

    def test_non_capability_entries_skipped(self):
        pm = PluginManager()
        pm.register_plugin(_MixedPlugin())
        assert pm.install_capabilities(InstanceRegistry()) == ["Ident"]

    def test_plugin_without_capability_hook(self):
        pm = PluginManager()
        pm.register_plugin(_DummyPlugin())
        assert pm.install_capabilities(InstanceRegistry()) == []


class TestDispatch:
    def test_dispatch_calls_hook(self):
        pm = PluginManager()
        plugin = _RecordingPlugin()
        pm.register_plugin(plugin)
        warnings: list[str] = []
        pm.dispatch(
            "post_derive",
            {"type_name": "Pair", "operations": ["Pair.map"], "equations": 1, "lawful": True},
            warnings,
        )
        assert plugin.calls == [
            {"type_name": "Pair", "operations": ["Pair.map"], "lawful": True}
        ]
        assert warnings == []

    def test_failure_becomes_warning(self):
        pm = PluginManager()
        pm.register_plugin(_ExplodingPlugin())
        warnings: list[str] = []
        pm.dispatch(
            "post_derive",
            {"type_name": "Pair", "operations": [], "equations": 0, "lawful": False},
            warnings,
        )
        assert warnings == ["Hook dispatch failed for post_derive"]
