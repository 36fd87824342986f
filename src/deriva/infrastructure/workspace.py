"""Workspace: the single dependency injected into every service.

Owns the declaration registry, the instance registry, and the plugin
manager.  Constructed once at CLI startup from :class:`DerivaSettings`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from deriva.infrastructure.declarations import load_declarations
from deriva.infrastructure.registry import DeclarationRegistry, InstanceRegistry

if TYPE_CHECKING:
    from deriva.config.settings import DerivaSettings
    from deriva.domain.types import TypeDecl
    from deriva.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class Workspace:
    """Registries plus plugin wiring for one CLI invocation or test."""

    def __init__(self, settings: DerivaSettings, decls: list[TypeDecl] | None = None) -> None:
        self._settings = settings
        self._decls = DeclarationRegistry(decls)
        self._instances = InstanceRegistry()
        self._plugins: PluginManager | None = None

    @property
    def settings(self) -> DerivaSettings:
        return self._settings

    @property
    def decls(self) -> DeclarationRegistry:
        return self._decls

    @property
    def instances(self) -> InstanceRegistry:
        return self._instances

    @property
    def plugins(self) -> PluginManager | None:
        """The plugin manager (None until :meth:`init_plugins`)."""
        return self._plugins

    def init_plugins(self) -> list[str]:
        """Create the plugin manager and install plugin capabilities.

        Registers the built-in containers plugin (unless disabled), then
        entry-point and local-directory plugins per ``[plugins]``.

        Returns the type names whose capabilities were installed.
        """
        from deriva.plugins.builtins.containers import ContainersPlugin
        from deriva.plugins.manager import PluginManager

        config = self._settings.plugins
        pm = PluginManager()
        if config.builtins:
            pm.register_plugin(ContainersPlugin(), name="containers-builtin")
        if config.discover:
            pm.discover_and_load(local_dir=self._settings.local_plugin_dir)
        self._plugins = pm
        installed = pm.install_capabilities(self._instances)
        logger.debug("Installed capabilities: %s", installed)
        return installed

    def load(self, path: Path) -> list[str]:
        """Add every declaration in the TOML file at *path*.

        Raises:
            DeclarationError: Unreadable or malformed file, or a duplicate name.
        """
        names = []
        for decl in load_declarations(path):
            self._decls.add(decl)
            names.append(decl.name)
        logger.debug("Loaded %d declarations from %s", len(names), path)
        return names
