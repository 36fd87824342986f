"""Extension layer: plugin system via pluggy.

Discovery: entry_points (pip-installed) and a local plugins directory.
INVARIANT: Plugin failures are warnings, never errors.
"""

from deriva.plugins.manager import PluginManager

__all__ = ["PluginManager"]
