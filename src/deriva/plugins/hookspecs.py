"""Pluggy hook specifications for capability providers and derivation events.

One setup-time hook lets plugins contribute container capabilities; one
lifecycle event fires synchronously after each successful derivation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from deriva.domain.capability import Capability

hookspec = pluggy.HookspecMarker("deriva")


class DerivaHookSpec:
    """Hook specifications for the deriva plugin system."""

    @hookspec
    def register_capabilities(self) -> list[Capability] | None:
        """Return container capabilities to install before any derivation."""

    @hookspec
    def post_derive(
        self,
        type_name: str,
        operations: list[str],
        equations: int,
        lawful: bool,
    ) -> None:
        """Called after a declaration is derived and installed."""
