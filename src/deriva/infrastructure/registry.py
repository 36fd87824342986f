"""In-process declaration and instance registries.

These stand in for the host environment's collaborators:

- :class:`DeclarationRegistry`: read-only ``lookup_decl(name)``.
- :class:`InstanceRegistry`: ``register(type_name, kind, implementation)``
  plus the ``lookup_capability(type_name)`` query used during synthesis.

INVARIANT: A derivation reads from both registries but only the service
layer writes to the instance registry, after a derivation fully succeeds.
"""

from __future__ import annotations

import logging
from typing import Any

from deriva.domain.capability import Capability
from deriva.domain.errors import DeclarationError, UnknownTypeError
from deriva.domain.types import CapabilityKind, TypeDecl

logger = logging.getLogger(__name__)


class DeclarationRegistry:
    """Type declarations by name."""

    def __init__(self, decls: list[TypeDecl] | None = None) -> None:
        self._decls: dict[str, TypeDecl] = {}
        for decl in decls or []:
            self.add(decl)

    def add(self, decl: TypeDecl) -> None:
        if decl.name in self._decls:
            raise DeclarationError(f"Duplicate declaration {decl.name}", type_name=decl.name)
        self._decls[decl.name] = decl

    def lookup_decl(self, name: str) -> TypeDecl:
        """Return the declaration called *name*.

        Raises:
            UnknownTypeError: No such declaration.
        """
        try:
            return self._decls[name]
        except KeyError:
            raise UnknownTypeError(f"Unknown type {name}", type_name=name) from None

    def names(self) -> list[str]:
        """Declaration names in insertion order."""
        return list(self._decls)

    def __contains__(self, name: object) -> bool:
        return name in self._decls

    def __len__(self) -> int:
        return len(self._decls)


class InstanceRegistry:
    """Installed capability implementations, keyed by type and kind."""

    def __init__(self) -> None:
        self._impls: dict[str, dict[CapabilityKind, Any]] = {}
        self._lawful: set[str] = set()

    def register(self, type_name: str, kind: CapabilityKind | str, implementation: Any) -> None:
        """Install *implementation* as *type_name*'s *kind* operation.

        Raises:
            ValueError: *kind* is not a known capability kind.
        """
        kind = CapabilityKind(kind)
        self._impls.setdefault(type_name, {})[kind] = implementation
        logger.debug("Registered %s for %s", kind, type_name)

    def install(self, capability: Capability) -> None:
        """Register every part of *capability* at once."""
        self.register(capability.type_name, CapabilityKind.MAP, capability.map)
        self.register(capability.type_name, CapabilityKind.TRAVERSE, capability.traverse)
        if capability.arbitrary is not None:
            self.register(capability.type_name, CapabilityKind.ARBITRARY, capability.arbitrary)
        if capability.lawful:
            self.mark_lawful(capability.type_name)

    def mark_lawful(self, type_name: str) -> None:
        self._lawful.add(type_name)

    def lookup(self, type_name: str, kind: CapabilityKind | str) -> Any | None:
        return self._impls.get(type_name, {}).get(CapabilityKind(kind))

    def lookup_capability(self, type_name: str) -> Capability | None:
        """Assemble the capability of *type_name*, or None if map or traverse is missing."""
        impls = self._impls.get(type_name, {})
        map_impl = impls.get(CapabilityKind.MAP)
        traverse_impl = impls.get(CapabilityKind.TRAVERSE)
        if map_impl is None or traverse_impl is None:
            return None
        return Capability(
            type_name=type_name,
            map=map_impl,
            traverse=traverse_impl,
            arbitrary=impls.get(CapabilityKind.ARBITRARY),
            lawful=type_name in self._lawful,
        )

    def names(self) -> list[str]:
        """Types with a complete map/traverse capability."""
        return [name for name in self._impls if self.lookup_capability(name) is not None]
