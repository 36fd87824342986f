"""Capability contract for containers that may appear as a nested outer type.

A capability bundles a container's own ``map`` and ``traverse`` so the
engine can push an element transform through it.  Lookup goes through the
:class:`CapabilityLookup` protocol, never through name-based reflection.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from deriva.domain.applicative import Applicative

MapFn = Callable[[Callable[[Any], Any], Any], Any]
TraverseFn = Callable[[Applicative, Callable[[Any], Any], Any], Any]


@dataclass(frozen=True)
class Capability:
    """The ``{map, traverse}`` pair exposed by a container type.

    Attributes:
        type_name: Head constructor name, e.g. ``"List"``.
        map: ``map(fn, value)``, transforms the final type argument.
        traverse: ``traverse(app, fn, value)`` with applicative evidence.
        arbitrary: Optional value-generator factory; receives one generator
            per type argument and returns a generator of container values.
        lawful: Whether the container's own functor/traversable laws are
            established.  Law verification of a type nesting this container
            requires it.
    """

    type_name: str
    map: MapFn
    traverse: TraverseFn
    arbitrary: Callable[..., Any] | None = None
    lawful: bool = False


class CapabilityLookup(Protocol):
    """Read-only capability query used by synthesis and law verification."""

    def lookup_capability(self, type_name: str) -> Capability | None: ...
