"""Derivation entry point: one declaration in, map + traverse out.

INVARIANT: ``derive`` either returns both operations with every unfolding
equation discharged, or raises.  There is no partial result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from deriva.domain.capability import Capability, CapabilityLookup
from deriva.domain.equations import attach_equations
from deriva.domain.evaluate import bind
from deriva.domain.synthesis import SynthesizedOp, synthesize_operation
from deriva.domain.terms import FreshNames
from deriva.domain.types import OpKind, TypeDecl

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Derivation:
    """Result of deriving one declaration."""

    decl: TypeDecl
    map: SynthesizedOp
    traverse: SynthesizedOp

    @property
    def ops(self) -> tuple[SynthesizedOp, SynthesizedOp]:
        return self.map, self.traverse

    @property
    def nested(self) -> frozenset[str]:
        """Containers whose capabilities the generated bodies call."""
        return self.map.nested | self.traverse.nested

    def capability(self, capabilities: CapabilityLookup, **extra: object) -> Capability:
        """Bind both operations into a :class:`Capability` for this type."""
        return Capability(
            type_name=self.decl.name,
            map=bind(self.map, capabilities),
            traverse=bind(self.traverse, capabilities),
            **extra,  # type: ignore[arg-type]
        )


def derive(decl: TypeDecl, capabilities: CapabilityLookup) -> Derivation:
    """Synthesize map and traverse for *decl* and discharge their equations.

    Raises:
        DerivationError: Any classification, recursion, capability, or
            exhaustiveness failure; see :mod:`deriva.domain.errors`.
    """
    names = FreshNames()
    ops = {
        kind: attach_equations(
            synthesize_operation(decl, kind, capabilities, names), decl, capabilities
        )
        for kind in (OpKind.MAP, OpKind.TRAVERSE)
    }
    logger.debug(
        "Derived %s: %d constructors, nested=%s",
        decl.name,
        len(decl.constructors),
        sorted(ops[OpKind.MAP].nested),
    )
    return Derivation(decl=decl, map=ops[OpKind.MAP], traverse=ops[OpKind.TRAVERSE])
