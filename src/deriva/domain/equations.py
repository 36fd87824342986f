"""Lemma generator: per-constructor unfolding equations.

For every constructor ``C`` the generator states::

    op f (C x1 .. xn) = <constructor synthesis of x1 .. xn>

The right-hand side is synthesized afresh from the declaration, and the
equation is discharged by unfolding ``op`` and reducing.  No search is
involved: the equation restates the definition.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

from deriva.domain.capability import CapabilityLookup
from deriva.domain.classify import classify
from deriva.domain.errors import MissingEquationError
from deriva.domain.synthesis import (
    SCRUTINEE,
    SynthesisContext,
    SynthesizedOp,
    synthesize_arm,
)
from deriva.domain.terms import (
    Ctor,
    FreshNames,
    Term,
    Var,
    alpha_equivalent,
    apply,
    reduce,
    substitute,
)
from deriva.domain.types import TypeDecl

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Equation:
    """``lhs = rhs`` for one constructor, universally quantified over *variables*."""

    op_name: str
    ctor: str
    variables: tuple[str, ...]
    lhs: Term
    rhs: Term
    proved: bool = False

    def __str__(self) -> str:
        from deriva.domain.render import render_term

        return f"{render_term(self.lhs)} = {render_term(self.rhs)}"


def generate_equations(
    op: SynthesizedOp,
    decl: TypeDecl,
    capabilities: CapabilityLookup,
) -> tuple[Equation, ...]:
    """State one unfolding equation per constructor of *decl*."""
    ctx = SynthesisContext(decl, op.kind, capabilities, FreshNames())
    leading = [Var(p) for p in op.params if p != SCRUTINEE]
    equations: list[Equation] = []
    for ctor in decl.constructors:
        classifications = [
            classify(f.type, decl.var, decl.name, constructor=ctor.name, field=f.label(i))
            for i, f in enumerate(ctor.fields)
        ]
        arm = synthesize_arm(ctor, classifications, ctx)
        value = apply(Ctor(decl.name, ctor.name, ctor.arity), *(Var(b) for b in arm.binders))
        equations.append(
            Equation(
                op_name=op.name,
                ctor=ctor.name,
                variables=arm.binders,
                lhs=apply(Var(op.name), *leading, value),
                rhs=arm.body,
            )
        )
    return tuple(equations)


def discharge(equation: Equation, op: SynthesizedOp) -> Equation:
    """Prove *equation* by unfolding *op* and reducing the left-hand side.

    Raises:
        MissingEquationError: The reduced left-hand side differs from the
            right-hand side, i.e. the body has no usable case for the
            constructor.
    """
    unfolded = reduce(substitute(equation.lhs, op.name, op.body))
    if not alpha_equivalent(unfolded, equation.rhs):
        raise MissingEquationError(
            f"Unfolding equation for {op.name} does not hold by reduction",
            type_name=op.type_name,
            constructor=equation.ctor,
        )
    return dataclasses.replace(equation, proved=True)


def attach_equations(
    op: SynthesizedOp,
    decl: TypeDecl,
    capabilities: CapabilityLookup,
) -> SynthesizedOp:
    """Generate, discharge, and attach the unfolding equations of *op*."""
    proved = tuple(discharge(eq, op) for eq in generate_equations(op, decl, capabilities))
    logger.debug("Discharged %d unfolding equations for %s", len(proved), op.name)
    return dataclasses.replace(op, equations=proved)


def require_equations(op: SynthesizedOp, decl: TypeDecl) -> dict[str, Equation]:
    """Index proved equations by constructor, failing on any gap.

    Raises:
        MissingEquationError: A constructor has no proved equation.
    """
    by_ctor = {eq.ctor: eq for eq in op.equations if eq.proved}
    for ctor in decl.constructors:
        if ctor.name not in by_ctor:
            raise MissingEquationError(
                f"No unfolding equation for {op.name} at {ctor.name}",
                type_name=decl.name,
                constructor=ctor.name,
            )
    return by_ctor
