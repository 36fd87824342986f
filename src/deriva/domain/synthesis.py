"""Term synthesis for map and traverse.

Pipeline per declaration::

    classify fields -> build nested transforms -> synthesize fields
        -> synthesize constructors -> one exhaustive match

All context (mode, capabilities, fresh names, applicative evidence) is passed
explicitly through :class:`SynthesisContext`; nothing is global.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from deriva.domain.classify import Absent, Classification, Exact, Nested, Recursive, classify
from deriva.domain.errors import (
    ClassificationError,
    MissingCapabilityError,
    NonExhaustiveError,
    RecursiveFieldError,
)
from deriva.domain.terms import (
    App,
    ApplyEffect,
    Arm,
    CapOp,
    Ctor,
    FreshNames,
    Lam,
    MapEffect,
    Match,
    Pure,
    Term,
    Var,
    apply,
)
from deriva.domain.types import Constructor, OpKind, TypeDecl

if TYPE_CHECKING:
    from deriva.domain.capability import CapabilityLookup
    from deriva.domain.equations import Equation

TRANSFORM = "f"
APPLICATIVE = "F"
SCRUTINEE = "x"

OP_PARAMS: dict[OpKind, tuple[str, ...]] = {
    OpKind.MAP: (TRANSFORM, SCRUTINEE),
    OpKind.TRAVERSE: (APPLICATIVE, TRANSFORM, SCRUTINEE),
}


@dataclass(frozen=True)
class SynthesisContext:
    """Immutable per-request context threaded through every synthesizer."""

    decl: TypeDecl
    mode: OpKind
    capabilities: CapabilityLookup
    names: FreshNames

    @property
    def transform(self) -> Term:
        return Var(TRANSFORM)

    @property
    def app(self) -> Term | None:
        return Var(APPLICATIVE) if self.mode is OpKind.TRAVERSE else None


@dataclass(frozen=True)
class FieldSynthesis:
    """Replacement term for one field.

    ``effectful`` is False for values that are carried through unchanged
    (every map field that is ``Absent``, and ``Absent`` traverse fields, which
    are lifted as pure values).
    """

    term: Term
    effectful: bool


@dataclass(frozen=True)
class SynthesizedOp:
    """A generated structural operation.

    Attributes:
        name: Qualified name, e.g. ``"Pair.map"``.
        kind: Map or traverse.
        type_name: The declaration the operation belongs to.
        params: Parameter names of *body*, outermost first.
        body: ``Lam`` chain ending in an exhaustive ``Match``.
        nested: Container names whose capabilities the body calls.
        equations: Per-constructor unfolding equations (filled in by the
            lemma generator).
    """

    name: str
    kind: OpKind
    type_name: str
    params: tuple[str, ...]
    body: Term
    nested: frozenset[str] = frozenset()
    equations: tuple[Equation, ...] = ()

    @property
    def match(self) -> Match:
        term = self.body
        while isinstance(term, Lam):
            term = term.body
        assert isinstance(term, Match)
        return term


# --- Nested-transform builder ---


def build_nested_transform(
    nested: Nested,
    ctx: SynthesisContext,
    *,
    constructor: str,
    field_label: str,
) -> Term:
    """Compose capability operations through a chain of ``Nested`` layers.

    The innermost transform is built first; each layer wraps it with its
    container's own map (or traverse, with the applicative evidence).

    Raises:
        MissingCapabilityError: A layer's container has no capability.
    """
    if isinstance(nested.inner, Exact):
        inner = ctx.transform
    elif isinstance(nested.inner, Nested):
        inner = build_nested_transform(
            nested.inner, ctx, constructor=constructor, field_label=field_label
        )
    else:
        raise ClassificationError(
            f"Nested argument {nested.inner_type} does not contain {ctx.decl.var}",
            type_name=ctx.decl.name,
            constructor=constructor,
            field=field_label,
        )

    head = nested.head
    if ctx.capabilities.lookup_capability(head) is None:
        raise MissingCapabilityError(
            f"{head} has no {ctx.mode} capability",
            type_name=ctx.decl.name,
            constructor=constructor,
            field=field_label,
        )
    return CapOp(head, ctx.mode, inner, ctx.app)


# --- Field synthesizer ---


def synthesize_field(
    value: Term,
    classification: Classification,
    ctx: SynthesisContext,
    *,
    constructor: str,
    field_label: str,
) -> FieldSynthesis:
    effectful = ctx.mode is OpKind.TRAVERSE
    if isinstance(classification, Exact):
        return FieldSynthesis(App(ctx.transform, value), effectful)
    if isinstance(classification, Absent):
        return FieldSynthesis(value, effectful=False)
    if isinstance(classification, Recursive):
        raise RecursiveFieldError(
            f"Recursive field not supported: {ctx.decl.name} refers to itself",
            type_name=ctx.decl.name,
            constructor=constructor,
            field=field_label,
        )
    transform = build_nested_transform(
        classification, ctx, constructor=constructor, field_label=field_label
    )
    return FieldSynthesis(App(transform, value), effectful)


# --- Constructor synthesizer ---


def synthesize_constructor(
    ctor: Constructor,
    fields: list[FieldSynthesis],
    ctx: SynthesisContext,
) -> Term:
    """Rebuild *ctor* from its field syntheses.

    Map applies the constructor directly.  Traverse starts from the pure
    constructor and sequences effectful fields strictly left to right; pure
    fields are applied to the accumulator without sequencing any effect.
    """
    constructor: Term = Ctor(ctx.decl.name, ctor.name, ctor.arity)
    if ctx.mode is OpKind.MAP:
        return apply(constructor, *(f.term for f in fields))

    app = ctx.app
    assert app is not None
    acc = constructor
    sequenced = False
    for synth in fields:
        if not synth.effectful:
            if sequenced:
                g = ctx.names.fresh("g")
                acc = MapEffect(app, Lam(g, App(Var(g), synth.term)), acc)
            else:
                acc = App(acc, synth.term)
        elif sequenced:
            acc = ApplyEffect(app, acc, synth.term)
        else:
            acc = MapEffect(app, acc, synth.term)
            sequenced = True
    if not sequenced:
        return Pure(app, acc)
    return acc


# --- Type synthesizer ---


def synthesize_arm(
    ctor: Constructor,
    classifications: list[Classification],
    ctx: SynthesisContext,
) -> Arm:
    binders = tuple(ctx.names.fresh("x") for _ in ctor.fields)
    fields = [
        synthesize_field(
            Var(binder),
            classification,
            ctx,
            constructor=ctor.name,
            field_label=f.label(i),
        )
        for i, (binder, classification, f) in enumerate(
            zip(binders, classifications, ctor.fields, strict=True)
        )
    ]
    return Arm(ctor.name, binders, synthesize_constructor(ctor, fields, ctx))


def synthesize_operation(
    decl: TypeDecl,
    mode: OpKind,
    capabilities: CapabilityLookup,
    names: FreshNames | None = None,
) -> SynthesizedOp:
    """Synthesize ``map`` or ``traverse`` for *decl*.

    Raises:
        ClassificationError: A field is not structurally transformable.
        RecursiveFieldError: A field refers to *decl* itself.
        MissingCapabilityError: A nested container lacks a capability.
        NonExhaustiveError: The generated match does not cover every
            constructor exactly once, in order.
    """
    ctx = SynthesisContext(decl, mode, capabilities, names or FreshNames())
    arms: list[Arm] = []
    nested: set[str] = set()
    for ctor in decl.constructors:
        classifications = [
            classify(f.type, decl.var, decl.name, constructor=ctor.name, field=f.label(i))
            for i, f in enumerate(ctor.fields)
        ]
        for c in classifications:
            if isinstance(c, Nested):
                nested.update(c.heads())
        arms.append(synthesize_arm(ctor, classifications, ctx))

    check_exhaustive(decl, arms)

    body: Term = Match(Var(SCRUTINEE), tuple(arms))
    params = OP_PARAMS[mode]
    for param in reversed(params):
        body = Lam(param, body)
    return SynthesizedOp(
        name=f"{decl.name}.{mode}",
        kind=mode,
        type_name=decl.name,
        params=params,
        body=body,
        nested=frozenset(nested),
    )


def check_exhaustive(decl: TypeDecl, arms: list[Arm] | tuple[Arm, ...]) -> None:
    """Require exactly one arm per constructor, in declaration order."""
    expected = [c.name for c in decl.constructors]
    actual = [a.ctor for a in arms]
    if actual != expected:
        missing = sorted(set(expected) - set(actual))
        raise NonExhaustiveError(
            f"Match arms {actual} do not cover constructors {expected}"
            + (f" (missing {', '.join(missing)})" if missing else ""),
            type_name=decl.name,
            constructor=missing[0] if missing else None,
        )
