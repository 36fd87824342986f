"""Generated term language and its reduction rules.

Synthesized operations are plain ASTs over these nodes.  Nothing here splices
into a shared environment: a term is data until :mod:`deriva.domain.evaluate`
interprets it.

The applicative nodes (``Pure``, ``MapEffect``, ``ApplyEffect``) and traverse
``CapOp`` nodes carry their applicative evidence explicitly as a term.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Union

from deriva.domain.errors import NonExhaustiveError
from deriva.domain.types import OpKind


@dataclass(frozen=True)
class Var:
    name: str


@dataclass(frozen=True)
class Lam:
    param: str
    body: Term


@dataclass(frozen=True)
class App:
    fn: Term
    arg: Term


@dataclass(frozen=True)
class Ctor:
    """Curried constructor function of a declared type."""

    type_name: str
    name: str
    arity: int


@dataclass(frozen=True)
class Arm:
    ctor: str
    binders: tuple[str, ...]
    body: Term


@dataclass(frozen=True)
class Match:
    scrutinee: Term
    arms: tuple[Arm, ...]


@dataclass(frozen=True)
class CapOp:
    """A container's capability partially applied to an element transform.

    Denotes ``lambda x: Cap.map(fn, x)`` or ``lambda x: Cap.traverse(app, fn, x)``.
    """

    type_name: str
    op: OpKind
    fn: Term
    app: Term | None = None


@dataclass(frozen=True)
class Pure:
    app: Term
    value: Term


@dataclass(frozen=True)
class MapEffect:
    app: Term
    fn: Term
    fx: Term


@dataclass(frozen=True)
class ApplyEffect:
    app: Term
    ff: Term
    fx: Term


Term = Union[Var, Lam, App, Ctor, Match, CapOp, Pure, MapEffect, ApplyEffect]


class FreshNames:
    """Monotonic fresh-name generator, one per derivation request."""

    def __init__(self) -> None:
        self._counter = itertools.count()

    def fresh(self, prefix: str = "x") -> str:
        return f"{prefix}{next(self._counter)}"


def apply(fn: Term, *args: Term) -> Term:
    """Build the curried application ``fn a1 ... an``."""
    for arg in args:
        fn = App(fn, arg)
    return fn


def app_spine(term: Term) -> tuple[Term, list[Term]]:
    args: list[Term] = []
    while isinstance(term, App):
        args.append(term.arg)
        term = term.fn
    args.reverse()
    return term, args


def substitute(term: Term, name: str, value: Term) -> Term:
    """Replace free occurrences of *name* in *term* with *value*."""
    return substitute_all(term, {name: value})


def substitute_all(term: Term, mapping: dict[str, Term]) -> Term:
    """Simultaneously replace free variables of *term* per *mapping*.

    Binders come from a :class:`FreshNames` generator, so no capture check
    is needed beyond respecting shadowing.
    """
    if not mapping:
        return term
    if isinstance(term, Var):
        return mapping.get(term.name, term)
    if isinstance(term, Lam):
        inner = {k: v for k, v in mapping.items() if k != term.param}
        return Lam(term.param, substitute_all(term.body, inner))
    if isinstance(term, App):
        return App(substitute_all(term.fn, mapping), substitute_all(term.arg, mapping))
    if isinstance(term, Match):
        arms = tuple(
            Arm(
                arm.ctor,
                arm.binders,
                substitute_all(
                    arm.body, {k: v for k, v in mapping.items() if k not in arm.binders}
                ),
            )
            for arm in term.arms
        )
        return Match(substitute_all(term.scrutinee, mapping), arms)
    if isinstance(term, CapOp):
        app = substitute_all(term.app, mapping) if term.app is not None else None
        return CapOp(term.type_name, term.op, substitute_all(term.fn, mapping), app)
    if isinstance(term, Pure):
        return Pure(substitute_all(term.app, mapping), substitute_all(term.value, mapping))
    if isinstance(term, MapEffect):
        return MapEffect(
            substitute_all(term.app, mapping),
            substitute_all(term.fn, mapping),
            substitute_all(term.fx, mapping),
        )
    if isinstance(term, ApplyEffect):
        return ApplyEffect(
            substitute_all(term.app, mapping),
            substitute_all(term.ff, mapping),
            substitute_all(term.fx, mapping),
        )
    return term


def reduce(term: Term) -> Term:
    """Normalize *term* by beta reduction and constructor-match reduction.

    Generated terms are non-recursive, so reduction always terminates.

    Raises:
        NonExhaustiveError: A match on a known constructor has no arm for it.
    """
    if isinstance(term, App):
        fn = reduce(term.fn)
        arg = reduce(term.arg)
        if isinstance(fn, Lam):
            return reduce(substitute(fn.body, fn.param, arg))
        return App(fn, arg)
    if isinstance(term, Lam):
        return Lam(term.param, reduce(term.body))
    if isinstance(term, Match):
        scrutinee = reduce(term.scrutinee)
        head, args = app_spine(scrutinee)
        if isinstance(head, Ctor) and len(args) == head.arity:
            for arm in term.arms:
                if arm.ctor == head.name:
                    bound = dict(zip(arm.binders, args, strict=True))
                    return reduce(substitute_all(arm.body, bound))
            raise NonExhaustiveError(
                f"No match arm for constructor {head.name}",
                type_name=head.type_name,
                constructor=head.name,
            )
        return Match(scrutinee, tuple(Arm(a.ctor, a.binders, reduce(a.body)) for a in term.arms))
    if isinstance(term, CapOp):
        app = reduce(term.app) if term.app is not None else None
        return CapOp(term.type_name, term.op, reduce(term.fn), app)
    if isinstance(term, Pure):
        return Pure(reduce(term.app), reduce(term.value))
    if isinstance(term, MapEffect):
        return MapEffect(reduce(term.app), reduce(term.fn), reduce(term.fx))
    if isinstance(term, ApplyEffect):
        return ApplyEffect(reduce(term.app), reduce(term.ff), reduce(term.fx))
    return term


def alpha_equivalent(a: Term, b: Term) -> bool:
    """Structural equality up to renaming of bound variables."""
    return _alpha(a, b, {}, {}, 0)


def _alpha(
    a: Term, b: Term, env_a: dict[str, int], env_b: dict[str, int], level: int
) -> bool:
    if type(a) is not type(b):
        return False
    if isinstance(a, Var):
        assert isinstance(b, Var)
        la, lb = env_a.get(a.name), env_b.get(b.name)
        if la is None and lb is None:
            return a.name == b.name
        return la == lb
    if isinstance(a, Lam):
        assert isinstance(b, Lam)
        return _alpha(
            a.body, b.body, {**env_a, a.param: level}, {**env_b, b.param: level}, level + 1
        )
    if isinstance(a, Match):
        assert isinstance(b, Match)
        if len(a.arms) != len(b.arms) or not _alpha(a.scrutinee, b.scrutinee, env_a, env_b, level):
            return False
        for arm_a, arm_b in zip(a.arms, b.arms, strict=True):
            if arm_a.ctor != arm_b.ctor or len(arm_a.binders) != len(arm_b.binders):
                return False
            inner_a = {**env_a, **{n: level + i for i, n in enumerate(arm_a.binders)}}
            inner_b = {**env_b, **{n: level + i for i, n in enumerate(arm_b.binders)}}
            depth = level + len(arm_a.binders)
            if not _alpha(arm_a.body, arm_b.body, inner_a, inner_b, depth):
                return False
        return True
    if isinstance(a, Ctor):
        return a == b
    if isinstance(a, CapOp):
        assert isinstance(b, CapOp)
        if (a.type_name, a.op) != (b.type_name, b.op) or (a.app is None) != (b.app is None):
            return False
    children_a, children_b = _children(a), _children(b)
    return len(children_a) == len(children_b) and all(
        _alpha(x, y, env_a, env_b, level) for x, y in zip(children_a, children_b, strict=True)
    )


def _children(term: Term) -> list[Term]:
    if isinstance(term, App):
        return [term.fn, term.arg]
    if isinstance(term, CapOp):
        return [term.fn] if term.app is None else [term.fn, term.app]
    if isinstance(term, Pure):
        return [term.app, term.value]
    if isinstance(term, MapEffect):
        return [term.app, term.fn, term.fx]
    if isinstance(term, ApplyEffect):
        return [term.app, term.ff, term.fx]
    return []
