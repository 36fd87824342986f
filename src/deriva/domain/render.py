"""Readable rendering of generated operations.

Output is Lean-flavoured: ``match`` with one ``|`` line per constructor,
``<$>`` for ``MapEffect`` and ``<*>`` for ``ApplyEffect``.  Applicative
evidence is implicit in the rendered text.
"""

from __future__ import annotations

from deriva.domain.synthesis import SynthesizedOp
from deriva.domain.terms import (
    App,
    ApplyEffect,
    CapOp,
    Ctor,
    Lam,
    MapEffect,
    Match,
    Pure,
    Term,
    Var,
)
from deriva.domain.types import OpKind


def _atomic(term: Term) -> bool:
    return isinstance(term, Var | Ctor)


def _paren(term: Term) -> str:
    text = render_term(term)
    return text if _atomic(term) else f"({text})"


def render_term(term: Term, indent: int = 0, type_name: str | None = None) -> str:
    """Render *term* as a single expression (matches span several lines).

    *type_name* qualifies constructor patterns of a top-level match.
    """
    if isinstance(term, Var):
        return term.name
    if isinstance(term, Ctor):
        return f"{term.type_name}.{term.name}"
    if isinstance(term, Lam):
        return f"fun {term.param} => {render_term(term.body, indent)}"
    if isinstance(term, App):
        fn = render_term(term.fn, indent) if isinstance(term.fn, App) else _paren(term.fn)
        return f"{fn} {_paren(term.arg)}"
    if isinstance(term, CapOp):
        if term.op is OpKind.MAP:
            return f"{term.type_name}.map {_paren(term.fn)}"
        return f"{term.type_name}.traverse {_paren(term.fn)}"
    if isinstance(term, Pure):
        return f"pure {_paren(term.value)}"
    if isinstance(term, MapEffect):
        return f"{_paren(term.fn)} <$> {_paren(term.fx)}"
    if isinstance(term, ApplyEffect):
        left = (
            render_term(term.ff, indent)
            if isinstance(term.ff, MapEffect | ApplyEffect)
            else _paren(term.ff)
        )
        return f"{left} <*> {_paren(term.fx)}"
    if isinstance(term, Match):
        pad = " " * (indent + 2)
        lines = [f"match {render_term(term.scrutinee)} with"]
        for arm in term.arms:
            ctor = f"{type_name}.{arm.ctor}" if type_name else arm.ctor
            pattern = " ".join([ctor, *arm.binders])
            lines.append(f"{pad}| {pattern} => {render_term(arm.body, indent + 2)}")
        return "\n".join(lines)
    raise TypeError(f"Unknown term node: {term!r}")


def render_op(op: SynthesizedOp) -> str:
    """Render *op* as a definition: ``def Pair.map f x := match x with ...``."""
    term = op.body
    params: list[str] = []
    while isinstance(term, Lam):
        params.append(term.param)
        term = term.body
    body = render_term(term, indent=2, type_name=op.type_name)
    return f"def {op.name} {' '.join(params)} :=\n  {body}"
