"""Interpreter turning generated terms into Python callables."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from deriva.domain.capability import CapabilityLookup
from deriva.domain.errors import MissingCapabilityError, NonExhaustiveError
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
from deriva.domain.types import DataValue, OpKind


def constructor_function(type_name: str, ctor: str, arity: int) -> Any:
    """Curried constructor: ``arity`` single-argument calls build a DataValue."""

    def collect(args: tuple[Any, ...]) -> Any:
        if len(args) == arity:
            return DataValue(type_name, ctor, args)
        return lambda value: collect((*args, value))

    return collect(())


def evaluate(term: Term, env: Mapping[str, Any], capabilities: CapabilityLookup) -> Any:
    """Evaluate *term* under *env*.

    Raises:
        NonExhaustiveError: A value reaches a match with no arm for its
            constructor.
        MissingCapabilityError: A capability disappeared from the lookup
            between synthesis and evaluation.
    """
    if isinstance(term, Var):
        return env[term.name]
    if isinstance(term, Lam):
        param, body = term.param, term.body
        return lambda value: evaluate(body, {**env, param: value}, capabilities)
    if isinstance(term, App):
        return evaluate(term.fn, env, capabilities)(evaluate(term.arg, env, capabilities))
    if isinstance(term, Ctor):
        return constructor_function(term.type_name, term.name, term.arity)
    if isinstance(term, Match):
        return _evaluate_match(term, env, capabilities)
    if isinstance(term, CapOp):
        return _evaluate_capability(term, env, capabilities)
    if isinstance(term, Pure):
        app = evaluate(term.app, env, capabilities)
        return app.pure(evaluate(term.value, env, capabilities))
    if isinstance(term, MapEffect):
        app = evaluate(term.app, env, capabilities)
        return app.fmap(evaluate(term.fn, env, capabilities), evaluate(term.fx, env, capabilities))
    if isinstance(term, ApplyEffect):
        app = evaluate(term.app, env, capabilities)
        return app.ap(evaluate(term.ff, env, capabilities), evaluate(term.fx, env, capabilities))
    raise TypeError(f"Unknown term node: {term!r}")


def _evaluate_match(term: Match, env: Mapping[str, Any], capabilities: CapabilityLookup) -> Any:
    value = evaluate(term.scrutinee, env, capabilities)
    if not isinstance(value, DataValue):
        raise TypeError(f"Cannot match on non-constructor value {value!r}")
    for arm in term.arms:
        if arm.ctor == value.ctor:
            bound = dict(zip(arm.binders, value.args, strict=True))
            return evaluate(arm.body, {**env, **bound}, capabilities)
    raise NonExhaustiveError(
        f"No match arm for constructor {value.ctor}",
        type_name=value.type_name,
        constructor=value.ctor,
    )


def _evaluate_capability(
    term: CapOp, env: Mapping[str, Any], capabilities: CapabilityLookup
) -> Callable[[Any], Any]:
    cap = capabilities.lookup_capability(term.type_name)
    if cap is None:
        raise MissingCapabilityError(
            f"{term.type_name} has no {term.op} capability", type_name=term.type_name
        )
    fn = evaluate(term.fn, env, capabilities)
    if term.op is OpKind.MAP:
        return lambda value: cap.map(fn, value)
    assert term.app is not None
    app = evaluate(term.app, env, capabilities)
    return lambda value: cap.traverse(app, fn, value)


def bind(op: SynthesizedOp, capabilities: CapabilityLookup) -> Callable[..., Any]:
    """Uncurry *op* into a plain function of its parameters.

    ``map`` binds as ``fn(f, x)``; ``traverse`` as ``fn(app, f, x)``.
    """
    curried = evaluate(op.body, {}, capabilities)
    arity = len(op.params)

    def call(*args: Any) -> Any:
        if len(args) != arity:
            raise TypeError(f"{op.name} takes {arity} arguments ({len(args)} given)")
        result = curried
        for arg in args:
            result = result(arg)
        return result

    call.__name__ = op.name.replace(".", "_")
    call.__qualname__ = op.name
    return call
