"""Hypothesis strategies for declared types, field types, and law inputs.

Values are generated structurally from the declaration: base types have
fixed strategies, applied container types use the ``arbitrary`` factory
installed alongside their capability, and the designated variable and
fixed parameters are bound to integers.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from hypothesis import strategies as st

from deriva.domain.applicative import Some
from deriva.domain.errors import MissingStrategyError
from deriva.domain.types import (
    CapabilityKind,
    Constructor,
    DataValue,
    TCon,
    TVar,
    TypeDecl,
    TypeExpr,
    spine,
)
from deriva.infrastructure.registry import InstanceRegistry

Strategy = st.SearchStrategy[Any]

BASE_STRATEGIES: dict[str, Strategy] = {
    "Nat": st.integers(min_value=0, max_value=100),
    "Int": st.integers(min_value=-100, max_value=100),
    "Bool": st.booleans(),
    "String": st.text(max_size=8),
    "Unit": st.just(()),
}

ELEMENTS: Strategy = st.integers(min_value=-1000, max_value=1000)


def strategy_for(
    t: TypeExpr,
    env: Mapping[str, Strategy],
    instances: InstanceRegistry,
) -> Strategy:
    """Strategy for values of field type *t*.

    *env* binds type variables (the designated variable and any fixed
    parameters) to strategies.

    Raises:
        MissingStrategyError: *t* mentions a type with no base strategy and
            no installed ``arbitrary`` factory.
    """
    if isinstance(t, TVar):
        try:
            return env[t.name]
        except KeyError:
            raise MissingStrategyError(f"Unbound type variable {t.name}") from None

    head, args = spine(t)
    if not isinstance(head, TCon):
        raise MissingStrategyError(f"No strategy for {t}")
    if not args and head.name in BASE_STRATEGIES:
        return BASE_STRATEGIES[head.name]

    factory = instances.lookup(head.name, CapabilityKind.ARBITRARY)
    if factory is None:
        raise MissingStrategyError(f"No strategy for {t}", type_name=head.name)
    return factory(*(strategy_for(arg, env, instances) for arg in args))


def constructor_strategy(
    decl: TypeDecl,
    ctor: Constructor,
    env: Mapping[str, Strategy],
    instances: InstanceRegistry,
) -> Strategy:
    """Strategy for values built with *ctor*, fields generated in order."""
    try:
        fields = [strategy_for(f.type, env, instances) for f in ctor.fields]
    except MissingStrategyError as exc:
        raise MissingStrategyError(
            exc.message, type_name=decl.name, constructor=ctor.name
        ) from exc
    return st.tuples(*fields).map(
        lambda args: DataValue(decl.name, ctor.name, tuple(args))
    )


def type_env(decl: TypeDecl, *args: Strategy) -> dict[str, Strategy]:
    """Bind *decl*'s parameters, then its designated variable, to *args*."""
    names = (*decl.params, decl.var)
    if len(args) != len(names):
        raise TypeError(f"{decl.name} takes {len(names)} type arguments ({len(args)} given)")
    return dict(zip(names, args, strict=True))


def default_env(decl: TypeDecl) -> dict[str, Strategy]:
    """Integers for every type variable of *decl*."""
    return type_env(decl, *([ELEMENTS] * decl.arity))


def arbitrary_factory(decl: TypeDecl, instances: InstanceRegistry) -> Any:
    """Build the ``arbitrary`` factory installed with a derived capability.

    The factory takes one strategy per type argument of *decl* and returns
    a strategy over all of its constructors.
    """

    def arbitrary(*args: Strategy) -> Strategy:
        env = type_env(decl, *args)
        options = [constructor_strategy(decl, ctor, env, instances) for ctor in decl.constructors]
        if not options:
            return st.nothing()
        return st.one_of(options)

    arbitrary.__qualname__ = f"{decl.name}.arbitrary"
    return arbitrary


# --- Law inputs ---


def element_functions() -> Strategy:
    """Pure integer-to-integer functions."""
    return st.functions(like=lambda value: value, returns=ELEMENTS, pure=True)


def option_functions() -> Strategy:
    """Pure functions into the Option effect; ``None`` marks failure."""
    return st.functions(
        like=lambda value: value,
        returns=st.none() | ELEMENTS.map(Some),
        pure=True,
    )


def writer_functions() -> Strategy:
    """Pure functions into the Writer effect with short logs."""
    logs = st.lists(ELEMENTS, max_size=2).map(tuple)
    return st.functions(
        like=lambda value: value,
        returns=st.tuples(logs, ELEMENTS),
        pure=True,
    )
