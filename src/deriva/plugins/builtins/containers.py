"""Built-in container capabilities: List, Option, Prod.

Value representations:

- ``List a``: a tuple of elements.
- ``Option a``: ``None`` or :class:`~deriva.domain.applicative.Some`.
- ``Prod b a``: a pair; only the second component is transformed.

Their laws are checked by the test suite, so they are installed as lawful.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pluggy
from hypothesis import strategies as st

from deriva.domain.applicative import Applicative, Some
from deriva.domain.capability import Capability

hookimpl = pluggy.HookimplMarker("deriva")

MAX_LIST_SIZE = 4


# --- List ---


def list_map(fn: Callable[[Any], Any], xs: tuple[Any, ...]) -> tuple[Any, ...]:
    return tuple(fn(x) for x in xs)


def list_traverse(app: Applicative, fn: Callable[[Any], Any], xs: tuple[Any, ...]) -> Any:
    acc = app.pure(())
    for x in xs:
        acc = app.ap(app.fmap(lambda done: lambda y: (*done, y), acc), fn(x))
    return acc


def list_arbitrary(elements: st.SearchStrategy[Any]) -> st.SearchStrategy[tuple[Any, ...]]:
    return st.lists(elements, max_size=MAX_LIST_SIZE).map(tuple)


# --- Option ---


def option_map(fn: Callable[[Any], Any], value: Some | None) -> Some | None:
    if value is None:
        return None
    return Some(fn(value.value))


def option_traverse(app: Applicative, fn: Callable[[Any], Any], value: Some | None) -> Any:
    if value is None:
        return app.pure(None)
    return app.fmap(Some, fn(value.value))


def option_arbitrary(elements: st.SearchStrategy[Any]) -> st.SearchStrategy[Some | None]:
    return st.none() | elements.map(Some)


# --- Prod ---


def prod_map(fn: Callable[[Any], Any], pair: tuple[Any, Any]) -> tuple[Any, Any]:
    first, second = pair
    return first, fn(second)


def prod_traverse(app: Applicative, fn: Callable[[Any], Any], pair: tuple[Any, Any]) -> Any:
    first, second = pair
    return app.fmap(lambda y: (first, y), fn(second))


def prod_arbitrary(
    first: st.SearchStrategy[Any], second: st.SearchStrategy[Any]
) -> st.SearchStrategy[tuple[Any, Any]]:
    return st.tuples(first, second)


BUILTIN_CAPABILITIES: list[Capability] = [
    Capability("List", list_map, list_traverse, list_arbitrary, lawful=True),
    Capability("Option", option_map, option_traverse, option_arbitrary, lawful=True),
    Capability("Prod", prod_map, prod_traverse, prod_arbitrary, lawful=True),
]


class ContainersPlugin:
    """Provides the List, Option and Prod capabilities."""

    @hookimpl
    def register_capabilities(self) -> list[Capability]:
        return list(BUILTIN_CAPABILITIES)
