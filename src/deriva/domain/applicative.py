"""Reference applicative effect contexts.

Each context provides ``pure``, ``fmap`` and ``ap``.  Values are plain
immutable Python objects so effects compare with ``==``:

- :class:`IdentityApplicative`: ``Identity(value)``.
- :class:`OptionApplicative`: ``None`` (failure) or ``Some(value)``.
- :class:`WriterApplicative`: ``(log, value)``; logs concatenate left to
  right, so it is the canonical non-commutative effect.
- :class:`ListApplicative`: tuple of alternatives, combined in order.
- :class:`ComposeApplicative`: ``outer`` effect holding ``inner`` effects.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol


class Applicative(Protocol):
    """Applicative evidence threaded through traverse."""

    name: str

    def pure(self, value: Any) -> Any: ...

    def fmap(self, fn: Callable[[Any], Any], fx: Any) -> Any: ...

    def ap(self, ff: Any, fx: Any) -> Any: ...


@dataclass(frozen=True)
class Identity:
    value: Any


@dataclass(frozen=True)
class Some:
    value: Any


class IdentityApplicative:
    name = "Identity"

    def pure(self, value: Any) -> Identity:
        return Identity(value)

    def fmap(self, fn: Callable[[Any], Any], fx: Identity) -> Identity:
        return Identity(fn(fx.value))

    def ap(self, ff: Identity, fx: Identity) -> Identity:
        return Identity(ff.value(fx.value))


class OptionApplicative:
    name = "Option"

    def pure(self, value: Any) -> Some:
        return Some(value)

    def fmap(self, fn: Callable[[Any], Any], fx: Some | None) -> Some | None:
        if fx is None:
            return None
        return Some(fn(fx.value))

    def ap(self, ff: Some | None, fx: Some | None) -> Some | None:
        if ff is None or fx is None:
            return None
        return Some(ff.value(fx.value))


class WriterApplicative:
    name = "Writer"

    def pure(self, value: Any) -> tuple[tuple[Any, ...], Any]:
        return (), value

    def fmap(self, fn: Callable[[Any], Any], fx: tuple[tuple[Any, ...], Any]) -> Any:
        log, value = fx
        return log, fn(value)

    def ap(self, ff: tuple[tuple[Any, ...], Any], fx: tuple[tuple[Any, ...], Any]) -> Any:
        log_f, fn = ff
        log_x, value = fx
        return log_f + log_x, fn(value)


class ListApplicative:
    name = "List"

    def pure(self, value: Any) -> tuple[Any, ...]:
        return (value,)

    def fmap(self, fn: Callable[[Any], Any], fx: tuple[Any, ...]) -> tuple[Any, ...]:
        return tuple(fn(x) for x in fx)

    def ap(self, ff: tuple[Any, ...], fx: tuple[Any, ...]) -> tuple[Any, ...]:
        return tuple(fn(x) for fn in ff for x in fx)


class ComposeApplicative:
    """``outer (inner a)`` with pure/ap lifted through both layers."""

    def __init__(self, outer: Applicative, inner: Applicative) -> None:
        self.outer = outer
        self.inner = inner
        self.name = f"Compose({outer.name}, {inner.name})"

    def pure(self, value: Any) -> Any:
        return self.outer.pure(self.inner.pure(value))

    def fmap(self, fn: Callable[[Any], Any], fx: Any) -> Any:
        return self.outer.fmap(lambda gx: self.inner.fmap(fn, gx), fx)

    def ap(self, ff: Any, fx: Any) -> Any:
        lifted = self.outer.fmap(lambda gf: lambda gx: self.inner.ap(gf, gx), ff)
        return self.outer.ap(lifted, fx)


def option_to_list(fx: Some | None) -> tuple[Any, ...]:
    """Applicative transformation from Option to List."""
    if fx is None:
        return ()
    return (fx.value,)


IDENTITY = IdentityApplicative()
OPTION = OptionApplicative()
WRITER = WriterApplicative()
LIST = ListApplicative()
