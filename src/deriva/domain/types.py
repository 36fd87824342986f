"""Declaration model: type expressions, fields, constructors, declarations.

Type expressions are curried applications over named constructors and
variables.  ``Prod Nat a`` is ``TApp(TApp(TCon("Prod"), TCon("Nat")), TVar("a"))``.

INVARIANT: Everything here is immutable.  A declaration is built once per
derivation request and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Union


class OpKind(StrEnum):
    """The two structural operations the engine synthesizes."""

    MAP = "map"
    TRAVERSE = "traverse"


class CapabilityKind(StrEnum):
    """Implementation kinds accepted by the instance registry."""

    MAP = "map"
    TRAVERSE = "traverse"
    ARBITRARY = "arbitrary"


# --- Type expressions ---


@dataclass(frozen=True)
class TVar:
    """Type variable reference."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class TCon:
    """Named type constructor (base type or container head)."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class TApp:
    """Application of a type to one argument."""

    head: TypeExpr
    arg: TypeExpr

    def __str__(self) -> str:
        arg = str(self.arg)
        if isinstance(self.arg, TApp):
            arg = f"({arg})"
        return f"{self.head} {arg}"


TypeExpr = Union[TVar, TCon, TApp]


def occurs(var: str, t: TypeExpr) -> bool:
    """Whether type variable *var* occurs anywhere inside *t*."""
    if isinstance(t, TVar):
        return t.name == var
    if isinstance(t, TApp):
        return occurs(var, t.head) or occurs(var, t.arg)
    return False


def mentions(con: str, t: TypeExpr) -> bool:
    """Whether type constructor *con* occurs anywhere inside *t*."""
    if isinstance(t, TCon):
        return t.name == con
    if isinstance(t, TApp):
        return mentions(con, t.head) or mentions(con, t.arg)
    return False


def spine(t: TypeExpr) -> tuple[TypeExpr, list[TypeExpr]]:
    """Split an application chain into its head and argument list.

    Examples:
        ``Prod Nat a`` -> ``(TCon("Prod"), [TCon("Nat"), TVar("a")])``
    """
    args: list[TypeExpr] = []
    while isinstance(t, TApp):
        args.append(t.arg)
        t = t.head
    args.reverse()
    return t, args


def depth(t: TypeExpr) -> int:
    """Nesting depth along the final-argument path of *t*."""
    if isinstance(t, TApp):
        return 1 + depth(t.arg)
    return 0


# --- Declarations ---


@dataclass(frozen=True)
class Field:
    """A constructor field.  *name* is cosmetic and only used in messages."""

    type: TypeExpr
    name: str | None = None

    def label(self, index: int) -> str:
        return self.name or f"#{index}"


@dataclass(frozen=True)
class Constructor:
    """A data constructor.  Field order fixes the effect order of traverse."""

    name: str
    fields: tuple[Field, ...] = ()

    @property
    def arity(self) -> int:
        return len(self.fields)


@dataclass(frozen=True)
class TypeDecl:
    """An algebraic data type parameterized over one designated variable.

    Attributes:
        name: Type name, also the head used to detect self-reference.
        constructors: Constructors in declaration order.
        var: The designated variable transformed by map/traverse.  It is
            always the last type parameter.
        params: Leading type parameters held fixed by the derivation.
    """

    name: str
    constructors: tuple[Constructor, ...]
    var: str = "a"
    params: tuple[str, ...] = ()

    @property
    def arity(self) -> int:
        """Number of type arguments the declared type takes."""
        return len(self.params) + 1

    def constructor(self, name: str) -> Constructor:
        for ctor in self.constructors:
            if ctor.name == name:
                return ctor
        raise KeyError(f"{self.name} has no constructor {name!r}")


# --- Runtime values ---


@dataclass(frozen=True)
class DataValue:
    """A value of a declared type: a constructor tag and its arguments."""

    type_name: str
    ctor: str
    args: tuple[Any, ...] = field(default_factory=tuple)

    def __repr__(self) -> str:
        if not self.args:
            return f"{self.type_name}.{self.ctor}"
        inner = ", ".join(repr(a) for a in self.args)
        return f"{self.type_name}.{self.ctor}({inner})"
