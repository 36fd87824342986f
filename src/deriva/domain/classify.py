"""Type classifier: how a field relates to the designated variable.

Four cases, checked in this order so exactly one applies:

- ``Exact``: the field type *is* the variable.
- ``Recursive``: the field mentions the type being derived.
- ``Absent``: the variable does not occur in the field type.
- ``Nested``: ``outer`` applied to a final argument that contains the
  variable; classification recurses into that argument.

INVARIANT: Each ``Nested`` step recurses into a strictly shallower type, so
classification always terminates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from deriva.domain.errors import ClassificationError
from deriva.domain.types import TApp, TCon, TVar, TypeDecl, TypeExpr, mentions, occurs, spine


@dataclass(frozen=True)
class Exact:
    """The field is the designated variable itself."""


@dataclass(frozen=True)
class Absent:
    """The designated variable does not occur in the field."""


@dataclass(frozen=True)
class Recursive:
    """The field refers back to the type being derived."""


@dataclass(frozen=True)
class Nested:
    """The variable sits in the final argument of an application chain.

    Attributes:
        outer: The partially applied container, e.g. ``Prod Nat``.
        inner_type: The final argument, e.g. ``List a``.
        inner: Classification of *inner_type* (``Exact`` or ``Nested``).
    """

    outer: TypeExpr
    inner_type: TypeExpr
    inner: Classification

    @property
    def head(self) -> str:
        """Name of the container whose capability is required."""
        head, _ = spine(self.outer)
        assert isinstance(head, TCon)
        return head.name

    def heads(self) -> list[str]:
        """Container names from outermost to innermost."""
        out = [self.head]
        if isinstance(self.inner, Nested):
            out.extend(self.inner.heads())
        return out


Classification = Union[Exact, Absent, Recursive, Nested]


def classify(
    t: TypeExpr,
    var: str,
    self_name: str,
    *,
    constructor: str | None = None,
    field: str | None = None,
) -> Classification:
    """Classify field type *t* against variable *var*.

    Raises:
        ClassificationError: *var* occurs somewhere other than the final
            argument of an application chain, or under a variable head.
    """
    if isinstance(t, TVar) and t.name == var:
        return Exact()
    if mentions(self_name, t):
        return Recursive()
    if not occurs(var, t):
        return Absent()
    if isinstance(t, TApp):
        head, _ = spine(t)
        if not occurs(var, t.head) and isinstance(head, TCon):
            return Nested(
                outer=t.head,
                inner_type=t.arg,
                inner=classify(t.arg, var, self_name, constructor=constructor, field=field),
            )
    raise ClassificationError(
        f"Type {t} is not structurally transformable with respect to {var}",
        type_name=self_name,
        constructor=constructor,
        field=field,
    )


def classify_decl(decl: TypeDecl) -> dict[str, list[Classification]]:
    """Classify every field of every constructor, in declaration order."""
    return {
        ctor.name: [
            classify(f.type, decl.var, decl.name, constructor=ctor.name, field=f.label(i))
            for i, f in enumerate(ctor.fields)
        ]
        for ctor in decl.constructors
    }
