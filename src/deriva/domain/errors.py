"""Derivation error taxonomy.

INVARIANT: Every error is fatal to its derivation request.  The engine never
emits a partial map/traverse; callers receive the offending location instead.
"""

from __future__ import annotations

from typing import Any


class DerivationError(Exception):
    """Base class for all derivation failures.

    Attributes:
        code: Stable machine-readable code, surfaced in ``ServiceError.code``.
        type_name: The declaration being derived, when known.
        constructor: Offending constructor, when known.
        field: Offending field label, when known.
    """

    code = "DERIVATION_FAILED"

    def __init__(
        self,
        message: str,
        *,
        type_name: str | None = None,
        constructor: str | None = None,
        field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.type_name = type_name
        self.constructor = constructor
        self.field = field

    @property
    def location(self) -> str:
        parts = [p for p in (self.type_name, self.constructor) if p]
        loc = ".".join(parts)
        if self.field:
            loc = f"{loc} field {self.field}" if loc else f"field {self.field}"
        return loc

    def detail(self) -> dict[str, Any]:
        """Location payload for ``ServiceError.detail``."""
        out: dict[str, Any] = {}
        if self.type_name:
            out["type"] = self.type_name
        if self.constructor:
            out["constructor"] = self.constructor
        if self.field:
            out["field"] = self.field
        return out

    def __str__(self) -> str:
        if self.location:
            return f"{self.message} (at {self.location})"
        return self.message


class ClassificationError(DerivationError):
    """The designated variable occurs outside a structurally-transformable position."""

    code = "NOT_TRANSFORMABLE"


class RecursiveFieldError(DerivationError):
    """A field refers to the type being derived."""

    code = "RECURSIVE_FIELD"


class MissingCapabilityError(DerivationError):
    """A nested outer type exposes no map/traverse capability."""

    code = "MISSING_CAPABILITY"


class NonExhaustiveError(DerivationError):
    """Constructor enumeration invariant violated."""

    code = "NON_EXHAUSTIVE"


class MissingEquationError(NonExhaustiveError):
    """A constructor has no unfolding equation to reason from."""

    code = "MISSING_EQUATION"


class MissingCapabilityLawError(DerivationError):
    """A nested capability's own laws were never established."""

    code = "MISSING_CAPABILITY_LAW"


class LawViolationError(DerivationError):
    """A generated value falsified a functor/traversable law."""

    code = "LAW_VIOLATION"

    def __init__(self, message: str, *, law: str, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.law = law

    def detail(self) -> dict[str, Any]:
        out = super().detail()
        out["law"] = self.law
        return out


class CapabilityFailureError(LawViolationError):
    """A capability raised while a law was being checked."""

    code = "CAPABILITY_FAILED"


class MissingStrategyError(DerivationError):
    """No value generator is known for a type appearing in a field."""

    code = "MISSING_STRATEGY"


class UnknownTypeError(DerivationError):
    """The declaration registry has no entry for the requested type."""

    code = "UNKNOWN_TYPE"


class DeclarationError(DerivationError):
    """A declaration could not be parsed or is malformed."""

    code = "INVALID_DECLARATION"
