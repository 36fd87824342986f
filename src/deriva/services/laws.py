"""Law prover: functor and traversable laws, checked per constructor.

Each law is stated once and then split by constructor: the value under
test is drawn only from that constructor, whose unfolding equations must
already be proved.  Hypothesis generates the values and element functions.

Obligations run in a fixed order.  The first falsified law aborts the
verification of the whole type.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from hypothesis import HealthCheck, Verbosity, given, seed, settings
from hypothesis.errors import Unsatisfiable

from deriva.config.models import LawsConfig
from deriva.domain.applicative import (
    IDENTITY,
    LIST,
    OPTION,
    WRITER,
    Applicative,
    ComposeApplicative,
    Identity,
    option_to_list,
)
from deriva.domain.capability import Capability
from deriva.domain.classify import Nested, classify_decl
from deriva.domain.derivation import Derivation
from deriva.domain.equations import require_equations
from deriva.domain.errors import (
    CapabilityFailureError,
    DerivationError,
    LawViolationError,
    MissingCapabilityError,
    MissingCapabilityLawError,
    MissingStrategyError,
)
from deriva.infrastructure.registry import InstanceRegistry
from deriva.services.strategies import (
    Strategy,
    constructor_strategy,
    default_env,
    element_functions,
    option_functions,
    writer_functions,
)
from deriva.services.telemetry import trace_span

logger = logging.getLogger(__name__)


def _identity(value: Any) -> Any:
    return value


def _map_identity(ops: Capability, x: Any) -> tuple[Any, Any]:
    return ops.map(_identity, x), x


def _map_composition(ops: Capability, x: Any, f: Any, g: Any) -> tuple[Any, Any]:
    return ops.map(lambda v: g(f(v)), x), ops.map(g, ops.map(f, x))


def _traverse_identity(app: Applicative) -> Callable[..., tuple[Any, Any]]:
    def check(ops: Capability, x: Any) -> tuple[Any, Any]:
        return ops.traverse(app, app.pure, x), app.pure(x)

    return check


OPTION_WRITER = ComposeApplicative(OPTION, WRITER)


def _traverse_composition(ops: Capability, x: Any, f: Any, g: Any) -> tuple[Any, Any]:
    lhs = ops.traverse(OPTION_WRITER, lambda v: OPTION.fmap(g, f(v)), x)
    rhs = OPTION.fmap(lambda y: ops.traverse(WRITER, g, y), ops.traverse(OPTION, f, x))
    return lhs, rhs


def _traverse_naturality(ops: Capability, x: Any, f: Any) -> tuple[Any, Any]:
    lhs = option_to_list(ops.traverse(OPTION, f, x))
    rhs = ops.traverse(LIST, lambda v: option_to_list(f(v)), x)
    return lhs, rhs


def _traverse_map_coherence(ops: Capability, x: Any, f: Any) -> tuple[Any, Any]:
    return ops.traverse(IDENTITY, lambda v: Identity(f(v)), x), Identity(ops.map(f, x))


@dataclass(frozen=True)
class Law:
    """A law as an equality ``check(ops, x, **inputs)`` must satisfy."""

    name: str
    check: Callable[..., tuple[Any, Any]]
    inputs: Callable[[], dict[str, Strategy]] = dict
    effect: str | None = None


LAWS: tuple[Law, ...] = (
    Law("map_identity", _map_identity),
    Law(
        "map_composition",
        _map_composition,
        lambda: {"f": element_functions(), "g": element_functions()},
    ),
    Law("traverse_identity", _traverse_identity(OPTION), effect=OPTION.name),
    Law("traverse_identity", _traverse_identity(WRITER), effect=WRITER.name),
    Law("traverse_identity", _traverse_identity(LIST), effect=LIST.name),
    Law(
        "traverse_composition",
        _traverse_composition,
        lambda: {"f": option_functions(), "g": writer_functions()},
        effect=OPTION_WRITER.name,
    ),
    Law(
        "traverse_naturality",
        _traverse_naturality,
        lambda: {"f": option_functions()},
        effect="Option -> List",
    ),
    Law(
        "traverse_map_coherence",
        _traverse_map_coherence,
        lambda: {"f": element_functions()},
        effect=IDENTITY.name,
    ),
)


@dataclass(frozen=True)
class Obligation:
    """One law checked at one constructor.

    *vacuous* marks a constructor with no values to test, so the law holds
    trivially there.
    """

    law: str
    constructor: str
    effect: str | None = None
    vacuous: bool = False

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"law": self.law, "constructor": self.constructor}
        if self.effect:
            out["effect"] = self.effect
        if self.vacuous:
            out["vacuous"] = True
        return out


class _Falsified(Exception):
    """Raised inside a property when the two sides of a law differ."""


@dataclass(frozen=True)
class LawReport:
    """Every obligation discharged for one type."""

    type_name: str
    obligations: list[Obligation] = field(default_factory=list)
    max_examples: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type_name,
            "max_examples": self.max_examples,
            "obligations": [o.to_dict() for o in self.obligations],
        }


class LawProver:
    """Checks the laws of a derivation against the installed capabilities."""

    def __init__(self, instances: InstanceRegistry, config: LawsConfig | None = None) -> None:
        self._instances = instances
        self._config = config or LawsConfig()

    def verify(self, derivation: Derivation) -> LawReport:
        """Discharge every law at every constructor of *derivation*.

        Raises:
            MissingEquationError: A constructor lacks a proved unfolding equation.
            MissingCapabilityLawError: A nested container is not lawful.
            MissingStrategyError: A field type has no value strategy.
            LawViolationError: A law is falsified.
            CapabilityFailureError: A capability raised while a law was checked.
        """
        decl = derivation.decl
        require_equations(derivation.map, decl)
        require_equations(derivation.traverse, decl)
        self._require_lawful_nesting(derivation)

        ops = derivation.capability(self._instances)
        env = default_env(decl)
        obligations: list[Obligation] = []
        for ctor in decl.constructors:
            values = constructor_strategy(decl, ctor, env, self._instances)
            if values.is_empty:
                logger.debug("%s.%s has no values; laws hold vacuously", decl.name, ctor.name)
                obligations.extend(
                    Obligation(law.name, ctor.name, law.effect, vacuous=True) for law in LAWS
                )
                continue
            for law in LAWS:
                with trace_span(
                    f"{law.name}:{ctor.name}",
                    law=law.name,
                    constructor=ctor.name,
                    effect=law.effect,
                ):
                    self._check(law, ops, values, type_name=decl.name, constructor=ctor.name)
                obligations.append(Obligation(law.name, ctor.name, law.effect))

        logger.debug("Verified %d law obligations for %s", len(obligations), decl.name)
        return LawReport(decl.name, obligations, self._config.max_examples)

    def _require_lawful_nesting(self, derivation: Derivation) -> None:
        decl = derivation.decl
        for ctor_name, classifications in classify_decl(decl).items():
            ctor = decl.constructor(ctor_name)
            for i, (fld, classification) in enumerate(
                zip(ctor.fields, classifications, strict=True)
            ):
                if not isinstance(classification, Nested):
                    continue
                for head in classification.heads():
                    cap = self._instances.lookup_capability(head)
                    if cap is None:
                        raise MissingCapabilityError(
                            f"{head} has no map/traverse capability",
                            type_name=decl.name,
                            constructor=ctor_name,
                            field=fld.label(i),
                        )
                    if not cap.lawful:
                        raise MissingCapabilityLawError(
                            f"Laws of {head} are not established",
                            type_name=decl.name,
                            constructor=ctor_name,
                            field=fld.label(i),
                        )

    def _check(
        self,
        law: Law,
        ops: Capability,
        values: Strategy,
        *,
        type_name: str,
        constructor: str,
    ) -> None:
        def prop(**kwargs: Any) -> None:
            lhs, rhs = law.check(ops, **kwargs)
            if lhs != rhs:
                raise _Falsified(f"{lhs!r} != {rhs!r}")

        test = given(x=values, **law.inputs())(prop)
        test = settings(
            max_examples=self._config.max_examples,
            database=None,
            deadline=None,
            derandomize=False,
            print_blob=False,
            report_multiple_bugs=False,
            verbosity=Verbosity.quiet,
            suppress_health_check=list(HealthCheck),
        )(test)
        if self._config.seed is not None:
            test = seed(self._config.seed)(test)

        where = f" under {law.effect}" if law.effect else ""
        try:
            test()
        except _Falsified as exc:
            raise LawViolationError(
                f"{law.name}{where} falsified: {exc}",
                law=law.name,
                type_name=type_name,
                constructor=constructor,
            ) from exc
        except DerivationError:
            raise
        except Unsatisfiable as exc:
            raise MissingStrategyError(
                f"Could not generate values for {law.name}{where}: {exc}",
                type_name=type_name,
                constructor=constructor,
            ) from exc
        except Exception as exc:
            raise CapabilityFailureError(
                f"{law.name}{where} raised {type(exc).__name__}: {exc}",
                law=law.name,
                type_name=type_name,
                constructor=constructor,
            ) from exc
