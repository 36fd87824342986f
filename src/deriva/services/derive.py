"""DeriveService: synthesize, verify, install.

A request names declarations by type (default: all loaded ones).  Each is
derived in dependency order, its laws are verified when enabled, and only
then is its capability installed and marked lawful so later types in the
same request can nest it.

INVARIANT: Installation happens only after a derivation and its laws have
fully succeeded.  A failed type leaves the instance registry untouched.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from deriva.domain.classify import Absent, Classification, Exact, Recursive, classify_decl
from deriva.domain.derivation import Derivation, derive
from deriva.domain.errors import DerivationError
from deriva.domain.render import render_op
from deriva.domain.types import TCon, TypeDecl, spine
from deriva.services.base import BaseService
from deriva.services.laws import LawProver, LawReport
from deriva.services.result import ServiceError, ServiceResult
from deriva.services.strategies import arbitrary_factory
from deriva.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


def describe_classification(c: Classification) -> dict[str, Any]:
    """JSON-friendly view of one field classification."""
    if isinstance(c, Exact):
        return {"kind": "exact"}
    if isinstance(c, Absent):
        return {"kind": "absent"}
    if isinstance(c, Recursive):
        return {"kind": "recursive"}
    return {
        "kind": "nested",
        "outer": str(c.outer),
        "inner_type": str(c.inner_type),
        "inner": describe_classification(c.inner),
    }


class DeriveService(BaseService):
    """Derives map/traverse for declarations in the workspace."""

    @traced
    def load(self, path: Path) -> ServiceResult:
        """Add the declarations in the TOML file at *path* to the workspace."""
        try:
            names = self._workspace.load(path)
        except DerivationError as exc:
            return ServiceResult(ok=False, op="load", error=ServiceError.from_exception(exc))
        return ServiceResult(ok=True, op="load", data={"path": str(path), "types": names})

    @traced
    def derive(self, names: list[str] | None = None, *, verify: bool | None = None) -> ServiceResult:
        """Derive each named type, then verify and install per config.

        *verify* overrides ``[derive] verify_laws`` when given.
        """
        if verify is None:
            verify = self._workspace.settings.derive.verify_laws
        return self._run("derive", names, verify=verify)

    @traced
    def verify(self, names: list[str] | None = None) -> ServiceResult:
        """Derive each named type and always verify its laws."""
        return self._run("laws", names, verify=True)

    @traced
    def classify(self, name: str) -> ServiceResult:
        """Report the classification of every field of *name*."""
        op = "classify"
        try:
            decl = self._workspace.decls.lookup_decl(name)
            table = classify_decl(decl)
        except DerivationError as exc:
            return ServiceResult(ok=False, op=op, error=ServiceError.from_exception(exc))

        constructors = []
        for ctor in decl.constructors:
            constructors.append(
                {
                    "name": ctor.name,
                    "fields": [
                        {
                            "label": f.label(i),
                            "type": str(f.type),
                            **describe_classification(c),
                        }
                        for i, (f, c) in enumerate(zip(ctor.fields, table[ctor.name], strict=True))
                    ],
                }
            )
        return ServiceResult(
            ok=True,
            op=op,
            data={"type": decl.name, "var": decl.var, "constructors": constructors},
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run(self, op: str, names: list[str] | None, *, verify: bool) -> ServiceResult:
        warnings: list[str] = []
        results: list[dict[str, Any]] = []
        try:
            for decl in self._ordered(names):
                with trace_span(decl.name, constructors=len(decl.constructors)) as span:
                    entry = self._derive_one(decl, verify=verify, warnings=warnings)
                    if span is not None:
                        span.annotate("lawful", entry["lawful"])
                    results.append(entry)
        except DerivationError as exc:
            logger.debug("Derivation failed: %s", exc)
            return ServiceResult(
                ok=False,
                op=op,
                warnings=warnings,
                error=ServiceError.from_exception(exc),
                data={"types": results},
            )
        return ServiceResult(ok=True, op=op, data={"types": results}, warnings=warnings)

    def _derive_one(
        self, decl: TypeDecl, *, verify: bool, warnings: list[str]
    ) -> dict[str, Any]:
        instances = self._workspace.instances
        derivation = derive(decl, instances)

        report: LawReport | None = None
        if verify:
            report = LawProver(instances, self._workspace.settings.laws).verify(derivation)

        installed = self._workspace.settings.derive.install
        if installed:
            self._install(derivation, lawful=report is not None)

        equations = [eq for op in derivation.ops for eq in op.equations]
        self._dispatch_event(
            "post_derive",
            {
                "type_name": decl.name,
                "operations": [op.name for op in derivation.ops],
                "equations": len(equations),
                "lawful": report is not None,
            },
            warnings,
        )

        out: dict[str, Any] = {
            "name": decl.name,
            "operations": {str(op.kind): render_op(op) for op in derivation.ops},
            "equations": [str(eq) for eq in equations],
            "nested": sorted(derivation.nested),
            "installed": installed,
            "lawful": report is not None,
        }
        if report is not None:
            out["laws"] = report.to_dict()
        return out

    def _install(self, derivation: Derivation, *, lawful: bool) -> None:
        instances = self._workspace.instances
        capability = derivation.capability(
            instances,
            arbitrary=arbitrary_factory(derivation.decl, instances),
            lawful=lawful,
        )
        instances.install(capability)
        logger.debug("Installed %s (lawful=%s)", derivation.decl.name, lawful)

    def _ordered(self, names: list[str] | None) -> list[TypeDecl]:
        """Requested declarations, each after the declared types it nests.

        A nested declared type that is not installed yet is derived first
        even when it was not requested.
        """
        registry = self._workspace.decls
        requested = [registry.lookup_decl(n) for n in (names or registry.names())]
        installed = set(self._workspace.instances.names())

        ordered: list[TypeDecl] = []
        visiting: set[str] = set()

        def visit(decl: TypeDecl) -> None:
            if decl in ordered or decl.name in visiting:
                return
            visiting.add(decl.name)
            for dep in _nested_heads(decl):
                if dep in registry and dep not in installed:
                    visit(registry.lookup_decl(dep))
            visiting.discard(decl.name)
            ordered.append(decl)

        for decl in requested:
            visit(decl)
        return ordered


def _nested_heads(decl: TypeDecl) -> list[str]:
    """Type constructor names applied in *decl*'s field types."""
    heads: list[str] = []
    for ctor in decl.constructors:
        for f in ctor.fields:
            stack = [f.type]
            while stack:
                head, args = spine(stack.pop())
                if args and isinstance(head, TCon) and head.name != decl.name:
                    heads.append(head.name)
                stack.extend(args)
    return heads
