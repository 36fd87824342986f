"""Tests for interpreting generated operations as Python callables."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from deriva.domain.applicative import IDENTITY, LIST, OPTION, WRITER, Identity, Some
from deriva.domain.errors import MissingCapabilityError, NonExhaustiveError
from deriva.domain.evaluate import bind, constructor_function, evaluate
from deriva.domain.synthesis import synthesize_operation
from deriva.domain.terms import Arm, CapOp, Match, Var
from deriva.domain.types import DataValue, OpKind, TypeDecl
from deriva.infrastructure.registry import InstanceRegistry


def _bind(decl: TypeDecl, kind: OpKind, instances: InstanceRegistry) -> Callable[..., Any]:
    return bind(synthesize_operation(decl, kind, instances), instances)


def _log(value: int) -> tuple[tuple[int, ...], int]:
    return (value,), value * 10


class TestConstructorFunction:
    def test_curried(self) -> None:
        mk = constructor_function("Pair", "mk", 2)
        assert mk(1)(2) == DataValue("Pair", "mk", (1, 2))

    def test_nullary_is_a_value(self) -> None:
        assert constructor_function("Rose", "leaf", 0) == DataValue("Rose", "leaf")


class TestPairScenario:
    def test_map(self, pair_decl: TypeDecl, instances: InstanceRegistry) -> None:
        pair_map = _bind(pair_decl, OpKind.MAP, instances)
        assert pair_map(lambda v: v + 1, DataValue("Pair", "mk", (1, 2))) == DataValue(
            "Pair", "mk", (2, 3)
        )

    def test_traverse_writer_preserves_field_order(
        self, pair_decl: TypeDecl, instances: InstanceRegistry
    ) -> None:
        pair_traverse = _bind(pair_decl, OpKind.TRAVERSE, instances)
        result = pair_traverse(WRITER, _log, DataValue("Pair", "mk", (1, 2)))
        assert result == ((1, 2), DataValue("Pair", "mk", (10, 20)))

    def test_traverse_option_short_circuits(
        self, pair_decl: TypeDecl, instances: InstanceRegistry
    ) -> None:
        pair_traverse = _bind(pair_decl, OpKind.TRAVERSE, instances)
        value = DataValue("Pair", "mk", (1, -1))
        assert pair_traverse(OPTION, lambda v: Some(v) if v > 0 else None, value) is None

    def test_traverse_list_enumerates_in_order(
        self, pair_decl: TypeDecl, instances: InstanceRegistry
    ) -> None:
        pair_traverse = _bind(pair_decl, OpKind.TRAVERSE, instances)
        result = pair_traverse(LIST, lambda v: (v, -v), DataValue("Pair", "mk", (1, 2)))
        assert result == (
            DataValue("Pair", "mk", (1, 2)),
            DataValue("Pair", "mk", (1, -2)),
            DataValue("Pair", "mk", (-1, 2)),
            DataValue("Pair", "mk", (-1, -2)),
        )


class TestBoxScenario:
    def test_map_keeps_count(self, box_decl: TypeDecl, instances: InstanceRegistry) -> None:
        box_map = _bind(box_decl, OpKind.MAP, instances)
        assert box_map(str, DataValue("Box", "mk", (7, 5))) == DataValue("Box", "mk", ("7", 5))

    def test_traverse_sequences_only_the_element(
        self, box_decl: TypeDecl, instances: InstanceRegistry
    ) -> None:
        box_traverse = _bind(box_decl, OpKind.TRAVERSE, instances)
        result = box_traverse(WRITER, _log, DataValue("Box", "mk", (3, 5)))
        assert result == ((3,), DataValue("Box", "mk", (30, 5)))

    def test_traverse_identity(self, box_decl: TypeDecl, instances: InstanceRegistry) -> None:
        box_traverse = _bind(box_decl, OpKind.TRAVERSE, instances)
        result = box_traverse(IDENTITY, lambda v: Identity(v * 2), DataValue("Box", "mk", (3, 5)))
        assert result == Identity(DataValue("Box", "mk", (6, 5)))


class TestNestedScenario:
    def test_rose_map_through_list_and_option(
        self, sample_decls: dict[str, TypeDecl], instances: InstanceRegistry
    ) -> None:
        rose_map = _bind(sample_decls["Rose"], OpKind.MAP, instances)
        value = DataValue("Rose", "node", (1, (Some(2), None, Some(3))))
        assert rose_map(lambda v: v * 2, value) == DataValue(
            "Rose", "node", (2, (Some(4), None, Some(6)))
        )

    def test_rose_traverse_writer_order_spans_nesting(
        self, sample_decls: dict[str, TypeDecl], instances: InstanceRegistry
    ) -> None:
        rose_traverse = _bind(sample_decls["Rose"], OpKind.TRAVERSE, instances)
        value = DataValue("Rose", "node", (1, (Some(2), None, Some(3))))
        log, result = rose_traverse(WRITER, _log, value)
        assert log == (1, 2, 3)
        assert result == DataValue("Rose", "node", (10, (Some(20), None, Some(30))))

    def test_rose_nullary_under_option(
        self, sample_decls: dict[str, TypeDecl], instances: InstanceRegistry
    ) -> None:
        rose_traverse = _bind(sample_decls["Rose"], OpKind.TRAVERSE, instances)
        leaf = DataValue("Rose", "leaf")
        assert rose_traverse(OPTION, lambda v: None, leaf) == Some(leaf)


class TestEvaluateErrors:
    def test_wrong_argument_count(self, pair_decl: TypeDecl, instances: InstanceRegistry) -> None:
        pair_map = _bind(pair_decl, OpKind.MAP, instances)
        with pytest.raises(TypeError, match="takes 2 arguments"):
            pair_map(lambda v: v)

    def test_match_without_arm(self, instances: InstanceRegistry) -> None:
        term = Match(Var("x"), (Arm("other", (), Var("x")),))
        with pytest.raises(NonExhaustiveError):
            evaluate(term, {"x": DataValue("T", "c")}, instances)

    def test_match_on_non_constructor_value(self, instances: InstanceRegistry) -> None:
        term = Match(Var("x"), ())
        with pytest.raises(TypeError):
            evaluate(term, {"x": 3}, instances)

    def test_capability_removed_after_synthesis(self) -> None:
        term = CapOp("Gone", OpKind.MAP, Var("f"))
        with pytest.raises(MissingCapabilityError, match="Gone") as info:
            evaluate(term, {"f": abs}, InstanceRegistry())
        assert info.value.type_name == "Gone"
        assert info.value.code == "MISSING_CAPABILITY"
