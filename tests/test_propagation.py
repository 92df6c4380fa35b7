"""Tests for recomputation after modify and replace."""

import operator
from collections.abc import Callable
from typing import Any

import pytest

import constructions as cs
from constructions import (
    ConstructedSpec,
    Construction,
    ConstructionRuleFailedError,
    ConstructionView,
    CycleDetectedError,
    ElementKind,
    ElementNotFoundError,
    NotAPlacedElementError,
    PlacedSpec,
    RecomputeFailedError,
    UnknownDependencyError,
    UpdateStalledError,
)

# --- Fixtures ---


@pytest.fixture
def sum_construction() -> Construction:
    """A=1, B=2 and S=A+B."""
    c = Construction()
    c.place("A", 1)
    c.place("B", 2)
    c.construct("S", lambda view: view["A"] + view["B"], {"A", "B"})
    return c


class RecordingRules:
    """Builds rules that record every evaluation."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def rule(self, name: str, func: Callable[..., Any], *requires: str) -> Callable[[ConstructionView], Any]:
        def evaluate(view: ConstructionView) -> Any:
            self.calls.append(name)
            return func(*(view[r] for r in requires))

        return evaluate


@pytest.fixture
def diamond() -> tuple[Construction, RecordingRules]:
    """A feeds B and C, which both feed D. Z feeds E independently."""
    rules = RecordingRules()
    c = Construction()
    c.place("A", 1)
    c.place("Z", 100)
    c.construct("B", rules.rule("B", lambda a: a + 1, "A"), {"A"})
    c.construct("C", rules.rule("C", lambda a: a * 2, "A"), {"A"})
    c.construct("D", rules.rule("D", operator.add, "B", "C"), {"B", "C"})
    c.construct("E", rules.rule("E", lambda z: -z, "Z"), {"Z"})
    rules.calls.clear()
    return c, rules


class TestModify:
    def test_propagates(self, sum_construction: Construction) -> None:
        assert sum_construction.modify("A", 5) == 5
        assert sum_construction["A"] == 5
        assert sum_construction["S"] == 7

    def test_recomputes_each_dependent_once_in_order(self, diamond: tuple[Construction, RecordingRules]) -> None:
        c, rules = diamond
        c.modify("A", 10)
        assert rules.calls == ["B", "C", "D"]
        assert c["D"] == 11 + 20

    def test_unrelated_elements_untouched(self, diamond: tuple[Construction, RecordingRules]) -> None:
        c, rules = diamond
        c.modify("Z", 5)
        assert rules.calls == ["E"]
        assert c["E"] == -5
        assert c["D"] == 4

    def test_without_dependents(self, diamond: tuple[Construction, RecordingRules]) -> None:
        c, rules = diamond
        c.place("lonely", 0)
        c.modify("lonely", 1)
        assert rules.calls == []

    def test_missing_name(self, sum_construction: Construction) -> None:
        with pytest.raises(ElementNotFoundError):
            sum_construction.modify("Z", 1)

    def test_constructed_element(self, sum_construction: Construction) -> None:
        with pytest.raises(NotAPlacedElementError, match="constructed") as exc_info:
            sum_construction.modify("S", 123)
        assert exc_info.value.name == "S"
        assert sum_construction["S"] == 3

    def test_rule_failure_is_not_rolled_back(self) -> None:
        c = Construction()
        c.place("A", 1)
        c.construct_from("B", lambda a: a + 1, "A")
        c.construct_from("C", lambda a: 10 / (a - 2), "A")

        with pytest.raises(RecomputeFailedError) as exc_info:
            c.modify("A", 2)

        error = exc_info.value
        assert error.name == "C"
        assert error.origin == "A"
        assert isinstance(error.cause, ZeroDivisionError)
        assert error.__cause__ is error.cause
        # B was recomputed before C failed
        assert c["A"] == 2
        assert c["B"] == 3
        assert c["C"] == -10

    def test_failure_stops_later_layers(self) -> None:
        c = Construction()
        c.place("A", 1)
        c.construct_from("B", lambda a: 10 // (a - 2), "A")
        c.construct_from("C", lambda b: b + 1, "B")

        with pytest.raises(RecomputeFailedError):
            c.modify("A", 2)
        assert c["C"] == -9


class TestReplace:
    def test_placed_value(self, sum_construction: Construction) -> None:
        assert sum_construction.replace("B", 10) == 10
        assert sum_construction["S"] == 11
        assert sum_construction.required_by("B") == frozenset({"S"})

    def test_constructed_rule(self, sum_construction: Construction) -> None:
        sum_construction.replace("B", 10)
        assert sum_construction.replace("S", cs.lift(operator.mul, "A", "B")) == 10
        assert sum_construction["S"] == 10

    def test_placed_spec(self, sum_construction: Construction) -> None:
        assert sum_construction.replace("A", PlacedSpec(7)) == 7
        assert sum_construction["S"] == 9

    def test_non_spec_values_are_placed(self, sum_construction: Construction) -> None:
        sum_construction.replace("S", len)
        assert sum_construction["S"] is len
        assert sum_construction.kind("S") is ElementKind.PLACED

    def test_placed_to_constructed(self, sum_construction: Construction) -> None:
        sum_construction.replace("B", ConstructedSpec(lambda view: view["A"] * 100, {"A"}))

        assert sum_construction.kind("B") is ElementKind.CONSTRUCTED
        assert sum_construction["B"] == 100
        assert sum_construction["S"] == 101
        assert sum_construction.required_by("A") == frozenset({"B", "S"})
        assert sum_construction.validate() == []

    def test_constructed_to_placed(self, sum_construction: Construction) -> None:
        sum_construction.construct_from("T", lambda s: s * 2, "S")
        sum_construction.replace("S", 42)

        assert sum_construction.kind("S") is ElementKind.PLACED
        assert sum_construction.required_by("A") == frozenset()
        assert sum_construction.required_by("B") == frozenset()
        assert sum_construction["T"] == 84
        assert sum_construction.validate() == []

        sum_construction.modify("S", 1)
        assert sum_construction["T"] == 2

    def test_missing_name(self, sum_construction: Construction) -> None:
        with pytest.raises(ElementNotFoundError):
            sum_construction.replace("Z", 1)

    def test_unknown_dependency_leaves_element(self, sum_construction: Construction) -> None:
        with pytest.raises(UnknownDependencyError):
            sum_construction.replace("S", cs.lift(operator.add, "A", "nope"))

        assert sum_construction["S"] == 3
        assert sum_construction.kind("S") is ElementKind.CONSTRUCTED
        assert sum_construction.required_by("A") == frozenset({"S"})
        assert sum_construction.validate() == []

    def test_rule_failure_leaves_element(self, sum_construction: Construction) -> None:
        sum_construction.construct_from("T", lambda s: s + 1, "S")

        with pytest.raises(ConstructionRuleFailedError):
            sum_construction.replace("S", ConstructedSpec(lambda view: view["A"] / 0, {"A"}))

        assert sum_construction["S"] == 3
        assert sum_construction["T"] == 4
        assert sum_construction.required_by("S") == frozenset({"T"})
        assert sum_construction.validate() == []

    def test_cannot_require_itself(self, sum_construction: Construction) -> None:
        with pytest.raises(UnknownDependencyError) as exc_info:
            sum_construction.replace("S", cs.lift(lambda s: s + 1, "S"))
        assert exc_info.value.missing == frozenset({"S"})
        assert sum_construction["S"] == 3

    def test_dependents_see_new_rule(self) -> None:
        c = Construction()
        c.place("A", 2)
        c.construct_from("X", lambda a: a + 1, "A")
        c.construct_from("Y", lambda x: x * 10, "X")

        c.replace("X", cs.lift(lambda a: a - 1, "A"))
        assert c["Y"] == 10

        c.modify("A", 5)
        assert c["X"] == 4
        assert c["Y"] == 40


class TestCycles:
    def test_introducing_and_breaking_a_cycle(self) -> None:
        c = Construction()
        c.place("A", 1)
        c.construct_from("X", lambda a: a + 1, "A")
        c.construct_from("Y", lambda x: x + 1, "X")

        # Y already requires X, so X requiring Y closes a cycle
        with pytest.raises(UpdateStalledError) as exc_info:
            c.replace("X", cs.lift(lambda y: y + 1, "Y"))
        assert exc_info.value.origin == "X"
        assert exc_info.value.stuck == ("X", "Y")

        with pytest.raises(CycleDetectedError):
            c.order()

        c.replace("X", cs.lift(lambda a: a + 1, "A"))

        order = c.order()
        assert order.index("A") < order.index("X") < order.index("Y")
        assert c["Y"] == c["X"] + 1
        assert c.validate() == []

    def test_modify_upstream_of_cycle_stalls(self) -> None:
        c = Construction()
        c.place("A", 1)
        c.construct_from("X", lambda a: a + 1, "A")
        c.construct_from("Y", operator.add, "X", "A")
        with pytest.raises(UpdateStalledError):
            c.replace("X", cs.lift(lambda y: y + 1, "Y"))

        # Y still requires A, so the cycle is reachable from A
        with pytest.raises(UpdateStalledError) as exc_info:
            c.modify("A", 5)
        assert exc_info.value.origin == "A"
        assert exc_info.value.stuck == ("X", "Y")
        assert c["A"] == 5
