from __future__ import annotations

import pytest

from dyno_table import (
    ExpressionError,
    FilterCondition,
    InvalidOperatorError,
    Operator,
    PrimaryKey,
    SortKeyCondition,
    SortKeyOperators,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("=", Operator.EQ),
        ("eq", Operator.EQ),
        ("<>", Operator.NE),
        ("!=", Operator.NE),
        ("le", Operator.LTE),
        (">=", Operator.GTE),
        ("between", Operator.BETWEEN),
        ("begins_with", Operator.BEGINS_WITH),
        ("contains", Operator.CONTAINS),
        ("attribute_not_exists", Operator.NOT_EXISTS),
        ("in", Operator.IN),
        (Operator.LT, Operator.LT),
    ],
)
def test_operator_parse(raw: str, expected: Operator) -> None:
    assert Operator.parse(raw) is expected


@pytest.mark.parametrize("raw", ["LIKE", "", "==", 3])
def test_operator_parse_rejects_unknown(raw: object) -> None:
    with pytest.raises(InvalidOperatorError):
        Operator.parse(raw)  # type: ignore[arg-type]


def test_filter_condition_constructors() -> None:
    assert FilterCondition.between("age", 1, 9) == FilterCondition("age", Operator.BETWEEN, (1, 9))
    assert FilterCondition.in_("diet", ["a", "b"]).values == ("a", "b")
    assert FilterCondition.exists("x").values == ()


def test_primary_key_sort_condition_resolution() -> None:
    assert PrimaryKey("A").sort_condition() is None
    assert PrimaryKey("A", "B").sort_condition() == SortKeyCondition.eq("B")
    assert PrimaryKey("A", SortKeyCondition.lt(5)).sort_condition() == SortKeyCondition.lt(5)

    seen: list[object] = []

    def callback(op: SortKeyOperators) -> SortKeyCondition:
        seen.append(op)
        return op.begins_with("FOSSIL#")

    key = PrimaryKey("A", callback)
    assert key.has_sort_condition
    assert key.sort_condition() == SortKeyCondition(Operator.BEGINS_WITH, ("FOSSIL#",))
    assert isinstance(seen[0], SortKeyOperators)


def test_primary_key_callback_must_return_condition() -> None:
    with pytest.raises(TypeError, match="must return a SortKeyCondition"):
        PrimaryKey("A", lambda op: "B").sort_condition()


def test_primary_key_coerce() -> None:
    key = PrimaryKey("A", "B")
    assert PrimaryKey.coerce(key) is key
    assert PrimaryKey.coerce({"pk": "A", "sk": "B"}) == key
    assert PrimaryKey.coerce({"pk": "A"}) == PrimaryKey("A")
    with pytest.raises(TypeError):
        PrimaryKey.coerce("A")  # type: ignore[arg-type]


def test_in_rejects_plain_strings() -> None:
    with pytest.raises(ExpressionError, match="not a string"):
        FilterCondition.in_("diet", "Carnivore")
