from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum
from typing import Any

from .errors import ExpressionError, InvalidOperatorError


class Operator(StrEnum):
    EQ = "="
    NE = "<>"
    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="
    BETWEEN = "BETWEEN"
    BEGINS_WITH = "BEGINS_WITH"
    CONTAINS = "CONTAINS"
    EXISTS = "EXISTS"
    NOT_EXISTS = "NOT_EXISTS"
    IN = "IN"

    @staticmethod
    def parse(op: Operator | str) -> Operator:
        if isinstance(op, Operator):
            return op
        if not isinstance(op, str):
            raise InvalidOperatorError(operator=op)
        normalized = _OPERATOR_ALIASES.get(op.strip().upper())
        if normalized is None:
            raise InvalidOperatorError(operator=op)
        return normalized


_OPERATOR_ALIASES: dict[str, Operator] = {
    **{o.value: o for o in Operator},
    "EQ": Operator.EQ,
    "!=": Operator.NE,
    "NE": Operator.NE,
    "LT": Operator.LT,
    "LE": Operator.LTE,
    "LTE": Operator.LTE,
    "GT": Operator.GT,
    "GE": Operator.GTE,
    "GTE": Operator.GTE,
    "ATTRIBUTE_EXISTS": Operator.EXISTS,
    "ATTRIBUTE_NOT_EXISTS": Operator.NOT_EXISTS,
}

KEY_OPERATORS = frozenset(
    {Operator.EQ, Operator.LT, Operator.LTE, Operator.GT, Operator.GTE, Operator.BETWEEN, Operator.BEGINS_WITH}
)


@dataclass(frozen=True)
class FilterCondition:
    attribute: str
    op: Operator | str
    values: tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.values, (tuple, str, bytes)):
            object.__setattr__(self, "values", tuple(self.values))

    @staticmethod
    def eq(attribute: str, value: Any) -> FilterCondition:
        return FilterCondition(attribute=attribute, op=Operator.EQ, values=(value,))

    @staticmethod
    def ne(attribute: str, value: Any) -> FilterCondition:
        return FilterCondition(attribute=attribute, op=Operator.NE, values=(value,))

    @staticmethod
    def lt(attribute: str, value: Any) -> FilterCondition:
        return FilterCondition(attribute=attribute, op=Operator.LT, values=(value,))

    @staticmethod
    def lte(attribute: str, value: Any) -> FilterCondition:
        return FilterCondition(attribute=attribute, op=Operator.LTE, values=(value,))

    @staticmethod
    def gt(attribute: str, value: Any) -> FilterCondition:
        return FilterCondition(attribute=attribute, op=Operator.GT, values=(value,))

    @staticmethod
    def gte(attribute: str, value: Any) -> FilterCondition:
        return FilterCondition(attribute=attribute, op=Operator.GTE, values=(value,))

    @staticmethod
    def between(attribute: str, low: Any, high: Any) -> FilterCondition:
        return FilterCondition(attribute=attribute, op=Operator.BETWEEN, values=(low, high))

    @staticmethod
    def begins_with(attribute: str, prefix: Any) -> FilterCondition:
        return FilterCondition(attribute=attribute, op=Operator.BEGINS_WITH, values=(prefix,))

    @staticmethod
    def contains(attribute: str, value: Any) -> FilterCondition:
        return FilterCondition(attribute=attribute, op=Operator.CONTAINS, values=(value,))

    @staticmethod
    def in_(attribute: str, values: Sequence[Any]) -> FilterCondition:
        if isinstance(values, (str, bytes)):
            raise ExpressionError("IN requires a sequence of values, not a string")
        return FilterCondition(attribute=attribute, op=Operator.IN, values=tuple(values))

    @staticmethod
    def exists(attribute: str) -> FilterCondition:
        return FilterCondition(attribute=attribute, op=Operator.EXISTS)

    @staticmethod
    def not_exists(attribute: str) -> FilterCondition:
        return FilterCondition(attribute=attribute, op=Operator.NOT_EXISTS)


@dataclass(frozen=True)
class SortKeyCondition:
    op: Operator
    values: tuple[Any, ...]

    @staticmethod
    def eq(value: Any) -> SortKeyCondition:
        return SortKeyCondition(op=Operator.EQ, values=(value,))

    @staticmethod
    def lt(value: Any) -> SortKeyCondition:
        return SortKeyCondition(op=Operator.LT, values=(value,))

    @staticmethod
    def lte(value: Any) -> SortKeyCondition:
        return SortKeyCondition(op=Operator.LTE, values=(value,))

    @staticmethod
    def gt(value: Any) -> SortKeyCondition:
        return SortKeyCondition(op=Operator.GT, values=(value,))

    @staticmethod
    def gte(value: Any) -> SortKeyCondition:
        return SortKeyCondition(op=Operator.GTE, values=(value,))

    @staticmethod
    def between(low: Any, high: Any) -> SortKeyCondition:
        return SortKeyCondition(op=Operator.BETWEEN, values=(low, high))

    @staticmethod
    def begins_with(prefix: Any) -> SortKeyCondition:
        return SortKeyCondition(op=Operator.BEGINS_WITH, values=(prefix,))


class SortKeyOperators:
    """Helper handed to sort key callbacks, e.g. ``sk=lambda op: op.begins_with("FOSSIL#")``."""

    eq = staticmethod(SortKeyCondition.eq)
    lt = staticmethod(SortKeyCondition.lt)
    lte = staticmethod(SortKeyCondition.lte)
    gt = staticmethod(SortKeyCondition.gt)
    gte = staticmethod(SortKeyCondition.gte)
    between = staticmethod(SortKeyCondition.between)
    begins_with = staticmethod(SortKeyCondition.begins_with)


type KeyValue = str | int | Decimal | bytes
type SortKeyInput = KeyValue | SortKeyCondition | Callable[[SortKeyOperators], SortKeyCondition]


@dataclass(frozen=True)
class PrimaryKey:
    pk: Any
    sk: Any | None = None

    @property
    def has_sort_condition(self) -> bool:
        return isinstance(self.sk, SortKeyCondition) or callable(self.sk)

    def sort_condition(self) -> SortKeyCondition | None:
        """Resolve ``sk`` into a condition; a plain value means equality."""
        if self.sk is None:
            return None
        if isinstance(self.sk, SortKeyCondition):
            return self.sk
        if callable(self.sk):
            resolved = self.sk(SortKeyOperators())
            if not isinstance(resolved, SortKeyCondition):
                raise TypeError("sort key callback must return a SortKeyCondition")
            return resolved
        return SortKeyCondition.eq(self.sk)

    @staticmethod
    def coerce(key: PrimaryKey | Mapping[str, Any]) -> PrimaryKey:
        if isinstance(key, PrimaryKey):
            return key
        if isinstance(key, Mapping):
            return PrimaryKey(pk=key.get("pk"), sk=key.get("sk"))
        raise TypeError(f"expected PrimaryKey or mapping, got {type(key).__name__}")


@dataclass(frozen=True)
class SetAction:
    attribute: str
    value: Any


@dataclass(frozen=True)
class RemoveAction:
    attribute: str


@dataclass(frozen=True)
class IncrementAction:
    attribute: str
    amount: int | float | Decimal = 1


type UpdateAction = SetAction | RemoveAction | IncrementAction


@dataclass(frozen=True)
class CompiledExpression:
    expression: str
    names: Mapping[str, str] = field(default_factory=dict)
    values: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class QueryResult:
    items: list[dict[str, Any]]
    page_key: dict[str, Any] | None = None
