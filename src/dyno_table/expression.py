"""Compilation of structured conditions into DynamoDB expressions.

Every attribute name is replaced by a ``#`` placeholder and every literal by a
``:`` placeholder, so reserved words and user data never reach the expression
text. Placeholder counters live only for the duration of one call; callers that
combine several fragments into one request give each fragment its own
namespace (``k`` for key conditions, ``f`` for filters, ``u`` for updates,
``c`` for conditions).
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from .conditions import (
    KEY_OPERATORS,
    CompiledExpression,
    FilterCondition,
    IncrementAction,
    Operator,
    PrimaryKey,
    RemoveAction,
    SetAction,
    SortKeyCondition,
    UpdateAction,
)
from .config import IndexConfig
from .errors import ExpressionError, ValidationError
from .validation import MaxInValues, validate_attribute_name, validate_expression

_COMPARISONS = {
    Operator.EQ: "=",
    Operator.NE: "<>",
    Operator.LT: "<",
    Operator.LTE: "<=",
    Operator.GT: ">",
    Operator.GTE: ">=",
}


class _Placeholders:
    def __init__(self, namespace: str) -> None:
        if not namespace.isalnum():
            raise ExpressionError(f"invalid placeholder namespace: {namespace!r}")
        self._namespace = namespace
        self._name_counter = 0
        self._value_counter = 0
        self.names: dict[str, str] = {}
        self.values: dict[str, Any] = {}

    def name(self, attribute: str) -> str:
        validate_attribute_name(attribute)
        ref = f"#{self._namespace}{self._name_counter}"
        self._name_counter += 1
        self.names[ref] = attribute
        return ref

    def value(self, value: Any) -> str:
        ref = f":{self._namespace}{self._value_counter}"
        self._value_counter += 1
        self.values[ref] = value
        return ref

    def compile(self, expression: str) -> CompiledExpression:
        validate_expression(expression)
        return CompiledExpression(expression=expression, names=dict(self.names), values=dict(self.values))


def _require_values(op: Operator, values: tuple[Any, ...], count: int) -> None:
    if len(values) != count:
        noun = "value" if count == 1 else "values"
        raise ExpressionError(f"{op.value} requires {count} {noun}, got {len(values)}")


def _build_term(attribute: str, op: Operator | str, values: Sequence[Any], refs: _Placeholders) -> str:
    operator = Operator.parse(op)
    if isinstance(values, (str, bytes)):
        raise ExpressionError(f"{operator.value} requires a sequence of values, not a string")
    values = tuple(values)

    if operator in (Operator.EXISTS, Operator.NOT_EXISTS):
        _require_values(operator, values, 0)
        fn = "attribute_exists" if operator is Operator.EXISTS else "attribute_not_exists"
        return f"{fn}({refs.name(attribute)})"

    if operator is Operator.BETWEEN:
        _require_values(operator, values, 2)
        name = refs.name(attribute)
        return f"{name} BETWEEN {refs.value(values[0])} AND {refs.value(values[1])}"

    if operator is Operator.IN:
        if not values:
            raise ExpressionError("IN requires at least one value")
        if len(values) > MaxInValues:
            raise ExpressionError(f"IN supports maximum {MaxInValues} values")
        name = refs.name(attribute)
        return f"{name} IN (" + ", ".join(refs.value(v) for v in values) + ")"

    _require_values(operator, values, 1)
    name = refs.name(attribute)
    if operator is Operator.BEGINS_WITH:
        return f"begins_with({name}, {refs.value(values[0])})"
    if operator is Operator.CONTAINS:
        return f"contains({name}, {refs.value(values[0])})"
    return f"{name} {_COMPARISONS[operator]} {refs.value(values[0])}"


class ExpressionBuilder:
    def create_expression(
        self,
        conditions: Sequence[FilterCondition],
        *,
        namespace: str = "f",
    ) -> CompiledExpression | None:
        if not conditions:
            return None

        refs = _Placeholders(namespace)
        terms: list[str] = []
        for condition in conditions:
            if not isinstance(condition, FilterCondition):
                raise ExpressionError(f"expected FilterCondition, got {type(condition).__name__}")
            terms.append(_build_term(condition.attribute, condition.op, condition.values, refs))
        return refs.compile(" AND ".join(terms))

    def create_key_condition(
        self,
        index: IndexConfig,
        key: PrimaryKey,
        *,
        namespace: str = "k",
    ) -> CompiledExpression:
        if key.pk is None:
            raise ValidationError("partition key is required")

        refs = _Placeholders(namespace)
        expression = f"{refs.name(index.partition_key)} = {refs.value(key.pk)}"

        sort = key.sort_condition()
        if sort is not None:
            if index.sort_key is None:
                raise ValidationError("sort key condition provided but index does not define a sort key")
            expression += " AND " + self._sort_key_term(index.sort_key, sort, refs)

        return refs.compile(expression)

    def create_update_expression(
        self,
        actions: Sequence[UpdateAction],
        *,
        namespace: str = "u",
    ) -> CompiledExpression:
        if not actions:
            raise ValidationError("no updates provided")

        refs = _Placeholders(namespace)
        set_parts: list[str] = []
        remove_parts: list[str] = []
        add_parts: list[str] = []

        for action in actions:
            match action:
                case SetAction(attribute=attribute, value=value):
                    set_parts.append(f"{refs.name(attribute)} = {refs.value(value)}")
                case RemoveAction(attribute=attribute):
                    remove_parts.append(refs.name(attribute))
                case IncrementAction(attribute=attribute, amount=amount):
                    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
                        raise ValidationError("increment requires a numeric amount")
                    add_parts.append(f"{refs.name(attribute)} {refs.value(amount)}")
                case _:
                    raise ExpressionError(f"unsupported update action: {type(action).__name__}")

        sections: list[str] = []
        if set_parts:
            sections.append("SET " + ", ".join(set_parts))
        if remove_parts:
            sections.append("REMOVE " + ", ".join(remove_parts))
        if add_parts:
            sections.append("ADD " + ", ".join(add_parts))
        return refs.compile(" ".join(sections))

    @staticmethod
    def _sort_key_term(attribute: str, cond: SortKeyCondition, refs: _Placeholders) -> str:
        op = Operator.parse(cond.op)
        if op not in KEY_OPERATORS:
            raise ExpressionError(f"{op.value} is not supported in key conditions")
        return _build_term(attribute, op, cond.values, refs)


def merge_expressions(*parts: CompiledExpression | None) -> tuple[dict[str, str], dict[str, Any]]:
    names: dict[str, str] = {}
    values: dict[str, Any] = {}
    for part in parts:
        if part is None:
            continue
        for ref, attribute in part.names.items():
            if ref in names and names[ref] != attribute:
                raise ExpressionError(f"expression attribute name collision: {ref}")
            names[ref] = attribute
        for ref, value in part.values.items():
            if ref in values:
                raise ExpressionError(f"expression attribute value collision: {ref}")
            values[ref] = value
    return names, values
