from __future__ import annotations

from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any

from .conditions import FilterCondition, IncrementAction, RemoveAction, SetAction, UpdateAction
from .config import IndexConfig
from .errors import BuilderAlreadyExecutedError, ValidationError
from .expression import ExpressionBuilder
from .operations import DynamoOperation, UpdateOperation


class UpdateBuilder:
    def __init__(
        self,
        key: Mapping[str, Any],
        index: IndexConfig,
        expression_builder: ExpressionBuilder,
        executor: Callable[[DynamoOperation], Any],
    ) -> None:
        self._key = dict(key)
        self._index = index
        self._expression_builder = expression_builder
        self._executor = executor
        self._updates: list[UpdateAction] = []
        self._conditions: list[FilterCondition] = []
        self._executed = False

    def set(self, field: str, value: Any) -> UpdateBuilder:
        self._updates.append(SetAction(self._checked(field), value))
        return self

    def set_many(self, data: Mapping[str, Any]) -> UpdateBuilder:
        for field, value in data.items():
            self.set(field, value)
        return self

    def remove(self, field: str) -> UpdateBuilder:
        self._updates.append(RemoveAction(self._checked(field)))
        return self

    def increment(self, field: str, amount: int | float | Decimal = 1) -> UpdateBuilder:
        self._updates.append(IncrementAction(self._checked(field), amount))
        return self

    def where(self, *conditions: FilterCondition) -> UpdateBuilder:
        self._conditions.extend(conditions)
        return self

    def if_exists(self) -> UpdateBuilder:
        """Only update an item that is already stored; DynamoDB would otherwise create it."""
        return self.where(FilterCondition.exists(self._index.partition_key))

    def build(self) -> UpdateOperation:
        if not self._updates:
            raise ValidationError("no updates provided")

        update = self._expression_builder.create_update_expression(self._updates, namespace="u")
        condition = self._expression_builder.create_expression(self._conditions, namespace="c")
        return UpdateOperation(key=self._key, update=update, condition=condition, return_values="ALL_NEW")

    def execute(self) -> dict[str, Any] | None:
        if self._executed:
            raise BuilderAlreadyExecutedError(builder="UpdateBuilder")
        operation = self.build()
        self._executed = True
        return self._executor(operation)

    def _checked(self, field: str) -> str:
        if field in (self._index.partition_key, self._index.sort_key):
            raise ValidationError(f"cannot update key field: {field}")
        return field
