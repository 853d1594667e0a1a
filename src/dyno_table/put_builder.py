from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from .conditions import FilterCondition
from .config import IndexConfig
from .errors import BuilderAlreadyExecutedError, ValidationError
from .expression import ExpressionBuilder
from .operations import DynamoOperation, PutOperation


class PutBuilder:
    def __init__(
        self,
        item: Mapping[str, Any],
        index: IndexConfig,
        expression_builder: ExpressionBuilder,
        executor: Callable[[DynamoOperation], Any],
    ) -> None:
        self._item = dict(item)
        self._index = index
        self._expression_builder = expression_builder
        self._executor = executor
        self._conditions: list[FilterCondition] = []
        self._executed = False

    def if_not_exists(self) -> PutBuilder:
        """Reject the write when an item with the same primary key is already stored."""
        return self.where(FilterCondition.not_exists(self._index.partition_key))

    def if_exists(self) -> PutBuilder:
        return self.where(FilterCondition.exists(self._index.partition_key))

    def where(self, *conditions: FilterCondition) -> PutBuilder:
        self._conditions.extend(conditions)
        return self

    def build(self) -> PutOperation:
        if self._item.get(self._index.partition_key) is None:
            raise ValidationError(f"item is missing partition key attribute: {self._index.partition_key}")
        if self._index.sort_key is not None and self._item.get(self._index.sort_key) is None:
            raise ValidationError(f"item is missing sort key attribute: {self._index.sort_key}")

        condition = self._expression_builder.create_expression(self._conditions, namespace="c")
        return PutOperation(item=self._item, condition=condition)

    def execute(self) -> dict[str, Any]:
        if self._executed:
            raise BuilderAlreadyExecutedError(builder="PutBuilder")
        operation = self.build()
        self._executed = True
        return self._executor(operation)
