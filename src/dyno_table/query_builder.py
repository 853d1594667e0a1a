from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from .conditions import FilterCondition, PrimaryKey, QueryResult
from .config import PRIMARY_INDEX, TableConfig
from .errors import BuilderAlreadyExecutedError, ValidationError
from .expression import ExpressionBuilder
from .operations import DynamoOperation, QueryOperation


class QueryBuilder:
    """Single-page query over the table or one of its secondary indexes.

    The partition key is required; ``key.sk`` may hold a plain value (equality),
    a ``SortKeyCondition`` or a callback such as ``lambda op: op.begins_with("A#")``.
    """

    def __init__(
        self,
        key: PrimaryKey,
        config: TableConfig,
        expression_builder: ExpressionBuilder,
        executor: Callable[[DynamoOperation], Any],
    ) -> None:
        self._key = key
        self._config = config
        self._expression_builder = expression_builder
        self._executor = executor
        self._index_name: str | None = None
        self._filters: list[FilterCondition] = []
        self._limit: int | None = None
        self._scan_forward = True
        self._page_key: Mapping[str, Any] | None = None
        self._executed = False

    def use_index(self, name: str) -> QueryBuilder:
        self._config.index(name)
        self._index_name = None if name == PRIMARY_INDEX else name
        return self

    def filter(self, *conditions: FilterCondition) -> QueryBuilder:
        self._filters.extend(conditions)
        return self

    def limit(self, n: int) -> QueryBuilder:
        if isinstance(n, bool) or not isinstance(n, int) or n <= 0:
            raise ValidationError("limit must be a positive integer")
        self._limit = n
        return self

    def sort_descending(self) -> QueryBuilder:
        self._scan_forward = False
        return self

    def sort_ascending(self) -> QueryBuilder:
        self._scan_forward = True
        return self

    def start_from(self, page_key: Mapping[str, Any] | None) -> QueryBuilder:
        self._page_key = page_key
        return self

    def build(self) -> QueryOperation:
        index = self._config.index(self._index_name)
        key_condition = self._expression_builder.create_key_condition(index, self._key, namespace="k")
        filter_expr = self._expression_builder.create_expression(self._filters, namespace="f")
        return QueryOperation(
            key_condition=key_condition,
            filter=filter_expr,
            index_name=self._index_name,
            limit=self._limit,
            scan_forward=self._scan_forward,
            page_key=self._page_key,
        )

    def execute(self) -> QueryResult:
        if self._executed:
            raise BuilderAlreadyExecutedError(builder="QueryBuilder")
        operation = self.build()
        self._executed = True
        return self._executor(operation)
