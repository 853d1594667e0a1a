from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, assert_never

import boto3

from .conditions import FilterCondition, PrimaryKey, QueryResult
from .config import PRIMARY_INDEX, IndexConfig, TableConfig
from .errors import ConfigurationError, ValidationError
from .expression import ExpressionBuilder
from .operations import (
    BatchDelete,
    BatchPut,
    BatchWriteOperation,
    BatchWriteRequest,
    CompiledTransactItem,
    DeleteOperation,
    DynamoOperation,
    PutOperation,
    QueryOperation,
    TransactConditionCheck,
    TransactDelete,
    TransactKind,
    TransactPut,
    TransactUpdate,
    TransactWriteAction,
    TransactWriteOperation,
    UpdateOperation,
)
from .put_builder import PutBuilder
from .query_builder import QueryBuilder
from .store import DynamoService
from .update_builder import UpdateBuilder
from .validation import MaxBatchWriteItems, MaxTransactItems


type KeyInput = PrimaryKey | Mapping[str, Any]


class Table:
    def __init__(
        self,
        *,
        table_name: str,
        indexes: Mapping[str, Any] | TableConfig,
        client: Any | None = None,
        expression_builder: ExpressionBuilder | None = None,
    ) -> None:
        if isinstance(indexes, TableConfig):
            if indexes.table_name != table_name:
                raise ConfigurationError("table_name does not match the supplied TableConfig")
            config = indexes
        else:
            config = TableConfig.from_mapping(table_name, indexes)

        self._config = config
        self._client: Any = client or boto3.client("dynamodb")
        self._service = DynamoService(self._client, config.table_name)
        self._expression_builder = expression_builder or ExpressionBuilder()

    @classmethod
    def from_config(
        cls,
        config: TableConfig,
        *,
        client: Any | None = None,
        expression_builder: ExpressionBuilder | None = None,
    ) -> Table:
        return cls(
            table_name=config.table_name,
            indexes=config,
            client=client,
            expression_builder=expression_builder,
        )

    @property
    def table_name(self) -> str:
        return self._config.table_name

    @property
    def config(self) -> TableConfig:
        return self._config

    def get_index_config(self, index_name: str | None = None) -> IndexConfig:
        return self._config.index(index_name)

    def put(self, item: Mapping[str, Any]) -> PutBuilder:
        return PutBuilder(item, self._config.primary, self._expression_builder, self._execute_operation)

    def update(self, key: KeyInput, data: Mapping[str, Any] | None = None) -> UpdateBuilder:
        key_object = self._to_key(key, self._config.primary)
        builder = UpdateBuilder(
            key_object,
            self._config.primary,
            self._expression_builder,
            self._execute_operation,
        )
        if data:
            builder.set_many(data)
        return builder

    def query(self, key: KeyInput) -> QueryBuilder:
        return QueryBuilder(
            PrimaryKey.coerce(key),
            self._config,
            self._expression_builder,
            self._execute_operation,
        )

    def get(self, key: KeyInput, *, index_name: str | None = None) -> dict[str, Any] | None:
        index = self.get_index_config(index_name)
        key_object = self._to_key(key, index)

        if index_name is None or index_name == PRIMARY_INDEX:
            return self._service.get(key_object)

        # GetItem only addresses the primary index; secondary lookups run a key-equality query.
        pk = PrimaryKey.coerce(key)
        operation = QueryOperation(
            key_condition=self._expression_builder.create_key_condition(index, pk, namespace="k"),
            index_name=index_name,
            limit=1,
        )
        result: QueryResult = self._execute_operation(operation)
        return result.items[0] if result.items else None

    def delete(self, key: KeyInput, *, conditions: Sequence[FilterCondition] = ()) -> None:
        key_object = self._to_key(key, self._config.primary)
        condition = self._expression_builder.create_expression(conditions, namespace="c")
        self._execute_operation(DeleteOperation(key=key_object, condition=condition))

    def scan(
        self,
        filters: Sequence[FilterCondition] | None = None,
        *,
        limit: int | None = None,
        page_key: Mapping[str, Any] | None = None,
        index_name: str | None = None,
    ) -> QueryResult:
        self.get_index_config(index_name)
        if index_name == PRIMARY_INDEX:
            index_name = None
        if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0):
            raise ValidationError("limit must be a positive integer")

        filter_expr = self._expression_builder.create_expression(filters or (), namespace="f")
        return self._service.scan(filter=filter_expr, index_name=index_name, limit=limit, page_key=page_key)

    def batch_write(self, operations: Sequence[BatchWriteRequest]) -> list[dict[str, Any]]:
        """Write up to 25 puts/deletes in one call; returns the requests the store left unprocessed."""
        if not operations:
            raise ValidationError("operations is required")
        if len(operations) > MaxBatchWriteItems:
            raise ValidationError(f"a batch write supports at most {MaxBatchWriteItems} operations")

        requests: list[BatchWriteRequest] = []
        for op in operations:
            match op:
                case BatchPut(item=item):
                    self._check_item_keys(item)
                    requests.append(BatchPut(item=dict(item)))
                case BatchDelete(key=key):
                    requests.append(BatchDelete(key=self._to_key(key, self._config.primary)))
                case _:
                    raise ValidationError(f"unsupported batch operation: {type(op).__name__}")

        return self._execute_operation(BatchWriteOperation(requests=tuple(requests)))

    def transact_write(self, operations: Sequence[TransactWriteAction]) -> None:
        if not operations:
            raise ValidationError("operations is required")
        if len(operations) > MaxTransactItems:
            raise ValidationError(f"a transaction supports at most {MaxTransactItems} operations")

        primary = self._config.primary
        build = self._expression_builder
        items: list[CompiledTransactItem] = []
        for op in operations:
            match op:
                case TransactPut(item=item, conditions=conditions):
                    self._check_item_keys(item)
                    items.append(
                        CompiledTransactItem(
                            kind=TransactKind.PUT,
                            item=dict(item),
                            condition=build.create_expression(conditions, namespace="c"),
                        )
                    )
                case TransactDelete(key=key, conditions=conditions):
                    items.append(
                        CompiledTransactItem(
                            kind=TransactKind.DELETE,
                            key=self._to_key(key, primary),
                            condition=build.create_expression(conditions, namespace="c"),
                        )
                    )
                case TransactUpdate(key=key, updates=updates, conditions=conditions):
                    for action in updates:
                        if action.attribute in (primary.partition_key, primary.sort_key):
                            raise ValidationError(f"cannot update key field: {action.attribute}")
                    items.append(
                        CompiledTransactItem(
                            kind=TransactKind.UPDATE,
                            key=self._to_key(key, primary),
                            update=build.create_update_expression(updates, namespace="u"),
                            condition=build.create_expression(conditions, namespace="c"),
                        )
                    )
                case TransactConditionCheck(key=key, conditions=conditions):
                    condition = build.create_expression(conditions, namespace="c")
                    if condition is None:
                        raise ValidationError("a condition check requires at least one condition")
                    items.append(
                        CompiledTransactItem(
                            kind=TransactKind.CONDITION_CHECK,
                            key=self._to_key(key, primary),
                            condition=condition,
                        )
                    )
                case _:
                    raise ValidationError(f"unsupported transaction action: {type(op).__name__}")

        self._execute_operation(TransactWriteOperation(items=tuple(items)))

    def _execute_operation(self, operation: DynamoOperation) -> Any:
        match operation:
            case PutOperation():
                return self._service.put(operation.item, condition=operation.condition)
            case UpdateOperation():
                return self._service.update(
                    operation.key,
                    operation.update,
                    condition=operation.condition,
                    return_values=operation.return_values,
                )
            case QueryOperation():
                return self._service.query(
                    operation.key_condition,
                    filter=operation.filter,
                    index_name=operation.index_name,
                    limit=operation.limit,
                    scan_forward=operation.scan_forward,
                    page_key=operation.page_key,
                )
            case DeleteOperation():
                return self._service.delete(operation.key, condition=operation.condition)
            case BatchWriteOperation():
                return self._service.batch_write(operation.requests)
            case TransactWriteOperation():
                return self._service.transact_write(operation.items)
            case _:
                assert_never(operation)

    def _to_key(self, key: KeyInput, index: IndexConfig) -> dict[str, Any]:
        pk = PrimaryKey.coerce(key)

        if pk.pk is None or pk.pk == "":
            raise ValidationError("partition key is required")
        if pk.has_sort_condition:
            raise ValidationError("sort key must be a value, not a condition")

        has_sort = pk.sk is not None and pk.sk != ""
        if has_sort and index.sort_key is None:
            raise ValidationError("sort key provided but index does not support sort keys")
        if not has_sort and index.sort_key is not None:
            raise ValidationError("index requires a sort key but none was provided")

        key_object: dict[str, Any] = {index.partition_key: pk.pk}
        if index.sort_key is not None:
            key_object[index.sort_key] = pk.sk
        return key_object

    def _check_item_keys(self, item: Mapping[str, Any]) -> None:
        primary = self._config.primary
        if item.get(primary.partition_key) is None:
            raise ValidationError(f"item is missing partition key attribute: {primary.partition_key}")
        if primary.sort_key is not None and item.get(primary.sort_key) is None:
            raise ValidationError(f"item is missing sort key attribute: {primary.sort_key}")
