from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .conditions import CompiledExpression, FilterCondition, PrimaryKey, UpdateAction


@dataclass(frozen=True)
class PutOperation:
    item: Mapping[str, Any]
    condition: CompiledExpression | None = None


@dataclass(frozen=True)
class UpdateOperation:
    key: Mapping[str, Any]
    update: CompiledExpression
    condition: CompiledExpression | None = None
    return_values: str = "ALL_NEW"


@dataclass(frozen=True)
class DeleteOperation:
    key: Mapping[str, Any]
    condition: CompiledExpression | None = None


@dataclass(frozen=True)
class QueryOperation:
    key_condition: CompiledExpression
    filter: CompiledExpression | None = None
    index_name: str | None = None
    limit: int | None = None
    scan_forward: bool = True
    page_key: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class BatchPut:
    item: Mapping[str, Any]


@dataclass(frozen=True)
class BatchDelete:
    key: PrimaryKey | Mapping[str, Any]


type BatchWriteRequest = BatchPut | BatchDelete


@dataclass(frozen=True)
class BatchWriteOperation:
    requests: tuple[BatchWriteRequest, ...]


@dataclass(frozen=True)
class TransactPut:
    item: Mapping[str, Any]
    conditions: Sequence[FilterCondition] = ()


@dataclass(frozen=True)
class TransactDelete:
    key: PrimaryKey | Mapping[str, Any]
    conditions: Sequence[FilterCondition] = ()


@dataclass(frozen=True)
class TransactUpdate:
    key: PrimaryKey | Mapping[str, Any]
    updates: Sequence[UpdateAction]
    conditions: Sequence[FilterCondition] = ()


@dataclass(frozen=True)
class TransactConditionCheck:
    key: PrimaryKey | Mapping[str, Any]
    conditions: Sequence[FilterCondition]


type TransactWriteAction = TransactPut | TransactDelete | TransactUpdate | TransactConditionCheck


class TransactKind(StrEnum):
    PUT = "Put"
    DELETE = "Delete"
    UPDATE = "Update"
    CONDITION_CHECK = "ConditionCheck"


@dataclass(frozen=True)
class CompiledTransactItem:
    """One transaction entry with its key already resolved and expressions compiled."""

    kind: TransactKind
    key: Mapping[str, Any] | None = None
    item: Mapping[str, Any] | None = None
    update: CompiledExpression | None = None
    condition: CompiledExpression | None = None


@dataclass(frozen=True)
class TransactWriteOperation:
    items: tuple[CompiledTransactItem, ...] = field(default_factory=tuple)


type DynamoOperation = (
    PutOperation
    | UpdateOperation
    | DeleteOperation
    | QueryOperation
    | BatchWriteOperation
    | TransactWriteOperation
)
