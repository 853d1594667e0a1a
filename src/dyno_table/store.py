from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import ClientError

from .aws_errors import map_client_error as _map_client_error
from .aws_errors import map_transaction_error as _map_transaction_error
from .conditions import CompiledExpression, QueryResult
from .errors import ValidationError
from .expression import merge_expressions
from .operations import BatchDelete, BatchPut, BatchWriteRequest, CompiledTransactItem, TransactKind

logger = logging.getLogger(__name__)


def _to_dynamo(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, Mapping):
        return {k: _to_dynamo(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_dynamo(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return {_to_dynamo(v) for v in value}
    return value


class DynamoService:
    def __init__(self, client: Any, table_name: str) -> None:
        self._client = client
        self._table_name = table_name
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    @property
    def table_name(self) -> str:
        return self._table_name

    def get(self, key: Mapping[str, Any]) -> dict[str, Any] | None:
        logger.debug("get_item table=%s", self._table_name)
        try:
            resp = self._client.get_item(TableName=self._table_name, Key=self._serialize_map(key))
        except ClientError as err:
            raise _map_client_error(err) from err

        item = resp.get("Item")
        return self._deserialize_map(item) if item else None

    def put(
        self,
        item: Mapping[str, Any],
        *,
        condition: CompiledExpression | None = None,
    ) -> dict[str, Any]:
        req: dict[str, Any] = {"TableName": self._table_name, "Item": self._serialize_map(item)}
        self._apply_expressions(req, condition=condition)

        logger.debug("put_item table=%s conditional=%s", self._table_name, condition is not None)
        try:
            self._client.put_item(**req)
        except ClientError as err:
            raise _map_client_error(err) from err
        return dict(item)

    def update(
        self,
        key: Mapping[str, Any],
        update: CompiledExpression,
        *,
        condition: CompiledExpression | None = None,
        return_values: str = "ALL_NEW",
    ) -> dict[str, Any] | None:
        req: dict[str, Any] = {
            "TableName": self._table_name,
            "Key": self._serialize_map(key),
            "UpdateExpression": update.expression,
            "ReturnValues": return_values,
        }
        self._apply_expressions(req, update, condition=condition)

        logger.debug("update_item table=%s conditional=%s", self._table_name, condition is not None)
        try:
            resp = self._client.update_item(**req)
        except ClientError as err:
            raise _map_client_error(err) from err

        attrs = resp.get("Attributes")
        return self._deserialize_map(attrs) if attrs else None

    def delete(
        self,
        key: Mapping[str, Any],
        *,
        condition: CompiledExpression | None = None,
    ) -> None:
        req: dict[str, Any] = {"TableName": self._table_name, "Key": self._serialize_map(key)}
        self._apply_expressions(req, condition=condition)

        logger.debug("delete_item table=%s conditional=%s", self._table_name, condition is not None)
        try:
            self._client.delete_item(**req)
        except ClientError as err:
            raise _map_client_error(err) from err

    def query(
        self,
        key_condition: CompiledExpression,
        *,
        filter: CompiledExpression | None = None,
        index_name: str | None = None,
        limit: int | None = None,
        scan_forward: bool = True,
        page_key: Mapping[str, Any] | None = None,
    ) -> QueryResult:
        req: dict[str, Any] = {
            "TableName": self._table_name,
            "KeyConditionExpression": key_condition.expression,
            "ScanIndexForward": scan_forward,
        }
        if filter is not None:
            req["FilterExpression"] = filter.expression
        self._apply_expressions(req, key_condition, filter)
        self._apply_paging(req, index_name=index_name, limit=limit, page_key=page_key)

        logger.debug("query table=%s index=%s", self._table_name, index_name)
        try:
            resp = self._client.query(**req)
        except ClientError as err:
            raise _map_client_error(err) from err
        return self._result(resp)

    def scan(
        self,
        *,
        filter: CompiledExpression | None = None,
        index_name: str | None = None,
        limit: int | None = None,
        page_key: Mapping[str, Any] | None = None,
    ) -> QueryResult:
        req: dict[str, Any] = {"TableName": self._table_name}
        if filter is not None:
            req["FilterExpression"] = filter.expression
            self._apply_expressions(req, filter)
        self._apply_paging(req, index_name=index_name, limit=limit, page_key=page_key)

        logger.debug("scan table=%s index=%s filtered=%s", self._table_name, index_name, filter is not None)
        try:
            resp = self._client.scan(**req)
        except ClientError as err:
            raise _map_client_error(err) from err
        return self._result(resp)

    def batch_write(self, requests: Sequence[BatchWriteRequest]) -> list[dict[str, Any]]:
        """Send one BatchWriteItem call and return the requests DynamoDB left unprocessed."""
        write_requests: list[dict[str, Any]] = []
        for request in requests:
            if isinstance(request, BatchPut):
                write_requests.append({"PutRequest": {"Item": self._serialize_map(request.item)}})
            elif isinstance(request, BatchDelete) and isinstance(request.key, Mapping):
                write_requests.append({"DeleteRequest": {"Key": self._serialize_map(request.key)}})
            else:
                raise ValidationError(f"unsupported batch request: {request!r}")

        logger.debug("batch_write_item table=%s requests=%d", self._table_name, len(write_requests))
        try:
            resp = self._client.batch_write_item(RequestItems={self._table_name: write_requests})
        except ClientError as err:
            raise _map_client_error(err) from err

        unprocessed = resp.get("UnprocessedItems", {}).get(self._table_name, []) or []
        if unprocessed:
            logger.warning(
                "batch_write_item left %d unprocessed request(s) on table %s",
                len(unprocessed),
                self._table_name,
            )
        return [self._deserialize_write_request(r) for r in unprocessed]

    def transact_write(self, items: Sequence[CompiledTransactItem]) -> None:
        transact_items: list[dict[str, Any]] = []
        for entry in items:
            req: dict[str, Any] = {"TableName": self._table_name}
            if entry.kind is TransactKind.PUT:
                req["Item"] = self._serialize_map(entry.item or {})
            else:
                req["Key"] = self._serialize_map(entry.key or {})
            if entry.update is not None:
                req["UpdateExpression"] = entry.update.expression
            self._apply_expressions(req, entry.update, condition=entry.condition)
            transact_items.append({entry.kind.value: req})

        logger.debug("transact_write_items table=%s actions=%d", self._table_name, len(transact_items))
        try:
            self._client.transact_write_items(TransactItems=transact_items)
        except ClientError as err:
            raise _map_transaction_error(err) from err

    def _apply_expressions(
        self,
        req: dict[str, Any],
        *parts: CompiledExpression | None,
        condition: CompiledExpression | None = None,
    ) -> None:
        if condition is not None:
            req["ConditionExpression"] = condition.expression
            parts = (*parts, condition)

        names, values = merge_expressions(*parts)
        if names:
            req["ExpressionAttributeNames"] = names
        if values:
            req["ExpressionAttributeValues"] = self._serialize_map(values)

    def _apply_paging(
        self,
        req: dict[str, Any],
        *,
        index_name: str | None,
        limit: int | None,
        page_key: Mapping[str, Any] | None,
    ) -> None:
        if index_name is not None:
            req["IndexName"] = index_name
        if limit is not None:
            req["Limit"] = limit
        if page_key:
            req["ExclusiveStartKey"] = self._serialize_map(page_key)

    def _result(self, resp: Mapping[str, Any]) -> QueryResult:
        items = [self._deserialize_map(item) for item in resp.get("Items", [])]
        last = resp.get("LastEvaluatedKey")
        return QueryResult(items=items, page_key=self._deserialize_map(last) if last else None)

    def _serialize_map(self, values: Mapping[str, Any]) -> dict[str, Any]:
        return {k: self._serializer.serialize(_to_dynamo(v)) for k, v in values.items()}

    def _deserialize_map(self, values: Mapping[str, Any]) -> dict[str, Any]:
        return {k: self._deserializer.deserialize(v) for k, v in values.items()}

    def _deserialize_write_request(self, request: Mapping[str, Any]) -> dict[str, Any]:
        if "PutRequest" in request:
            return {"put": self._deserialize_map(request["PutRequest"].get("Item", {}))}
        return {"delete": self._deserialize_map(request.get("DeleteRequest", {}).get("Key", {}))}
