from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import TracebackType
from typing import Any

from boto3.dynamodb.types import TypeDeserializer
from botocore.exceptions import ClientError

_PLACEHOLDER = re.compile(r"[#:][A-Za-z][A-Za-z0-9_]*")


class _AnySentinel:
    def __repr__(self) -> str:  # pragma: no cover
        return "ANY"


ANY: Any = _AnySentinel()


def _assert_match(expected: Any, actual: Any, *, path: str) -> None:
    if expected is ANY:
        return

    if isinstance(expected, dict):
        if not isinstance(actual, dict):
            raise AssertionError(f"{path}: expected dict, got {type(actual).__name__}")
        for k, v in expected.items():
            if k not in actual:
                raise AssertionError(f"{path}: missing key {k!r}")
            _assert_match(v, actual[k], path=f"{path}.{k}")
        return

    if isinstance(expected, list):
        if not isinstance(actual, list):
            raise AssertionError(f"{path}: expected list, got {type(actual).__name__}")
        if len(expected) != len(actual):
            raise AssertionError(f"{path}: expected {len(expected)} items, got {len(actual)}")
        for i, (e, a) in enumerate(zip(expected, actual, strict=True)):
            _assert_match(e, a, path=f"{path}[{i}]")
        return

    if expected != actual:
        raise AssertionError(f"{path}: expected {expected!r}, got {actual!r}")


def client_error(code: str, message: str = "", *, operation: str = "Operation", **extra: Any) -> ClientError:
    """Build the ``ClientError`` botocore raises for a failed DynamoDB call."""
    response: dict[str, Any] = {"Error": {"Code": code, "Message": message}, **extra}
    return ClientError(response, operation)  # type: ignore[arg-type]


def render_expression(request: Mapping[str, Any], field: str) -> str:
    """Return ``request[field]`` with every placeholder replaced by what it stands for.

    ``#f0 = :f0`` with ``{"#f0": "status"}`` / ``{":f0": {"S": "OPEN"}}`` renders as
    ``status = 'OPEN'``, so tests can assert on meaning rather than on placeholder numbering.
    """
    expression = request.get(field)
    if expression is None:
        raise AssertionError(f"request has no {field}")

    names: Mapping[str, str] = request.get("ExpressionAttributeNames", {})
    values: Mapping[str, Any] = request.get("ExpressionAttributeValues", {})
    deserializer = TypeDeserializer()

    def substitute(match: re.Match[str]) -> str:
        ref = match.group(0)
        if ref.startswith("#"):
            if ref not in names:
                raise AssertionError(f"{field}: undefined name placeholder {ref}")
            return names[ref]
        if ref not in values:
            raise AssertionError(f"{field}: undefined value placeholder {ref}")
        return repr(deserializer.deserialize(values[ref]))

    return _PLACEHOLDER.sub(substitute, str(expression))


@dataclass(frozen=True)
class ExpectedCall:
    method: str
    expected: Mapping[str, Any] | Callable[[Mapping[str, Any]], None] | None = None
    response: Mapping[str, Any] | None = None
    error: Exception | None = None

    def answer(self, method: str, req: dict[str, Any]) -> dict[str, Any]:
        if self.method != method:
            raise AssertionError(f"expected {self.method}, got {method}")

        if callable(self.expected):
            self.expected(req)
        elif self.expected is not None:
            _assert_match(dict(self.expected), req, path=method)

        if self.error is not None:
            raise self.error
        return dict(self.response or {})


class FakeDynamoDBClient:
    """Stand-in for ``boto3.client("dynamodb")`` that replays scripted responses.

    Calls must arrive in the order they were expected. ``expected`` is either a
    partial request matched recursively (``ANY`` matches anything) or a callable
    that asserts on the request itself. Used as a context manager, leaving the
    block cleanly asserts that every expected call was made.
    """

    def __init__(self) -> None:
        self._expected: list[ExpectedCall] = []
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def __enter__(self) -> FakeDynamoDBClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.assert_no_pending()

    def expect(
        self,
        method: str,
        expected: Mapping[str, Any] | Callable[[Mapping[str, Any]], None] | None = None,
        *,
        response: Mapping[str, Any] | None = None,
        error: Exception | None = None,
    ) -> None:
        self._expected.append(ExpectedCall(method=method, expected=expected, response=response, error=error))

    def assert_no_pending(self) -> None:
        if self._expected:
            pending = ", ".join(call.method for call in self._expected)
            raise AssertionError(f"pending expected calls: {pending}")

    def last_request(self, method: str) -> dict[str, Any]:
        for name, req in reversed(self.calls):
            if name == method:
                return req
        raise AssertionError(f"no {method} call was made")

    def _handle(self, method: str, req: dict[str, Any]) -> Mapping[str, Any]:
        self.calls.append((method, dict(req)))
        if not self._expected:
            raise AssertionError(f"unexpected call: {method}")
        return self._expected.pop(0).answer(method, req)

    def put_item(self, **kwargs: Any) -> Mapping[str, Any]:
        return self._handle("put_item", kwargs)

    def get_item(self, **kwargs: Any) -> Mapping[str, Any]:
        return self._handle("get_item", kwargs)

    def update_item(self, **kwargs: Any) -> Mapping[str, Any]:
        return self._handle("update_item", kwargs)

    def delete_item(self, **kwargs: Any) -> Mapping[str, Any]:
        return self._handle("delete_item", kwargs)

    def query(self, **kwargs: Any) -> Mapping[str, Any]:
        return self._handle("query", kwargs)

    def scan(self, **kwargs: Any) -> Mapping[str, Any]:
        return self._handle("scan", kwargs)

    def batch_write_item(self, **kwargs: Any) -> Mapping[str, Any]:
        return self._handle("batch_write_item", kwargs)

    def transact_write_items(self, **kwargs: Any) -> Mapping[str, Any]:
        return self._handle("transact_write_items", kwargs)
