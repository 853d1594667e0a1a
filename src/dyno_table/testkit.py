from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .mocks import ANY, FakeDynamoDBClient, client_error, render_expression
from .table import Table

DEFAULT_TEST_INDEXES: Mapping[str, Any] = {
    "primary": {"partition_key": "pk", "sort_key": "sk"},
    "gsi1": {"partition_key": "gsi1pk", "sort_key": "gsi1sk"},
    "gsi2": {"partition_key": "gsi2pk"},
}


def fake_table(
    client: FakeDynamoDBClient | None = None,
    *,
    table_name: str = "tbl",
    indexes: Mapping[str, Any] | None = None,
) -> tuple[Table, FakeDynamoDBClient]:
    fake = client or FakeDynamoDBClient()
    table = Table(table_name=table_name, indexes=indexes or DEFAULT_TEST_INDEXES, client=fake)
    return table, fake


__all__ = [
    "ANY",
    "DEFAULT_TEST_INDEXES",
    "FakeDynamoDBClient",
    "client_error",
    "fake_table",
    "render_expression",
]
