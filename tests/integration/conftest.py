from __future__ import annotations

import uuid
from collections.abc import Iterator
from typing import Any

import pytest

from dyno_table import Table, client_from_env

INDEXES = {
    "primary": {"partition_key": "pk", "sort_key": "sk"},
    "gsi1": {"partition_key": "gsi1pk", "sort_key": "gsi1sk"},
}


@pytest.fixture()
def client() -> Any:
    return client_from_env()


@pytest.fixture()
def table(client: Any) -> Iterator[Table]:
    table_name = f"dyno_table_{uuid.uuid4().hex[:12]}"
    client.create_table(
        TableName=table_name,
        KeySchema=[{"AttributeName": "pk", "KeyType": "HASH"}, {"AttributeName": "sk", "KeyType": "RANGE"}],
        AttributeDefinitions=[
            {"AttributeName": "pk", "AttributeType": "S"},
            {"AttributeName": "sk", "AttributeType": "S"},
            {"AttributeName": "gsi1pk", "AttributeType": "S"},
            {"AttributeName": "gsi1sk", "AttributeType": "S"},
        ],
        GlobalSecondaryIndexes=[
            {
                "IndexName": "gsi1",
                "KeySchema": [
                    {"AttributeName": "gsi1pk", "KeyType": "HASH"},
                    {"AttributeName": "gsi1sk", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            }
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    client.get_waiter("table_exists").wait(TableName=table_name)

    try:
        yield Table(table_name=table_name, indexes=INDEXES, client=client)
    finally:
        client.delete_table(TableName=table_name)
