"""Single-table dinosaur park: one table, three partition-only secondary indexes.

Run against DynamoDB Local with ``DYNAMODB_ENDPOINT=http://localhost:8000``.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from dyno_table import (
    FilterCondition,
    PrimaryKey,
    SetAction,
    Table,
    TransactConditionCheck,
    TransactUpdate,
    client_from_env,
)

INDEXES = {
    "partitionKey": "pk",
    "sortKey": "sk",
    "gsis": {
        "gsi1": {"partitionKey": "gsi1pk"},
        "gsi2": {"partitionKey": "gsi2pk"},
        "gsi3": {"partitionKey": "gsi3pk"},
    },
}


def _now() -> str:
    return datetime.now(tz=UTC).isoformat()


def dinosaurs_by_species(table: Table, species: str) -> list[dict[str, Any]]:
    return table.query({"pk": f"SPECIES#{species}"}).use_index("gsi1").execute().items


def dinosaurs_by_period(table: Table, period_id: str) -> list[dict[str, Any]]:
    return (
        table.query({"pk": f"PERIOD#{period_id}"})
        .use_index("gsi2")
        .filter(FilterCondition.eq("entityType", "DINOSAUR"))
        .execute()
        .items
    )


def large_carnivores_in_habitat(table: Table, habitat_id: str, min_length: int) -> list[dict[str, Any]]:
    return (
        table.query({"pk": f"HABITAT#{habitat_id}"})
        .use_index("gsi3")
        .filter(FilterCondition.eq("diet", "Carnivore"), FilterCondition.gte("length", min_length))
        .execute()
        .items
    )


def fossils_for(table: Table, dino_id: str) -> list[dict[str, Any]]:
    key = PrimaryKey(f"DINO#{dino_id}", lambda op: op.begins_with("FOSSIL#"))
    return table.query(key).sort_descending().execute().items


def relocate(table: Table, dino_id: str, habitat_id: str) -> None:
    """Move a dinosaur only if the target habitat is open."""
    table.transact_write(
        [
            TransactConditionCheck(
                {"pk": f"HABITAT#{habitat_id}", "sk": "METADATA"},
                [FilterCondition.eq("status", "OPEN")],
            ),
            TransactUpdate(
                {"pk": f"DINO#{dino_id}", "sk": "METADATA"},
                [
                    SetAction("habitatId", habitat_id),
                    SetAction("gsi3pk", f"HABITAT#{habitat_id}"),
                    SetAction("updatedAt", _now()),
                ],
            ),
        ]
    )


def _create_table(client: Any, table_name: str) -> None:
    gsis = [
        {
            "IndexName": name,
            "KeySchema": [{"AttributeName": f"{name}pk", "KeyType": "HASH"}],
            "Projection": {"ProjectionType": "ALL"},
        }
        for name in ("gsi1", "gsi2", "gsi3")
    ]
    client.create_table(
        TableName=table_name,
        KeySchema=[{"AttributeName": "pk", "KeyType": "HASH"}, {"AttributeName": "sk", "KeyType": "RANGE"}],
        AttributeDefinitions=[
            {"AttributeName": attr, "AttributeType": "S"} for attr in ("pk", "sk", "gsi1pk", "gsi2pk", "gsi3pk")
        ],
        GlobalSecondaryIndexes=gsis,
        BillingMode="PAY_PER_REQUEST",
    )
    client.get_waiter("table_exists").wait(TableName=table_name)


def main() -> None:
    client = client_from_env()
    table_name = f"DinosaurData_{uuid.uuid4().hex[:8]}"
    _create_table(client, table_name)

    try:
        table = Table(table_name=table_name, indexes=INDEXES, client=client)

        for habitat_id, status in (("H1", "OPEN"), ("H2", "CLOSED")):
            table.put(
                {"pk": f"HABITAT#{habitat_id}", "sk": "METADATA", "entityType": "HABITAT", "status": status}
            ).execute()

        table.put(
            {
                "pk": "DINO#1",
                "sk": "METADATA",
                "gsi1pk": "SPECIES#Tyrannosaurus",
                "gsi2pk": "PERIOD#cretaceous",
                "gsi3pk": "HABITAT#H2",
                "entityType": "DINOSAUR",
                "species": "Tyrannosaurus",
                "diet": "Carnivore",
                "length": 12.3,
                "habitatId": "H2",
                "createdAt": _now(),
            }
        ).if_not_exists().execute()
        table.put({"pk": "DINO#1", "sk": "FOSSIL#1998", "entityType": "FOSSIL", "completeness": 90}).execute()

        print("by species:", dinosaurs_by_species(table, "Tyrannosaurus"))
        print("by period:", dinosaurs_by_period(table, "cretaceous"))
        print("fossils:", fossils_for(table, "1"))

        relocate(table, "1", "H1")
        print("large carnivores in H1:", large_carnivores_in_habitat(table, "H1", 10))
    finally:
        client.delete_table(TableName=table_name)


if __name__ == "__main__":
    main()
