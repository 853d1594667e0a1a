from __future__ import annotations

import logging
import os
import uuid

from dyno_table import ConditionalCheckFailedError, FilterCondition, PrimaryKey, Table, client_from_env


def main() -> None:
    logging.basicConfig(level=logging.DEBUG if os.environ.get("DEBUG") else logging.INFO)

    client = client_from_env()
    table_name = f"dyno_table_example_{uuid.uuid4().hex[:12]}"

    client.create_table(
        TableName=table_name,
        KeySchema=[{"AttributeName": "pk", "KeyType": "HASH"}, {"AttributeName": "sk", "KeyType": "RANGE"}],
        AttributeDefinitions=[
            {"AttributeName": "pk", "AttributeType": "S"},
            {"AttributeName": "sk", "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    client.get_waiter("table_exists").wait(TableName=table_name)

    try:
        table = Table(
            table_name=table_name,
            indexes={"primary": {"partition_key": "pk", "sort_key": "sk"}},
            client=client,
        )

        table.put({"pk": "A", "sk": "001", "value": 1}).execute()
        table.put({"pk": "A", "sk": "010", "value": 10}).execute()
        table.put({"pk": "A", "sk": "100", "value": 100}).execute()

        try:
            table.put({"pk": "A", "sk": "001", "value": -1}).if_not_exists().execute()
        except ConditionalCheckFailedError as err:
            print("duplicate rejected:", err.code)

        print("get:", table.get({"pk": "A", "sk": "010"}))

        page = table.query(PrimaryKey("A", lambda op: op.begins_with("0"))).execute()
        print("query begins_with('0'):", page.items)

        print("update:", table.update({"pk": "A", "sk": "100"}).increment("value", 5).execute())

        print("scan value > 5:", table.scan([FilterCondition.gt("value", 5)]).items)
    finally:
        client.delete_table(TableName=table_name)


if __name__ == "__main__":
    main()
