from __future__ import annotations

import logging
from decimal import Decimal

import pytest

from dyno_table import (
    BatchDelete,
    BatchPut,
    ConditionalCheckFailedError,
    FilterCondition,
    IncrementAction,
    PrimaryKey,
    RemoveAction,
    SetAction,
    TransactConditionCheck,
    TransactDelete,
    TransactionCanceledError,
    TransactPut,
    TransactUpdate,
    ValidationError,
)
from dyno_table.testkit import client_error, fake_table


def test_batch_write_mixes_puts_and_deletes() -> None:
    table, client = fake_table()
    client.expect(
        "batch_write_item",
        {
            "RequestItems": {
                "tbl": [
                    {"PutRequest": {"Item": {"pk": {"S": "A"}, "sk": {"S": "1"}, "n": {"N": "1.5"}}}},
                    {"DeleteRequest": {"Key": {"pk": {"S": "B"}, "sk": {"S": "2"}}}},
                ]
            }
        },
        response={"UnprocessedItems": {}},
    )

    out = table.batch_write(
        [BatchPut({"pk": "A", "sk": "1", "n": 1.5}), BatchDelete(PrimaryKey("B", "2"))],
    )

    client.assert_no_pending()
    assert out == []


def test_batch_write_returns_unprocessed_requests_to_the_caller(caplog: pytest.LogCaptureFixture) -> None:
    table, client = fake_table()
    client.expect(
        "batch_write_item",
        response={
            "UnprocessedItems": {
                "tbl": [
                    {"PutRequest": {"Item": {"pk": {"S": "A"}, "sk": {"S": "1"}, "n": {"N": "3"}}}},
                    {"DeleteRequest": {"Key": {"pk": {"S": "B"}, "sk": {"S": "2"}}}},
                ]
            }
        },
    )

    with caplog.at_level(logging.WARNING, logger="dyno_table.store"):
        unprocessed = table.batch_write(
            [BatchPut({"pk": "A", "sk": "1", "n": 3}), BatchDelete({"pk": "B", "sk": "2"})]
        )

    client.assert_no_pending()
    assert unprocessed == [
        {"put": {"pk": "A", "sk": "1", "n": Decimal("3")}},
        {"delete": {"pk": "B", "sk": "2"}},
    ]
    assert any("2 unprocessed request(s)" in r.getMessage() for r in caplog.records)


def test_batch_write_limits() -> None:
    table, client = fake_table()
    with pytest.raises(ValidationError, match="operations is required"):
        table.batch_write([])
    too_many = [BatchPut({"pk": "A", "sk": str(i)}) for i in range(26)]
    with pytest.raises(ValidationError, match="at most 25 operations"):
        table.batch_write(too_many)
    assert client.calls == []


def test_batch_write_accepts_exactly_25_operations() -> None:
    table, client = fake_table()

    def validate(req: dict) -> None:
        assert len(req["RequestItems"]["tbl"]) == 25

    client.expect("batch_write_item", validate, response={})
    table.batch_write([BatchPut({"pk": "A", "sk": str(i)}) for i in range(25)])
    client.assert_no_pending()


def test_batch_write_validates_each_operation() -> None:
    table, client = fake_table()
    with pytest.raises(ValidationError, match="missing sort key attribute"):
        table.batch_write([BatchPut({"pk": "A"})])
    with pytest.raises(ValidationError, match="partition key is required"):
        table.batch_write([BatchDelete({"sk": "B"})])
    with pytest.raises(ValidationError, match="unsupported batch operation"):
        table.batch_write([{"pk": "A", "sk": "B"}])  # type: ignore[list-item]
    assert client.calls == []


def test_transact_write_builds_every_action_kind() -> None:
    table, client = fake_table()

    def validate(req: dict) -> None:
        items = req["TransactItems"]
        assert [next(iter(i)) for i in items] == ["Put", "Update", "Delete", "ConditionCheck"]

        put = items[0]["Put"]
        assert put["TableName"] == "tbl"
        assert put["Item"] == {"pk": {"S": "DINO#2"}, "sk": {"S": "META"}}
        assert put["ConditionExpression"] == "attribute_not_exists(#c0)"
        assert put["ExpressionAttributeNames"] == {"#c0": "pk"}

        update = items[1]["Update"]
        assert update["Key"] == {"pk": {"S": "HABITAT#1"}, "sk": {"S": "META"}}
        assert update["UpdateExpression"] == "SET #u0 = :u0 REMOVE #u1 ADD #u2 :u1"
        assert update["ExpressionAttributeNames"] == {
            "#u0": "status",
            "#u1": "note",
            "#u2": "occupants",
            "#c0": "capacity",
        }
        assert update["ExpressionAttributeValues"] == {
            ":u0": {"S": "OPEN"},
            ":u1": {"N": "1"},
            ":c0": {"N": "0"},
        }
        assert update["ConditionExpression"] == "#c0 > :c0"

        delete = items[2]["Delete"]
        assert delete == {"TableName": "tbl", "Key": {"pk": {"S": "DINO#1"}, "sk": {"S": "META"}}}

        check = items[3]["ConditionCheck"]
        assert check["ConditionExpression"] == "#c0 = :c0"
        assert check["ExpressionAttributeNames"] == {"#c0": "status"}

    client.expect("transact_write_items", validate, response={})

    table.transact_write(
        [
            TransactPut({"pk": "DINO#2", "sk": "META"}, [FilterCondition.not_exists("pk")]),
            TransactUpdate(
                {"pk": "HABITAT#1", "sk": "META"},
                [SetAction("status", "OPEN"), RemoveAction("note"), IncrementAction("occupants")],
                [FilterCondition.gt("capacity", 0)],
            ),
            TransactDelete(PrimaryKey("DINO#1", "META")),
            TransactConditionCheck({"pk": "PARK", "sk": "META"}, [FilterCondition.eq("status", "OPEN")]),
        ]
    )
    client.assert_no_pending()


def test_transact_write_surfaces_cancellation_reasons() -> None:
    table, client = fake_table()
    client.expect(
        "transact_write_items",
        error=client_error(
            "TransactionCanceledException",
            "Transaction cancelled",
            CancellationReasons=[{"Code": "None"}, {"Code": "ConditionalCheckFailed"}],
        ),
    )

    with pytest.raises(TransactionCanceledError) as exc_info:
        table.transact_write(
            [
                TransactDelete({"pk": "A", "sk": "B"}),
                TransactConditionCheck({"pk": "C", "sk": "D"}, [FilterCondition.exists("pk")]),
            ]
        )
    assert exc_info.value.reason_codes == ("None", "ConditionalCheckFailed")
    assert not isinstance(exc_info.value, ConditionalCheckFailedError)


def test_transact_write_validation() -> None:
    table, client = fake_table()
    with pytest.raises(ValidationError, match="operations is required"):
        table.transact_write([])
    with pytest.raises(ValidationError, match="at most 100 operations"):
        table.transact_write([TransactDelete({"pk": "A", "sk": str(i)}) for i in range(101)])
    with pytest.raises(ValidationError, match="cannot update key field: sk"):
        table.transact_write([TransactUpdate({"pk": "A", "sk": "B"}, [SetAction("sk", "C")])])
    with pytest.raises(ValidationError, match="requires at least one condition"):
        table.transact_write([TransactConditionCheck({"pk": "A", "sk": "B"}, [])])
    with pytest.raises(ValidationError, match="missing partition key attribute"):
        table.transact_write([TransactPut({"sk": "B"})])
    with pytest.raises(ValidationError, match="unsupported transaction action"):
        table.transact_write([BatchPut({"pk": "A", "sk": "B"})])  # type: ignore[list-item]
    assert client.calls == []
