from __future__ import annotations

import pytest

from dyno_table import (
    ConditionalCheckFailedError,
    DynoTableError,
    ResourceNotFoundError,
    StoreError,
    StoreValidationError,
    ThrottlingError,
    TransactionCanceledError,
)
from dyno_table.aws_errors import map_client_error, map_transaction_error
from dyno_table.mocks import client_error


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("ConditionalCheckFailedException", ConditionalCheckFailedError),
        ("ValidationException", StoreValidationError),
        ("ResourceNotFoundException", ResourceNotFoundError),
        ("ProvisionedThroughputExceededException", ThrottlingError),
        ("RequestLimitExceeded", ThrottlingError),
        ("ThrottlingException", ThrottlingError),
        ("TransactionCanceledException", TransactionCanceledError),
        ("InternalServerError", StoreError),
    ],
)
def test_map_client_error(code: str, expected: type[StoreError]) -> None:
    err = map_client_error(client_error(code, "boom"))
    assert type(err) is expected
    assert isinstance(err, DynoTableError)
    assert err.code == code
    assert err.message == "boom"


def test_map_client_error_without_code() -> None:
    err = map_client_error(client_error(""))
    assert type(err) is StoreError
    assert err.code == "UnknownError"
    assert err.message


def test_map_transaction_error_collects_reason_codes() -> None:
    err = map_transaction_error(
        client_error(
            "TransactionCanceledException",
            "cancelled",
            CancellationReasons=[{"Code": "None"}, {"Code": "ConditionalCheckFailed"}, {"Message": "x"}],
        )
    )
    assert isinstance(err, TransactionCanceledError)
    assert err.reason_codes == ("None", "ConditionalCheckFailed")
    assert str(err) == "TransactionCanceledException: cancelled"


def test_map_transaction_error_falls_back_to_client_error_mapping() -> None:
    err = map_transaction_error(client_error("ValidationException", "bad"))
    assert isinstance(err, StoreValidationError)
