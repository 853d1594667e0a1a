from __future__ import annotations

from botocore.exceptions import ClientError

from .errors import (
    ConditionalCheckFailedError,
    ResourceNotFoundError,
    StoreError,
    StoreValidationError,
    ThrottlingError,
    TransactionCanceledError,
)

_THROTTLING_CODES = frozenset(
    {
        "ProvisionedThroughputExceededException",
        "RequestLimitExceeded",
        "ThrottlingException",
    }
)


def _error_fields(err: ClientError) -> tuple[str, str]:
    code = str(err.response.get("Error", {}).get("Code", ""))
    message = str(err.response.get("Error", {}).get("Message", ""))
    return code or "UnknownError", message or str(err)


def map_client_error(err: ClientError) -> StoreError:
    code, message = _error_fields(err)

    if code == "ConditionalCheckFailedException":
        return ConditionalCheckFailedError(code=code, message=message)
    if code == "ValidationException":
        return StoreValidationError(code=code, message=message)
    if code == "ResourceNotFoundException":
        return ResourceNotFoundError(code=code, message=message)
    if code in _THROTTLING_CODES:
        return ThrottlingError(code=code, message=message)
    if code == "TransactionCanceledException":
        return map_transaction_error(err)

    return StoreError(code=code, message=message)


def map_transaction_error(err: ClientError) -> StoreError:
    code, message = _error_fields(err)
    if code != "TransactionCanceledException":
        return map_client_error(err)

    reasons_raw = err.response.get("CancellationReasons") or []
    reason_codes = tuple(
        str(reason.get("Code", "Unknown"))
        for reason in reasons_raw
        if isinstance(reason, dict) and reason.get("Code")
    )
    return TransactionCanceledError(message=message, reason_codes=reason_codes)
