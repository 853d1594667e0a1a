from __future__ import annotations

import re

from .errors import ConfigurationError, DynoTableError, ExpressionError

MaxAttributeNameLength = 255
MaxExpressionLength = 4096
MaxInValues = 100
MaxBatchWriteItems = 25
MaxTransactItems = 100

_RESOURCE_NAME = re.compile(r"^[a-zA-Z0-9_.-]{3,255}$")


def _contains_control_characters(value: str) -> bool:
    for ch in value:
        code = ord(ch)
        if 0 <= code <= 0x1F or code == 0x7F:
            return True
    return False


def validate_attribute_name(
    name: str,
    *,
    error: type[DynoTableError] = ExpressionError,
) -> None:
    if not isinstance(name, str) or not name:
        raise error("attribute name cannot be empty")
    if len(name) > MaxAttributeNameLength:
        raise error(f"attribute name exceeds {MaxAttributeNameLength} characters")
    if _contains_control_characters(name):
        raise error("attribute name contains control characters")


def validate_expression(expression: str) -> None:
    if len(expression) > MaxExpressionLength:
        raise ExpressionError(
            f"expression exceeds maximum length of {MaxExpressionLength} characters ({len(expression)})"
        )


def validate_table_name(name: str) -> None:
    if _RESOURCE_NAME.match(name) is None:
        raise ConfigurationError(f"invalid table name: {name!r}")


def validate_index_name(name: str) -> None:
    if _RESOURCE_NAME.match(name) is None:
        raise ConfigurationError(f"invalid index name: {name!r}")
