from __future__ import annotations

import json
import re
from importlib.resources import files
from typing import TYPE_CHECKING, Any

from .conditions import (
    CompiledExpression,
    FilterCondition,
    IncrementAction,
    Operator,
    PrimaryKey,
    QueryResult,
    RemoveAction,
    SetAction,
    SortKeyCondition,
    SortKeyOperators,
)
from .config import PRIMARY_INDEX, IndexConfig, TableConfig
from .errors import (
    BuilderAlreadyExecutedError,
    ConditionalCheckFailedError,
    ConfigurationError,
    DynoTableError,
    ExpressionError,
    IndexNotFoundError,
    InvalidOperatorError,
    ResourceNotFoundError,
    StoreError,
    StoreValidationError,
    ThrottlingError,
    TransactionCanceledError,
    ValidationError,
)
from .expression import ExpressionBuilder
from .operations import (
    BatchDelete,
    BatchPut,
    TransactConditionCheck,
    TransactDelete,
    TransactPut,
    TransactUpdate,
)
from .put_builder import PutBuilder
from .query_builder import QueryBuilder
from .store import DynamoService
from .table import Table
from .update_builder import UpdateBuilder

if TYPE_CHECKING:
    from .runtime import client_from_env, create_client_config


def _read_repo_version() -> str:
    try:
        data = json.loads(files(__package__).joinpath("version.json").read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return "0.0.0"

    version = data.get("version")
    return version if isinstance(version, str) and version else "0.0.0"


def _normalize_repo_version(repo_version: str) -> str:
    match = re.match(r"^(\d+\.\d+\.\d+)-rc\.?([0-9]+)$", repo_version)
    if match:
        return f"{match.group(1)}rc{match.group(2)}"
    return repo_version


__repo_version__ = _read_repo_version()
__version__ = _normalize_repo_version(__repo_version__)


def __getattr__(name: str) -> Any:
    if name in {"client_from_env", "create_client_config"}:
        from . import runtime

        return getattr(runtime, name)
    raise AttributeError(name)


__all__ = [
    "BatchDelete",
    "BatchPut",
    "BuilderAlreadyExecutedError",
    "client_from_env",
    "CompiledExpression",
    "ConditionalCheckFailedError",
    "ConfigurationError",
    "create_client_config",
    "DynamoService",
    "DynoTableError",
    "ExpressionBuilder",
    "ExpressionError",
    "FilterCondition",
    "IncrementAction",
    "IndexConfig",
    "IndexNotFoundError",
    "InvalidOperatorError",
    "Operator",
    "PRIMARY_INDEX",
    "PrimaryKey",
    "PutBuilder",
    "QueryBuilder",
    "QueryResult",
    "RemoveAction",
    "ResourceNotFoundError",
    "SetAction",
    "SortKeyCondition",
    "SortKeyOperators",
    "StoreError",
    "StoreValidationError",
    "Table",
    "TableConfig",
    "ThrottlingError",
    "TransactConditionCheck",
    "TransactDelete",
    "TransactionCanceledError",
    "TransactPut",
    "TransactUpdate",
    "UpdateBuilder",
    "ValidationError",
    "__repo_version__",
    "__version__",
]
