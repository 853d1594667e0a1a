from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import ConfigurationError, IndexNotFoundError
from .validation import validate_attribute_name, validate_index_name, validate_table_name

PRIMARY_INDEX = "primary"


@dataclass(frozen=True)
class IndexConfig:
    partition_key: str
    sort_key: str | None = None

    def __post_init__(self) -> None:
        if not self.partition_key:
            raise ConfigurationError("index partition_key is required")
        validate_attribute_name(self.partition_key, error=ConfigurationError)
        if self.sort_key is not None:
            validate_attribute_name(self.sort_key, error=ConfigurationError)

    @staticmethod
    def from_mapping(data: Mapping[str, Any] | IndexConfig) -> IndexConfig:
        if isinstance(data, IndexConfig):
            return data
        if not isinstance(data, Mapping):
            raise ConfigurationError("index configuration must be a mapping")

        partition = data.get("partition_key", data.get("partitionKey", data.get("pkName")))
        sort = data.get("sort_key", data.get("sortKey", data.get("skName")))
        if not isinstance(partition, str) or not partition:
            raise ConfigurationError("index configuration is missing a partition key name")
        if sort is not None and not isinstance(sort, str):
            raise ConfigurationError("index sort key name must be a string")
        return IndexConfig(partition_key=partition, sort_key=sort or None)


@dataclass(frozen=True)
class TableConfig:
    table_name: str
    primary: IndexConfig
    indexes: Mapping[str, IndexConfig] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.table_name:
            raise ConfigurationError("table_name is required")
        validate_table_name(self.table_name)
        for name in self.indexes:
            if name == PRIMARY_INDEX:
                raise ConfigurationError(f"{PRIMARY_INDEX!r} is reserved for the table's primary index")
            validate_index_name(name)

    def index(self, name: str | None = None) -> IndexConfig:
        if name is None or name == PRIMARY_INDEX:
            return self.primary
        found = self.indexes.get(name)
        if found is None:
            raise IndexNotFoundError(index_name=name)
        return found

    @property
    def index_names(self) -> tuple[str, ...]:
        return tuple(self.indexes)

    @staticmethod
    def from_mapping(table_name: str, data: Mapping[str, Any]) -> TableConfig:
        """Build a config from either of the two accepted plain shapes.

        Flat: ``{"primary": {"partition_key": "pk", "sort_key": "sk"}, "gsi1": {...}}``

        Nested: ``{"partitionKey": "pk", "sortKey": "sk", "gsis": {"gsi1": {...}}}``
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError("table index configuration must be a mapping")

        if PRIMARY_INDEX in data:
            primary = IndexConfig.from_mapping(data[PRIMARY_INDEX])
            secondary = {
                str(name): IndexConfig.from_mapping(index_data)
                for name, index_data in data.items()
                if name != PRIMARY_INDEX
            }
            return TableConfig(table_name=table_name, primary=primary, indexes=secondary)

        if any(k in data for k in ("partition_key", "partitionKey", "pkName")):
            primary = IndexConfig.from_mapping(data)
            gsis = data.get("gsis", data.get("indexes")) or {}
            if not isinstance(gsis, Mapping):
                raise ConfigurationError("gsis must be a mapping of index name to key names")
            secondary = {str(name): IndexConfig.from_mapping(index_data) for name, index_data in gsis.items()}
            return TableConfig(table_name=table_name, primary=primary, indexes=secondary)

        raise ConfigurationError(f"table configuration must define a {PRIMARY_INDEX!r} index")
