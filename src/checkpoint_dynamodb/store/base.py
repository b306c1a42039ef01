"""Abstract key-value store contract used by the checkpoint repositories."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ..config.saver_config import DYNAMODB_BATCH_LIMIT, DYNAMODB_ITEM_SIZE_LIMIT
from ..errors import PayloadTooLarge


class TableSchema(BaseModel):
    """A table name plus the names of its partition and sort key attributes."""

    model_config = ConfigDict(frozen=True)

    name: str
    partition_key: str
    sort_key: str

    def key_of(self, item: Mapping[str, Any]) -> Dict[str, Any]:
        """Extract the primary key attributes of an item."""
        return {
            self.partition_key: item[self.partition_key],
            self.sort_key: item[self.sort_key],
        }


class QueryPage(BaseModel):
    """One page of query results plus the key to resume after it."""

    items: List[Dict[str, Any]] = Field(default_factory=list)
    last_key: Optional[Dict[str, Any]] = None


def calculate_item_size(item: Mapping[str, Any]) -> int:
    """
    Approximate the stored size of an item in bytes.

    Each attribute counts its UTF-8 name length plus its value length: UTF-8
    length for strings, raw length for bytes, decimal digits for numbers.

    Args:
        item: Item attributes

    Returns:
        Size in bytes
    """
    size = 0
    for name, value in item.items():
        size += len(name.encode("utf-8"))
        if value is None:
            size += 1
        elif isinstance(value, (bytes, bytearray)):
            size += len(value)
        elif isinstance(value, str):
            size += len(value.encode("utf-8"))
        else:
            size += len(str(value))
    return size


class BaseKeyValueStore(ABC):
    """
    Abstract store offering point-get, partition range queries, single puts
    and bounded batched puts.
    """

    def __init__(
        self,
        max_batch_size: int = DYNAMODB_BATCH_LIMIT,
        max_item_size: int = DYNAMODB_ITEM_SIZE_LIMIT,
    ):
        """
        Initialize store limits.

        Args:
            max_batch_size: Maximum items per batch_put call
            max_item_size: Per-item size ceiling in bytes
        """
        self.max_batch_size = max_batch_size
        self.max_item_size = max_item_size

    def check_item_size(self, table: TableSchema, item: Mapping[str, Any]) -> None:
        """
        Reject items over the size ceiling before they reach the store.

        Raises:
            PayloadTooLarge: If the item exceeds max_item_size
        """
        size = calculate_item_size(item)
        if size > self.max_item_size:
            raise PayloadTooLarge(size, self.max_item_size, table.name)

    def check_batch_size(self, items: Sequence[Mapping[str, Any]]) -> None:
        if len(items) > self.max_batch_size:
            raise ValueError(
                f"Batch of {len(items)} items exceeds the limit of "
                f"{self.max_batch_size}; split it before calling batch_put"
            )

    @abstractmethod
    async def get_item(
        self, table: TableSchema, key: Mapping[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """
        Fetch one item by its full primary key.

        Args:
            table: Target table
            key: Partition and sort key values

        Returns:
            Item if found, None otherwise
        """
        pass

    @abstractmethod
    async def query(
        self,
        table: TableSchema,
        partition_value: str,
        *,
        sort_before: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        consistent_read: bool = False,
        filters: Optional[Mapping[str, Any]] = None,
        start_key: Optional[Mapping[str, Any]] = None,
    ) -> QueryPage:
        """
        Query one partition, ordered by sort key.

        ``limit`` bounds the items examined, not the items returned: equality
        ``filters`` are applied afterwards, so a page may come back short or
        empty while ``last_key`` is still set.

        Args:
            table: Target table
            partition_value: Partition key value
            sort_before: Only items whose sort key is strictly less than this
            descending: Return the greatest sort keys first
            limit: Maximum items to examine
            consistent_read: Request a strongly consistent read
            filters: Attribute equality filters
            start_key: Resume after this key (``last_key`` of a prior page)

        Returns:
            Query page
        """
        pass

    @abstractmethod
    async def put_item(self, table: TableSchema, item: Mapping[str, Any]) -> None:
        """
        Insert or overwrite one item.

        Raises:
            PayloadTooLarge: If the item exceeds the size ceiling
        """
        pass

    @abstractmethod
    async def batch_put(
        self, table: TableSchema, items: Sequence[Mapping[str, Any]]
    ) -> None:
        """
        Insert or overwrite up to ``max_batch_size`` items in one call.

        Raises:
            ValueError: If more than max_batch_size items are given
            PayloadTooLarge: If any item exceeds the size ceiling
            StoreUnavailable: If the store left some items unprocessed
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release client resources."""
        pass
