"""In-process key-value store with DynamoDB query semantics."""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .base import BaseKeyValueStore, QueryPage, TableSchema

logger = logging.getLogger(__name__)


class InMemoryKeyValueStore(BaseKeyValueStore):
    """
    Dict-backed store for local runs and tests.

    Items are kept per table and partition; sort keys are ordered by plain
    string comparison, which matches DynamoDB ordering for string keys.
    Size and batch ceilings are enforced like the remote store.
    """

    def __init__(self, **limits: Any):
        super().__init__(**limits)
        self._tables: Dict[str, Dict[str, Dict[str, Dict[str, Any]]]] = {}
        self.batch_calls = 0

    def _partition(self, table: TableSchema, value: str) -> Dict[str, Dict[str, Any]]:
        return self._tables.setdefault(table.name, {}).setdefault(value, {})

    def _store(self, table: TableSchema, item: Mapping[str, Any]) -> None:
        partition = self._partition(table, item[table.partition_key])
        partition[item[table.sort_key]] = dict(item)

    async def get_item(
        self, table: TableSchema, key: Mapping[str, Any]
    ) -> Optional[Dict[str, Any]]:
        partition = self._tables.get(table.name, {}).get(key[table.partition_key], {})
        item = partition.get(key[table.sort_key])
        return dict(item) if item is not None else None

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
        partition = self._tables.get(table.name, {}).get(partition_value, {})
        sort_keys = sorted(partition, reverse=descending)

        if sort_before is not None:
            sort_keys = [k for k in sort_keys if k < sort_before]

        if start_key is not None:
            resume_after = start_key[table.sort_key]
            if descending:
                sort_keys = [k for k in sort_keys if k < resume_after]
            else:
                sort_keys = [k for k in sort_keys if k > resume_after]

        examined = sort_keys if limit is None else sort_keys[:limit]
        items: List[Dict[str, Any]] = []
        for sort_key in examined:
            item = partition[sort_key]
            if filters and any(item.get(k) != v for k, v in filters.items()):
                continue
            items.append(dict(item))

        last_key = None
        if limit is not None and len(sort_keys) > limit and examined:
            last_key = table.key_of(partition[examined[-1]])

        logger.debug(
            f"Queried {table.name}/{partition_value}: examined {len(examined)}, "
            f"returned {len(items)}"
        )
        return QueryPage(items=items, last_key=last_key)

    async def put_item(self, table: TableSchema, item: Mapping[str, Any]) -> None:
        self.check_item_size(table, item)
        self._store(table, item)

    async def batch_put(
        self, table: TableSchema, items: Sequence[Mapping[str, Any]]
    ) -> None:
        self.check_batch_size(items)
        for item in items:
            self.check_item_size(table, item)
        self.batch_calls += 1
        for item in items:
            self._store(table, item)

    async def close(self) -> None:
        self._tables.clear()

    def count(self, table: TableSchema) -> int:
        """Number of items held in a table."""
        return sum(len(p) for p in self._tables.get(table.name, {}).values())
