"""Checkpoints table access: latest/exact lookup, history paging, insertion."""

import logging
from typing import AsyncIterator, Dict, Optional

from ..models.checkpoint_models import (
    CHECKPOINTS_PARTITION_KEY,
    CHECKPOINTS_SORT_KEY,
    CheckpointAddress,
    CheckpointItem,
)
from ..store.base import BaseKeyValueStore, TableSchema

logger = logging.getLogger(__name__)


def checkpoints_table(name: str) -> TableSchema:
    """Schema of the checkpoints table: thread_id / checkpoint_id."""
    return TableSchema(
        name=name,
        partition_key=CHECKPOINTS_PARTITION_KEY,
        sort_key=CHECKPOINTS_SORT_KEY,
    )


class CheckpointRepository:
    """
    Repository for the checkpoints table.

    Checkpoint ids are time ordered, so the greatest sort key in a thread's
    partition is its most recent checkpoint. No separate "latest" pointer is
    kept.
    """

    def __init__(self, store: BaseKeyValueStore, table_name: str):
        """
        Initialize repository.

        Args:
            store: Key-value store client
            table_name: Name of the checkpoints table
        """
        self.store = store
        self.table = checkpoints_table(table_name)

    async def get_latest_or_exact(
        self, address: CheckpointAddress
    ) -> Optional[CheckpointItem]:
        """
        Fetch the addressed checkpoint, or the latest one when no id is given.

        A non-empty namespace restricts the "latest" lookup to that namespace;
        an empty one matches any namespace.

        Args:
            address: Validated checkpoint address

        Returns:
            Checkpoint item if found, None otherwise
        """
        if address.checkpoint_id is not None:
            item = await self.store.get_item(
                self.table,
                {
                    CHECKPOINTS_PARTITION_KEY: address.thread_id,
                    CHECKPOINTS_SORT_KEY: address.checkpoint_id,
                },
            )
            return CheckpointItem.from_store_item(item) if item is not None else None

        filters = None
        if address.checkpoint_ns:
            filters = {"checkpoint_ns": address.checkpoint_ns}

        start_key: Optional[Dict] = None
        while True:
            page = await self.store.query(
                self.table,
                address.thread_id,
                descending=True,
                limit=1,
                consistent_read=True,
                filters=filters,
                start_key=start_key,
            )
            if page.items:
                return CheckpointItem.from_store_item(page.items[0])
            if page.last_key is None:
                return None
            # Filtered-out item consumed the limit; continue past it
            start_key = page.last_key

    async def list_page(
        self,
        thread_id: str,
        before: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> AsyncIterator[CheckpointItem]:
        """
        Yield a thread's checkpoints newest first.

        Store pages are fetched lazily. Each call starts a fresh query; to
        continue a listing pass the last seen checkpoint id as ``before``.

        Args:
            thread_id: Thread identifier
            before: Only checkpoints with ids strictly less than this
            limit: Maximum checkpoints to yield

        Yields:
            Checkpoint items in descending id order
        """
        remaining = limit
        start_key: Optional[Dict] = None
        pages = 0

        while remaining is None or remaining > 0:
            page = await self.store.query(
                self.table,
                thread_id,
                sort_before=before,
                descending=True,
                limit=remaining,
                start_key=start_key,
            )
            pages += 1

            for item in page.items:
                yield CheckpointItem.from_store_item(item)
                if remaining is not None:
                    remaining -= 1
                    if remaining == 0:
                        break

            if page.last_key is None:
                break
            start_key = page.last_key

        logger.debug(f"Listed checkpoints for thread {thread_id} in {pages} page(s)")

    async def insert(self, item: CheckpointItem) -> None:
        """
        Write a checkpoint, overwriting any item with the same id.

        Raises:
            PayloadTooLarge: If the item exceeds the store's size ceiling
        """
        await self.store.put_item(self.table, item.to_store_item())
        parent = item.parent_checkpoint_id
        logger.info(
            f"Saved checkpoint {item.checkpoint_id} for thread {item.thread_id}"
            + (f" (parent: {parent})" if parent else "")
        )
