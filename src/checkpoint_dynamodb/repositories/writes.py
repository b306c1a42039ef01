"""Writes table access: batched appends and per-checkpoint retrieval."""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.keys import join_partition_key
from ..errors import MissingCheckpointId
from ..models.checkpoint_models import (
    WRITES_PARTITION_KEY,
    WRITES_SORT_KEY,
    CheckpointAddress,
    WriteItem,
)
from ..store.base import BaseKeyValueStore, TableSchema

logger = logging.getLogger(__name__)

# (channel, type tag, serialized value)
SerializedWrite = Tuple[str, str, bytes]


def writes_table(name: str) -> TableSchema:
    """Schema of the writes table keyed by the composite write keys."""
    return TableSchema(
        name=name,
        partition_key=WRITES_PARTITION_KEY,
        sort_key=WRITES_SORT_KEY,
    )


class WriteRepository:
    """
    Repository for pending writes attached to checkpoints.

    Writes are appended in sequential batches bounded by the store's batch
    ceiling. Batches are not atomic as a group: if one fails, the earlier
    ones stay written.
    """

    def __init__(self, store: BaseKeyValueStore, table_name: str):
        """
        Initialize repository.

        Args:
            store: Key-value store client
            table_name: Name of the writes table
        """
        self.store = store
        self.table = writes_table(table_name)

    async def append(
        self,
        owner: CheckpointAddress,
        task_id: str,
        writes: Sequence[SerializedWrite],
    ) -> None:
        """
        Store one task's writes for a checkpoint.

        Each write gets ``idx`` equal to its position in ``writes``.

        Args:
            owner: Address of the owning checkpoint (checkpoint_id required)
            task_id: Task that produced the writes
            writes: Serialized writes in order

        Raises:
            MissingCheckpointId: If owner has no checkpoint_id
            MalformedKey: If task_id contains the key separator; nothing is
                written in that case
        """
        if owner.checkpoint_id is None:
            raise MissingCheckpointId()

        items = [
            WriteItem(
                thread_id=owner.thread_id,
                checkpoint_ns=owner.checkpoint_ns,
                checkpoint_id=owner.checkpoint_id,
                task_id=task_id,
                idx=idx,
                channel=channel,
                type=type_,
                value=value,
            ).to_store_item()
            for idx, (channel, type_, value) in enumerate(writes)
        ]

        batch_size = self.store.max_batch_size
        for batch_number, start in enumerate(range(0, len(items), batch_size), 1):
            batch = items[start : start + batch_size]
            await self.store.batch_put(self.table, batch)
            logger.debug(
                f"Wrote batch {batch_number} ({len(batch)} writes) for task "
                f"{task_id} on checkpoint {owner.checkpoint_id}"
            )

        logger.info(
            f"Stored {len(items)} pending writes for task {task_id} "
            f"on checkpoint {owner.checkpoint_id}"
        )

    async def fetch_all(self, owner: CheckpointAddress) -> List[WriteItem]:
        """
        Fetch every write stored for a checkpoint.

        Order is whatever the store returns; use ``(task_id, idx)`` to order.

        Args:
            owner: Address of the owning checkpoint (checkpoint_id required)

        Returns:
            Pending writes

        Raises:
            MissingCheckpointId: If owner has no checkpoint_id
            MalformedKey: If a stored key cannot be split
        """
        if owner.checkpoint_id is None:
            raise MissingCheckpointId()

        partition_value = join_partition_key(
            owner.thread_id, owner.checkpoint_id, owner.checkpoint_ns
        )
        writes: List[WriteItem] = []
        start_key: Optional[Dict] = None
        while True:
            page = await self.store.query(
                self.table, partition_value, start_key=start_key
            )
            writes.extend(
                WriteItem.from_store_item(item, owner) for item in page.items
            )
            if page.last_key is None:
                break
            start_key = page.last_key
        return writes
