"""Checkpoint data models for DynamoDB persistence."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from ..core.keys import (
    join_partition_key,
    join_sort_key,
    split_partition_key,
    split_sort_key,
)

CHECKPOINTS_PARTITION_KEY = "thread_id"
CHECKPOINTS_SORT_KEY = "checkpoint_id"
WRITES_PARTITION_KEY = "thread_id_checkpoint_id_checkpoint_ns"
WRITES_SORT_KEY = "task_id_idx"


class CheckpointAddress(BaseModel):
    """Validated address of a checkpoint (or of the latest one in a thread)."""

    model_config = ConfigDict(frozen=True)

    thread_id: str
    checkpoint_ns: str = ""
    checkpoint_id: Optional[str] = None

    def to_configurable(self) -> Dict[str, Any]:
        """Render as a langgraph ``configurable`` mapping."""
        return {
            "thread_id": self.thread_id,
            "checkpoint_ns": self.checkpoint_ns,
            "checkpoint_id": self.checkpoint_id,
        }


class CheckpointItem(BaseModel):
    """
    One row of the checkpoints table.

    Partition key is ``thread_id``, sort key is ``checkpoint_id``. Checkpoint
    ids are time ordered, so descending sort key order is newest first.
    """

    thread_id: str
    checkpoint_ns: str = ""
    checkpoint_id: str
    parent_checkpoint_id: Optional[str] = None
    type: str
    checkpoint: bytes
    metadata: bytes

    @property
    def address(self) -> CheckpointAddress:
        return CheckpointAddress(
            thread_id=self.thread_id,
            checkpoint_ns=self.checkpoint_ns,
            checkpoint_id=self.checkpoint_id,
        )

    @property
    def parent_address(self) -> Optional[CheckpointAddress]:
        if not self.parent_checkpoint_id:
            return None
        return CheckpointAddress(
            thread_id=self.thread_id,
            checkpoint_ns=self.checkpoint_ns,
            checkpoint_id=self.parent_checkpoint_id,
        )

    def to_store_item(self) -> Dict[str, Any]:
        """Convert to a store item, omitting an absent parent."""
        return self.model_dump(exclude_none=True)

    @classmethod
    def from_store_item(cls, item: Dict[str, Any]) -> "CheckpointItem":
        return cls(**item)


class WriteItem(BaseModel):
    """
    One pending write attached to a checkpoint.

    Stored in the writes table under composite keys: the partition key joins
    ``thread_id``, ``checkpoint_id`` and ``checkpoint_ns``; the sort key joins
    ``task_id`` and ``idx``.
    """

    thread_id: str
    checkpoint_ns: str = ""
    checkpoint_id: str
    task_id: str
    idx: int
    channel: str
    type: str
    value: bytes

    @property
    def partition_key(self) -> str:
        return join_partition_key(
            self.thread_id, self.checkpoint_id, self.checkpoint_ns
        )

    @property
    def sort_key(self) -> str:
        return join_sort_key(self.task_id, self.idx)

    def to_store_item(self) -> Dict[str, Any]:
        """Convert to the writes-table item layout."""
        return {
            WRITES_PARTITION_KEY: self.partition_key,
            WRITES_SORT_KEY: self.sort_key,
            "channel": self.channel,
            "type": self.type,
            "value": self.value,
        }

    @classmethod
    def from_store_item(
        cls, item: Dict[str, Any], owner: Optional[CheckpointAddress] = None
    ) -> "WriteItem":
        """
        Rebuild a write from its writes-table item.

        Args:
            item: Writes-table item
            owner: Checkpoint the item was queried under; when given, the
                partition key is not split again

        Raises:
            MalformedKey: If a composite key cannot be split
        """
        if owner is not None and owner.checkpoint_id is not None:
            thread_id = owner.thread_id
            checkpoint_id = owner.checkpoint_id
            checkpoint_ns = owner.checkpoint_ns
        else:
            thread_id, checkpoint_id, checkpoint_ns = split_partition_key(
                item[WRITES_PARTITION_KEY]
            )
        task_id, idx = split_sort_key(item[WRITES_SORT_KEY])
        return cls(
            thread_id=thread_id,
            checkpoint_ns=checkpoint_ns,
            checkpoint_id=checkpoint_id,
            task_id=task_id,
            idx=idx,
            channel=item["channel"],
            type=item["type"],
            value=item["value"],
        )
