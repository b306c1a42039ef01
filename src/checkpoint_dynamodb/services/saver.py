"""LangGraph checkpoint saver persisting to DynamoDB."""

import logging
import random
from typing import Any, AsyncIterator, Dict, Iterator, List, Optional, Sequence, Tuple

from langchain_core.runnables import RunnableConfig
from langgraph.checkpoint.base import (
    BaseCheckpointSaver,
    ChannelVersions,
    Checkpoint,
    CheckpointMetadata,
    CheckpointTuple,
)
from langgraph.checkpoint.serde.base import SerializerProtocol

from ..config.saver_config import SaverConfig
from ..core.validation import validate_checkpoint_id, validate_configurable
from ..errors import SerializationTypeMismatch
from ..models.checkpoint_models import CheckpointAddress, CheckpointItem, WriteItem
from ..repositories.checkpoints import CheckpointRepository
from ..repositories.writes import WriteRepository
from ..store.base import BaseKeyValueStore
from ..store.dynamodb import DynamoDBKeyValueStore

logger = logging.getLogger(__name__)


def _as_config(address: CheckpointAddress) -> RunnableConfig:
    return {"configurable": address.to_configurable()}


class DynamoDBSaver(BaseCheckpointSaver):
    """
    Checkpoint saver storing thread history in two DynamoDB tables.

    The checkpoints table holds one item per checkpoint, keyed by thread and
    checkpoint id, with a pointer to its parent. The writes table holds the
    pending writes of each checkpoint under composite keys.

    The saver is async-only. The store client is injected and owned by the
    saver: call ``aclose()`` (or use ``async with``) to release it.
    """

    def __init__(
        self,
        store: BaseKeyValueStore,
        checkpoints_table_name: str,
        writes_table_name: str,
        serde: Optional[SerializerProtocol] = None,
    ):
        """
        Initialize DynamoDB saver.

        Args:
            store: Key-value store client
            checkpoints_table_name: Name of the checkpoints table
            writes_table_name: Name of the writes table
            serde: Value serializer (langgraph JsonPlusSerializer by default)
        """
        super().__init__(serde=serde)
        self.store = store
        self.checkpoints = CheckpointRepository(store, checkpoints_table_name)
        self.writes = WriteRepository(store, writes_table_name)

    @classmethod
    def from_config(
        cls,
        config: Optional[SaverConfig] = None,
        serde: Optional[SerializerProtocol] = None,
    ) -> "DynamoDBSaver":
        """
        Build a saver backed by a new DynamoDB client.

        Args:
            config: Saver configuration (read from the environment if omitted)
            serde: Value serializer

        Returns:
            Configured saver
        """
        config = config or SaverConfig()
        return cls(
            store=DynamoDBKeyValueStore.from_config(config),
            checkpoints_table_name=config.checkpoints_table_name,
            writes_table_name=config.writes_table_name,
            serde=serde,
        )

    async def aclose(self) -> None:
        """Release the store client."""
        await self.store.close()

    async def __aenter__(self) -> "DynamoDBSaver":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _load_checkpoint(self, item: CheckpointItem) -> Tuple[Checkpoint, Any]:
        checkpoint = self.serde.loads_typed((item.type, item.checkpoint))
        metadata = self.serde.loads_typed((item.type, item.metadata))
        return checkpoint, metadata

    def _load_writes(self, writes: List[WriteItem]) -> List[Tuple[str, str, Any]]:
        ordered = sorted(writes, key=lambda w: (w.task_id, w.idx))
        return [
            (w.task_id, w.channel, self.serde.loads_typed((w.type, w.value)))
            for w in ordered
        ]

    def _to_tuple(
        self,
        item: CheckpointItem,
        pending_writes: Optional[List[Tuple[str, str, Any]]] = None,
    ) -> CheckpointTuple:
        checkpoint, metadata = self._load_checkpoint(item)
        parent = item.parent_address
        return CheckpointTuple(
            config=_as_config(item.address),
            checkpoint=checkpoint,
            metadata=metadata,
            parent_config=_as_config(parent) if parent is not None else None,
            pending_writes=pending_writes,
        )

    async def aget_tuple(self, config: RunnableConfig) -> Optional[CheckpointTuple]:
        """
        Fetch a checkpoint with its pending writes.

        Without a checkpoint_id in the config the latest checkpoint of the
        thread is returned.

        Args:
            config: Config addressing the checkpoint

        Returns:
            Checkpoint tuple if found, None otherwise
        """
        address = validate_configurable(config.get("configurable"))
        item = await self.checkpoints.get_latest_or_exact(address)
        if item is None:
            logger.debug(
                f"No checkpoint found for thread {address.thread_id} "
                f"(checkpoint_id={address.checkpoint_id})"
            )
            return None

        # Writes belong to the resolved checkpoint, not the requested address
        writes = await self.writes.fetch_all(item.address)
        return self._to_tuple(item, self._load_writes(writes))

    async def alist(
        self,
        config: Optional[RunnableConfig],
        *,
        filter: Optional[Dict[str, Any]] = None,
        before: Optional[RunnableConfig] = None,
        limit: Optional[int] = None,
    ) -> AsyncIterator[CheckpointTuple]:
        """
        Iterate over a thread's checkpoints, newest first.

        Pending writes are not loaded for listed checkpoints.

        Args:
            config: Config holding the thread_id
            filter: Metadata key/value pairs every result must match
            before: Only checkpoints older than this config's checkpoint_id
            limit: Maximum number of checkpoints to yield

        Yields:
            Checkpoint tuples
        """
        address = validate_configurable(config.get("configurable") if config else None)
        before_id = (before or {}).get("configurable", {}).get("checkpoint_id")

        if not filter:
            async for item in self.checkpoints.list_page(
                address.thread_id, before=before_id, limit=limit
            ):
                yield self._to_tuple(item)
            return

        if limit is not None and limit <= 0:
            return

        # Filtering happens after decoding, so the store cannot apply the limit
        matched = 0
        async for item in self.checkpoints.list_page(
            address.thread_id, before=before_id
        ):
            result = self._to_tuple(item)
            if all(result.metadata.get(k) == v for k, v in filter.items()):
                yield result
                matched += 1
                if limit is not None and matched >= limit:
                    return

    async def aput(
        self,
        config: RunnableConfig,
        checkpoint: Checkpoint,
        metadata: CheckpointMetadata,
        new_versions: ChannelVersions,
    ) -> RunnableConfig:
        """
        Save a checkpoint.

        The checkpoint the config points at becomes the parent of the new one.

        Args:
            config: Config of the thread (and current checkpoint, if any)
            checkpoint: Checkpoint to store; its ``id`` becomes the checkpoint_id
            metadata: Checkpoint metadata
            new_versions: Channel versions (not stored)

        Returns:
            Config addressing the saved checkpoint

        Raises:
            InvalidCheckpointId: If the checkpoint id is not a usable key
            SerializationTypeMismatch: If checkpoint and metadata serialize
                under different type tags
            PayloadTooLarge: If the item exceeds the store's size ceiling
        """
        address = validate_configurable(config.get("configurable"))
        checkpoint_id = validate_checkpoint_id(checkpoint.get("id"))

        checkpoint_type, serialized_checkpoint = self.serde.dumps_typed(checkpoint)
        metadata_type, serialized_metadata = self.serde.dumps_typed(metadata)
        if checkpoint_type != metadata_type:
            logger.error(
                f"Checkpoint {checkpoint_id} serialized as {checkpoint_type} but "
                f"its metadata as {metadata_type}"
            )
            raise SerializationTypeMismatch(checkpoint_type, metadata_type)

        item = CheckpointItem(
            thread_id=address.thread_id,
            checkpoint_ns=address.checkpoint_ns,
            checkpoint_id=checkpoint_id,
            parent_checkpoint_id=address.checkpoint_id,
            type=checkpoint_type,
            checkpoint=serialized_checkpoint,
            metadata=serialized_metadata,
        )
        await self.checkpoints.insert(item)
        return _as_config(item.address)

    async def aput_writes(
        self,
        config: RunnableConfig,
        writes: Sequence[Tuple[str, Any]],
        task_id: str,
        task_path: str = "",
    ) -> None:
        """
        Store pending writes for a checkpoint.

        Args:
            config: Config addressing the checkpoint (checkpoint_id required)
            writes: (channel, value) pairs
            task_id: Task that produced the writes
            task_path: Task path (not stored)

        Raises:
            MissingCheckpointId: If the config has no checkpoint_id
            MalformedKey: If task_id contains the key separator
        """
        address = validate_configurable(
            config.get("configurable"), require_checkpoint_id=True
        )
        serialized = []
        for channel, value in writes:
            type_, data = self.serde.dumps_typed(value)
            serialized.append((channel, type_, data))
        await self.writes.append(address, task_id, serialized)

    def get_next_version(self, current: Optional[str], channel: Any = None) -> str:
        """
        Generate the next channel version.

        Versions are zero padded so they sort as strings; the random suffix
        keeps concurrent writers from colliding.
        """
        if current is None:
            current_v = 0
        elif isinstance(current, int):
            current_v = current
        else:
            current_v = int(current.split(".")[0])
        next_v = current_v + 1
        next_h = random.random()
        return f"{next_v:032}.{next_h:016}"

    def get_tuple(self, config: RunnableConfig) -> Optional[CheckpointTuple]:
        raise NotImplementedError("DynamoDBSaver is async-only; use aget_tuple()")

    def list(
        self,
        config: Optional[RunnableConfig],
        *,
        filter: Optional[Dict[str, Any]] = None,
        before: Optional[RunnableConfig] = None,
        limit: Optional[int] = None,
    ) -> Iterator[CheckpointTuple]:
        raise NotImplementedError("DynamoDBSaver is async-only; use alist()")

    def put(
        self,
        config: RunnableConfig,
        checkpoint: Checkpoint,
        metadata: CheckpointMetadata,
        new_versions: ChannelVersions,
    ) -> RunnableConfig:
        raise NotImplementedError("DynamoDBSaver is async-only; use aput()")

    def put_writes(
        self,
        config: RunnableConfig,
        writes: Sequence[Tuple[str, Any]],
        task_id: str,
        task_path: str = "",
    ) -> None:
        raise NotImplementedError("DynamoDBSaver is async-only; use aput_writes()")
