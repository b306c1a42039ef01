"""Composite key encoding for the writes table.

Pending writes are addressed by two composite keys:

- partition key: ``thread_id``, ``checkpoint_id`` and ``checkpoint_ns``
  joined with ``KEY_SEPARATOR``, in that order
- sort key: ``task_id`` and ``idx`` joined the same way

Identifier values must not contain ``KEY_SEPARATOR``. Joining refuses such
values, so every stored key splits back into its components.
"""

from typing import Tuple

from ..errors import MalformedKey

KEY_SEPARATOR = ":::"


def _join(*components: str) -> str:
    for component in components:
        if KEY_SEPARATOR in component:
            raise MalformedKey(
                component, f"component contains the separator {KEY_SEPARATOR!r}"
            )
    return KEY_SEPARATOR.join(components)


def join_partition_key(thread_id: str, checkpoint_id: str, checkpoint_ns: str) -> str:
    """
    Build the writes-table partition key for one checkpoint.

    Args:
        thread_id: Thread identifier
        checkpoint_id: Checkpoint identifier
        checkpoint_ns: Checkpoint namespace (may be empty)

    Returns:
        Joined partition key

    Raises:
        MalformedKey: If a component contains ``KEY_SEPARATOR``
    """
    return _join(thread_id, checkpoint_id, checkpoint_ns)


def split_partition_key(key: str) -> Tuple[str, str, str]:
    """
    Recover ``(thread_id, checkpoint_id, checkpoint_ns)`` from a partition key.

    Args:
        key: Joined partition key

    Returns:
        Tuple of thread_id, checkpoint_id, checkpoint_ns

    Raises:
        MalformedKey: If the key does not hold exactly three components
    """
    parts = key.split(KEY_SEPARATOR)
    if len(parts) != 3:
        raise MalformedKey(key, f"expected 3 components, found {len(parts)}")
    thread_id, checkpoint_id, checkpoint_ns = parts
    return thread_id, checkpoint_id, checkpoint_ns


def join_sort_key(task_id: str, idx: int) -> str:
    """
    Build the writes-table sort key for one write of a task.

    Raises:
        MalformedKey: If task_id contains ``KEY_SEPARATOR``
    """
    return _join(task_id, str(idx))


def split_sort_key(key: str) -> Tuple[str, int]:
    """
    Recover ``(task_id, idx)`` from a sort key.

    Raises:
        MalformedKey: If the key does not hold two components or idx is not
            a base-10 integer
    """
    parts = key.split(KEY_SEPARATOR)
    if len(parts) != 2:
        raise MalformedKey(key, f"expected 2 components, found {len(parts)}")
    task_id, raw_idx = parts
    try:
        idx = int(raw_idx, 10)
    except ValueError:
        raise MalformedKey(key, f"index {raw_idx!r} is not an integer") from None
    return task_id, idx
