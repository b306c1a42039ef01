"""Validation of caller-supplied checkpoint addresses."""

from typing import Any, Mapping, Optional

from ..errors import (
    InvalidCheckpointId,
    InvalidNamespace,
    InvalidThreadId,
    MissingAddress,
    MissingCheckpointId,
)
from ..models.checkpoint_models import CheckpointAddress
from .keys import KEY_SEPARATOR

SEPARATOR_NOT_ALLOWED = f"must not contain {KEY_SEPARATOR!r}"


def validate_configurable(
    configurable: Optional[Mapping[str, Any]],
    require_checkpoint_id: bool = False,
) -> CheckpointAddress:
    """
    Validate and normalize a ``configurable`` mapping.

    The namespace defaults to ``""``. An absent ``checkpoint_id`` is kept
    absent and means "latest in this thread". Identifiers containing
    ``KEY_SEPARATOR`` are refused, since pending writes could not be keyed
    under them.

    Args:
        configurable: Mapping holding thread_id, checkpoint_ns, checkpoint_id
        require_checkpoint_id: Reject addresses without a checkpoint_id

    Returns:
        Normalized checkpoint address

    Raises:
        MissingAddress: If no mapping was supplied
        InvalidThreadId: If thread_id is not a non-empty string
        InvalidNamespace: If checkpoint_ns is present and not a string
        InvalidCheckpointId: If checkpoint_id is present and not a string
        MissingCheckpointId: If required and checkpoint_id is absent
    """
    if configurable is None:
        raise MissingAddress()

    thread_id = configurable.get("thread_id")
    checkpoint_ns = configurable.get("checkpoint_ns")
    checkpoint_id = configurable.get("checkpoint_id")

    if not isinstance(thread_id, str) or not thread_id:
        raise InvalidThreadId()
    if KEY_SEPARATOR in thread_id:
        raise InvalidThreadId(f"Invalid thread_id: {SEPARATOR_NOT_ALLOWED}")

    if checkpoint_ns is not None and not isinstance(checkpoint_ns, str):
        raise InvalidNamespace()
    if checkpoint_ns and KEY_SEPARATOR in checkpoint_ns:
        raise InvalidNamespace(f"Invalid checkpoint_ns: {SEPARATOR_NOT_ALLOWED}")

    if checkpoint_id is not None:
        validate_checkpoint_id(checkpoint_id)

    if require_checkpoint_id and checkpoint_id is None:
        raise MissingCheckpointId()

    return CheckpointAddress(
        thread_id=thread_id,
        checkpoint_ns=checkpoint_ns if checkpoint_ns is not None else "",
        checkpoint_id=checkpoint_id,
    )


def validate_checkpoint_id(checkpoint_id: Any) -> str:
    """
    Check an identifier that will become a checkpoint's sort key.

    Raises:
        InvalidCheckpointId: If it is not a string or contains the separator
    """
    if not isinstance(checkpoint_id, str):
        raise InvalidCheckpointId()
    if KEY_SEPARATOR in checkpoint_id:
        raise InvalidCheckpointId(f"Invalid checkpoint_id: {SEPARATOR_NOT_ALLOWED}")
    return checkpoint_id
