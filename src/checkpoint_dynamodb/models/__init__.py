"""Models package for checkpoint persistence."""

from .checkpoint_models import CheckpointAddress, CheckpointItem, WriteItem

__all__ = [
    "CheckpointAddress",
    "CheckpointItem",
    "WriteItem",
]
