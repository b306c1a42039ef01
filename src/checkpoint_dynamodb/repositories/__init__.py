"""Table repositories for checkpoints and pending writes."""

from .checkpoints import CheckpointRepository
from .writes import WriteRepository

__all__ = ["CheckpointRepository", "WriteRepository"]
