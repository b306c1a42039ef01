"""LangGraph checkpoint saver backed by Amazon DynamoDB."""

from .config.saver_config import SaverConfig
from .errors import (
    AddressError,
    CheckpointSaverError,
    InvalidCheckpointId,
    InvalidNamespace,
    InvalidThreadId,
    MalformedKey,
    MissingAddress,
    MissingCheckpointId,
    PayloadTooLarge,
    SerializationTypeMismatch,
    StoreError,
    StoreUnavailable,
)
from .services.saver import DynamoDBSaver
from .store.dynamodb import DynamoDBKeyValueStore
from .store.memory import InMemoryKeyValueStore

__all__ = [
    "DynamoDBSaver",
    "SaverConfig",
    "DynamoDBKeyValueStore",
    "InMemoryKeyValueStore",
    "CheckpointSaverError",
    "AddressError",
    "MissingAddress",
    "InvalidThreadId",
    "InvalidNamespace",
    "InvalidCheckpointId",
    "MissingCheckpointId",
    "SerializationTypeMismatch",
    "MalformedKey",
    "StoreError",
    "PayloadTooLarge",
    "StoreUnavailable",
]

__version__ = "0.1.0"
