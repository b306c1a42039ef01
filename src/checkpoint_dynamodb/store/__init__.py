"""Key-value store clients."""

from .base import BaseKeyValueStore, QueryPage, TableSchema, calculate_item_size
from .dynamodb import DynamoDBKeyValueStore
from .memory import InMemoryKeyValueStore

__all__ = [
    "BaseKeyValueStore",
    "QueryPage",
    "TableSchema",
    "calculate_item_size",
    "DynamoDBKeyValueStore",
    "InMemoryKeyValueStore",
]
