"""Services package for checkpoint persistence."""

from .saver import DynamoDBSaver

__all__ = ["DynamoDBSaver"]
