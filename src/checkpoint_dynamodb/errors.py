"""Error taxonomy for the DynamoDB checkpoint saver."""


class CheckpointSaverError(Exception):
    """Base class for all checkpoint saver failures."""

    pass


class AddressError(CheckpointSaverError, ValueError):
    """Raised when a caller-supplied checkpoint address is unusable."""

    pass


class MissingAddress(AddressError):
    """Raised when no configurable mapping was supplied."""

    def __init__(self, message: str = "Missing configurable"):
        super().__init__(message)


class InvalidThreadId(AddressError):
    """Raised when thread_id is absent or not a string."""

    def __init__(self, message: str = "Invalid thread_id"):
        super().__init__(message)


class InvalidNamespace(AddressError):
    """Raised when checkpoint_ns is present but not a string."""

    def __init__(self, message: str = "Invalid checkpoint_ns"):
        super().__init__(message)


class InvalidCheckpointId(AddressError):
    """Raised when checkpoint_id is present but not a string."""

    def __init__(self, message: str = "Invalid checkpoint_id"):
        super().__init__(message)


class MissingCheckpointId(AddressError):
    """Raised when a write targets an address without a checkpoint_id."""

    def __init__(self, message: str = "Missing checkpoint_id"):
        super().__init__(message)


class SerializationTypeMismatch(CheckpointSaverError):
    """Raised when checkpoint and metadata serialize under different type tags."""

    def __init__(self, checkpoint_type: str, metadata_type: str):
        self.checkpoint_type = checkpoint_type
        self.metadata_type = metadata_type
        super().__init__(
            "Failed to serialize checkpoint and metadata to the same type "
            f"({checkpoint_type!r} != {metadata_type!r})."
        )


class MalformedKey(CheckpointSaverError, ValueError):
    """Raised when a stored composite key cannot be split into its components."""

    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(f"Malformed composite key {key!r}: {reason}")


class StoreError(CheckpointSaverError):
    """Base class for failures reported by the key-value store."""

    pass


class PayloadTooLarge(StoreError):
    """Raised when an item exceeds the store's per-item size ceiling."""

    def __init__(self, size: int, limit: int, table: str = ""):
        self.size = size
        self.limit = limit
        self.table = table
        target = f" in table {table!r}" if table else ""
        super().__init__(
            "Item size has exceeded the maximum allowed size"
            f"{target} ({size} > {limit} bytes)"
        )


class StoreUnavailable(StoreError):
    """Raised when the store did not accept (part of) a request."""

    pass
