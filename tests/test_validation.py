"""Unit tests for checkpoint address validation."""

import pytest

from checkpoint_dynamodb.core.validation import (
    validate_checkpoint_id,
    validate_configurable,
)
from checkpoint_dynamodb.errors import (
    AddressError,
    InvalidCheckpointId,
    InvalidNamespace,
    InvalidThreadId,
    MissingAddress,
    MissingCheckpointId,
)


class TestValidateConfigurable:
    """Test suite for validate_configurable."""

    def test_defaults_namespace(self):
        """Test namespace defaults to empty and checkpoint_id stays absent."""
        address = validate_configurable({"thread_id": "1"})

        # Verify
        assert address.thread_id == "1"
        assert address.checkpoint_ns == ""
        assert address.checkpoint_id is None

    def test_preserves_values(self):
        """Test all supplied fields are kept."""
        address = validate_configurable(
            {"thread_id": "1", "checkpoint_ns": "child", "checkpoint_id": "abc"}
        )
        assert address.checkpoint_ns == "child"
        assert address.checkpoint_id == "abc"

    def test_explicit_none_namespace(self):
        """Test an explicit None namespace is treated as absent."""
        address = validate_configurable({"thread_id": "1", "checkpoint_ns": None})
        assert address.checkpoint_ns == ""

    def test_missing_configurable(self):
        """Test absent configurable mapping."""
        with pytest.raises(MissingAddress, match="Missing configurable"):
            validate_configurable(None)

    def test_missing_thread_id(self):
        """Test missing thread_id."""
        with pytest.raises(InvalidThreadId, match="Invalid thread_id"):
            validate_configurable({"checkpoint_id": "x"})

    def test_non_string_thread_id(self):
        """Test non-string thread_id."""
        with pytest.raises(InvalidThreadId):
            validate_configurable({"thread_id": 1})

    def test_invalid_namespace(self):
        """Test non-string namespace."""
        with pytest.raises(InvalidNamespace, match="Invalid checkpoint_ns"):
            validate_configurable({"thread_id": "1", "checkpoint_ns": 5})

    def test_invalid_checkpoint_id(self):
        """Test non-string checkpoint_id."""
        with pytest.raises(InvalidCheckpointId, match="Invalid checkpoint_id"):
            validate_configurable({"thread_id": "1", "checkpoint_id": 123})

    def test_require_checkpoint_id(self):
        """Test checkpoint_id can be required."""
        with pytest.raises(MissingCheckpointId, match="Missing checkpoint_id"):
            validate_configurable({"thread_id": "1"}, require_checkpoint_id=True)

    def test_errors_are_value_errors(self):
        """Test address errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            validate_configurable({"thread_id": None})
        assert issubclass(MissingCheckpointId, AddressError)

    def test_empty_thread_id(self):
        """Test an empty thread_id is rejected."""
        with pytest.raises(InvalidThreadId):
            validate_configurable({"thread_id": ""})

    def test_thread_id_with_separator(self):
        """Test a thread_id containing the key separator is rejected."""
        with pytest.raises(InvalidThreadId, match="must not contain"):
            validate_configurable({"thread_id": "a:::b"})

    def test_namespace_with_separator(self):
        """Test a namespace containing the key separator is rejected."""
        with pytest.raises(InvalidNamespace, match="must not contain"):
            validate_configurable({"thread_id": "1", "checkpoint_ns": "outer:::inner"})

    def test_checkpoint_id_with_separator(self):
        """Test a checkpoint_id containing the key separator is rejected."""
        with pytest.raises(InvalidCheckpointId, match="must not contain"):
            validate_configurable({"thread_id": "1", "checkpoint_id": "a:::b"})


class TestValidateCheckpointId:
    """Test suite for validate_checkpoint_id."""

    def test_accepts_plain_id(self):
        """Test a plain id is returned unchanged."""
        assert validate_checkpoint_id("ckpt-1") == "ckpt-1"

    def test_rejects_non_string(self):
        """Test non-string ids are rejected."""
        with pytest.raises(InvalidCheckpointId):
            validate_checkpoint_id(None)
