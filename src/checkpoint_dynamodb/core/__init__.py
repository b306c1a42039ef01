"""Key encoding and address validation."""
