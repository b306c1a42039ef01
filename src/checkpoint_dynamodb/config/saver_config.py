"""DynamoDB saver configuration with environment variable loading."""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()

# DynamoDB BatchWriteItem accepts at most 25 put requests per call
DYNAMODB_BATCH_LIMIT = 25

# DynamoDB per-item ceiling (400 KiB)
DYNAMODB_ITEM_SIZE_LIMIT = 409600


class SaverConfig(BaseModel):
    """Configuration for the DynamoDB checkpoint saver."""

    # Table Configuration
    checkpoints_table_name: str = Field(
        default_factory=lambda: os.getenv("CHECKPOINTS_TABLE_NAME", "checkpoints"),
        description="DynamoDB table holding checkpoints",
    )
    writes_table_name: str = Field(
        default_factory=lambda: os.getenv("WRITES_TABLE_NAME", "writes"),
        description="DynamoDB table holding pending writes",
    )

    # Client Configuration
    region_name: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_REGION"),
        description="AWS region (boto3 default chain when unset)",
    )
    endpoint_url: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_DYNAMODB_ENDPOINT"),
        description="DynamoDB endpoint override (e.g. DynamoDB Local)",
    )

    # Store Limits
    max_batch_size: int = Field(
        default_factory=lambda: int(
            os.getenv("DYNAMODB_MAX_BATCH_SIZE", str(DYNAMODB_BATCH_LIMIT))
        ),
        ge=1,
        le=DYNAMODB_BATCH_LIMIT,
        validate_default=True,
        description="Items per batched write",
    )
    max_item_size: int = Field(
        default_factory=lambda: int(
            os.getenv("DYNAMODB_MAX_ITEM_SIZE", str(DYNAMODB_ITEM_SIZE_LIMIT))
        ),
        gt=0,
        validate_default=True,
        description="Per-item size ceiling in bytes",
    )
