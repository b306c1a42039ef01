"""Integration tests for DynamoDBSaver against a live DynamoDB endpoint.

These tests require DynamoDB Local (or another endpoint) to be running:
    docker run -p 8000:8000 amazon/dynamodb-local
    export AWS_DYNAMODB_ENDPOINT=http://localhost:8000
"""

import os
import uuid

import boto3
import pytest
from langgraph.checkpoint.base.id import uuid6

from checkpoint_dynamodb.config.saver_config import SaverConfig
from checkpoint_dynamodb.services.saver import DynamoDBSaver

ENDPOINT = os.getenv("AWS_DYNAMODB_ENDPOINT")

pytestmark = pytest.mark.skipif(
    not ENDPOINT, reason="AWS_DYNAMODB_ENDPOINT not set; DynamoDB not available"
)


def create_table(client, name: str, partition_key: str, sort_key: str):
    """Create a string-keyed table and wait until it is active."""
    client.create_table(
        TableName=name,
        KeySchema=[
            {"AttributeName": partition_key, "KeyType": "HASH"},
            {"AttributeName": sort_key, "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": partition_key, "AttributeType": "S"},
            {"AttributeName": sort_key, "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    client.get_waiter("table_exists").wait(TableName=name)


@pytest.fixture
def config():
    """Provision uniquely named tables and drop them afterwards."""
    suffix = uuid.uuid4().hex[:8]
    config = SaverConfig(
        checkpoints_table_name=f"checkpoints-{suffix}",
        writes_table_name=f"writes-{suffix}",
        region_name=os.getenv("AWS_REGION", "us-east-1"),
        endpoint_url=ENDPOINT,
    )
    client = boto3.client(
        "dynamodb", region_name=config.region_name, endpoint_url=ENDPOINT
    )
    create_table(client, config.checkpoints_table_name, "thread_id", "checkpoint_id")
    create_table(
        client,
        config.writes_table_name,
        "thread_id_checkpoint_id_checkpoint_ns",
        "task_id_idx",
    )

    yield config

    client.delete_table(TableName=config.checkpoints_table_name)
    client.delete_table(TableName=config.writes_table_name)
    client.close()


def create_checkpoint(num: int):
    """Build a checkpoint with a time-ordered id."""
    return {
        "v": 1,
        "id": str(uuid6(clock_seq=num)),
        "ts": "2024-04-19T17:19:07.952Z",
        "channel_values": {"someKey1": f"someValue{num}"},
        "channel_versions": {"someKey2": num},
        "versions_seen": {"someKey3": {"someKey4": num}},
    }


@pytest.mark.asyncio
class TestDynamoDBSaverIntegration:
    """Integration tests for DynamoDBSaver."""

    async def test_save_and_load(self, config):
        """Test a checkpoint and its writes survive a round trip."""
        thread = {"configurable": {"thread_id": "1"}}
        checkpoint = create_checkpoint(1)
        metadata = {"source": "update", "step": -1, "writes": None}

        async with DynamoDBSaver.from_config(config) as saver:
            saved = await saver.aput(thread, checkpoint, metadata, {})
            await saver.aput_writes(saved, [("bar", "baz")], "foo")

            loaded = await saver.aget_tuple(thread)

        # Verify
        assert loaded is not None
        assert loaded.checkpoint["id"] == checkpoint["id"]
        assert loaded.metadata == metadata
        assert loaded.pending_writes == [("foo", "bar", "baz")]

    async def test_history(self, config):
        """Test parent links, latest lookup and listing order."""
        thread = {"configurable": {"thread_id": "2"}}

        async with DynamoDBSaver.from_config(config) as saver:
            current = thread
            saved = []
            for i in range(4):
                current = await saver.aput(current, create_checkpoint(i), {}, {})
                saved.append(current)

            latest = await saver.aget_tuple(thread)
            listed = [t async for t in saver.alist(thread, limit=3)]

        # Verify
        assert latest.config == saved[-1]
        assert latest.parent_config == saved[-2]
        assert [t.config for t in listed] == list(reversed(saved))[:3]

    async def test_many_writes(self, config):
        """Test writes spanning several batches."""
        thread = {"configurable": {"thread_id": "3"}}

        async with DynamoDBSaver.from_config(config) as saver:
            saved = await saver.aput(thread, create_checkpoint(1), {}, {})
            await saver.aput_writes(saved, [(f"c{i}", i) for i in range(30)], "task")
            loaded = await saver.aget_tuple(saved)

        assert [w[2] for w in loaded.pending_writes] == list(range(30))
