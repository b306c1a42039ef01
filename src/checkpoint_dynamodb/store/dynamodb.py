"""DynamoDB-backed key-value store using the low-level boto3 client."""

import asyncio
import functools
import logging
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

import boto3
from boto3.dynamodb.types import Binary, TypeDeserializer, TypeSerializer
from botocore.exceptions import ClientError

from .base import BaseKeyValueStore, QueryPage, TableSchema, calculate_item_size
from ..config.saver_config import SaverConfig
from ..errors import PayloadTooLarge, StoreUnavailable

logger = logging.getLogger(__name__)

ITEM_SIZE_EXCEEDED = "Item size has exceeded"

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def _to_wire(item: Mapping[str, Any]) -> Dict[str, Any]:
    """Encode a plain item as DynamoDB attribute values."""
    return {name: _serializer.serialize(value) for name, value in item.items()}


def _from_wire(item: Mapping[str, Any]) -> Dict[str, Any]:
    """Decode DynamoDB attribute values, unwrapping Binary into plain bytes."""
    decoded = {name: _deserializer.deserialize(value) for name, value in item.items()}
    return {
        name: value.value if isinstance(value, Binary) else value
        for name, value in decoded.items()
    }


def _is_size_error(err: ClientError) -> bool:
    error = err.response.get("Error", {})
    return error.get("Code") == "ValidationException" and ITEM_SIZE_EXCEEDED in str(
        error.get("Message", "")
    )


class DynamoDBKeyValueStore(BaseKeyValueStore):
    """
    Key-value store backed by Amazon DynamoDB.

    Each boto3 call is blocking, so it runs in the default executor. All
    calls share one low-level client, which botocore allows across threads.
    Errors from botocore are passed through unchanged, except item size
    violations which become PayloadTooLarge.
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        **limits: Any,
    ):
        """
        Initialize DynamoDB store.

        Args:
            client: Existing boto3 DynamoDB client (built if omitted)
            region_name: AWS region for a new client
            endpoint_url: Endpoint override for a new client
            **limits: max_batch_size / max_item_size overrides
        """
        super().__init__(**limits)
        if client is None:
            client = boto3.client(
                "dynamodb", region_name=region_name, endpoint_url=endpoint_url
            )
        self._client = client

    @classmethod
    def from_config(cls, config: SaverConfig) -> "DynamoDBKeyValueStore":
        return cls(
            region_name=config.region_name,
            endpoint_url=config.endpoint_url,
            max_batch_size=config.max_batch_size,
            max_item_size=config.max_item_size,
        )

    async def _run(self, func: Callable[..., Any], **kwargs: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, **kwargs))

    async def get_item(
        self, table: TableSchema, key: Mapping[str, Any]
    ) -> Optional[Dict[str, Any]]:
        try:
            response = await self._run(
                self._client.get_item,
                TableName=table.name,
                Key=_to_wire(key),
                ConsistentRead=True,
            )
        except ClientError as err:
            logger.error(f"Failed to get item from {table.name}: {err}")
            raise

        item = response.get("Item")
        return _from_wire(item) if item is not None else None

    async def query(
        self,
        table: TableSchema,
        partition_value: str,
        *,
        sort_before: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        consistent_read: bool = False,
        filters: Optional[Mapping[str, Any]] = None,
        start_key: Optional[Mapping[str, Any]] = None,
    ) -> QueryPage:
        names = {"#pk": table.partition_key}
        values = {":pk": _serializer.serialize(partition_value)}
        key_condition = "#pk = :pk"
        if sort_before is not None:
            names["#sk"] = table.sort_key
            values[":before"] = _serializer.serialize(sort_before)
            key_condition += " AND #sk < :before"

        params: Dict[str, Any] = {
            "TableName": table.name,
            "KeyConditionExpression": key_condition,
            "ScanIndexForward": not descending,
            "ConsistentRead": consistent_read,
        }
        if limit is not None:
            params["Limit"] = limit
        if start_key is not None:
            params["ExclusiveStartKey"] = _to_wire(start_key)
        if filters:
            conditions = []
            for i, (name, value) in enumerate(filters.items()):
                names[f"#f{i}"] = name
                values[f":f{i}"] = _serializer.serialize(value)
                conditions.append(f"#f{i} = :f{i}")
            params["FilterExpression"] = " AND ".join(conditions)
        params["ExpressionAttributeNames"] = names
        params["ExpressionAttributeValues"] = values

        try:
            response = await self._run(self._client.query, **params)
        except ClientError as err:
            logger.error(f"Failed to query {table.name}/{partition_value}: {err}")
            raise

        items = [_from_wire(item) for item in response.get("Items", [])]
        last_key = response.get("LastEvaluatedKey")
        logger.debug(
            f"Queried {table.name}/{partition_value}: {len(items)} items"
            + (" (more pages)" if last_key is not None else "")
        )
        return QueryPage(
            items=items,
            last_key=_from_wire(last_key) if last_key is not None else None,
        )

    async def put_item(self, table: TableSchema, item: Mapping[str, Any]) -> None:
        self.check_item_size(table, item)
        try:
            await self._run(
                self._client.put_item, TableName=table.name, Item=_to_wire(item)
            )
        except ClientError as err:
            if _is_size_error(err):
                raise PayloadTooLarge(
                    calculate_item_size(item), self.max_item_size, table.name
                ) from err
            logger.error(f"Failed to put item into {table.name}: {err}")
            raise

    async def batch_put(
        self, table: TableSchema, items: Sequence[Mapping[str, Any]]
    ) -> None:
        self.check_batch_size(items)
        for item in items:
            self.check_item_size(table, item)

        requests = [{"PutRequest": {"Item": _to_wire(item)}} for item in items]
        try:
            response = await self._run(
                self._client.batch_write_item,
                RequestItems={table.name: requests},
            )
        except ClientError as err:
            if _is_size_error(err):
                largest = max(calculate_item_size(item) for item in items)
                raise PayloadTooLarge(largest, self.max_item_size, table.name) from err
            logger.error(f"Failed to batch write into {table.name}: {err}")
            raise

        unprocessed = response.get("UnprocessedItems", {}).get(table.name, [])
        if unprocessed:
            raise StoreUnavailable(
                f"{len(unprocessed)} of {len(items)} items were not written to "
                f"{table.name}"
            )

    async def close(self) -> None:
        self._client.close()
        logger.info("DynamoDB client closed")
