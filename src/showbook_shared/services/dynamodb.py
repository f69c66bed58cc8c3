"""DynamoDB service wrapper for table operations."""

from typing import Any

import boto3
from botocore.exceptions import ClientError

from showbook_shared.config import load_settings

# Module-level singleton for connection reuse across warm invocations
_dynamodb_service_instance: "DynamoDBService | None" = None


def get_dynamodb_service() -> "DynamoDBService":
    """Get or create the singleton DynamoDB service instance.

    Avoids creating new boto3 resources on every request, which adds
    ~100-200ms per instantiation on a cold path.
    """
    global _dynamodb_service_instance
    if _dynamodb_service_instance is None:
        settings = load_settings()
        _dynamodb_service_instance = DynamoDBService(
            table_prefix=settings.table_prefix,
            endpoint_url=settings.dynamodb_endpoint_url,
        )
    return _dynamodb_service_instance


def reset_dynamodb_service() -> None:
    """Reset the singleton instance (for testing only).

    Lets tests create a fresh DynamoDBService inside a mock_aws context.
    """
    global _dynamodb_service_instance
    _dynamodb_service_instance = None


class DynamoDBService:
    """Service for DynamoDB operations with prefixed table names."""

    def __init__(self, table_prefix: str, endpoint_url: str | None = None) -> None:
        """Initialize DynamoDB service.

        Args:
            table_prefix: Prefix joined to every logical table name.
            endpoint_url: Optional endpoint override (DynamoDB Local).
        """
        self.name_prefix = table_prefix
        self._dynamodb = boto3.resource("dynamodb", endpoint_url=endpoint_url)

    def _table_name(self, table: str) -> str:
        """Get full table name with prefix."""
        return f"{self.name_prefix}-{table}"

    def _get_table(self, table: str) -> Any:
        """Get DynamoDB table resource."""
        return self._dynamodb.Table(self._table_name(table))

    def get_item(
        self,
        table: str,
        key: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Get a single item by key.

        Args:
            table: Table name without prefix
            key: Primary key dict

        Returns:
            Item dict or None if not found
        """
        response = self._get_table(table).get_item(Key=key)
        item: dict[str, Any] | None = response.get("Item")
        return item

    def put_item(
        self,
        table: str,
        item: dict[str, Any],
        condition_expression: str | None = None,
    ) -> bool:
        """Put an item into the table.

        Args:
            table: Table name without prefix
            item: Item to store
            condition_expression: Optional condition for write

        Returns:
            True if successful, False if condition failed
        """
        try:
            kwargs: dict[str, Any] = {"Item": item}
            if condition_expression:
                kwargs["ConditionExpression"] = condition_expression

            self._get_table(table).put_item(**kwargs)
            return True
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                return False
            raise

    def update_item(
        self,
        table: str,
        key: dict[str, Any],
        update_expression: str,
        expression_attribute_values: dict[str, Any],
        expression_attribute_names: dict[str, str] | None = None,
        condition_expression: str | None = None,
    ) -> dict[str, Any] | None:
        """Update an item with expressions.

        Args:
            table: Table name without prefix
            key: Primary key dict
            update_expression: DynamoDB update expression
            expression_attribute_values: Values for expression
            expression_attribute_names: Names for expression (for reserved words)
            condition_expression: Optional condition for update

        Returns:
            Updated attributes or None if condition failed
        """
        try:
            kwargs: dict[str, Any] = {
                "Key": key,
                "UpdateExpression": update_expression,
                "ExpressionAttributeValues": expression_attribute_values,
                "ReturnValues": "ALL_NEW",
            }
            if expression_attribute_names:
                kwargs["ExpressionAttributeNames"] = expression_attribute_names
            if condition_expression:
                kwargs["ConditionExpression"] = condition_expression

            response = self._get_table(table).update_item(**kwargs)
            attrs: dict[str, Any] | None = response.get("Attributes")
            return attrs
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                return None
            raise

    def scan(
        self,
        table: str,
        filter_expression: Any | None = None,
    ) -> list[dict[str, Any]]:
        """Scan a table, following pagination to the end.

        Args:
            table: Table name without prefix
            filter_expression: Boto3 Attr condition (optional)

        Returns:
            All matching items, unordered
        """
        kwargs: dict[str, Any] = {}
        if filter_expression is not None:
            kwargs["FilterExpression"] = filter_expression

        items: list[dict[str, Any]] = []
        dynamo_table = self._get_table(table)
        while True:
            response = dynamo_table.scan(**kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key
