"""DynamoDB utilities and helper functions."""

import os
import boto3
from typing import Any, Dict, List, Optional
from datetime import date, datetime
from decimal import Decimal
from botocore.exceptions import BotoCoreError, ClientError
import logging

from .exceptions import DatabaseError

logger = logging.getLogger(__name__)

STORE_ERRORS = (BotoCoreError, ClientError)


class DynamoDBClient:
    """DynamoDB table wrapper used as the expense tracker's record store."""

    def __init__(self, table_name: str):
        """
        Initialize DynamoDB client.

        Args:
            table_name: Name of the DynamoDB table
        """
        self.table_name = table_name

        # Support for LocalStack
        endpoint_url = os.environ.get('LOCALSTACK_ENDPOINT')
        if endpoint_url and os.environ.get('USE_LOCALSTACK', 'false').lower() == 'true':
            self.dynamodb = boto3.resource('dynamodb', endpoint_url=endpoint_url)
        else:
            self.dynamodb = boto3.resource('dynamodb')

        self.table = self.dynamodb.Table(table_name)

    def put_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Put an item in the table.

        Raises:
            DatabaseError: If the operation fails
        """
        try:
            item = self.to_item(item)
            self.table.put_item(Item=item)
            return item
        except STORE_ERRORS as e:
            logger.error(f"Error putting item into {self.table_name}: {e}")
            raise DatabaseError(f"Failed to put item: {str(e)}")

    def get_item(self, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Get an item from the table.

        Returns:
            The item if found, None otherwise

        Raises:
            DatabaseError: If the operation fails
        """
        try:
            response = self.table.get_item(Key=key)
        except STORE_ERRORS as e:
            logger.error(f"Error getting item from {self.table_name}: {e}")
            raise DatabaseError(f"Failed to get item: {str(e)}")

        item = response.get('Item')
        return self.from_item(item) if item else None

    def update_item(
        self,
        key: Dict[str, Any],
        update_expression: str,
        expression_values: Dict[str, Any],
        expression_names: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Update an item in the table.

        Args:
            key: Primary key of the item
            update_expression: Update expression
            expression_values: Expression attribute values
            expression_names: Optional expression attribute names

        Returns:
            Updated item

        Raises:
            DatabaseError: If the operation fails
        """
        kwargs = {
            'Key': key,
            'UpdateExpression': update_expression,
            'ExpressionAttributeValues': self.to_item(expression_values),
            'ReturnValues': 'ALL_NEW'
        }

        if expression_names:
            kwargs['ExpressionAttributeNames'] = expression_names

        try:
            response = self.table.update_item(**kwargs)
        except STORE_ERRORS as e:
            logger.error(f"Error updating item in {self.table_name}: {e}")
            raise DatabaseError(f"Failed to update item: {str(e)}")

        return self.from_item(response['Attributes'])

    def delete_item(self, key: Dict[str, Any]) -> None:
        """
        Delete an item from the table.

        Raises:
            DatabaseError: If the operation fails
        """
        try:
            self.table.delete_item(Key=key)
        except STORE_ERRORS as e:
            logger.error(f"Error deleting item from {self.table_name}: {e}")
            raise DatabaseError(f"Failed to delete item: {str(e)}")

    def query(
        self,
        key_condition_expression: Any,
        filter_expression: Optional[Any] = None,
        index_name: Optional[str] = None,
        limit: Optional[int] = None,
        scan_forward: bool = True,
        exclusive_start_key: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Query one page of items from the table.

        Args:
            key_condition_expression: Key condition expression
            filter_expression: Optional filter expression
            index_name: Optional index name
            limit: Optional limit
            scan_forward: Sort order (default: True for ascending)
            exclusive_start_key: Optional pagination key

        Returns:
            Dictionary with items and optional last evaluated key

        Raises:
            DatabaseError: If the operation fails
        """
        kwargs = {
            'KeyConditionExpression': key_condition_expression,
            'ScanIndexForward': scan_forward
        }

        if filter_expression is not None:
            kwargs['FilterExpression'] = filter_expression
        if index_name:
            kwargs['IndexName'] = index_name
        if limit:
            kwargs['Limit'] = limit
        if exclusive_start_key:
            kwargs['ExclusiveStartKey'] = exclusive_start_key

        try:
            response = self.table.query(**kwargs)
        except STORE_ERRORS as e:
            logger.error(f"Error querying {self.table_name}: {e}")
            raise DatabaseError(f"Failed to query items: {str(e)}")

        return {
            'items': [self.from_item(item) for item in response.get('Items', [])],
            'last_evaluated_key': response.get('LastEvaluatedKey')
        }

    def query_all(
        self,
        key_condition_expression: Any,
        filter_expression: Optional[Any] = None,
        index_name: Optional[str] = None,
        scan_forward: bool = True,
        page_size: int = 100
    ) -> List[Dict[str, Any]]:
        """Query every page for a key condition and return the items in store order."""
        items = []
        last_key = None

        while True:
            result = self.query(
                key_condition_expression=key_condition_expression,
                filter_expression=filter_expression,
                index_name=index_name,
                limit=page_size,
                scan_forward=scan_forward,
                exclusive_start_key=last_key
            )

            items.extend(result['items'])
            last_key = result.get('last_evaluated_key')

            if not last_key:
                break

        return items

    @staticmethod
    def to_item(obj: Any) -> Any:
        """Convert Python values to DynamoDB compatible types."""
        if isinstance(obj, dict):
            return {k: DynamoDBClient.to_item(v) for k, v in obj.items()}
        elif isinstance(obj, (list, tuple)):
            return [DynamoDBClient.to_item(item) for item in obj]
        elif isinstance(obj, float):
            return Decimal(str(obj))
        elif isinstance(obj, (datetime, date)):
            return obj.isoformat()
        return obj

    @staticmethod
    def from_item(obj: Any) -> Any:
        """Convert DynamoDB values back to Python; amounts stay Decimal."""
        if isinstance(obj, dict):
            return {k: DynamoDBClient.from_item(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [DynamoDBClient.from_item(item) for item in obj]
        return obj
