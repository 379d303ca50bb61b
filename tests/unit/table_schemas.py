"""
DynamoDB table schema definitions for testing.

Mirrors the deployed usage table so moto behaves like the real thing.
"""

from typing import Any

USAGE_TABLE_NAME = "cardmaker-usage-test"


def create_usage_table_schema() -> dict[str, Any]:
    """
    Schema for the daily usage table.

    Key structure: PK=dateKey (UTC date string, e.g. 2024-06-01)
    Counters (generationCount, orderCount) and ttl are plain attributes.
    """
    return {
        "TableName": USAGE_TABLE_NAME,
        "KeySchema": [
            {"AttributeName": "dateKey", "KeyType": "HASH"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "dateKey", "AttributeType": "S"},
        ],
        "BillingMode": "PAY_PER_REQUEST",
    }


def create_usage_table(dynamodb: Any) -> Any:
    """Create the usage table on a (mocked) DynamoDB resource."""
    return dynamodb.create_table(**create_usage_table_schema())
