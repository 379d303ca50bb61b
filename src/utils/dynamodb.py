"""
DynamoDB table access utilities.

Table names and endpoints are passed in by the caller; nothing here reads
the process environment. Tests can swap in their own table objects.
"""

from typing import TYPE_CHECKING, Any, Optional

import boto3

if TYPE_CHECKING:
    from mypy_boto3_dynamodb import DynamoDBServiceResource
    from mypy_boto3_dynamodb.service_resource import Table


# Module-level cache for test overrides
_table_overrides: dict[str, Any] = {}


def get_dynamodb_resource(
    region: Optional[str] = None, endpoint_url: Optional[str] = None
) -> "DynamoDBServiceResource":
    """Get DynamoDB resource with optional endpoint override for LocalStack."""
    return boto3.resource("dynamodb", region_name=region, endpoint_url=endpoint_url)


def get_table(
    table_name: str, region: Optional[str] = None, endpoint_url: Optional[str] = None
) -> "Table":
    """Get a table by name, honouring test overrides."""
    if override := _table_overrides.get(table_name):
        return override
    return get_dynamodb_resource(region, endpoint_url).Table(table_name)


# Test utilities
def override_table(table_name: str, table: Any) -> None:
    """Override a table for testing. Set to None to clear override."""
    if table is None:
        _table_overrides.pop(table_name, None)
    else:
        _table_overrides[table_name] = table


def clear_all_overrides() -> None:
    """Clear all table overrides (call in test teardown)."""
    _table_overrides.clear()
