"""
Test fixtures for Lambda function tests.

Provides common test data and mocked AWS resources.
"""

import os
from datetime import datetime, timezone
from typing import Any, Callable, Generator, List

import boto3
import pytest
from moto import mock_aws

from src.utils.config import AppConfig, reset_config
from src.utils.dynamodb import clear_all_overrides
from tests.unit.table_schemas import USAGE_TABLE_NAME, create_usage_table


@pytest.fixture(autouse=True)
def reset_module_state() -> Generator[None, None, None]:
    """Drop cached config and table overrides between tests."""
    reset_config()
    clear_all_overrides()
    yield
    reset_config()
    clear_all_overrides()


@pytest.fixture
def aws_credentials() -> None:
    """Set fake AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def usage_table(aws_credentials: None) -> Generator[Any, None, None]:
    """Create the mock usage table."""
    with mock_aws():
        dynamodb = boto3.resource("dynamodb", region_name="us-east-1")
        yield create_usage_table(dynamodb)


class FakeClock:
    """Settable clock for simulating day rollovers."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at 2024-06-01 12:00 UTC."""
    return FakeClock(datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def app_config() -> AppConfig:
    """Fully configured AppConfig with small limits."""
    return AppConfig(
        usage_table_name=USAGE_TABLE_NAME,
        max_daily_generations=2,
        max_daily_orders=2,
        aws_region="us-east-1",
        image_bucket_name="cardmaker-images-test",
        shopify_store_domain="cards.myshopify.com",
        shopify_access_token="shpat_test",
        shopify_card_variant_id="gid://shopify/ProductVariant/4242",
        shopify_webhook_secret="shh",
        printify_api_key="printify-test",
        printify_shop_id="777",
        memberstack_secret_key="sk_test",
    )


@pytest.fixture
def lambda_context() -> Any:
    """Mock Lambda context."""

    class Context:
        function_name = "test-function"
        memory_limit_in_mb = 128
        invoked_function_arn = "arn:aws:lambda:us-east-1:123456789012:function:test-function"
        aws_request_id = "test-request-id"

    return Context()


@pytest.fixture
def log_lines(capsys: Any) -> Callable[[], List[str]]:
    """Return the structured log lines printed so far."""

    def read() -> List[str]:
        return [line for line in capsys.readouterr().out.splitlines() if line.strip()]

    return read
