"""
Daily usage limits backed by DynamoDB.

One item per UTC calendar day holds a counter attribute per limited
operation (``generationCount``, ``orderCount``). Every check that can
grant a unit of quota is a single conditional ``update_item``, so two
concurrent callers can never both take the last unit.

Store outages fail open.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from botocore.exceptions import ClientError

try:  # pragma: no cover
    from utils.logging import StructuredLogger, get_logger
except ModuleNotFoundError:  # pragma: no cover
    from .logging import StructuredLogger, get_logger

if TYPE_CHECKING:  # pragma: no cover
    from mypy_boto3_dynamodb.service_resource import Table


GENERATION_COUNTER = "generationCount"
ORDER_COUNTER = "orderCount"

# Records are pruned by the table's TTL setting on this attribute
TTL_ATTRIBUTE = "ttl"
RECORD_RETENTION = timedelta(days=7)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class UsageDecision:
    """Outcome of a quota check."""

    allowed: bool
    current_count: int
    limit: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "allowed": self.allowed,
            "currentCount": self.current_count,
            "limit": self.limit,
        }


class DailyUsageLimiter:
    """
    Enforces "at most N operations per UTC day" for one counter attribute.

    Args:
        table: DynamoDB table keyed by ``dateKey``
        counter_attribute: Attribute holding this operation's count
        clock: Returns the current time
        logger: Logger for fail-open errors
    """

    def __init__(
        self,
        table: "Table",
        counter_attribute: str = GENERATION_COUNTER,
        clock: Clock = utc_now,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        self.table = table
        self.counter_attribute = counter_attribute
        self.clock = clock
        self.logger = logger or get_logger(__name__)

    def date_key(self) -> str:
        """Today's partition key, e.g. ``2024-06-01``."""
        return self.clock().astimezone(timezone.utc).strftime("%Y-%m-%d")

    def expires_at(self) -> int:
        """Epoch seconds after which today's record may be deleted."""
        return int((self.clock() + RECORD_RETENTION).timestamp())

    def check_and_increment(self, limit: int) -> UsageDecision:
        """
        Take one unit of today's quota if any is left.

        The read, the comparison and the write happen in one conditional
        update. When the condition fails the record is left unchanged.

        Args:
            limit: Maximum number of operations per day

        Returns:
            UsageDecision with the post-increment count when allowed, or
            ``current_count == limit`` when the quota is exhausted
        """
        try:
            response = self.table.update_item(
                Key={"dateKey": self.date_key()},
                UpdateExpression="SET #count = if_not_exists(#count, :zero) + :inc, #ttl = :ttl",
                ConditionExpression="attribute_not_exists(#count) OR #count < :limit",
                ExpressionAttributeNames={
                    "#count": self.counter_attribute,
                    "#ttl": TTL_ATTRIBUTE,
                },
                ExpressionAttributeValues={
                    ":zero": 0,
                    ":inc": 1,
                    ":ttl": self.expires_at(),
                    ":limit": limit,
                },
                ReturnValues="UPDATED_NEW",
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                return UsageDecision(allowed=False, current_count=limit, limit=limit)
            return self._fail_open("Error in check_and_increment", e, limit)
        except Exception as e:
            return self._fail_open("Error in check_and_increment", e, limit)

        new_count = int(response["Attributes"][self.counter_attribute])
        return UsageDecision(allowed=True, current_count=new_count, limit=limit)

    def check_limit(self, limit: int) -> UsageDecision:
        """
        Report today's usage without changing it.

        Intended for pre-flight checks and display; it does not reserve a
        unit of quota.
        """
        try:
            response = self.table.get_item(Key={"dateKey": self.date_key()})
        except Exception as e:
            return self._fail_open("Error checking usage limit", e, limit)

        item = response.get("Item") or {}
        current_count = int(item.get(self.counter_attribute, 0))
        return UsageDecision(allowed=current_count < limit, current_count=current_count, limit=limit)

    def increment(self) -> Optional[int]:
        """
        Unconditionally add one to today's count.

        Returns:
            The new count, or None if the store could not be updated
        """
        try:
            response = self.table.update_item(
                Key={"dateKey": self.date_key()},
                UpdateExpression="SET #count = if_not_exists(#count, :zero) + :inc, #ttl = :ttl",
                ExpressionAttributeNames={
                    "#count": self.counter_attribute,
                    "#ttl": TTL_ATTRIBUTE,
                },
                ExpressionAttributeValues={
                    ":zero": 0,
                    ":inc": 1,
                    ":ttl": self.expires_at(),
                },
                ReturnValues="UPDATED_NEW",
            )
        except Exception as e:
            self.logger.error(
                "Error incrementing usage counter",
                counter=self.counter_attribute,
                error=str(e),
            )
            return None

        return int(response["Attributes"][self.counter_attribute])

    def _fail_open(self, message: str, error: Exception, limit: int) -> UsageDecision:
        self.logger.error(
            message,
            counter=self.counter_attribute,
            date_key=self.date_key(),
            error=str(error),
            error_type=type(error).__name__,
        )
        return UsageDecision(allowed=True, current_count=0, limit=limit)
