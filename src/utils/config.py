"""
Configuration for the Lambda functions.

All environment variables are read and validated once, in
``AppConfig.from_env``. Components receive the values they need through
their constructors.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

try:  # pragma: no cover
    from utils.errors import AppError, ErrorCode
    from utils.logging import set_log_level
except ModuleNotFoundError:  # pragma: no cover
    from .errors import AppError, ErrorCode
    from .logging import set_log_level

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}
VALID_IMAGE_QUALITIES = {"standard", "premium"}


def _optional(env: Mapping[str, str], name: str) -> Optional[str]:
    value = env.get(name, "").strip()
    return value or None


def _int(env: Mapping[str, str], name: str, default: int, minimum: int = 1) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw}")
    if value < minimum:
        raise ValueError(f"{name} must be at least {minimum}, got: {value}")
    return value


@dataclass(frozen=True)
class AppConfig:
    """Validated configuration shared by all handlers."""

    usage_table_name: Optional[str] = None
    max_daily_generations: int = 50
    max_daily_orders: int = 20
    aws_region: str = "us-west-2"
    dynamodb_endpoint: Optional[str] = None

    image_bucket_name: Optional[str] = None
    bedrock_image_model: str = "amazon.titan-image-generator-v2:0"
    image_width: int = 1500
    image_height: int = 2100
    image_quality: str = "premium"

    shopify_store_domain: Optional[str] = None
    shopify_access_token: Optional[str] = None
    shopify_card_variant_id: Optional[str] = None
    shopify_webhook_secret: Optional[str] = None

    printify_api_key: Optional[str] = None
    printify_shop_id: Optional[str] = None
    printify_blueprint_id: int = 1094
    printify_print_provider_id: int = 228
    printify_variant_id: int = 81866

    memberstack_secret_key: Optional[str] = None

    debug_mode: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """
        Create an AppConfig from environment variables.

        Args:
            env: Mapping to read instead of ``os.environ``

        Raises:
            ValueError: If a variable is present but invalid.
        """
        env = os.environ if env is None else env

        log_level = env.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
        if log_level not in VALID_LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(VALID_LOG_LEVELS)}, got: {log_level}")

        image_quality = env.get("BEDROCK_IMAGE_QUALITY", "premium").strip() or "premium"
        if image_quality not in VALID_IMAGE_QUALITIES:
            raise ValueError(
                f"BEDROCK_IMAGE_QUALITY must be one of {sorted(VALID_IMAGE_QUALITIES)}, got: {image_quality}"
            )

        return cls(
            usage_table_name=_optional(env, "USAGE_TABLE_NAME"),
            max_daily_generations=_int(env, "MAX_DAILY_GENERATIONS", 50),
            max_daily_orders=_int(env, "MAX_DAILY_ORDERS", 20),
            aws_region=_optional(env, "BEDROCK_REGION") or "us-west-2",
            dynamodb_endpoint=_optional(env, "DYNAMODB_ENDPOINT"),
            image_bucket_name=_optional(env, "IMAGE_BUCKET_NAME"),
            bedrock_image_model=_optional(env, "BEDROCK_IMAGE_MODEL") or "amazon.titan-image-generator-v2:0",
            image_width=_int(env, "BEDROCK_IMAGE_WIDTH", 1500),
            image_height=_int(env, "BEDROCK_IMAGE_HEIGHT", 2100),
            image_quality=image_quality,
            shopify_store_domain=_optional(env, "SHOPIFY_STORE_DOMAIN"),
            shopify_access_token=_optional(env, "SHOPIFY_ACCESS_TOKEN"),
            shopify_card_variant_id=_optional(env, "SHOPIFY_CARD_VARIANT_ID"),
            shopify_webhook_secret=_optional(env, "SHOPIFY_WEBHOOK_SECRET"),
            printify_api_key=_optional(env, "PRINTIFY_API_KEY"),
            printify_shop_id=_optional(env, "PRINTIFY_SHOP_ID"),
            printify_blueprint_id=_int(env, "PRINTIFY_CARD_BLUEPRINT_ID", 1094),
            printify_print_provider_id=_int(env, "PRINTIFY_PRINT_PROVIDER_ID", 228),
            printify_variant_id=_int(env, "PRINTIFY_CARD_VARIANT_ID", 81866),
            memberstack_secret_key=_optional(env, "MEMBERSTACK_SECRET_KEY"),
            debug_mode=env.get("DEBUG_MODE", "").strip().lower() == "true",
            log_level=log_level,
        )


def require_setting(value: Optional[str], name: str) -> str:
    """Return a configured value, or raise a configuration error naming it."""
    if not value:
        raise AppError(
            ErrorCode.CONFIGURATION_ERROR,
            f"{name} environment variable not configured",
            {"setting": name},
        )
    return value


# Built on first use (Lambda cold start)
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the process-wide configuration instance.

    Raises:
        ValueError: If an environment variable is invalid.
    """
    global _config
    if _config is None:
        _config = AppConfig.from_env()
        set_log_level(_config.log_level)
    return _config


def reset_config() -> None:
    """Drop the cached configuration (for testing isolation)."""
    global _config
    _config = None
    set_log_level("INFO")
