"""
Builds collaborators from AppConfig.

Each builder raises AppError(CONFIGURATION_ERROR) naming the missing
setting.
"""

from typing import Optional

try:  # pragma: no cover
    from services.image_generator import ImageGenerator
    from services.image_store import ImageStore
    from services.memberstack import MemberstackClient
    from services.printify import PrintifyClient
    from services.shopify import ShopifyClient
    from utils.config import AppConfig, require_setting
    from utils.dynamodb import get_table
    from utils.logging import StructuredLogger
    from utils.usage_limiter import DailyUsageLimiter
except ModuleNotFoundError:  # pragma: no cover
    from ..services.image_generator import ImageGenerator
    from ..services.image_store import ImageStore
    from ..services.memberstack import MemberstackClient
    from ..services.printify import PrintifyClient
    from ..services.shopify import ShopifyClient
    from ..utils.config import AppConfig, require_setting
    from ..utils.dynamodb import get_table
    from ..utils.logging import StructuredLogger
    from ..utils.usage_limiter import DailyUsageLimiter


def build_usage_limiter(
    config: AppConfig, counter_attribute: str, logger: Optional[StructuredLogger] = None
) -> DailyUsageLimiter:
    table_name = require_setting(config.usage_table_name, "USAGE_TABLE_NAME")
    table = get_table(table_name, config.aws_region, config.dynamodb_endpoint)
    return DailyUsageLimiter(table, counter_attribute, logger=logger)


def build_image_generator(config: AppConfig) -> ImageGenerator:
    return ImageGenerator(
        model_id=config.bedrock_image_model,
        width=config.image_width,
        height=config.image_height,
        quality=config.image_quality,
        region=config.aws_region,
    )


def build_image_store(config: AppConfig) -> ImageStore:
    bucket = require_setting(config.image_bucket_name, "IMAGE_BUCKET_NAME")
    return ImageStore(bucket, region=config.aws_region)


def build_shopify_client(config: AppConfig) -> ShopifyClient:
    return ShopifyClient(
        store_domain=require_setting(config.shopify_store_domain, "SHOPIFY_STORE_DOMAIN"),
        access_token=require_setting(config.shopify_access_token, "SHOPIFY_ACCESS_TOKEN"),
        card_variant_id=require_setting(config.shopify_card_variant_id, "SHOPIFY_CARD_VARIANT_ID"),
    )


def build_printify_client(config: AppConfig) -> PrintifyClient:
    return PrintifyClient(
        api_key=require_setting(config.printify_api_key, "PRINTIFY_API_KEY"),
        shop_id=require_setting(config.printify_shop_id, "PRINTIFY_SHOP_ID"),
        blueprint_id=config.printify_blueprint_id,
        print_provider_id=config.printify_print_provider_id,
        variant_id=config.printify_variant_id,
    )


def build_memberstack_client(config: AppConfig) -> MemberstackClient:
    return MemberstackClient(require_setting(config.memberstack_secret_key, "MEMBERSTACK_SECRET_KEY"))
