"""
S3 storage for generated card images.
"""

import base64
import binascii
import uuid
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

try:  # pragma: no cover
    from utils.errors import AppError, ErrorCode
    from utils.logging import get_logger
except ModuleNotFoundError:  # pragma: no cover
    from ..utils.errors import AppError, ErrorCode
    from ..utils.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover
    from mypy_boto3_s3.client import S3Client


CARD_IMAGE_PREFIX = "cards"

# Presigned URLs stay valid for 4 hours
PRESIGNED_URL_EXPIRY_SECONDS = 4 * 60 * 60


def card_image_key(image_id: str) -> str:
    """S3 key for a card image."""
    return f"{CARD_IMAGE_PREFIX}/{image_id}.png"


class ImageStore:
    """Uploads card images and hands out presigned GET URLs."""

    def __init__(
        self,
        bucket_name: str,
        region: Optional[str] = None,
        client: "Optional[S3Client]" = None,
    ) -> None:
        self.bucket_name = bucket_name
        self.client = client or boto3.client("s3", region_name=region)
        self.logger = get_logger(__name__)

    def upload_image(self, image_id: str, base64_data: str, content_type: str = "image/png") -> str:
        """
        Upload base64 image data.

        Returns:
            The S3 object key

        Raises:
            AppError: UPSTREAM_ERROR if the data is not base64 or S3 rejects the upload
        """
        key = card_image_key(image_id)
        try:
            data = base64.b64decode(base64_data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise AppError(ErrorCode.UPSTREAM_ERROR, f"Failed to upload image: {e}")

        try:
            self.client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=data,
                ContentType=content_type,
                Metadata={"generated-at": datetime.now(timezone.utc).isoformat()},
            )
        except (BotoCoreError, ClientError) as e:
            raise AppError(ErrorCode.UPSTREAM_ERROR, f"Failed to upload image: {e}")

        return key

    def get_presigned_url(self, image_id: str) -> Dict[str, str]:
        """Return ``{imageUrl, expiresAt}`` for a stored image."""
        try:
            url = self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": card_image_key(image_id)},
                ExpiresIn=PRESIGNED_URL_EXPIRY_SECONDS,
            )
        except (BotoCoreError, ClientError) as e:
            raise AppError(ErrorCode.UPSTREAM_ERROR, f"Failed to generate presigned URL: {e}")

        expires_at = datetime.now(timezone.utc) + timedelta(seconds=PRESIGNED_URL_EXPIRY_SECONDS)
        return {"imageUrl": url, "expiresAt": expires_at.isoformat()}

    def upload_and_get_url(self, base64_data: str, content_type: str = "image/png") -> Dict[str, str]:
        """
        Upload an image under a fresh ID and return a presigned URL for it.

        Returns:
            Dict with imageId, imageUrl and expiresAt
        """
        image_id = str(uuid.uuid4())
        self.upload_image(image_id, base64_data, content_type)
        urls = self.get_presigned_url(image_id)

        self.logger.info("Card image stored", image_id=image_id, bucket=self.bucket_name)
        return {"imageId": image_id, **urls}
