"""
Bedrock Titan image generation for greeting cards.
"""

import json
import random
from typing import TYPE_CHECKING, Any, Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

try:  # pragma: no cover
    from utils.errors import AppError, ErrorCode
    from utils.logging import get_logger
    from utils.validation import MAX_PROMPT_LENGTH
except ModuleNotFoundError:  # pragma: no cover
    from ..utils.errors import AppError, ErrorCode
    from ..utils.logging import get_logger
    from ..utils.validation import MAX_PROMPT_LENGTH

if TYPE_CHECKING:  # pragma: no cover
    from mypy_boto3_bedrock_runtime import BedrockRuntimeClient


MAX_SEED = 2147483646
CFG_SCALE = 8.0


class ImageGenerator:
    """Generates one PNG per prompt with a Titan image model."""

    def __init__(
        self,
        model_id: str,
        width: int,
        height: int,
        quality: str,
        region: Optional[str] = None,
        client: "Optional[BedrockRuntimeClient]" = None,
    ) -> None:
        self.model_id = model_id
        self.width = width
        self.height = height
        self.quality = quality
        self.client = client or boto3.client("bedrock-runtime", region_name=region)
        self.logger = get_logger(__name__)

    def build_request(self, prompt: str) -> dict[str, Any]:
        return {
            "taskType": "TEXT_IMAGE",
            "textToImageParams": {"text": prompt},
            "imageGenerationConfig": {
                "numberOfImages": 1,
                "width": self.width,
                "height": self.height,
                "quality": self.quality,
                "cfgScale": CFG_SCALE,
                "seed": random.randint(0, MAX_SEED),
            },
        }

    def generate_image(self, prompt: str) -> Tuple[str, str]:
        """
        Generate an image from a text prompt.

        Args:
            prompt: Card description

        Returns:
            Tuple of (base64 PNG data, content type)

        Raises:
            AppError: INVALID_INPUT, RATE_LIMITED, ACCESS_DENIED or UPSTREAM_ERROR
        """
        sanitized = prompt.strip()[:MAX_PROMPT_LENGTH]
        if not sanitized:
            raise AppError(ErrorCode.INVALID_INPUT, "Prompt cannot be empty")

        self.logger.debug("Invoking image model", model_id=self.model_id, prompt_length=len(sanitized))
        try:
            response = self.client.invoke_model(
                modelId=self.model_id,
                contentType="application/json",
                accept="application/json",
                body=json.dumps(self.build_request(sanitized)),
            )
            payload = json.loads(response["body"].read())
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            message = e.response.get("Error", {}).get("Message", str(e))
            if code == "ValidationException":
                raise AppError(ErrorCode.INVALID_INPUT, f"Invalid prompt: {message}")
            if code == "ThrottlingException":
                raise AppError(ErrorCode.RATE_LIMITED, "Rate limit exceeded. Please try again later.")
            if code == "AccessDeniedException":
                raise AppError(ErrorCode.ACCESS_DENIED, "Access denied to Bedrock model. Check IAM permissions.")
            raise AppError(ErrorCode.UPSTREAM_ERROR, f"Image generation failed: {message}")
        except (BotoCoreError, ValueError, KeyError) as e:
            raise AppError(ErrorCode.UPSTREAM_ERROR, f"Image generation failed: {e}")

        images = payload.get("images") or []
        if not images:
            raise AppError(ErrorCode.UPSTREAM_ERROR, "Image generation failed: No image generated")

        return images[0], "image/png"
