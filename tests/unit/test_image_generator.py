"""Tests for the Bedrock image generator."""

import io
import json
from typing import Any
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from src.services.image_generator import ImageGenerator
from src.utils.errors import AppError, ErrorCode


def _bedrock_response(payload: Any) -> dict:
    return {"body": io.BytesIO(json.dumps(payload).encode())}


def _client_error(code: str, message: str = "nope") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, "InvokeModel")


@pytest.fixture
def bedrock() -> MagicMock:
    client = MagicMock()
    client.invoke_model.return_value = _bedrock_response({"images": ["aW1n"]})
    return client


@pytest.fixture
def generator(bedrock: MagicMock) -> ImageGenerator:
    return ImageGenerator("amazon.titan-image-generator-v2:0", 1500, 2100, "premium", client=bedrock)


class TestBuildRequest:
    def test_titan_payload(self, generator: ImageGenerator) -> None:
        request = generator.build_request("a fox")

        assert request["taskType"] == "TEXT_IMAGE"
        assert request["textToImageParams"] == {"text": "a fox"}
        config = request["imageGenerationConfig"]
        assert config["numberOfImages"] == 1
        assert (config["width"], config["height"], config["quality"]) == (1500, 2100, "premium")
        assert config["cfgScale"] == 8.0
        assert 0 <= config["seed"] <= 2147483646


class TestGenerateImage:
    def test_returns_first_image(self, generator: ImageGenerator, bedrock: MagicMock) -> None:
        assert generator.generate_image("  a fox  ") == ("aW1n", "image/png")

        kwargs = bedrock.invoke_model.call_args.kwargs
        assert kwargs["modelId"] == "amazon.titan-image-generator-v2:0"
        assert json.loads(kwargs["body"])["textToImageParams"]["text"] == "a fox"

    def test_empty_prompt(self, generator: ImageGenerator, bedrock: MagicMock) -> None:
        with pytest.raises(AppError) as exc_info:
            generator.generate_image("   ")

        assert exc_info.value.error_code == ErrorCode.INVALID_INPUT
        bedrock.invoke_model.assert_not_called()

    @pytest.mark.parametrize(
        "code,error_code,message",
        [
            ("ValidationException", ErrorCode.INVALID_INPUT, "Invalid prompt: nope"),
            ("ThrottlingException", ErrorCode.RATE_LIMITED, "Rate limit exceeded. Please try again later."),
            ("AccessDeniedException", ErrorCode.ACCESS_DENIED, "Access denied to Bedrock model. Check IAM permissions."),
            ("ModelTimeoutException", ErrorCode.UPSTREAM_ERROR, "Image generation failed: nope"),
        ],
    )
    def test_client_errors(
        self, generator: ImageGenerator, bedrock: MagicMock, code: str, error_code: ErrorCode, message: str
    ) -> None:
        bedrock.invoke_model.side_effect = _client_error(code)

        with pytest.raises(AppError) as exc_info:
            generator.generate_image("a fox")

        assert exc_info.value.error_code == error_code
        assert exc_info.value.message == message

    def test_network_error(self, generator: ImageGenerator, bedrock: MagicMock) -> None:
        bedrock.invoke_model.side_effect = EndpointConnectionError(endpoint_url="https://bedrock.invalid")

        with pytest.raises(AppError) as exc_info:
            generator.generate_image("a fox")

        assert exc_info.value.error_code == ErrorCode.UPSTREAM_ERROR

    @pytest.mark.parametrize("payload", [{"images": []}, {}])
    def test_no_image_returned(self, generator: ImageGenerator, bedrock: MagicMock, payload: Any) -> None:
        bedrock.invoke_model.return_value = _bedrock_response(payload)

        with pytest.raises(AppError) as exc_info:
            generator.generate_image("a fox")

        assert exc_info.value.message == "Image generation failed: No image generated"

    def test_unreadable_body(self, generator: ImageGenerator, bedrock: MagicMock) -> None:
        bedrock.invoke_model.return_value = {"body": io.BytesIO(b"<html>")}

        with pytest.raises(AppError) as exc_info:
            generator.generate_image("a fox")

        assert exc_info.value.error_code == ErrorCode.UPSTREAM_ERROR
