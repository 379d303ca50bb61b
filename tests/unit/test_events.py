"""Tests for API Gateway event helpers."""

import base64
from typing import Any

import pytest

from src.utils.errors import AppError, ErrorCode
from src.utils.events import get_header, get_raw_body, parse_json_body


class TestGetHeader:
    def test_case_insensitive(self) -> None:
        event = {"headers": {"X-Shopify-Hmac-Sha256": "sig"}}

        assert get_header(event, "x-shopify-hmac-sha256") == "sig"

    def test_missing(self) -> None:
        assert get_header({"headers": {}}, "Authorization") is None
        assert get_header({"headers": None}, "Authorization") is None
        assert get_header({}, "Authorization") is None


class TestGetRawBody:
    def test_text_body(self) -> None:
        assert get_raw_body({"body": '{"a": "é"}'}) == '{"a": "é"}'.encode("utf-8")

    def test_base64_body(self) -> None:
        encoded = base64.b64encode(b"\x00\x01raw").decode()

        assert get_raw_body({"body": encoded, "isBase64Encoded": True}) == b"\x00\x01raw"

    def test_missing_body(self) -> None:
        assert get_raw_body({"body": None}) == b""

    def test_invalid_base64(self) -> None:
        with pytest.raises(AppError) as exc_info:
            get_raw_body({"body": "not base64!!", "isBase64Encoded": True})

        assert exc_info.value.error_code == ErrorCode.INVALID_INPUT


class TestParseJsonBody:
    def test_object(self) -> None:
        assert parse_json_body({"body": '{"prompt": "fox"}'}) == {"prompt": "fox"}

    @pytest.mark.parametrize("body", [None, "", "   "])
    def test_empty_body_is_empty_object(self, body: Any) -> None:
        assert parse_json_body({"body": body}) == {}

    @pytest.mark.parametrize("body", ["{not json", "[1, 2]", '"text"', "42"])
    def test_rejects_non_objects(self, body: str) -> None:
        with pytest.raises(AppError) as exc_info:
            parse_json_body({"body": body})

        assert exc_info.value.message == "Invalid JSON in request body"
