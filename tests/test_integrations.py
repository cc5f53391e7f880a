# tests/test_integrations.py

"""
Tests for the Claude vision analyzer and the relay client.
"""

import asyncio
import base64
import json

import anthropic
import httpx
import pytest

from app.exceptions import AnalysisOutputError, CheckAnalysisError, VisionNotConfiguredError
from app.integrations.claude import (
    ClaudeCheckAnalyzer,
    detect_media_type,
    parse_analysis,
)
from app.integrations.relay import RelayCheckAnalyzer
from tests.helpers.fakes import AnthropicStub

JPEG = b"\xff\xd8\xff\xe0" + b"0" * 16
PNG = b"\x89PNG\r\n\x1a\n" + b"0" * 16

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"


def anthropic_response(status_code: int) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request("POST", ANTHROPIC_URL))


def analyze(analyzer, image: bytes = JPEG, media_type: str = "image/jpeg"):
    return asyncio.run(analyzer.analyze(image, media_type))


# ============================================
# Response Parsing Tests
# ============================================

class TestParseAnalysis:
    def test_plain_json(self):
        result = parse_analysis('{"checkNumber": "1234", "checkName": "John Smith"}')

        assert result.check_number == "1234"
        assert result.check_name == "John Smith"

    def test_fenced_json(self):
        text = '```json\n{"checkNumber": "1234", "checkName": "John Smith"}\n```'

        assert parse_analysis(text).check_number == "1234"

    def test_numbers_and_nulls_coerced(self):
        result = parse_analysis('{"checkNumber": 1234, "checkName": null}')

        assert result.check_number == "1234"
        assert result.check_name == ""

    def test_missing_fields_empty(self):
        result = parse_analysis("{}")

        assert result.check_number == ""
        assert result.check_name == ""

    @pytest.mark.parametrize("text", ["I could not read this check.", "[1, 2]", ""])
    def test_unparseable_answer(self, text):
        with pytest.raises(AnalysisOutputError) as exc:
            parse_analysis(text)

        assert exc.value.status_code == 500
        assert exc.value.message == "Failed to process the request"


class TestDetectMediaType:
    def test_known_formats(self):
        assert detect_media_type(JPEG) == "image/jpeg"
        assert detect_media_type(PNG) == "image/png"
        assert detect_media_type(b"GIF89a" + b"0" * 8) == "image/gif"
        assert detect_media_type(b"RIFF\x00\x00\x00\x00WEBPVP8 ") == "image/webp"

    def test_unknown(self):
        assert detect_media_type(b"not an image") is None


# ============================================
# Claude Analyzer Tests
# ============================================

class TestClaudeCheckAnalyzer:
    def test_success(self):
        stub = AnthropicStub('{"checkNumber": "1234", "checkName": "John Smith"}')
        analyzer = ClaudeCheckAnalyzer(client=stub, model="test-model", max_tokens=100)

        result = analyze(analyzer)

        assert result.check_number == "1234"
        assert result.check_name == "John Smith"

        call = stub.calls[0]
        assert call["model"] == "test-model"
        assert call["max_tokens"] == 100
        image_block, text_block = call["messages"][0]["content"]
        assert image_block["source"]["media_type"] == "image/jpeg"
        assert base64.b64decode(image_block["source"]["data"]) == JPEG
        assert text_block["type"] == "text"

    def test_media_type_sniffed_from_bytes(self):
        stub = AnthropicStub('{"checkNumber": "1", "checkName": "A"}')

        analyze(ClaudeCheckAnalyzer(client=stub), PNG, "image/jpeg")

        assert stub.calls[0]["messages"][0]["content"][0]["source"]["media_type"] == "image/png"

    def test_uses_configured_model(self, monkeypatch):
        monkeypatch.setenv("VISION_MODEL", "claude-test")
        stub = AnthropicStub('{"checkNumber": "1", "checkName": "A"}')

        analyze(ClaudeCheckAnalyzer(client=stub))

        assert stub.calls[0]["model"] == "claude-test"

    def test_not_configured(self):
        analyzer = ClaudeCheckAnalyzer()

        assert analyzer.configured is False
        with pytest.raises(VisionNotConfiguredError) as exc:
            analyze(analyzer)

        assert exc.value.status_code == 500
        assert exc.value.message == "Server configuration error"

    def test_configured_from_environment(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")

        assert ClaudeCheckAnalyzer().configured is True

    def test_authentication_error(self):
        error = anthropic.AuthenticationError(
            "invalid x-api-key sk-ant-secret",
            response=anthropic_response(401),
            body=None,
        )
        analyzer = ClaudeCheckAnalyzer(client=AnthropicStub(error))

        with pytest.raises(CheckAnalysisError) as exc:
            analyze(analyzer)

        assert exc.value.status_code == 401
        assert exc.value.message == "API authentication failed"
        assert "sk-ant-secret" not in exc.value.message

    @pytest.mark.parametrize("status_code,retryable", [(400, False), (429, True), (529, True)])
    def test_upstream_status_propagated(self, status_code, retryable):
        error = anthropic.APIStatusError(
            "upstream failure",
            response=anthropic_response(status_code),
            body=None,
        )
        analyzer = ClaudeCheckAnalyzer(client=AnthropicStub(error))

        with pytest.raises(CheckAnalysisError) as exc:
            analyze(analyzer)

        assert exc.value.status_code == status_code
        assert exc.value.retryable is retryable
        assert exc.value.message == "Vision service error"

    def test_connection_error(self):
        error = anthropic.APIConnectionError(request=httpx.Request("POST", ANTHROPIC_URL))
        analyzer = ClaudeCheckAnalyzer(client=AnthropicStub(error))

        with pytest.raises(CheckAnalysisError) as exc:
            analyze(analyzer)

        assert exc.value.status_code == 502
        assert exc.value.retryable is True


# ============================================
# Relay Client Tests
# ============================================

def relay_analyze(handler, image: bytes = JPEG):
    async def go():
        transport = httpx.MockTransport(handler)
        async with httpx.AsyncClient(transport=transport) as client:
            analyzer = RelayCheckAnalyzer("http://relay.test/", client=client)
            return await analyzer.analyze(image)

    return asyncio.run(go())


class TestRelayCheckAnalyzer:
    def test_posts_base64_image(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"checkNumber": "1234", "checkName": "John Smith"})

        result = relay_analyze(handler)

        assert seen["url"] == "http://relay.test/analyze-check"
        assert base64.b64decode(seen["body"]["base64Image"]) == JPEG
        assert result.check_number == "1234"
        assert result.check_name == "John Smith"

    def test_error_message_surfaced(self):
        def handler(request):
            return httpx.Response(401, json={"error": "Failed to analyze image", "message": "API authentication failed"})

        with pytest.raises(CheckAnalysisError) as exc:
            relay_analyze(handler)

        assert exc.value.status_code == 401
        assert exc.value.message == "Analysis failed: API authentication failed"
        assert exc.value.retryable is False

    def test_error_without_json_body(self):
        def handler(request):
            return httpx.Response(503, text="Service Unavailable")

        with pytest.raises(CheckAnalysisError) as exc:
            relay_analyze(handler)

        assert exc.value.message == "Analysis failed: Unknown error"
        assert exc.value.retryable is True

    def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(CheckAnalysisError) as exc:
            relay_analyze(handler)

        assert exc.value.status_code == 502
        assert exc.value.message.startswith("Failed to analyze check image")
        assert exc.value.retryable is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
