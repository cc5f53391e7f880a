# app/integrations/claude.py

"""
Claude vision integration for check image analysis.

Sends a check image to Claude and reads back:
1. The check number (usually in the top-right corner)
2. The payee name (after "Pay to the order of")
"""

import base64
import json
import logging
from typing import Optional

import anthropic
from anthropic import AsyncAnthropic

from app.config import get_settings
from app.exceptions import (
    AnalysisOutputError,
    CheckAnalysisError,
    VisionNotConfiguredError,
    redact_secrets,
)
from app.models import CheckAnalysis

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an assistant specialized in analyzing check images.
Your task is to carefully extract two key pieces of information:
1. The check number (usually found in the top-right corner)
2. The payee name (text that appears after "Pay to the order of")

Analyze the image thoroughly, looking for these specific elements.
If the check number is unclear, look for other identifying numbers on the check.
If the payee name is partially visible, extract what you can see clearly.

Return ONLY the extracted information in JSON format:
{"checkNumber": "1234", "checkName": "John Smith"}"""

USER_PROMPT = "Extract the check number and payee name from this check image."

SUPPORTED_MEDIA_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


def detect_media_type(image: bytes) -> Optional[str]:
    """Sniff the image format from its leading bytes."""
    if image.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    if image[:4] == b"RIFF" and image[8:12] == b"WEBP":
        return "image/webp"
    return None


def parse_analysis(text: str) -> CheckAnalysis:
    """Parse the model's JSON answer, tolerating markdown code fences."""
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
    if text.endswith("```"):
        text = text.rsplit("```", 1)[0]

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error("Vision answer is not JSON: %s", text[:200])
        raise AnalysisOutputError() from e

    if not isinstance(data, dict):
        logger.error("Vision answer is not a JSON object: %s", text[:200])
        raise AnalysisOutputError()

    return CheckAnalysis(
        check_number=data.get("checkNumber"),
        check_name=data.get("checkName"),
    )


class ClaudeCheckAnalyzer:
    """CheckAnalyzer backed by Anthropic's Messages API."""

    def __init__(
        self,
        client: Optional[AsyncAnthropic] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ):
        settings = get_settings()
        self._client = client
        self._api_key = settings.anthropic_api_key
        self.model = model or settings.vision_model
        self.max_tokens = max_tokens or settings.vision_max_tokens

    @property
    def configured(self) -> bool:
        return self._client is not None or bool(self._api_key)

    def _get_client(self) -> AsyncAnthropic:
        if self._client is None:
            if not self._api_key:
                logger.error("Anthropic API key is not configured")
                raise VisionNotConfiguredError()
            self._client = AsyncAnthropic(api_key=self._api_key)
        return self._client

    async def analyze(self, image: bytes, media_type: str = "image/jpeg") -> CheckAnalysis:
        """
        Extract check number and payee name from an image.

        Raises CheckAnalysisError with the status code the relay should
        answer with. Upstream error details are logged, never returned.
        """
        client = self._get_client()

        media_type = detect_media_type(image) or media_type
        if media_type not in SUPPORTED_MEDIA_TYPES:
            media_type = "image/jpeg"

        try:
            response = await client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image",
                                "source": {
                                    "type": "base64",
                                    "media_type": media_type,
                                    "data": base64.b64encode(image).decode("ascii"),
                                },
                            },
                            {"type": "text", "text": USER_PROMPT},
                        ],
                    }
                ],
            )
        except anthropic.AuthenticationError as e:
            logger.error("Claude API authentication failed: %s", redact_secrets(str(e)))
            raise CheckAnalysisError("API authentication failed", status_code=401) from e
        except anthropic.APIStatusError as e:
            logger.error("Claude API error %s: %s", e.status_code, redact_secrets(str(e)))
            raise CheckAnalysisError(
                "Vision service error",
                status_code=e.status_code,
                retryable=e.status_code == 429 or e.status_code >= 500,
            ) from e
        except anthropic.APIConnectionError as e:
            logger.error("Claude API unreachable: %s", redact_secrets(str(e)))
            raise CheckAnalysisError("Vision service error", status_code=502, retryable=True) from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        return parse_analysis(text)
