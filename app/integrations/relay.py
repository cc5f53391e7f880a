# app/integrations/relay.py

"""
Client for the /analyze-check relay.

Used by workers that hold no API key themselves: the image goes to the
relay as base64 JSON and the relay calls Claude.
"""

import base64
import logging
from typing import Optional

import httpx

from app.exceptions import CheckAnalysisError, redact_secrets
from app.models import CheckAnalysis

logger = logging.getLogger(__name__)

RELAY_PATH = "/analyze-check"


class RelayCheckAnalyzer:
    """CheckAnalyzer that posts images to a running relay."""

    def __init__(
        self,
        base_url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 60.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    async def _post(self, payload: dict) -> httpx.Response:
        url = f"{self.base_url}{RELAY_PATH}"
        if self._client is not None:
            return await self._client.post(url, json=payload)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, json=payload)

    async def analyze(self, image: bytes, media_type: str = "image/jpeg") -> CheckAnalysis:
        payload = {"base64Image": base64.b64encode(image).decode("ascii")}

        try:
            response = await self._post(payload)
        except httpx.HTTPError as e:
            message = redact_secrets(str(e))
            logger.error("Error calling analysis relay: %s", message)
            raise CheckAnalysisError(
                f"Failed to analyze check image: {message}",
                status_code=502,
                retryable=True,
            ) from e

        if response.is_error:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {}
            if not isinstance(error_data, dict):
                error_data = {}
            detail = error_data.get("message") or error_data.get("error") or "Unknown error"
            raise CheckAnalysisError(
                f"Analysis failed: {detail}",
                status_code=response.status_code,
                retryable=response.status_code == 429 or response.status_code >= 500,
            )

        return CheckAnalysis.model_validate(response.json())
