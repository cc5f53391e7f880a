# tests/helpers/fakes.py

"""Test doubles for the vision capability and the Anthropic client."""

from types import SimpleNamespace

from app.exceptions import CheckAnalysisError
from app.models import CheckAnalysis


class FakeAnalyzer:
    """
    CheckAnalyzer stand-in.

    answers maps image bytes to a CheckAnalysis or an exception to raise;
    unknown images fail with a non-retryable 500. Every call is
    recorded in order.
    """

    def __init__(self, answers=None, configured=True):
        self.answers = answers or {}
        self.calls = []
        self.configured = configured

    async def analyze(self, image: bytes, media_type: str = "image/jpeg") -> CheckAnalysis:
        self.calls.append(image)
        answer = self.answers.get(image)
        if answer is None:
            raise CheckAnalysisError("Vision service error", status_code=500)
        if isinstance(answer, Exception):
            raise answer
        return answer


class AnthropicStub:
    """
    Minimal stub matching the AsyncAnthropic shape used by ClaudeCheckAnalyzer.

    reply is either the text the model answers with or an exception to
    raise from messages.create.
    """

    def __init__(self, reply):
        self._reply = reply
        self.calls = []
        outer = self

        class _Messages:
            async def create(self, **kwargs):
                outer.calls.append(kwargs)
                if isinstance(outer._reply, Exception):
                    raise outer._reply
                return SimpleNamespace(
                    content=[SimpleNamespace(type="text", text=outer._reply)],
                )

        self.messages = _Messages()
