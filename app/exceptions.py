# app/exceptions.py

"""
Domain errors.

Routers translate these into HTTP responses; the core raises them to
its immediate caller and never across the reconciliation step.
"""

import re

_SECRET_RE = re.compile(r"sk-[a-zA-Z0-9_-]+")


def redact_secrets(message: str) -> str:
    """Mask API keys that upstream libraries echo back in error text."""
    return _SECRET_RE.sub("sk-***", message)


class CheckmateError(Exception):
    """Base class for all application errors."""


class InputError(CheckmateError):
    """User-supplied input was rejected; nothing was processed."""


class CSVInputError(InputError):
    """The uploaded statement could not be read as a bank-statement CSV."""


class TooManyImagesError(InputError):
    """More check images were uploaded than one run accepts."""

    def __init__(self, count: int, limit: int):
        self.count = count
        self.limit = limit
        super().__init__(f"Maximum {limit} images allowed")


class RuleConflictError(CheckmateError):
    """A rule with the same search term (ignoring case) already exists."""

    def __init__(self, search_term: str):
        self.search_term = search_term
        super().__init__("A rule with this search term already exists")


class RuleNotFoundError(CheckmateError):
    """No rule has the requested search term."""

    def __init__(self, search_term: str):
        self.search_term = search_term
        super().__init__(f"No rule with search term '{search_term}'")


class RuleStorageError(CheckmateError):
    """Rule persistence is unavailable."""


class CheckAnalysisError(CheckmateError):
    """
    The vision capability could not read a check image.

    status_code mirrors what the relay answers with; retryable marks
    failures worth another attempt (transport errors, 429, 5xx).
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        retryable: bool = False,
    ):
        self.message = message
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(message)


class VisionNotConfiguredError(CheckAnalysisError):
    """No API key is configured for the vision service."""

    def __init__(self):
        super().__init__("Server configuration error", status_code=500)


class AnalysisOutputError(CheckAnalysisError):
    """The vision service answered, but not with the expected JSON."""

    def __init__(self):
        super().__init__("Failed to process the request", status_code=500)
