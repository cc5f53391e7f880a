# app/dependencies.py

"""
Request dependencies for FastAPI.

- get_current_user: the auth boundary. Validates Supabase JWTs and the
  email allow-list when auth is required, otherwise a local user.
- get_rule_store: the matching rules of the current user.
- get_check_analyzer: the vision capability (Claude or a remote relay).
"""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.config import get_settings
from app.core.analysis_queue import AnalysisQueue, CheckAnalyzer
from app.database import get_supabase_admin
from app.integrations.claude import ClaudeCheckAnalyzer
from app.integrations.relay import RelayCheckAnalyzer
from app.models import LOCAL_USER, User
from app.rule_store import JsonFileRuleStore, RuleStore, SupabaseRuleStore

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )


def is_email_allowed(email: str, allowed: list[str]) -> bool:
    """An empty allow-list admits everyone."""
    if not allowed:
        logger.warning("No allowed emails configured - allowing all emails")
        return True
    return email.strip().lower() in allowed


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """
    Validate the Supabase JWT and return the user.

    Uses supabase_admin.auth.get_user() to verify the token.
    This is a sync function -- FastAPI auto-runs it in a threadpool.
    """
    settings = get_settings()
    if not settings.require_auth:
        return LOCAL_USER

    if credentials is None:
        raise _unauthorized()

    try:
        user_response = get_supabase_admin().auth.get_user(credentials.credentials)
    except Exception:
        raise _unauthorized()

    if user_response is None or user_response.user is None:
        raise _unauthorized()

    account = user_response.user
    email = account.email or ""

    if not getattr(account, "email_confirmed_at", None):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Email address is not verified",
        )

    if not is_email_allowed(email, settings.allowed_email_list):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your email address is not authorized to access this application",
        )

    metadata = account.user_metadata or {}
    return User(
        id=account.id,
        email=email,
        name=metadata.get("full_name") or metadata.get("name") or "",
        picture=metadata.get("avatar_url") or metadata.get("picture") or "",
    )


def get_rule_store(user: User = Depends(get_current_user)) -> RuleStore:
    """Rule storage for the current user."""
    settings = get_settings()
    if settings.rule_store == "supabase":
        return SupabaseRuleStore(user.id)
    return JsonFileRuleStore(settings.rules_path)


@lru_cache()
def get_check_analyzer() -> CheckAnalyzer:
    """
    Shared analyzer (one HTTP client per process).

    Goes through a remote relay when VISION_RELAY_URL is set, otherwise
    calls Claude directly with this process's API key.
    """
    settings = get_settings()
    if settings.vision_relay_url:
        return RelayCheckAnalyzer(settings.vision_relay_url)
    return ClaudeCheckAnalyzer()


def get_analysis_queue(analyzer: CheckAnalyzer = Depends(get_check_analyzer)) -> AnalysisQueue:
    settings = get_settings()
    return AnalysisQueue(
        analyzer,
        concurrency=settings.analysis_concurrency,
        retries=settings.analysis_retries,
        max_images=settings.max_images,
    )
