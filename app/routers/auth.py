# app/routers/auth.py

"""
Session routes.

Sign-in itself happens in the browser with Supabase; this only reports
who the current token belongs to.
"""

from fastapi import APIRouter, Depends

from app.dependencies import get_current_user
from app.models import User

router = APIRouter()


@router.get("/me")
async def current_user(user: User = Depends(get_current_user)):
    """Return the authenticated user."""
    return {
        "authenticated": True,
        "user": user.model_dump(),
    }
