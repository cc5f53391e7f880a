# app/routers/__init__.py

from app.routers import health
from app.routers import auth
from app.routers import checks
from app.routers import statements
from app.routers import reconcile
from app.routers import rules

__all__ = ["health", "auth", "checks", "statements", "reconcile", "rules"]
