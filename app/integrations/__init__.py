# app/integrations/__init__.py

from app.integrations import claude
from app.integrations import relay

__all__ = ["claude", "relay"]
