# app/main.py

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.routers import auth, checks, statements, reconcile, rules, health

settings = get_settings()


def configure_logging(level: str) -> None:
    """Configure the root logger once for the whole process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


configure_logging(settings.log_level)

# ============================================
# Create FastAPI app
# ============================================

app = FastAPI(
    title=settings.app_name,
    description="Bank statement ↔ check image reconciliation",
    version="1.0.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# ============================================
# CORS middleware
# ============================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.frontend_url,
        "http://localhost:5173",
        "http://localhost:8888",
    ],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Matched-Rows", "X-Unmatched-Rows", "X-Rows-With-Reason"],
)

# ============================================
# Include routers
# ============================================

app.include_router(health.router, tags=["Health"])
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(checks.router, tags=["Check Images"])
app.include_router(statements.router, prefix="/statements", tags=["Statements"])
app.include_router(reconcile.router, tags=["Reconciliation"])
app.include_router(rules.router, prefix="/rules", tags=["Matching Rules"])

# ============================================
# Root endpoint
# ============================================

@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs" if settings.debug else None,
    }
