"""Liveness and readiness check routes."""

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

router = APIRouter()


@router.get("/test", response_class=PlainTextResponse)
async def test() -> str:
    """Plain liveness probe kept for existing callers."""
    return "API working"


@router.get("/ready")
async def ready(request: Request) -> dict:
    """Lightweight readiness check, no external calls."""
    settings = request.app.state.settings
    return {
        "status": "ok",
        "service": "social-aggregator",
        "commit": settings.git_sha,
        "upstream_configured": not settings.validate(),
    }
