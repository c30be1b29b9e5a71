"""Top users route: ranked by post count, cached with stale fallback."""

from fastapi import APIRouter, Depends, Query

from routes.dependencies import get_aggregator
from services.aggregator import Aggregator

router = APIRouter()


@router.get("/users")
async def top_users(
    refresh: str | None = Query(None),
    aggregator: Aggregator = Depends(get_aggregator),
) -> dict:
    """Top 5 users by post count. ``?refresh=true`` bypasses the cache."""
    return await aggregator.top_users(refresh=refresh == "true")
