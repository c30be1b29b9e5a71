"""Posts route: most-commented or most recent posts, always live."""

from fastapi import APIRouter, Depends, Query

from routes.dependencies import get_aggregator
from services.aggregator import Aggregator

router = APIRouter()


@router.get("/posts")
async def top_posts(
    post_type: str = Query("popular", alias="type"),
    aggregator: Aggregator = Depends(get_aggregator),
) -> dict:
    return await aggregator.top_posts(post_type)
