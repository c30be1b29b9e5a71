"""Top users and top/latest posts, built from the upstream API.

The top-users result is memoized in the shared TTLCache and served stale
when a fresh computation fails. Posts are always fetched live.
"""

import logging
from datetime import datetime, timezone

from config import Settings
from errors import AggregatorError, ValidationError
from services.cache import TTLCache
from services.fanout import gather_bounded
from services.ranking import rank_top_users, select_latest, select_popular
from services.upstream import UpstreamClient

logger = logging.getLogger(__name__)

TOP_USERS_KEY = "topFiveUsers"
TOP_USERS_LIMIT = 5
LATEST_POSTS_LIMIT = 5
POST_TYPES = ("popular", "latest")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Aggregator:
    def __init__(
        self,
        client: UpstreamClient,
        cache: TTLCache,
        top_users_ttl: int = 60,
        fanout_concurrency: int = 10,
    ):
        self._client = client
        self._cache = cache
        self._top_users_ttl = top_users_ttl
        self._fanout_concurrency = fanout_concurrency

    @classmethod
    def from_settings(cls, client: UpstreamClient, cache: TTLCache, settings: Settings) -> "Aggregator":
        return cls(
            client,
            cache,
            top_users_ttl=settings.top_users_ttl,
            fanout_concurrency=settings.fanout_concurrency,
        )

    async def top_users(self, refresh: bool = False) -> dict:
        """Five users with the most posts; cached, with stale fallback on failure."""
        if not refresh:
            cached = self._cache.get(TOP_USERS_KEY)
            if cached is not None:
                return {
                    "status": "success",
                    "message": "Top 5 users fetched from cache",
                    "data": cached,
                    "source": "cache",
                    "ttl": self._cache.remaining_ttl(TOP_USERS_KEY),
                }

        try:
            top = await self._compute_top_users()
            self._cache.set(TOP_USERS_KEY, top, self._top_users_ttl)
        except Exception as e:
            logger.exception("Error fetching top users")
            stale = self._cache.get_stale(TOP_USERS_KEY)
            if stale is None:
                raise AggregatorError("Failed to fetch top users") from e
            logger.warning("Serving stale top users after upstream failure")
            return {
                "status": "success",
                "message": "Returning cached results due to error",
                "data": stale,
                "source": "cache-fallback",
                "ttl": self._cache.stale_ttl(TOP_USERS_KEY),
            }

        return {
            "status": "success",
            "message": "Top 5 users fetched successfully",
            "data": top,
            "source": "api",
            "fetchedAt": _now_iso(),
        }

    async def _compute_top_users(self) -> list[dict]:
        users = await self._client.fetch_users()

        async def _count(user_id: str) -> int:
            return len(await self._client.fetch_user_posts(user_id))

        fanout = await gather_bounded(users, _count, limit=self._fanout_concurrency)
        fanout.raise_for_failures("fetch user posts")

        logger.info("Ranked %d users by post count", len(users))
        return rank_top_users(users, fanout.results, limit=TOP_USERS_LIMIT)

    async def top_posts(self, post_type: str = "popular") -> dict:
        """Most-commented posts (all ties) or the five most recent posts."""
        if post_type not in POST_TYPES:
            raise ValidationError("Invalid type parameter. Use 'popular' or 'latest'")

        try:
            posts = await self._client.fetch_all_posts()
            if post_type == "popular":
                selected = select_popular(posts)
            else:
                selected = select_latest(posts, limit=LATEST_POSTS_LIMIT)
        except Exception as e:
            logger.exception("Error fetching %s posts", post_type)
            raise AggregatorError("Failed to fetch posts") from e

        return {
            "status": "success",
            "message": f"{post_type.capitalize()} posts fetched successfully",
            "data": selected,
            "source": "api",
            "fetchedAt": _now_iso(),
        }
