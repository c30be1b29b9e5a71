"""Pure ranking rules for users and posts. No I/O."""

from collections.abc import Sequence
from datetime import datetime, timezone

# Missing or unparseable post timestamps sort as the oldest possible post.
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Epoch numbers above this are treated as milliseconds.
_MILLIS_THRESHOLD = 10**11


def rank_top_users(users: dict[str, str], post_counts: dict[str, int], limit: int = 5) -> list[dict]:
    """Build user summaries and keep the ``limit`` users with the most posts.

    Ties keep the order of ``users`` (``sorted`` is stable).
    """
    summaries = [
        {"id": user_id, "name": name, "postCount": post_counts.get(user_id, 0)}
        for user_id, name in users.items()
    ]
    summaries.sort(key=lambda s: s["postCount"], reverse=True)
    return summaries[:limit]


def comment_count(post: dict) -> int:
    comments = post.get("comments")
    if isinstance(comments, Sequence) and not isinstance(comments, (str, bytes)):
        return len(comments)
    return 0


def post_timestamp(post: dict) -> datetime:
    """Parse ``post["timestamp"]`` as ISO-8601 or epoch seconds/millis."""
    raw = post.get("timestamp")
    if raw is None or isinstance(raw, bool):
        return EPOCH
    try:
        if isinstance(raw, (int, float)):
            seconds = raw / 1000 if abs(raw) > _MILLIS_THRESHOLD else raw
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        if isinstance(raw, str) and raw:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed
    except (ValueError, OverflowError, OSError):
        return EPOCH
    return EPOCH


def select_popular(posts: list[dict]) -> list[dict]:
    """All posts tied for the highest comment count, in upstream order."""
    if not posts:
        return []
    max_count = max(comment_count(p) for p in posts)
    return [p for p in posts if comment_count(p) == max_count]


def select_latest(posts: list[dict], limit: int = 5) -> list[dict]:
    return sorted(posts, key=post_timestamp, reverse=True)[:limit]
