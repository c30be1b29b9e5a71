"""Upstream social API client: users, per-user posts, and all posts.

Every response is expected in a ``{"data": ...}`` envelope. Transport
failures, non-2xx statuses, non-JSON bodies and unexpected shapes all
surface as ``UpstreamError``.
"""

import logging
from typing import Any

import httpx

from config import Settings
from errors import UpstreamError

logger = logging.getLogger(__name__)

USERS_PATH = "/test/users"
USER_POSTS_PATH = "/test/users/{user_id}/posts"
POSTS_PATH = "/test/posts"


class UpstreamClient:
    """Thin async wrapper around one shared ``httpx.AsyncClient``.

    Safe to call concurrently for many user ids: httpx pools connections
    and no per-call state is kept on the instance.
    """

    def __init__(
        self,
        base_url: str,
        auth_token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Cache-Control": "max-age=60"}
        if auth_token:
            headers["Authorization"] = f"Bearer {auth_token}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "UpstreamClient":
        return cls(
            base_url=settings.api_base_url or "",
            auth_token=settings.auth_token,
            timeout=settings.upstream_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "UpstreamClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _get_data(self, path: str) -> Any:
        """GET ``path`` and return the decoded body's ``data`` field (or None)."""
        logger.debug("Upstream GET %s", path)
        try:
            resp = await self._client.get(path)
            resp.raise_for_status()
            body = resp.json()
        except httpx.TimeoutException as e:
            raise UpstreamError(f"Upstream request timed out: {path}") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Upstream request failed for {path}: {e}") from e
        except ValueError as e:
            raise UpstreamError(f"Upstream returned non-JSON body for {path}") from e

        if not isinstance(body, dict):
            raise UpstreamError(f"Upstream returned unexpected body for {path}")
        return body.get("data")

    async def fetch_users(self) -> dict[str, str]:
        """Return ``{user_id: display_name}`` in upstream order."""
        data = await self._get_data(USERS_PATH)
        if not isinstance(data, dict):
            raise UpstreamError("invalid users data structure")
        return {str(user_id): name for user_id, name in data.items()}

    async def fetch_user_posts(self, user_id: str) -> list[dict]:
        # A missing or null "data" means the user has no posts.
        data = await self._get_data(USER_POSTS_PATH.format(user_id=user_id))
        if data is None:
            return []
        if not isinstance(data, list):
            raise UpstreamError(f"invalid posts data structure for user {user_id}")
        return data

    async def fetch_all_posts(self) -> list[dict]:
        data = await self._get_data(POSTS_PATH)
        if not isinstance(data, list) or not all(isinstance(post, dict) for post in data):
            raise UpstreamError("invalid posts data structure")
        return data
