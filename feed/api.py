import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import aiohttp

logger = logging.getLogger(__name__)

# (filename, bytes, content type)
ImageFile = Tuple[str, bytes, str]


class FeedApiError(Exception):
    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class FeedApi:
    """Async client for the posts API"""

    def __init__(self, session: aiohttp.ClientSession, base_url: str, token: Optional[str] = None):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.token = token

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(self, method: str, path: str, fallback: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}/api/posts{path}"
        try:
            async with self.session.request(method, url, headers=self._headers(), **kwargs) as response:
                try:
                    payload = await response.json(content_type=None)
                except ValueError:
                    payload = None

                if response.status >= 400:
                    detail = payload.get("detail") if isinstance(payload, dict) else None
                    raise FeedApiError(response.status, str(detail) if detail else fallback)

                return payload if isinstance(payload, dict) else {}
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise FeedApiError(0, fallback) from e

    async def list_posts(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "", "Unable to load feed right now.")
        return data.get("posts") or []

    async def list_my_posts(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/my/posts", "Unable to load your posts right now.")
        return data.get("posts") or []

    async def get_post(self, post_id: str) -> Dict[str, Any]:
        data = await self._request("GET", f"/{post_id}", "Unable to load this post.")
        return data.get("post") or {}

    async def create_post(self, title: str, content: str, image: Optional[ImageFile] = None) -> Optional[Dict[str, Any]]:
        """
        Create a post as multipart form data.

        Returns the created post when the server echoes it, otherwise None.
        """
        form = aiohttp.FormData()
        form.add_field("title", title)
        form.add_field("content", content)
        if image is not None:
            filename, data, content_type = image
            form.add_field("image", data, filename=filename, content_type=content_type)

        data = await self._request("POST", "", "Could not share your post. Try again!", data=form)
        return data.get("post")

    async def update_post(self, post_id: str, title: Optional[str] = None, content: Optional[str] = None) -> Dict[str, Any]:
        body = {key: value for key, value in (("title", title), ("content", content)) if value is not None}
        data = await self._request("PUT", f"/{post_id}", "Could not update this post.", json=body)
        return data.get("post") or {}

    async def delete_post(self, post_id: str) -> None:
        await self._request("DELETE", f"/{post_id}", "Could not delete this post.")
