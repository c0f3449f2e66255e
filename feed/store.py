"""
Client-side feed state.

Server responses always win over local state. Every fetch is tagged with a
generation number and a response from a superseded fetch is dropped, so a
slow request can never overwrite the result of a newer one. Posts the server
confirmed as created while a fetch was in flight are kept if that fetch's
snapshot predates them.
"""
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from feed.api import FeedApi, FeedApiError, ImageFile

logger = logging.getLogger(__name__)

FETCH_ERROR = "Unable to load feed right now."
CREATE_ERROR = "Could not share your post. Try again!"


class FeedStatus(str, Enum):
    LOGGED_OUT = "logged_out"
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    POPULATED = "populated"


class FeedValidationError(ValueError):
    pass


def _user_key(user: Optional[Dict[str, Any]]) -> Optional[str]:
    return user.get("user_id") if user else None


class FeedStore:

    def __init__(self, api: FeedApi, mine: bool = False):
        self.api = api
        self.mine = mine
        self.user: Optional[Dict[str, Any]] = None
        self.posts: List[Dict[str, Any]] = []
        self.loading = False
        self.error: Optional[str] = None
        self.submitting = False
        self.notifications: List[Tuple[str, str]] = []
        self._generation = 0
        self._created_during_fetch: List[Dict[str, Any]] = []

    @property
    def status(self) -> FeedStatus:
        if self.user is None:
            return FeedStatus.LOGGED_OUT
        if self.loading:
            return FeedStatus.LOADING
        if self.error:
            return FeedStatus.ERROR
        if not self.posts:
            return FeedStatus.EMPTY
        return FeedStatus.POPULATED

    def notify(self, level: str, message: str) -> None:
        self.notifications.append((level, message))

    def drain_notifications(self) -> List[Tuple[str, str]]:
        notifications, self.notifications = self.notifications, []
        return notifications

    async def set_user(self, user: Optional[Dict[str, Any]]) -> None:
        """Switch the identified user, refetching when it changes"""
        if _user_key(user) == _user_key(self.user):
            self.user = user
            return

        self.user = user
        self._generation += 1
        self.posts = []
        self.error = None
        self.loading = False
        self._created_during_fetch = []
        if user is not None:
            await self.load()

    async def load(self) -> None:
        """Fetch the feed. Only the most recent fetch may update state."""
        if self.user is None:
            return

        self._generation += 1
        generation = self._generation
        self._created_during_fetch = []
        self.loading = True
        self.error = None

        try:
            fetch = self.api.list_my_posts if self.mine else self.api.list_posts
            posts = await fetch()
        except FeedApiError as e:
            if generation == self._generation:
                self.error = e.message or FETCH_ERROR
            return
        finally:
            if generation == self._generation:
                self.loading = False

        if generation != self._generation:
            logger.debug("Dropping stale feed response (generation %s < %s)", generation, self._generation)
            return

        known = {post.get("id") for post in posts}
        missing = [post for post in self._created_during_fetch if post.get("id") not in known]
        self.posts = missing + list(posts)
        self._created_during_fetch = []

    async def retry(self) -> None:
        await self.load()

    def _prepend(self, post: Dict[str, Any]) -> None:
        self.posts = [post] + [p for p in self.posts if p.get("id") != post.get("id")]
        if self.loading:
            self._created_during_fetch.insert(0, post)

    async def submit(self, title: str, content: str, image: Optional[ImageFile] = None) -> Optional[Dict[str, Any]]:
        """
        Create a post and fold the server's answer into the feed.

        Empty title or content is rejected here, before any request is sent.
        """
        title = (title or "").strip()
        content = (content or "").strip()
        if not title or not content:
            message = "Add a title and something to share before posting!"
            self.notify("error", message)
            raise FeedValidationError(message)

        if not self.api.token:
            self.notify("error", "You need to be logged in to post.")
            return None

        self.submitting = True
        try:
            created = await self.api.create_post(title, content, image)
        except FeedApiError as e:
            self.notify("error", e.message or CREATE_ERROR)
            return None
        finally:
            self.submitting = False

        self.notify("success", "Shared to your feed!")
        if created:
            self._prepend(created)
        else:
            await self.load()
        return created
