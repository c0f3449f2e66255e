import html
import logging
from typing import List, Dict, Any, Optional

import bleach
from fastapi import HTTPException
from google.api_core.exceptions import GoogleAPICallError

from models.post import Post, PostUpdate
from models.user import User
from services.firestore import FirestoreDB
from services.s3 import S3Service
from services.uploads import ImageUpload

logger = logging.getLogger(__name__)


def is_author(post: Dict[str, Any], user_id: Optional[str]) -> bool:
    """True when the given user wrote the post"""
    return bool(user_id) and post.get("author_uid") == user_id


def clean_text(value: Optional[str]) -> str:
    if value is None:
        return ""
    # strip tags, keep literal characters such as & and <
    return html.unescape(bleach.clean(value, strip=True)).strip()


class PostsService:

    def __init__(self, db: FirestoreDB, s3: S3Service, url_expiration_seconds: int = 3600):
        self.db = db
        self.s3 = s3
        self.url_expiration_seconds = url_expiration_seconds

    def to_post(self, data: Dict[str, Any]) -> Post:
        """Build the API representation of a stored post, signing its image URL"""
        image_key = data.get("image_key")
        image_url = None
        if image_key:
            image_url = self.s3.get_presigned_url(image_key, self.url_expiration_seconds)
        return Post(
            id=data["id"],
            title=data.get("title", ""),
            content=data.get("content", ""),
            author=data.get("author", ""),
            author_uid=data.get("author_uid", ""),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at"),
            image_key=image_key,
            image_url=image_url,
        )

    def display_name(self, user: User) -> str:
        """Username from the user's profile, falling back to token claims"""
        profile = self.db.get_user(user.user_id) or {}
        if profile.get("username"):
            return profile["username"]
        if user.name:
            return user.name
        if user.email:
            return user.email.split("@")[0]
        return user.user_id

    def _load(self, post_id: str) -> Dict[str, Any]:
        post = self.db.get_post(post_id)
        if post is None:
            raise HTTPException(status_code=404, detail="Post not found")
        return post

    def _load_owned(self, post_id: str, user: User, action: str) -> Dict[str, Any]:
        post = self._load(post_id)
        if not is_author(post, user.user_id):
            logger.warning("User %s attempted to %s post %s owned by %s",
                           user.user_id, action, post_id, post.get("author_uid"))
            raise HTTPException(status_code=403, detail=f"Not authorized to {action} this post")
        return post

    def create_post(self, user: User, title: str, content: str, image: Optional[ImageUpload] = None) -> Post:
        """
        Create a post owned by the calling user

        Args:
            user: The authenticated author
            title: Post title, required
            content: Post body, required
            image: Optional validated image attachment

        Returns:
            The created post
        """
        title = clean_text(title)
        content = clean_text(content)
        if not title or not content:
            raise HTTPException(status_code=400, detail="Title and content are required")

        author = self.display_name(user)
        image_key = self.s3.upload_image(image, user.user_id) if image else None

        try:
            created = self.db.create_post(title, content, author, user.user_id, image_key)
        except GoogleAPICallError:
            if image_key:
                # don't leave an orphaned object behind
                self.s3.delete_file(image_key)
            raise

        logger.info("User %s created post %s", user.user_id, created["id"])
        return self.to_post(created)

    def list_posts(self) -> List[Post]:
        return [self.to_post(post) for post in self.db.get_all_posts()]

    def list_user_posts(self, user: User) -> List[Post]:
        return [self.to_post(post) for post in self.db.get_posts_by_author(user.user_id)]

    def get_post(self, post_id: str) -> Post:
        return self.to_post(self._load(post_id))

    def update_post(self, user: User, post_id: str, update: PostUpdate) -> Post:
        """Apply a partial title/content update. Only the author may do this."""
        changes = {}
        for field, value in update.model_dump(exclude_none=True).items():
            cleaned = clean_text(value)
            if not cleaned:
                raise HTTPException(status_code=400, detail=f"{field.capitalize()} cannot be empty")
            changes[field] = cleaned

        if not changes:
            raise HTTPException(status_code=400, detail="Nothing to update")

        self._load_owned(post_id, user, "update")
        updated = self.db.update_post(post_id, changes)
        if updated is None:
            raise HTTPException(status_code=404, detail="Post not found")

        logger.info("User %s updated post %s", user.user_id, post_id)
        return self.to_post(updated)

    def delete_post(self, user: User, post_id: str) -> None:
        """Permanently delete a post and its image. Only the author may do this."""
        post = self._load_owned(post_id, user, "delete")
        self.db.delete_post(post_id)
        if post.get("image_key"):
            self.s3.delete_file(post["image_key"])
        logger.info("User %s deleted post %s", user.user_id, post_id)
