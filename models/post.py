from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class Post(BaseModel):
    id: str
    title: str
    content: str
    author: str
    author_uid: str
    created_at: str
    updated_at: Optional[str] = None
    image_key: Optional[str] = None
    image_url: Optional[str] = None


class PostUpdate(BaseModel):
    """Partial update body. Only title and content are mutable."""
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    content: Optional[str] = None


class PostResponse(BaseModel):
    post: Post


class PostListResponse(BaseModel):
    posts: List[Post]


class DeleteResponse(BaseModel):
    message: str
    id: str
