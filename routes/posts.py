from typing import Annotated

from fastapi import APIRouter, Form

from dependencies import Posts, CurrentUser, Image
from models.post import PostUpdate, PostResponse, PostListResponse, DeleteResponse

router = APIRouter()


@router.post("", status_code=201)
async def create_post(
        posts: Posts,
        current_user: CurrentUser,
        image: Image,
        title: Annotated[str, Form()],
        content: Annotated[str, Form()],
) -> PostResponse:
    """Create a new post, optionally with an image attachment"""
    post = posts.create_post(current_user, title, content, image)
    return PostResponse(post=post)


@router.get("")
async def get_posts(posts: Posts) -> PostListResponse:
    """Get all posts, newest first"""
    return PostListResponse(posts=posts.list_posts())


@router.get("/my/posts")
async def get_my_posts(posts: Posts, current_user: CurrentUser) -> PostListResponse:
    """Get the posts written by the current user"""
    return PostListResponse(posts=posts.list_user_posts(current_user))


@router.get("/{post_id}")
async def get_post(posts: Posts, post_id: str) -> PostResponse:
    return PostResponse(post=posts.get_post(post_id))


@router.put("/{post_id}")
async def update_post(
        posts: Posts,
        post_id: str,
        update: PostUpdate,
        current_user: CurrentUser
) -> PostResponse:
    """Update a post's title or content (author only)"""
    return PostResponse(post=posts.update_post(current_user, post_id, update))


@router.delete("/{post_id}")
async def delete_post(posts: Posts, post_id: str, current_user: CurrentUser) -> DeleteResponse:
    """Delete a post (author only)"""
    posts.delete_post(current_user, post_id)
    return DeleteResponse(message="Post deleted", id=post_id)
