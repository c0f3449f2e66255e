import logging
from typing import Annotated, Optional

from fastapi import Request, Depends, HTTPException
from firebase_admin.auth import verify_id_token
from firebase_admin.exceptions import FirebaseError

import config
from models.user import User
from services.firestore import FirestoreDB
from services.posts import PostsService
from services.s3 import S3Service
from services.uploads import ImageUpload, image_upload

logger = logging.getLogger(__name__)


def _bearer_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("Authorization")
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization.split("Bearer ", 1)[1].strip() or None


def _verify(token: str) -> User:
    try:
        # Verify the Firebase ID token
        decoded_token = verify_id_token(token, check_revoked=True, clock_skew_seconds=10)
    except (ValueError, FirebaseError) as e:
        logger.warning("Invalid authentication token: %s", e)
        raise HTTPException(
            status_code=401,
            detail="Invalid authentication token"
        )
    return User(
        user_id=decoded_token["uid"],
        email=decoded_token.get("email"),
        name=decoded_token.get("name"),
    )


async def get_current_user(request: Request) -> User:
    """
    Verify Firebase ID token from Authorization header and return user info
    """
    token = _bearer_token(request)
    if token is None:
        raise HTTPException(
            status_code=401,
            detail="Invalid authorization header"
        )
    return _verify(token)


async def get_s3_service(request: Request) -> S3Service:
    """Get S3 service from app state"""
    return request.app.state.s3_service


async def get_firestore(request: Request) -> FirestoreDB:
    """ Get Firestore DB from app state """
    return request.app.state.firestore


async def get_posts_service(
        db: Annotated[FirestoreDB, Depends(get_firestore)],
        s3: Annotated[S3Service, Depends(get_s3_service)],
) -> PostsService:
    return PostsService(db, s3, config.IMAGE_URL_EXPIRATION_SECONDS)


# Type annotations for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
Posts = Annotated[PostsService, Depends(get_posts_service)]
Image = Annotated[Optional[ImageUpload], Depends(image_upload)]
