"""
Validation for image attachments.

The guard runs as a FastAPI dependency, so a bad upload is rejected before
the route handler body executes. Accepted files are held in memory only.
"""
from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import File, HTTPException, UploadFile

MAX_IMAGE_BYTES = 5 * 1024 * 1024


@dataclass(frozen=True)
class ImageUpload:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def _too_large(max_bytes: int) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail=f"Image exceeds the {max_bytes // (1024 * 1024)}MB size limit"
    )


async def validate_image(
        file: Optional[UploadFile],
        max_bytes: int = MAX_IMAGE_BYTES,
) -> Optional[ImageUpload]:
    """
    Check that an uploaded file is an image within the size limit and buffer it

    Args:
        file: The multipart file, or None when the field was not sent
        max_bytes: Maximum accepted payload size

    Returns:
        The buffered image, or None when no file was attached

    Raises:
        HTTPException: 400 for oversized or non-image files
    """
    if file is None or not file.filename:
        return None

    # size is checked before the type, like a transport-level limit would
    if file.size is not None and file.size > max_bytes:
        raise _too_large(max_bytes)

    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image files are allowed")

    data = await file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise _too_large(max_bytes)

    return ImageUpload(filename=file.filename, content_type=content_type, data=data)


async def image_upload(
        image: Annotated[Optional[UploadFile], File()] = None,
) -> Optional[ImageUpload]:
    """Dependency for the optional `image` multipart field"""
    return await validate_image(image)
