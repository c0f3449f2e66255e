import logging
import mimetypes
import uuid
from datetime import datetime

import boto3
from botocore.exceptions import ClientError
from fastapi import HTTPException

from services.uploads import ImageUpload

logger = logging.getLogger(__name__)


class S3Service:
    def __init__(self, bucket_name: str, client: boto3.client):
        """
        Initialize the S3 service with bucket name and client
        """
        self.bucket_name = bucket_name
        self.s3 = client

    @staticmethod
    def build_key(image: ImageUpload, user_id: str) -> str:
        """Object key for a post image, namespaced by owner"""
        extension = mimetypes.guess_extension(image.content_type) or ""
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        return f"posts/{user_id}/{timestamp}-{uuid.uuid4()}{extension}"

    def upload_image(self, image: ImageUpload, user_id: str) -> str:
        """
        Upload a validated post image to S3 with user ownership metadata

        Args:
            image: The buffered image
            user_id: The ID of the user uploading the image

        Returns:
            The unique S3 key for the uploaded image

        Raises:
            HTTPException: If the upload fails
        """
        key = self.build_key(image, user_id)
        try:
            self.s3.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=image.data,
                ContentType=image.content_type,
                Metadata={
                    'user_id': user_id,
                    'filename': image.filename,
                }
            )
        except ClientError as e:
            logger.exception("S3 upload error for %s: %s", key, e)
            raise HTTPException(status_code=500, detail="Failed to upload image")

        return key

    def get_presigned_url(self, key: str, expiration_seconds: int = 3600) -> str:
        """
        Generate a presigned URL for accessing a file

        Args:
            key: The S3 key of the file
            expiration_seconds: URL expiration time in seconds

        Returns:
            Presigned URL for the file

        Raises:
            HTTPException: If URL generation fails
        """
        try:
            url = self.s3.generate_presigned_url(
                'get_object',
                Params={
                    'Bucket': self.bucket_name,
                    'Key': key
                },
                ExpiresIn=expiration_seconds
            )
            return url
        except ClientError as e:
            logger.error("S3 error details: %s", e)
            raise HTTPException(status_code=404, detail="File not found or access denied")

    def delete_file(self, key: str) -> None:
        try:
            self.s3.delete_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            logger.exception("S3 delete error for %s: %s", key, e)
            raise HTTPException(status_code=500, detail="Failed to delete image")
