"""Cloudflare R2 object storage, reached through its S3-compatible API."""
from functools import lru_cache
from typing import Annotated
import logging
import time

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Depends, HTTPException, status

from gotrippin.core.config import settings

logger = logging.getLogger(__name__)

AVATARS_PREFIX = "avatars/"
TRIP_IMAGES_PREFIX = "trip-images/"
PRESIGN_EXPIRES = 300
MAX_UPLOADED_AVATARS = 3


def create_r2_client():
    return boto3.client(
        "s3",
        endpoint_url=f"https://{settings.R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=settings.R2_ACCESS_KEY_ID,
        aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY,
        region_name="auto",
    )


def public_url(key: str, base: str | None = None) -> str:
    base = base if base is not None else settings.R2_PUBLIC_URL
    if not base:
        return key
    return f"{base.rstrip('/')}/{key}"


def avatar_prefix(user_id: str) -> str:
    return f"{AVATARS_PREFIX}{user_id}/"


class StorageService:

    def __init__(self, client, bucket: str | None = None, public_base: str | None = None):
        self.client = client
        self.bucket = bucket or settings.R2_BUCKET
        self.public_base = public_base

    def url_for(self, key: str) -> str:
        return public_url(key, self.public_base)

    def upload_object(self, key: str, body: bytes, content_type: str) -> str:
        self.client.put_object(Bucket=self.bucket, Key=key, Body=body, ContentType=content_type)
        return key

    def presign_avatar_upload(self, user_id: str, content_type: str, file_extension: str) -> dict:
        key = f"{avatar_prefix(user_id)}{user_id}-{int(time.time() * 1000)}.{file_extension}"

        try:
            upload_url = self.client.generate_presigned_url(
                "put_object",
                Params={"Bucket": self.bucket, "Key": key, "ContentType": content_type},
                ExpiresIn=PRESIGN_EXPIRES,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Presign error for {key}: {e}")
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to get upload URL")

        return {"uploadUrl": upload_url, "key": key, "url": self.url_for(key)}

    def list_avatars(self, user_id: str) -> list[dict]:
        """The user's most recent uploaded avatars, newest first."""
        objects = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=avatar_prefix(user_id)):
                objects.extend(page.get("Contents", []))
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to list avatars for {user_id}: {e}")
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to list avatars")

        objects = [o for o in objects if o.get("Size", 0) > 0]
        objects.sort(key=lambda o: o.get("LastModified") or 0, reverse=True)

        return [{"key": o["Key"], "url": self.url_for(o["Key"])} for o in objects[:MAX_UPLOADED_AVATARS]]

    def delete_avatar(self, user_id: str, key: str) -> dict:
        if not key.startswith(avatar_prefix(user_id)):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only delete your own avatars")

        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to delete {key}: {e}")
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to delete avatar")

        return {"success": True}


@lru_cache
def get_storage() -> StorageService:
    if not settings.storage_configured:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Storage is not configured")
    return StorageService(create_r2_client())


StorageDep = Annotated[StorageService, Depends(get_storage)]
