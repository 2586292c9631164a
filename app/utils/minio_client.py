# app/utils/minio_client.py

import json
import mimetypes
from typing import BinaryIO, Optional
from urllib.parse import urlparse

from minio import Minio

from app.config.settings import (
    MINIO_ENDPOINT,
    MINIO_PUBLIC_ENDPOINT,
    MINIO_ROOT_USER,
    MINIO_ROOT_PASSWORD,
)
from app.utils.logger import logger


def create_minio_client() -> Minio:
    """Builds a MinIO client from the environment."""
    return Minio(
        endpoint=MINIO_ENDPOINT,
        access_key=MINIO_ROOT_USER,
        secret_key=MINIO_ROOT_PASSWORD,
        secure=MINIO_ENDPOINT.startswith("https")
    )


# Lazily created global client
client = None


def get_minio_client() -> Minio:
    global client
    if client is None:
        client = create_minio_client()
    return client


def ensure_public_bucket(bucket_name: str) -> None:
    """Creates the bucket when missing and grants anonymous read on its objects."""
    minio = get_minio_client()
    if minio.bucket_exists(bucket_name):
        return

    logger.info(f"[MinIO] Creating bucket: {bucket_name}")
    minio.make_bucket(bucket_name)
    policy = {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": "*",
                "Action": "s3:GetObject",
                "Resource": f"arn:aws:s3:::{bucket_name}/*"
            }
        ]
    }
    minio.set_bucket_policy(bucket_name, json.dumps(policy))


def extension_for(content_type: Optional[str], filename: Optional[str] = None) -> str:
    """File extension without the dot, preferring the uploaded file name."""
    if filename and "." in filename:
        return filename.rsplit(".", 1)[1].lower()
    guessed = mimetypes.guess_extension(content_type or "") or ".bin"
    return guessed.lstrip(".")


class MinioUploader:
    """Object storage used for payment proofs. Swapped for a fake in tests."""

    def upload(self, bucket: str, object_name: str, data: BinaryIO, content_type: Optional[str]) -> str:
        ensure_public_bucket(bucket)
        try:
            get_minio_client().put_object(
                bucket_name=bucket,
                object_name=object_name,
                data=data,
                length=-1,
                part_size=10 * 1024 * 1024,
                content_type=content_type or "application/octet-stream",
            )
        except Exception as e:
            logger.error(f"[MinIO] Upload failed for {bucket}/{object_name}: {e}")
            raise

        url = f"{MINIO_PUBLIC_ENDPOINT}/{bucket}/{object_name}"
        logger.info(f"[MinIO] Uploaded {url}")
        return url

    def remove(self, file_url: str) -> bool:
        """Removes an object by its public URL. Returns False when nothing was removed."""
        if not file_url:
            return False

        path_parts = [p for p in urlparse(file_url).path.split("/") if p]
        if len(path_parts) < 2:
            logger.error(f"[MinIO] Invalid object path: {file_url}")
            return False

        bucket_name = path_parts[0]
        object_key = "/".join(path_parts[1:])
        try:
            get_minio_client().remove_object(bucket_name, object_key)
            logger.info(f"[MinIO] Removed {bucket_name}/{object_key}")
            return True
        except Exception as e:
            logger.error(f"[MinIO] Could not remove {file_url}: {e}")
            return False
