"""
Product image storage on an S3-compatible object store (MinIO).

Images go into a private bucket and are handed out as presigned GET URLs.
"""
import io
import os
import uuid
from datetime import timedelta

from dotenv import load_dotenv
from fastapi import HTTPException
from loguru import logger
from minio import Minio

load_dotenv()

STORAGE_ENDPOINT = os.getenv("STORAGE_ENDPOINT", "localhost:9000")
STORAGE_ACCESS_KEY = os.getenv("STORAGE_ACCESS_KEY")
STORAGE_SECRET_KEY = os.getenv("STORAGE_SECRET_KEY")
STORAGE_SECURE = os.getenv("STORAGE_SECURE", "false").lower() in ("1", "true", "yes")
STORAGE_BUCKET = os.getenv("STORAGE_BUCKET", "product-images")

# presigned URLs cannot outlive 7 days
MAX_URL_EXPIRY = timedelta(days=7)
IMAGE_URL_EXPIRY = min(timedelta(days=int(os.getenv("IMAGE_URL_EXPIRY_DAYS", "7"))), MAX_URL_EXPIRY)


class ImageStorage:
    def __init__(self, client: Minio, bucket: str, url_expiry: timedelta = MAX_URL_EXPIRY):
        self.client = client
        self.bucket = bucket
        self.url_expiry = min(url_expiry, MAX_URL_EXPIRY)

    def ensure_bucket(self):
        if not self.client.bucket_exists(self.bucket):
            self.client.make_bucket(self.bucket)
            logger.info(f"Created bucket: {self.bucket}")

    @staticmethod
    def object_name(filename: str) -> str:
        ext = filename.rsplit(".", 1)[-1].lower() if "." in (filename or "") else "bin"
        return f"{uuid.uuid4()}.{ext}"

    def upload(self, filename: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        """Store the image and return a signed URL for it."""
        name = self.object_name(filename)
        self.client.put_object(
            self.bucket,
            name,
            io.BytesIO(data),
            length=len(data),
            content_type=content_type or "application/octet-stream",
        )
        logger.info(f"Uploaded image {name} ({len(data)} bytes)")
        return self.client.presigned_get_object(self.bucket, name, expires=self.url_expiry)


_storage = None


def get_storage() -> ImageStorage:
    """FastAPI dependency returning the configured image store."""
    global _storage
    if _storage is None:
        if not (STORAGE_ACCESS_KEY and STORAGE_SECRET_KEY):
            raise HTTPException(status_code=500, detail="Image storage not configured")
        client = Minio(
            endpoint=STORAGE_ENDPOINT,
            access_key=STORAGE_ACCESS_KEY,
            secret_key=STORAGE_SECRET_KEY,
            secure=STORAGE_SECURE,
        )
        _storage = ImageStorage(client, STORAGE_BUCKET, IMAGE_URL_EXPIRY)
    return _storage
