import asyncio
import io
import logging
from typing import Optional, Protocol

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from feed_engine.config import settings
from feed_engine.exceptions import StoreUnavailableException

logger = logging.getLogger(__name__)


class AssetStore(Protocol):
    """Binary asset storage keyed by an opaque id (post ids for post images)."""

    async def create_asset(self, payload: bytes, key: str, content_type: str) -> str:
        """Store payload under key and return a retrievable reference (URL)."""
        ...

    async def delete_asset(self, key: str) -> bool:
        """Delete the asset under key. False means there was nothing to delete."""
        ...


class S3AssetStore:
    """AssetStore backed by an S3 bucket; every key lives under `namespace/`."""

    def __init__(self, namespace: Optional[str] = None, client=None):
        if client is None:
            session = boto3.session.Session(
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
                region_name=settings.AWS_S3_REGION or None,
            )
            client = session.client("s3", config=Config(s3={"addressing_style": "virtual"}))
        self.s3 = client
        self.bucket = settings.AWS_S3_BUCKET
        self.namespace = (namespace or settings.ASSET_NAMESPACE).strip("/")
        self.public_base = settings.AWS_S3_PUBLIC_URL.strip() if settings.AWS_S3_PUBLIC_URL else ""

    def object_key(self, key: str) -> str:
        return f"{self.namespace}/{key}" if self.namespace else key

    def public_url(self, key: str) -> str:
        object_key = self.object_key(key)
        if self.public_base:
            return f"{self.public_base.rstrip('/')}/{object_key}"
        region = settings.AWS_S3_REGION
        return f"https://{self.bucket}.s3.{region}.amazonaws.com/{object_key}"

    async def create_asset(self, payload: bytes, key: str, content_type: str) -> str:
        self._require_bucket()
        try:
            await asyncio.to_thread(
                self.s3.upload_fileobj,
                Fileobj=io.BytesIO(payload),
                Bucket=self.bucket,
                Key=self.object_key(key),
                ExtraArgs={
                    "ContentType": content_type,
                    "CacheControl": "public, max-age=31536000",
                },
            )
        except (BotoCoreError, ClientError) as e:
            raise StoreUnavailableException("asset store", str(e)) from e

        logger.debug("Uploaded asset %s (%d bytes)", self.object_key(key), len(payload))
        return self.public_url(key)

    async def delete_asset(self, key: str) -> bool:
        self._require_bucket()
        object_key = self.object_key(key)
        try:
            # delete_object succeeds on missing keys, so probe first to report NotFound
            await asyncio.to_thread(self.s3.head_object, Bucket=self.bucket, Key=object_key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise StoreUnavailableException("asset store", str(e)) from e
        except BotoCoreError as e:
            raise StoreUnavailableException("asset store", str(e)) from e

        try:
            await asyncio.to_thread(self.s3.delete_object, Bucket=self.bucket, Key=object_key)
        except (BotoCoreError, ClientError) as e:
            raise StoreUnavailableException("asset store", str(e)) from e
        return True

    def _require_bucket(self) -> None:
        if not self.bucket:
            raise StoreUnavailableException("asset store", "AWS_S3_BUCKET is not configured")
