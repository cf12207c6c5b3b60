"""
S3 object storage
"""

import asyncio
from typing import Any, BinaryIO, Dict, Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import ClientError

from catalog_sync.core.config.settings import StorageSettings, settings
from catalog_sync.core.logging import get_logger
from catalog_sync.domains.assets.interfaces import IObjectStorage

logger = get_logger(__name__)


class S3ObjectStorage(IObjectStorage):
    """IObjectStorage on a boto3 S3 client; blocking calls run in a worker thread"""

    def __init__(
        self,
        bucket: str,
        region: str,
        endpoint_url: Optional[str] = None,
        client: Any = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
    ):
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        self.client = client or boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
        )

    @classmethod
    def from_settings(
        cls, storage_settings: Optional[StorageSettings] = None
    ) -> Optional["S3ObjectStorage"]:
        """Build from settings; None when storage credentials are not configured"""
        storage_settings = storage_settings or settings.storage
        if not storage_settings.is_configured:
            return None
        return cls(
            bucket=storage_settings.S3_BUCKET,
            region=storage_settings.S3_REGION,
            endpoint_url=storage_settings.S3_ENDPOINT_URL,
            access_key_id=storage_settings.AWS_ACCESS_KEY_ID,
            secret_access_key=storage_settings.AWS_SECRET_ACCESS_KEY,
        )

    async def exists(self, key: str) -> bool:
        try:
            await asyncio.to_thread(self.client.head_object, Bucket=self.bucket, Key=key)
            return True
        except ClientError as e:
            status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            code = e.response.get("Error", {}).get("Code")
            if status == 404 or code in ("404", "NoSuchKey", "NotFound"):
                return False
            raise

    async def upload(
        self,
        key: str,
        body: BinaryIO,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> None:
        # S3 metadata must be ASCII
        safe_metadata = {k: quote(str(v), safe=":/?=&") for k, v in (metadata or {}).items()}
        await asyncio.to_thread(
            self.client.upload_fileobj,
            body,
            self.bucket,
            key,
            ExtraArgs={"ContentType": content_type, "Metadata": safe_metadata},
        )
        logger.debug("Uploaded object", bucket=self.bucket, key=key)

    def public_url(self, key: str) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"
