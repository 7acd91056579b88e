# This project was developed with assistance from AI tools.
"""S3-compatible object storage for document bytes (uploads and mail attachments).

Drive files stay in Drive and are only referenced; bytes we receive directly
(uploads, downloaded mail attachments) are kept here under
``{loan_id}/{source_ref}/{filename}``. The boto3 client is synchronous, so
calls run in the default executor. Storage failures surface as
``UpstreamUnavailable`` so a sync can count and skip them.
"""

import asyncio
import logging
import os
import re
from functools import partial

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..clients.base import UpstreamUnavailable
from ..core.config import Settings

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]+")


class StorageService:
    """Document byte store backed by a single S3 bucket."""

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket: str,
        region: str = "us-east-1",
    ):
        self._bucket = bucket
        self._client = boto3.client(
            "s3",
            endpoint_url=endpoint,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
            config=BotoConfig(signature_version="s3v4", s3={"addressing_style": "path"}),
        )
        self._ensure_bucket()

    def _ensure_bucket(self) -> None:
        try:
            self._client.head_bucket(Bucket=self._bucket)
        except ClientError:
            logger.info("Creating document bucket %s", self._bucket)
            self._client.create_bucket(Bucket=self._bucket)

    async def _call(self, description: str, method, **kwargs):
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, partial(method, Bucket=self._bucket, **kwargs))
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamUnavailable(f"Object storage {description} failed: {exc}") from exc

    @staticmethod
    def build_object_key(loan_id: int, source_ref: str, filename: str) -> str:
        """Key for a document's bytes.

        ``source_ref`` is sanitised (mail refs contain ``:``) and only the
        basename of ``filename`` is kept so a crafted name cannot escape the
        loan's prefix.
        """
        safe_ref = _UNSAFE_KEY_CHARS_RE.sub("_", source_ref) or "ref"
        safe_name = os.path.basename(filename) or f"doc-{safe_ref}"
        return f"{loan_id}/{safe_ref}/{safe_name}"

    async def upload_file(self, file_data: bytes, object_key: str, content_type: str) -> str:
        await self._call(
            f"write of {object_key}",
            self._client.put_object,
            Key=object_key,
            Body=file_data,
            ContentType=content_type,
        )
        return object_key

    async def store_document(
        self,
        loan_id: int,
        source_ref: str,
        filename: str,
        file_data: bytes,
        content_type: str | None,
    ) -> str:
        """Store a document's bytes and return the object key to record on it."""
        key = self.build_object_key(loan_id, source_ref, filename)
        await self.upload_file(file_data, key, content_type or "application/octet-stream")
        logger.debug("Stored %d bytes for loan %s at %s", len(file_data), loan_id, key)
        return key

    async def download_file(self, object_key: str) -> bytes:
        response = await self._call(
            f"read of {object_key}", self._client.get_object, Key=object_key
        )
        return response["Body"].read()


def init_storage_service(cfg: Settings) -> StorageService:
    """Build the storage service from settings (called once from app lifespan)."""
    service = StorageService(
        endpoint=cfg.S3_ENDPOINT,
        access_key=cfg.S3_ACCESS_KEY,
        secret_key=cfg.S3_SECRET_KEY,
        bucket=cfg.S3_BUCKET,
        region=cfg.S3_REGION,
    )
    logger.info("StorageService initialised (bucket=%s)", cfg.S3_BUCKET)
    return service
