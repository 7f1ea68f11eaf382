"""
Storage Adapter - S3-compatible object storage for document blobs

Works with MinIO (development default) and any S3-compatible provider.
Switching providers only changes MINIO_* environment variables.

Object names are storage keys, e.g. documents/{document_id}.

boto3 is synchronous, so every call runs in the default executor to keep
the event loop free. There is no caching or batching layer.
"""
import asyncio
import functools
import logging
from typing import Union

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from config.database import StorageConfig

logger = logging.getLogger(__name__)

MISSING_OBJECT_CODES = {'404', 'NoSuchKey', 'NotFound'}
MISSING_BUCKET_CODES = {'404', 'NoSuchBucket', 'NotFound'}


class StorageAdapter:
    """Object storage client bound to one bucket"""

    def __init__(self, config: StorageConfig, client=None):
        self.config = config
        self.bucket = config.bucket
        self._client = client

    def _get_client(self):
        """Get or create the S3 client (lazy initialization)."""
        if self._client is None:
            s3_config = Config(
                signature_version='s3v4',
                s3={'addressing_style': 'path'},  # Required for MinIO
                retries={'max_attempts': 3, 'mode': 'standard'}
            )
            self._client = boto3.client(
                's3',
                endpoint_url=self.config.endpoint_url,
                aws_access_key_id=self.config.access_key,
                aws_secret_access_key=self.config.secret_key,
                region_name=self.config.region,
                use_ssl=self.config.use_ssl,
                config=s3_config,
            )
        return self._client

    async def _run(self, func, *args, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))

    @staticmethod
    def _error_code(error: ClientError) -> str:
        return str(error.response.get('Error', {}).get('Code', ''))

    # =========================================================================
    # BUCKET
    # =========================================================================

    async def ensure_bucket(self) -> None:
        """Create the bucket if it does not exist."""
        await self._run(self._ensure_bucket_sync)

    def _ensure_bucket_sync(self) -> None:
        client = self._get_client()
        try:
            client.head_bucket(Bucket=self.bucket)
        except ClientError as e:
            if self._error_code(e) not in MISSING_BUCKET_CODES:
                raise
            client.create_bucket(Bucket=self.bucket)
            logger.info(f"🪣 Created storage bucket {self.bucket}")
        logger.info(f"✅ Object storage ready at {self.config.endpoint_url}/{self.bucket}")

    # =========================================================================
    # OBJECT OPERATIONS
    # =========================================================================

    async def upload(
        self,
        object_name: str,
        data: Union[bytes, str],
        content_type: str = "text/markdown; charset=utf-8"
    ) -> str:
        """
        Upload bytes (or text, encoded as UTF-8).

        Returns:
            The object name
        """
        if isinstance(data, str):
            data = data.encode('utf-8')
        await self._run(
            self._get_client().put_object,
            Bucket=self.bucket,
            Key=object_name,
            Body=data,
            ContentType=content_type,
        )
        logger.debug(f"⬆️  Uploaded {object_name} ({len(data)} bytes)")
        return object_name

    async def download(self, object_name: str) -> bytes:
        """
        Download an object.

        Raises:
            botocore.exceptions.ClientError: object missing or backend failure
        """
        return await self._run(self._download_sync, object_name)

    def _download_sync(self, object_name: str) -> bytes:
        response = self._get_client().get_object(Bucket=self.bucket, Key=object_name)
        body = response['Body']
        try:
            return body.read()
        finally:
            body.close()

    async def delete(self, object_name: str) -> None:
        """Delete an object. Deleting a missing object is not an error."""
        try:
            await self._run(self._get_client().delete_object, Bucket=self.bucket, Key=object_name)
        except ClientError as e:
            if self._error_code(e) not in MISSING_OBJECT_CODES:
                raise
        logger.debug(f"🗑️  Deleted {object_name}")

    async def exists(self, object_name: str) -> bool:
        try:
            await self._run(self._get_client().head_object, Bucket=self.bucket, Key=object_name)
            return True
        except ClientError as e:
            if self._error_code(e) in MISSING_OBJECT_CODES:
                return False
            raise

    async def presign(self, object_name: str, expires_in: int = 3600) -> str:
        """Presigned GET URL, generated by the storage backend."""
        return await self._run(
            self._get_client().generate_presigned_url,
            'get_object',
            Params={'Bucket': self.bucket, 'Key': object_name},
            ExpiresIn=expires_in,
        )
