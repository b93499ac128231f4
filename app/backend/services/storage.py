"""
Object storage access for uploaded credit reports.

Downloads report PDFs from an S3-compatible bucket with boto3.
"""

import asyncio
import logging
from typing import Any

from .exceptions import DownloadError

logger = logging.getLogger(__name__)


class StorageService:
    """Thin wrapper over an S3 client. Holds no per-job state."""

    def __init__(
        self,
        region_name: str | None = None,
        endpoint_url: str | None = None,
        aws_access_key_id: str | None = None,
        aws_secret_access_key: str | None = None,
        client: Any = None,
    ):
        self.region_name = region_name
        self.endpoint_url = endpoint_url
        self.aws_access_key_id = aws_access_key_id
        self.aws_secret_access_key = aws_secret_access_key
        self._client = client

    @property
    def client(self):
        """Lazy-load the boto3 S3 client."""
        if self._client is None:
            import boto3

            self._client = boto3.client(
                "s3",
                region_name=self.region_name,
                endpoint_url=self.endpoint_url,
                aws_access_key_id=self.aws_access_key_id,
                aws_secret_access_key=self.aws_secret_access_key,
            )
        return self._client

    def _download(self, bucket: str, path: str) -> bytes:
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            response = self.client.get_object(Bucket=bucket, Key=path)
            data = response["Body"].read()
        except ClientError as e:
            message = e.response.get("Error", {}).get("Message") or str(e)
            raise DownloadError(f"Failed to download file: {message}") from e
        except BotoCoreError as e:
            raise DownloadError(f"Failed to download file: {e}") from e

        if not data:
            raise DownloadError(f"Failed to download file: {path} is empty")
        return data

    async def download(self, bucket: str, path: str) -> bytes:
        """
        Download an object.

        Raises:
            DownloadError: If the object is missing, unreadable or empty.
        """
        data = await asyncio.to_thread(self._download, bucket, path)
        logger.info("Downloaded PDF, size: %d bytes", len(data))
        return data
