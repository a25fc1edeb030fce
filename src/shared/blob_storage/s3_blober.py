"""S3 Blob Storage adapter for client document uploads."""
import asyncio
from typing import Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, Field


class S3BlobStorageSettings(BaseModel):
    """Settings for S3 Blob Storage."""
    bucket_name: str = Field(..., description="S3 bucket name")
    endpoint_url: Optional[str] = Field(None, description="S3 endpoint URL (for LocalStack)")
    public_base_url: Optional[str] = Field(None, description="Base URL objects are served from, e.g. a CDN")
    region_name: str = Field(default="us-east-1", description="AWS region")
    aws_access_key_id: Optional[str] = Field(None, description="AWS access key ID")
    aws_secret_access_key: Optional[str] = Field(None, description="AWS secret access key")


class S3BlobStorage:
    """
    S3 Blob Storage adapter compatible with both AWS S3 and LocalStack.

    Stores uploaded binary documents in a single bucket and hands back a URL the
    object can be retrieved from. boto3 is synchronous, so every call is wrapped
    in ``asyncio.to_thread``. The client is created lazily and shared by all requests.
    """

    def __init__(self, settings: S3BlobStorageSettings):
        """
        Initialize S3 Blob Storage adapter.

        Args:
            settings: S3 storage configuration
        """
        self.settings = settings
        self._client = None

    @property
    def client(self):
        """Get or create S3 client (lazy initialization)."""
        if self._client is None:
            client_kwargs = {
                "region_name": self.settings.region_name,
            }

            if self.settings.endpoint_url:
                client_kwargs["endpoint_url"] = self.settings.endpoint_url

            if self.settings.aws_access_key_id and self.settings.aws_secret_access_key:
                client_kwargs["aws_access_key_id"] = self.settings.aws_access_key_id
                client_kwargs["aws_secret_access_key"] = self.settings.aws_secret_access_key

            self._client = boto3.client("s3", **client_kwargs)  # type: ignore[call-overload]

        return self._client

    async def ensure_bucket_exists(self) -> None:
        """
        Ensure the configured bucket exists, create if it doesn't.

        Raises:
            RuntimeError: If the bucket cannot be accessed or created
        """
        await asyncio.to_thread(self._ensure_bucket_exists_sync)

    def _ensure_bucket_exists_sync(self) -> None:
        """Synchronous helper to ensure bucket exists."""
        try:
            self.client.head_bucket(Bucket=self.settings.bucket_name)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code != "404":
                raise RuntimeError(
                    f"Failed to access bucket {self.settings.bucket_name}: {str(e)}"
                ) from e
            try:
                if self.settings.region_name == "us-east-1":
                    # us-east-1 doesn't support LocationConstraint
                    self.client.create_bucket(Bucket=self.settings.bucket_name)
                else:
                    self.client.create_bucket(
                        Bucket=self.settings.bucket_name,
                        CreateBucketConfiguration={"LocationConstraint": self.settings.region_name}
                    )
            except ClientError as create_error:
                raise RuntimeError(
                    f"Failed to create bucket {self.settings.bucket_name}: {str(create_error)}"
                ) from create_error

    def object_url(self, key: str) -> str:
        """
        Build the URL an uploaded object can be retrieved from.

        Uses the public base URL when configured, the path-style endpoint URL for
        LocalStack/custom endpoints, and the virtual-hosted AWS URL otherwise.
        """
        quoted_key = quote(key, safe="/")
        if self.settings.public_base_url:
            return f"{self.settings.public_base_url.rstrip('/')}/{quoted_key}"
        if self.settings.endpoint_url:
            return f"{self.settings.endpoint_url.rstrip('/')}/{self.settings.bucket_name}/{quoted_key}"
        return (
            f"https://{self.settings.bucket_name}.s3.{self.settings.region_name}"
            f".amazonaws.com/{quoted_key}"
        )

    async def upload_bytes(self, key: str, content: bytes, content_type: str) -> str:
        """
        Upload binary content to S3.

        Args:
            key: S3 object key (path) for the content
            content: Raw bytes to upload
            content_type: MIME type stored with the object

        Returns:
            The URL of the uploaded object

        Raises:
            RuntimeError: If upload fails
        """
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.settings.bucket_name,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            raise RuntimeError(
                f"Failed to upload content to S3 key {key}: {str(e)}"
            ) from e

        return self.object_url(key)
