"""S3 Storage Adapter - Implementation of DocumentStorePort using boto3.

Provides S3-compatible storage operations for AWS S3, MinIO, and other S3-compatible services.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import logging
from io import BytesIO
from typing import BinaryIO, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from domain.documents.ports.object_storage_port import DocumentStorePort, StorageError

logger = logging.getLogger(__name__)


class S3StorageAdapter(DocumentStorePort):
    """S3-compatible content store using boto3.

    Object keys have the form ``{company_id}/{storage_filename}``. A single
    put_object call is atomic: readers either see the complete object or
    nothing at that key.

    Example:
        config = load_storage_config(get_settings())
        storage = S3StorageAdapter(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
        )

        location = await storage.write(str(company_id), "1760780000000_ab12.pdf", content)
    """

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: str,
        secret_key: str,
        bucket_name: str,
        region: str = "us-east-1",
    ):
        """Initialize S3 storage adapter.

        Args:
            endpoint_url: S3 endpoint URL (None for AWS S3, URL for MinIO)
            access_key: S3 access key ID
            secret_key: S3 secret access key
            bucket_name: S3 bucket name
            region: AWS region (default: 'us-east-1')

        Raises:
            StorageError: If S3 client initialization fails
        """
        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
            )
            self.bucket_name = bucket_name
            self.region = region

            logger.info(
                f"Initialized S3 storage adapter: bucket={bucket_name}, "
                f"endpoint={endpoint_url or 'AWS S3'}, region={region}"
            )
        except NoCredentialsError as e:
            raise StorageError(f"Invalid S3 credentials: {e}")
        except Exception as e:
            raise StorageError(f"Failed to initialize S3 client: {e}")

    async def write(self, namespace: str, storage_filename: str, content: bytes) -> str:
        """Store bytes at ``{namespace}/{storage_filename}``.

        Raises:
            StorageError: If upload fails
        """
        if not namespace or "/" in namespace or not storage_filename or "/" in storage_filename:
            raise StorageError(f"Invalid object key parts: {namespace!r}/{storage_filename!r}")

        storage_key = f"{namespace}/{storage_filename}"

        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=storage_key,
                Body=BytesIO(content),
                ContentLength=len(content),
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(
                f"S3 upload failed: storage_key={storage_key}, "
                f"error={error_code}, message={e}"
            )
            raise StorageError(f"Failed to upload file: {error_code}")
        except Exception as e:
            logger.error(f"Unexpected error during upload: {e}")
            raise StorageError(f"Failed to upload file: {e}")

        logger.info(f"Uploaded file: storage_key={storage_key}, size={len(content)}")
        return storage_key

    async def open_for_read(self, location: str) -> BinaryIO:
        """Retrieve an object from S3.

        Returns:
            BinaryIO: Streaming body (caller must close)

        Raises:
            FileNotFoundError: If object doesn't exist
            StorageError: If retrieval fails
        """
        try:
            response = self.s3_client.get_object(
                Bucket=self.bucket_name,
                Key=location,
            )

            logger.info(f"Retrieved file: storage_key={location}")
            return response["Body"]

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("NoSuchKey", "404"):
                logger.warning(f"File not found: storage_key={location}")
                raise FileNotFoundError(f"File not found: {location}")
            logger.error(
                f"S3 retrieval failed: storage_key={location}, "
                f"error={error_code}"
            )
            raise StorageError(f"Failed to retrieve file: {error_code}")
        except Exception as e:
            logger.error(f"Unexpected error during retrieval: {e}")
            raise StorageError(f"Failed to retrieve file: {e}")

    async def delete(self, location: str) -> bool:
        """Delete an object from S3.

        Returns:
            bool: True if deleted, False if it didn't exist

        Raises:
            StorageError: If deletion fails
        """
        try:
            if not await self.exists(location):
                logger.info(f"File not found for deletion: storage_key={location}")
                return False

            self.s3_client.delete_object(
                Bucket=self.bucket_name,
                Key=location,
            )

            logger.info(f"Deleted file: storage_key={location}")
            return True

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(
                f"S3 deletion failed: storage_key={location}, "
                f"error={error_code}"
            )
            raise StorageError(f"Failed to delete file: {error_code}")
        except BotoCoreError as e:
            logger.error(f"S3 deletion failed: storage_key={location}, error={e}")
            raise StorageError(f"Failed to delete file: {e}")

    async def exists(self, location: str) -> bool:
        """Check if an object exists (HEAD request).

        Raises:
            StorageError: For errors other than a missing key
        """
        try:
            self.s3_client.head_object(
                Bucket=self.bucket_name,
                Key=location,
            )
            return True
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey", "NotFound"):
                return False
            logger.error(f"S3 existence check failed: storage_key={location}, error={error_code}")
            raise StorageError(f"Failed to check file: {error_code}")
        except BotoCoreError as e:
            logger.error(f"S3 existence check failed: storage_key={location}, error={e}")
            raise StorageError(f"Failed to check file: {e}")

    async def health_check(self) -> None:
        await self.verify_bucket_exists()

    async def verify_bucket_exists(self) -> bool:
        """Verify that the configured bucket exists.

        Called on application startup to fail fast if the bucket is missing.

        Raises:
            StorageError: If bucket check fails or bucket doesn't exist
        """
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
            logger.info(f"Verified bucket exists: {self.bucket_name}")
            return True
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "404":
                raise StorageError(
                    f"Bucket '{self.bucket_name}' does not exist. "
                    f"Create it first or update S3_BUCKET_NAME environment variable."
                )
            raise StorageError(f"Failed to verify bucket: {error_code}")
        except BotoCoreError as e:
            raise StorageError(f"Failed to verify bucket: {e}")
