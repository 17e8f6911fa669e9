"""
S3 client for attachment storage.
"""
import boto3
from botocore.exceptions import ClientError, BotoCoreError
from typing import Optional, Tuple
from io import BytesIO

from core.logger import logger


class S3Client:
    """S3 client for storing and retrieving detainee attachments in a single bucket."""

    def __init__(
        self,
        bucket_name: str,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        region_name: str = "us-east-1",
        endpoint_url: Optional[str] = None,  # For S3-compatible services (MinIO, etc.)
        auto_create_bucket: bool = True,
        presigned_url_expiry: int = 3600
    ):
        """
        Initialize S3 client.

        Args:
            bucket_name: Bucket holding all attachments
            aws_access_key_id: AWS access key (or from env)
            aws_secret_access_key: AWS secret key (or from env)
            region_name: AWS region
            endpoint_url: Custom endpoint URL (for MinIO, etc.)
            auto_create_bucket: Create the bucket if it doesn't exist
            presigned_url_expiry: Lifetime of generated download URLs in seconds
        """
        self.bucket_name = bucket_name
        self.region_name = region_name
        self.auto_create_bucket = auto_create_bucket
        self.presigned_url_expiry = presigned_url_expiry

        client_kwargs = {
            "region_name": region_name
        }

        if aws_access_key_id:
            client_kwargs["aws_access_key_id"] = aws_access_key_id
        if aws_secret_access_key:
            client_kwargs["aws_secret_access_key"] = aws_secret_access_key
        if endpoint_url:
            client_kwargs["endpoint_url"] = endpoint_url

        self.s3_client = boto3.client("s3", **client_kwargs)
        self._ensure_bucket_exists()

        logger.info(f"S3 client initialized (bucket: {bucket_name})")

    def _ensure_bucket_exists(self):
        """Ensure bucket exists, create if it doesn't."""
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
            logger.debug(f"Bucket {self.bucket_name} exists")
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code not in ("404", "NoSuchBucket") or not self.auto_create_bucket:
                logger.error(f"Error checking bucket {self.bucket_name}: {e}")
                raise
            if self.region_name == "us-east-1":
                self.s3_client.create_bucket(Bucket=self.bucket_name)
            else:
                self.s3_client.create_bucket(
                    Bucket=self.bucket_name,
                    CreateBucketConfiguration={"LocationConstraint": self.region_name}
                )
            logger.info(f"Created bucket: {self.bucket_name}")

    # Blob store interface

    def put(self, data: bytes, key: str, content_type: Optional[str] = None) -> str:
        """
        Upload bytes to S3.

        Returns:
            Stable reference "s3://bucket/key"
        """
        extra_args = {}
        if content_type:
            extra_args["ContentType"] = content_type
        try:
            self.s3_client.upload_fileobj(BytesIO(data), self.bucket_name, key, ExtraArgs=extra_args)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to upload file object to S3: {e}")
            raise

        url = f"s3://{self.bucket_name}/{key}"
        logger.info(f"Uploaded file object to S3: {url}")
        return url

    def delete(self, reference: str) -> None:
        bucket, key = self._split(reference)
        try:
            self.s3_client.delete_object(Bucket=bucket, Key=key)
            logger.info(f"Deleted file from S3: {bucket}/{key}")
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to delete file from S3: {e}")
            raise

    def read(self, reference: str) -> bytes:
        bucket, key = self._split(reference)
        file_obj = BytesIO()
        self.s3_client.download_fileobj(bucket, key, file_obj)
        return file_obj.getvalue()

    def url_for(self, reference: str) -> Optional[str]:
        """Presigned HTTPS URL for a stored reference, or None on error."""
        bucket, key = self._split(reference)
        if not key:
            return None
        try:
            return self.s3_client.generate_presigned_url(
                "get_object",
                Params={"Bucket": bucket, "Key": key},
                ExpiresIn=self.presigned_url_expiry,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to generate presigned URL: {e}")
            return None

    def _split(self, reference: str) -> Tuple[str, str]:
        """'s3://bucket/key' or bare 'key' -> (bucket, key)."""
        ref = (reference or "").strip()
        if ref.startswith("s3://"):
            parts = ref[len("s3://"):].split("/", 1)
            return parts[0], parts[1] if len(parts) > 1 else ""
        return self.bucket_name, ref
