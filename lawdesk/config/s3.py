"""
AWS S3 configuration for document storage
"""
import boto3
from botocore.config import Config
from botocore.exceptions import ClientError, NoCredentialsError
import logging

logger = logging.getLogger(__name__)


class S3Config:
    """S3 configuration and lazy client management."""

    def __init__(self):
        from .settings import settings

        self.aws_access_key_id = settings.aws_access_key_id
        self.aws_secret_access_key = settings.aws_secret_access_key
        self.aws_region = settings.aws_region
        self.bucket_name = settings.s3_bucket_name
        self.endpoint_url = settings.s3_endpoint_url

        self._client = None
        self._is_available = None

    @property
    def client(self):
        """Get or create S3 client"""
        if self._client is None:
            s3_config = Config(
                region_name=self.aws_region,
                signature_version='s3v4',
                s3={'addressing_style': 'virtual'},
            )
            endpoint = self.endpoint_url or f"https://s3.{self.aws_region}.amazonaws.com"

            try:
                self._client = boto3.client(
                    's3',
                    aws_access_key_id=self.aws_access_key_id,
                    aws_secret_access_key=self.aws_secret_access_key,
                    region_name=self.aws_region,
                    endpoint_url=endpoint,
                    config=s3_config
                )
            except Exception as e:
                logger.error(f"Failed to create S3 client: {e}")
                raise

            logger.info(f"S3 client configured with endpoint: {endpoint}")
        return self._client

    @property
    def public_base_url(self) -> str:
        """Base URL objects are reachable under"""
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}"
        return f"https://{self.bucket_name}.s3.{self.aws_region}.amazonaws.com"

    @property
    def is_available(self) -> bool:
        """Check if S3 is configured and the bucket is reachable"""
        if self._is_available is None:
            if not all([self.aws_access_key_id,
                        self.aws_secret_access_key,
                        self.bucket_name]):
                self._is_available = False
                logger.warning("S3 credentials or bucket name not configured")
                return self._is_available

            try:
                self.client.head_bucket(Bucket=self.bucket_name)
                self._is_available = True
                logger.info(f"S3 bucket '{self.bucket_name}' is accessible")
            except NoCredentialsError:
                self._is_available = False
                logger.error("AWS credentials not found")
            except ClientError as e:
                self._is_available = False
                logger.error(f"S3 bucket '{self.bucket_name}' not accessible: {e}")

        return self._is_available


# Global S3 configuration instance
s3_config = S3Config()
