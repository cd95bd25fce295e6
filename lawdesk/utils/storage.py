"""
Document storage backends (S3 or local disk), selected by STORAGE_PROVIDER
"""
import os
import uuid
import logging
from dataclasses import dataclass
from functools import lru_cache
from io import BytesIO
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from botocore.exceptions import ClientError

from ..config.settings import settings
from ..config.s3 import s3_config

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a file cannot be stored or removed"""
    pass


@dataclass
class StoredFile:
    url: str
    key: str
    size: int


def generate_storage_key(folder: str, filename: str) -> str:
    """Unique key under ``folder`` keeping the original extension"""
    file_ext = os.path.splitext(filename or "")[1].lower()
    return f"{folder.strip('/') or 'general'}/{uuid.uuid4().hex}{file_ext}"


class StorageBackend:
    """Store bytes and hand back a URL; remove them again by key or URL."""

    def upload(self, content: bytes, folder: str, filename: str, mimetype: str) -> StoredFile:
        raise NotImplementedError

    def delete(self, key_or_url: str) -> bool:
        raise NotImplementedError

    def key_from_url(self, url: str) -> Optional[str]:
        raise NotImplementedError

    def _resolve_key(self, key_or_url: str) -> str:
        if key_or_url.startswith("http") or key_or_url.startswith("/"):
            key = self.key_from_url(key_or_url)
            if not key:
                raise StorageError(f"Cannot extract storage key from {key_or_url}")
            return key
        return key_or_url


class S3StorageBackend(StorageBackend):
    """Files live in the configured S3 bucket"""

    def __init__(self, config=None):
        self.config = config or s3_config

    def upload(self, content: bytes, folder: str, filename: str, mimetype: str) -> StoredFile:
        key = generate_storage_key(folder, filename)
        try:
            self.config.client.upload_fileobj(
                BytesIO(content),
                self.config.bucket_name,
                key,
                ExtraArgs={
                    'ContentType': mimetype or 'application/octet-stream',
                    'ServerSideEncryption': 'AES256',
                    'Metadata': {'original-filename': filename or ''},
                }
            )
        except ClientError as e:
            logger.error(f"Failed to upload file to S3: {e}")
            raise StorageError(f"Failed to upload file to S3: {e}")

        logger.info(f"File uploaded to S3: {key}")
        return StoredFile(url=f"{self.config.public_base_url}/{key}", key=key, size=len(content))

    def delete(self, key_or_url: str) -> bool:
        key = self._resolve_key(key_or_url)
        try:
            self.config.client.delete_object(Bucket=self.config.bucket_name, Key=key)
        except ClientError as e:
            logger.error(f"Failed to delete file from S3: {e}")
            raise StorageError(f"Failed to delete file from S3: {e}")

        logger.info(f"File deleted from S3: {key}")
        return True

    def key_from_url(self, url: str) -> Optional[str]:
        base = self.config.public_base_url.rstrip('/') + '/'
        if url.startswith(base):
            return url[len(base):] or None
        # path-style URLs: https://host/<bucket>/<key>
        path = urlparse(url).path.lstrip('/')
        prefix = f"{self.config.bucket_name}/"
        if path.startswith(prefix):
            return path[len(prefix):] or None
        return path or None


class LocalStorageBackend(StorageBackend):
    """Files live under UPLOAD_DIR and are served from UPLOAD_BASE_URL"""

    def __init__(self, upload_dir: str = None, base_url: str = None):
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.base_url = (base_url or settings.upload_base_url).rstrip('/')

    def upload(self, content: bytes, folder: str, filename: str, mimetype: str) -> StoredFile:
        key = generate_storage_key(folder, filename)
        path = self.upload_dir / key
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            logger.error(f"Failed to write file {path}: {e}")
            raise StorageError(f"Failed to store file locally: {e}")

        logger.info(f"File stored locally: {key}")
        return StoredFile(url=f"{self.base_url}/{key}", key=key, size=len(content))

    def delete(self, key_or_url: str) -> bool:
        key = self._resolve_key(key_or_url)
        path = self.upload_dir / key
        if not path.exists():
            logger.warning(f"Local file not found for deletion: {key}")
            return False

        path.unlink()
        logger.info(f"Local file deleted: {key}")
        return True

    def key_from_url(self, url: str) -> Optional[str]:
        path = urlparse(url).path
        base_path = urlparse(self.base_url).path.rstrip('/') + '/'
        if path.startswith(base_path):
            return path[len(base_path):] or None
        return None


@lru_cache(maxsize=1)
def get_storage_backend() -> StorageBackend:
    """Storage backend for this process, chosen once from settings"""
    provider = settings.storage_provider
    if provider == "s3":
        logger.info("File storage mode: S3")
        return S3StorageBackend()
    if provider == "local":
        logger.info("File storage mode: local disk")
        return LocalStorageBackend()
    raise ValueError(f"Unsupported STORAGE_PROVIDER: {provider} (expected s3 or local)")
