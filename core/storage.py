# core/storage.py
"""Binary object storage for uploaded images and audio."""
from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Optional
import logging
import os
import re

import requests

from core.errors import OperationFailedError, StorageNotConfiguredError

logger = logging.getLogger(__name__)

DEFAULT_BUCKET = 'uploads'


def unique_file_name(file_name: str) -> str:
    """Prefix a sanitized name with the current time in milliseconds"""
    timestamp = int(datetime.now(UTC).timestamp() * 1000)
    sanitized = re.sub(r'[^a-zA-Z0-9.-]', '_', file_name or 'file')
    return f"{timestamp}_{sanitized}"


@dataclass
class StoredObject:
    public_url: str
    path: str


class ObjectStorage:
    """Interface of the storage capability handed to the upload adapter"""

    def is_configured(self) -> bool:
        raise NotImplementedError

    def store(self, data: bytes, file_name: str, content_type: str, folder: str) -> StoredObject:
        raise NotImplementedError

    def delete(self, path: str) -> bool:
        raise NotImplementedError


class SupabaseStorage(ObjectStorage):
    """Supabase Storage through its REST API.

    Objects are written to ``<bucket>/<folder>/<timestamp>_<name>`` and are
    served from the bucket's public URL.
    """

    def __init__(self, url: Optional[str], service_key: Optional[str], bucket: str = DEFAULT_BUCKET, timeout: float = 60):
        """
        Args:
            url: Project URL, e.g. https://xyz.supabase.co
            service_key: Service role key used for writes
            bucket: Bucket that receives every upload
            timeout: Seconds to wait for one request
        """
        self.url = (url or '').rstrip('/')
        self.service_key = service_key or ''
        self.bucket = bucket
        self.timeout = timeout

    @classmethod
    def from_env(cls) -> 'SupabaseStorage':
        storage = cls(
            os.getenv('SUPABASE_URL'),
            os.getenv('SUPABASE_SERVICE_ROLE_KEY'),
            os.getenv('SUPABASE_STORAGE_BUCKET', DEFAULT_BUCKET),
        )
        if not storage.is_configured():
            logger.warning("Supabase Storage is not configured. Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY.")
        return storage

    def is_configured(self) -> bool:
        return bool(self.url and self.service_key)

    def _headers(self, content_type: Optional[str] = None) -> dict:
        headers = {
            'Authorization': f'Bearer {self.service_key}',
            'apikey': self.service_key,
        }
        if content_type:
            headers['Content-Type'] = content_type
        return headers

    def public_url(self, path: str) -> str:
        return f"{self.url}/storage/v1/object/public/{self.bucket}/{path}"

    def store(self, data: bytes, file_name: str, content_type: str, folder: str) -> StoredObject:
        """Upload one object.

        Raises:
            StorageNotConfiguredError: If the URL or key is missing
            OperationFailedError: If the upload request fails
        """
        if not self.is_configured():
            raise StorageNotConfiguredError("Supabase Storage is not configured. Please check your environment variables.")
        path = f"{folder.strip('/')}/{unique_file_name(file_name)}"
        try:
            response = requests.post(
                f"{self.url}/storage/v1/object/{self.bucket}/{path}",
                data=data,
                headers=dict(self._headers(content_type or 'application/octet-stream'), **{'x-upsert': 'false'}),
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Supabase Storage upload of {path} failed: {e}")
            raise OperationFailedError("Failed to upload file to storage")
        logger.info(f"Stored {len(data)} bytes in {folder} as {path}")
        return StoredObject(public_url=self.public_url(path), path=path)

    def delete(self, path: str) -> bool:
        if not self.is_configured():
            raise StorageNotConfiguredError("Supabase Storage is not configured.")
        try:
            response = requests.delete(
                f"{self.url}/storage/v1/object/{self.bucket}",
                json={'prefixes': [path]},
                headers=self._headers(),
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Supabase Storage delete of {path} failed: {e}")
            raise OperationFailedError("Failed to delete file from storage")
        return True
