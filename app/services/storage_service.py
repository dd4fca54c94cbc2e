"""Minimal Supabase Storage client used for curriculum cover images.

Only two calls are needed: upload an object, and build its public URL. Both
go through the Storage REST API with the service-role key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from app.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StorageError(Exception):
    code: str
    status_code: int = 502

    def __str__(self) -> str:  # pragma: no cover - human readable message
        return self.code


class StorageClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        service_key: Optional[str] = None,
        bucket: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        url = base_url or (str(settings.SUPABASE_URL) if settings.SUPABASE_URL else "")
        self.base_url = url.rstrip("/")
        self.service_key = service_key or settings.SUPABASE_SERVICE_ROLE_KEY
        self.bucket = bucket or settings.STORAGE_BUCKET
        self.timeout = timeout or settings.STORAGE_TIMEOUT_SECONDS

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.service_key)

    def _headers(self, content_type: str, upsert: bool) -> dict[str, str]:
        return {
            "apikey": self.service_key or "",
            "Authorization": f"Bearer {self.service_key}",
            "Content-Type": content_type,
            "cache-control": f"max-age={settings.STORAGE_CACHE_CONTROL}",
            "x-upsert": "true" if upsert else "false",
        }

    def upload(self, path: str, content: bytes, content_type: str, upsert: bool = True) -> str:
        """Store *content* at *path* in the bucket and return the object key."""
        if not self.is_configured:
            raise StorageError("storage_not_configured", status_code=503)

        url = f"{self.base_url}/storage/v1/object/{self.bucket}/{path.lstrip('/')}"
        try:
            response = requests.post(
                url,
                data=content,
                headers=self._headers(content_type, upsert),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Storage upload to %s failed: %s", path, exc)
            raise StorageError("storage_unreachable") from exc

        if response.status_code >= 400:
            logger.error("Storage upload rejected (%s): %s", response.status_code, response.text)
            raise StorageError("storage_upload_failed")

        return path

    def get_public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{path.lstrip('/')}"
