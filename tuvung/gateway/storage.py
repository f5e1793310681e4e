"""Blob storage for word images, word audio and lecture covers."""

from __future__ import annotations

import logging
import mimetypes
import uuid
from pathlib import PurePosixPath

import requests

from tuvung.core.config import settings

from .result import Err, GatewayResult, Ok

logger = logging.getLogger(__name__)


class SupabaseStorage:
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        access_token: str | None = None,
        http: requests.Session | None = None,
    ):
        self.base_url = (base_url or settings.supabase_base_url or "").rstrip("/")
        self.api_key = api_key or settings.SUPABASE_ANON_KEY or settings.SUPABASE_SERVICE_ROLE_KEY or ""
        self.access_token = access_token
        self.http = http or requests.Session()

    @property
    def buckets(self) -> set[str]:
        return {
            settings.WORD_IMAGE_BUCKET,
            settings.WORD_AUDIO_BUCKET,
            settings.LECTURE_COVER_BUCKET,
        }

    def upload_asset(
        self,
        data: bytes,
        filename: str,
        bucket: str,
        content_type: str | None = None,
    ) -> GatewayResult[str]:
        """Upload ``data`` under a random name and return its storage path."""

        if not self.base_url:
            return Err("Supabase URL is not configured", code="not_configured")

        suffix = PurePosixPath(filename or "").suffix
        object_name = f"{uuid.uuid4()}{suffix}"
        mime = content_type or mimetypes.guess_type(filename or "")[0] or "application/octet-stream"
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
            "Content-Type": mime,
            "cache-control": f"max-age={settings.STORAGE_CACHE_CONTROL}",
            "x-upsert": "false",
        }
        url = f"{self.base_url}/storage/v1/object/{bucket}/{object_name}"

        try:
            response = self.http.post(url, data=data, headers=headers, timeout=settings.HTTP_TIMEOUT_SECONDS)
        except requests.RequestException as exc:
            logger.error("Storage upload to '%s' failed: %s", bucket, exc)
            return Err(str(exc), code="network_error")

        if response.status_code >= 400:
            logger.warning("Storage upload rejected (%s): %s", response.status_code, response.text)
            return Err(response.text or "upload_failed", code=str(response.status_code))

        logger.info("Uploaded %s bytes to %s/%s", len(data), bucket, object_name)
        return Ok(object_name)

    def resolve_public_url(self, path: str | None, bucket: str) -> str | None:
        if not path:
            return None
        if path.startswith("http"):
            return path
        if not self.base_url:
            return None
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{path.lstrip('/')}"
