import logging
from pathlib import Path
from urllib.parse import quote

import httpx

from seo_reports.core.config import Settings
from seo_reports.core.results import ErrorKind, Result

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


class LocalStorage:
    """Bucket directories on the local filesystem, served under PUBLIC_BASE_URL."""

    def __init__(self, settings: Settings):
        self.root = Path(settings.STORAGE_DIR)
        self.bucket = settings.STORAGE_BUCKET
        self.public_base_url = settings.PUBLIC_BASE_URL.rstrip("/")

    def _target(self, path: str) -> Path:
        target = (self.root / self.bucket / path).resolve()
        bucket_root = (self.root / self.bucket).resolve()
        if bucket_root not in target.parents:
            raise ValueError(f"Object path escapes the bucket: {path}")
        return target

    def public_url(self, path: str) -> str:
        return f"{self.public_base_url}/{self.bucket}/{path}"

    async def upload(self, path: str, data: bytes, content_type: str = PDF_CONTENT_TYPE) -> Result[str]:
        try:
            target = self._target(path)
            if target.exists():
                return Result.failure(ErrorKind.UPSTREAM, f"Object already exists: {path}")
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except (OSError, ValueError) as e:
            logger.error("Local upload failed for %s: %s", path, e)
            return Result.failure(ErrorKind.UPSTREAM, f"Failed to upload PDF: {e}")
        return Result.success(self.public_url(path))

    async def delete(self, path: str) -> Result[None]:
        try:
            self._target(path).unlink(missing_ok=True)
        except (OSError, ValueError) as e:
            logger.error("Local delete failed for %s: %s", path, e)
            return Result.failure(ErrorKind.UPSTREAM, str(e))
        return Result.success()


class HttpStorage:
    """Remote object storage speaking the storage REST API (object/{bucket}/{path})."""

    def __init__(self, settings: Settings, http: httpx.AsyncClient):
        if not settings.STORAGE_URL:
            raise ValueError("STORAGE_URL is required for the http storage backend")
        self.base_url = settings.STORAGE_URL.rstrip("/")
        self.bucket = settings.STORAGE_BUCKET
        self.http = http
        self.headers = {}
        if settings.STORAGE_KEY:
            self.headers = {
                "Authorization": f"Bearer {settings.STORAGE_KEY}",
                "apikey": settings.STORAGE_KEY,
            }

    def _object_path(self, path: str) -> str:
        segments = path.split("/")
        if any(s in ("", ".", "..") for s in segments):
            raise ValueError(f"Object path escapes the bucket: {path}")
        return "/".join(quote(s, safe="") for s in segments)

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/object/public/{self.bucket}/{self._object_path(path)}"

    async def upload(self, path: str, data: bytes, content_type: str = PDF_CONTENT_TYPE) -> Result[str]:
        headers = {**self.headers, "Content-Type": content_type, "x-upsert": "false"}
        try:
            object_path = self._object_path(path)
        except ValueError as e:
            logger.error("Rejected storage path %s: %s", path, e)
            return Result.failure(ErrorKind.UPSTREAM, f"Failed to upload PDF: {e}")
        try:
            response = await self.http.post(
                f"{self.base_url}/object/{self.bucket}/{object_path}", content=data, headers=headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Storage upload rejected for %s: %s %s", path, e.response.status_code, e.response.text)
            return Result.failure(ErrorKind.UPSTREAM, f"Failed to upload PDF: {e.response.text or e}")
        except httpx.HTTPError as e:
            logger.error("Storage upload failed for %s: %s", path, e)
            return Result.failure(ErrorKind.UPSTREAM, f"Failed to upload PDF: {e}")
        return Result.success(self.public_url(path))

    async def delete(self, path: str) -> Result[None]:
        try:
            object_path = self._object_path(path)
            response = await self.http.delete(f"{self.base_url}/object/{self.bucket}/{object_path}", headers=self.headers)
            response.raise_for_status()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Storage delete failed for %s: %s", path, e)
            return Result.failure(ErrorKind.UPSTREAM, str(e))
        return Result.success()


def build_storage(settings: Settings, http: httpx.AsyncClient):
    if settings.STORAGE_BACKEND == "http":
        return HttpStorage(settings, http)
    if settings.STORAGE_BACKEND == "local":
        return LocalStorage(settings)
    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")
