import asyncio
from pathlib import Path

import httpx
import pytest

from seo_reports.core.config import Settings
from seo_reports.integrations.storage import HttpStorage, LocalStorage, build_storage


def test_local_upload_and_delete(tmp_path: Path) -> None:
    storage = LocalStorage(Settings(STORAGE_DIR=str(tmp_path), PUBLIC_BASE_URL="http://localhost:8000/files/"))

    result = asyncio.run(storage.upload("reports/u1/a.pdf", b"%PDF-1.4"))

    assert result.ok
    assert result.value == "http://localhost:8000/files/pdf-reports/reports/u1/a.pdf"
    target = tmp_path / "pdf-reports" / "reports" / "u1" / "a.pdf"
    assert target.read_bytes() == b"%PDF-1.4"

    assert asyncio.run(storage.delete("reports/u1/a.pdf")).ok
    assert not target.exists()


def test_local_upload_never_overwrites(tmp_path: Path) -> None:
    storage = LocalStorage(Settings(STORAGE_DIR=str(tmp_path)))
    asyncio.run(storage.upload("reports/u1/a.pdf", b"first"))

    result = asyncio.run(storage.upload("reports/u1/a.pdf", b"second"))

    assert result.error.status_code == 500
    assert (tmp_path / "pdf-reports" / "reports" / "u1" / "a.pdf").read_bytes() == b"first"


def test_local_upload_rejects_paths_outside_bucket(tmp_path: Path) -> None:
    storage = LocalStorage(Settings(STORAGE_DIR=str(tmp_path)))
    result = asyncio.run(storage.upload("../escape.pdf", b"x"))
    assert not result.ok
    assert not (tmp_path / "escape.pdf").exists()


def _http_run(handler, call):
    settings = Settings(STORAGE_BACKEND="http", STORAGE_URL="https://store.test/storage/v1", STORAGE_KEY="k")

    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            return await call(build_storage(settings, http))

    return asyncio.run(go())


def test_http_upload() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"Key": "pdf-reports/reports/u1/a.pdf"})

    result = _http_run(handler, lambda s: s.upload("reports/u1/a.pdf", b"%PDF"))

    assert result.value == "https://store.test/storage/v1/object/public/pdf-reports/reports/u1/a.pdf"
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://store.test/storage/v1/object/pdf-reports/reports/u1/a.pdf"
    assert request.headers["x-upsert"] == "false"
    assert request.headers["Content-Type"] == "application/pdf"
    assert request.headers["Authorization"] == "Bearer k"
    assert request.content == b"%PDF"


def test_http_upload_rejected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, text="Bucket not found")

    result = _http_run(handler, lambda s: s.upload("reports/u1/a.pdf", b"%PDF"))

    assert result.error.status_code == 500
    assert "Bucket not found" in result.error.message


def test_http_delete() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    assert _http_run(handler, lambda s: s.delete("reports/u1/a.pdf")).ok
    assert seen[0].method == "DELETE"


def test_build_storage_validates_backend() -> None:
    with pytest.raises(ValueError):
        build_storage(Settings(STORAGE_BACKEND="ftp"), None)
    with pytest.raises(ValueError):
        build_storage(Settings(STORAGE_BACKEND="http"), None)


def test_http_storage_rejects_traversal() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    upload = _http_run(handler, lambda s: s.upload("reports/../../other-bucket/a.pdf", b"%PDF"))
    assert upload.error.status_code == 500
    assert "escapes the bucket" in upload.error.message

    assert not _http_run(handler, lambda s: s.delete("reports/u1/../../a.pdf")).ok


def test_http_storage_quotes_path_segments() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    result = _http_run(handler, lambda s: s.upload("reports/user one?/a.pdf", b"%PDF"))

    assert result.value.endswith("/object/public/pdf-reports/reports/user%20one%3F/a.pdf")
    assert seen[0].url.raw_path == b"/storage/v1/object/pdf-reports/reports/user%20one%3F/a.pdf"
