import asyncio
import logging

from sqlalchemy.exc import OperationalError

from seo_reports.services.records import RecordLookup


class _UnavailableSession:
    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, query):
        raise OperationalError("SELECT", {}, Exception("database is locked"))


def test_semantic_lookup_outage_is_logged_as_error(caplog) -> None:
    lookup = RecordLookup(_UnavailableSession)

    with caplog.at_level(logging.ERROR, logger="seo_reports.services.records"):
        semantic = asyncio.run(lookup.get_semantic("https://example.com", "u1"))

    assert semantic is None
    assert any(r.levelno == logging.ERROR and "Semantic lookup failed" in r.getMessage() for r in caplog.records)


def test_scan_lookup_outage_is_an_upstream_error() -> None:
    lookup = RecordLookup(_UnavailableSession)

    result = asyncio.run(lookup.get_scan("https://example.com", None))

    assert result.error.status_code == 500
    assert result.error.message.startswith("Database error")
