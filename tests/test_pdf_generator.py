import math
from datetime import date, datetime, timedelta, timezone
from io import BytesIO

import pytest
from pypdf import PdfReader

from seo_reports.core.schemas import ContentPlan, ContentPlanEntry, ScanRecord, SemanticRecord
from seo_reports.utils.pdf_generator import (
    FIX_TECHNICAL,
    ROWS_PER_PAGE,
    build_content_plan_report,
    build_seo_report,
    hostname,
    plan_table_pages,
)

GENERATED_AT = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


def _scan(**overrides) -> ScanRecord:
    data = {
        "id": "scan-1",
        "url": "https://example.com/blog",
        "seo": {
            "score": 72,
            "title": "Example blog - guides for trail runners",
            "metaDescription": "Guides, reviews and training plans for trail runners of every level.",
            "h1": ["Trail running guides"],
            "h2": ["Shoes", "Training", "Nutrition"],
            "images": [{"src": "/img/hero.jpg", "alt": "Runner on a ridge"}, {"src": "/img/shoe.jpg", "alt": ""}],
        },
        "performance": {"mobile": {"score": 0.71}, "desktop": {"score": 0.9}},
    }
    data.update(overrides)
    return ScanRecord.model_validate(data)


def _plan(count: int) -> ContentPlan:
    start = date(2026, 1, 5)
    return ContentPlan(
        main_topic="Trail running",
        entries=[
            ContentPlanEntry(
                plan_date=start + timedelta(days=i),
                title=f"Article {i}: a long title about choosing trail running shoes for muddy courses",
                main_keyword="trail running shoes for beginners",
                secondary_keywords=["mud", "grip", "waterproof", "drop", "cushioning", "budget"],
                search_intent="informational" if i % 3 else "commercial",
                content_length="1500-2000",
            )
            for i in range(count)
        ],
    )


def _pages(content: bytes) -> int:
    return len(PdfReader(BytesIO(content)).pages)


def _text(content: bytes, page: int) -> str:
    return PdfReader(BytesIO(content)).pages[page].extract_text()


def test_seo_report_has_five_pages() -> None:
    report = build_seo_report(_scan(), None, False, GENERATED_AT)
    assert report.page_count == 5
    assert _pages(report.content) == 5
    assert report.sections == ["cover", "contents", "summary", "technical", "conclusion"]


def test_ai_report_has_seven_pages() -> None:
    semantic = SemanticRecord(
        url="https://example.com/blog",
        user_id="user-1",
        main_topic="Trail running",
        search_intent="informational",
        missing_topics=["Ultra distance pacing", "Trail etiquette"],
        entities=["Salomon", "UTMB"],
    )
    report = build_seo_report(_scan(), semantic, True, GENERATED_AT)
    assert report.page_count == 7
    assert _pages(report.content) == 7
    assert report.sections == [
        "cover", "contents", "summary", "technical", "ai_semantic", "comparison", "conclusion",
    ]


def test_ai_report_without_semantic_data_keeps_layout() -> None:
    report = build_seo_report(_scan(), None, True, GENERATED_AT)
    assert report.page_count == 7
    assert "No AI semantic analysis" in _text(report.content, 4)


def test_score_72_example_recommends_technical_fixes() -> None:
    report = build_seo_report(_scan(), None, False, GENERATED_AT)
    assert "ai_semantic" not in report.sections
    conclusion = _text(report.content, 4)
    assert FIX_TECHNICAL in conclusion
    assert "95/100" in conclusion


def test_sparse_scan_still_renders() -> None:
    report = build_seo_report(ScanRecord(url="example.org"), None, False, GENERATED_AT)
    assert report.page_count == 5


def test_same_scan_renders_identical_layout() -> None:
    first = build_seo_report(_scan(), None, True, GENERATED_AT)
    second = build_seo_report(_scan(), None, True, GENERATED_AT)
    assert first.page_count == second.page_count
    assert first.sections == second.sections


@pytest.mark.parametrize("count", [1, 17, 18, 19, 36, 40])
def test_content_plan_table_pages(count: int) -> None:
    report = build_content_plan_report(_plan(count), GENERATED_AT)
    table_pages = math.ceil(count / ROWS_PER_PAGE)
    assert plan_table_pages(count) == table_pages
    assert report.sections.count("plan_table") == table_pages
    assert report.page_count == 4 + table_pages
    assert _pages(report.content) == report.page_count


def test_content_plan_titles_are_truncated() -> None:
    report = build_content_plan_report(_plan(1), GENERATED_AT)
    table = _text(report.content, 3)
    assert "Article 0: a long title about choosing t..." in table
    assert "muddy courses" not in table


def test_empty_content_plan_is_rejected() -> None:
    with pytest.raises(ValueError):
        build_content_plan_report(ContentPlan(main_topic="Empty", entries=[]), GENERATED_AT)


def test_hostname() -> None:
    assert hostname("https://www.example.com/path?q=1") == "www.example.com"
    assert hostname("example.org") == "example.org"
