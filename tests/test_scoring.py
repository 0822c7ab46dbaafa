from seo_reports.core.schemas import ScanRecord
from seo_reports.utils import scoring


def _scan(**seo) -> ScanRecord:
    return ScanRecord.model_validate({"url": "https://example.com", "seo": seo})


def test_title_thresholds() -> None:
    assert scoring.check_title("").score == 0
    assert scoring.check_title("").status == scoring.ERROR
    assert scoring.check_title("x" * 20).score == 50
    assert scoring.check_title("x" * 70).score == 70
    assert scoring.check_title("x" * 45).status == scoring.VALID


def test_meta_description_thresholds() -> None:
    assert scoring.check_meta_description("").score == 0
    assert scoring.check_meta_description("x" * 100).score == 60
    assert scoring.check_meta_description("x" * 200).score == 70
    assert scoring.check_meta_description("x" * 140).score == 80


def test_headings_penalties() -> None:
    assert scoring.check_headings(_scan().seo).score == 0
    assert scoring.check_headings(_scan(h1=["Main"], h2=["A", "B"]).seo).score == 70
    assert scoring.check_headings(_scan(h2=["A"]).seo).score == 40
    assert scoring.check_headings(_scan(h1=["One", "Two"]).seo).score == 50
    assert scoring.check_headings(_scan(h1=["Main"], h2=["Same", "same"]).seo).score == 55


def test_alt_text_coverage() -> None:
    seo = _scan(images=[{"src": "a.png", "alt": "A"}, {"src": "b.png", "alt": ""}]).seo
    check = scoring.check_alt_text(seo)
    assert check.score == 50
    assert check.status == scoring.ERROR
    assert scoring.check_alt_text(_scan().seo).score == 100


def test_alt_text_uses_stored_counts() -> None:
    seo = _scan(totalImages=10, imagesWithoutAlt=1).seo
    assert seo.image_count == 10
    assert scoring.check_alt_text(seo).score == 90


def test_page_speed() -> None:
    scan = ScanRecord.model_validate({
        "url": "https://example.com",
        "performance": {"mobile": {"score": 0.95}, "desktop": {"score": 0.97}},
    })
    assert scoring.check_page_speed(scan).score == 100
    unmeasured = scoring.check_page_speed(_scan())
    assert unmeasured.status == scoring.WARNING
    assert unmeasured.message == "Not measured"


def test_overall_score_prefers_stored_score() -> None:
    assert scoring.overall_score(_scan(score=72.4)) == 72
    assert scoring.overall_score(_scan(score=140)) == 100


def test_overall_score_falls_back_to_field_checks() -> None:
    scan = _scan(title="x" * 45, metaDescription="x" * 100)
    assert scoring.overall_score(scan) == round((95 + 60) / 2)
    assert scoring.overall_score(_scan()) == 0


def test_predicted_score_is_capped() -> None:
    assert scoring.predicted_score(72) == 95
    assert scoring.predicted_score(40) == 70
    assert scoring.predicted_score(0) == 30


def test_needs_technical_fixes() -> None:
    good = _scan(score=90, title="x" * 45, metaDescription="x" * 140, h1=["Main"])
    assert not scoring.needs_technical_fixes(good)
    assert scoring.needs_technical_fixes(_scan(score=72))
    missing_alt = _scan(score=90, title="x" * 45, metaDescription="x" * 140, h1=["Main"],
                        images=[{"src": "a.png"}])
    assert scoring.needs_technical_fixes(missing_alt)


def test_collect_issues_keeps_stored_issues_first() -> None:
    scan = _scan(score=50, issues=[{"type": "Broken canonical"}])
    issues = scoring.collect_issues(scan)
    assert issues[0].label == "Broken canonical"
    assert any(i.label.startswith("Meta title") for i in issues)


def test_fractional_scores_are_rounded() -> None:
    scan = ScanRecord.model_validate({
        "url": "https://example.com",
        "seo": {"score": 72.6},
        "ai_analysis": {"score": 80.4, "searchIntent": "informational"},
    })
    assert scan.seo.score == 73
    assert scan.ai_analysis.score == 80

    fallback = ScanRecord.model_validate({
        "url": "https://example.com",
        "seo": {"title": "x" * 45},
        "ai_analysis": {"score": 79.6},
    })
    assert scoring.overall_score(fallback) == round((95 + 80) / 2)
