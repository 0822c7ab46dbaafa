from collections import Counter
from dataclasses import dataclass
from typing import List, Optional

from seo_reports.core.schemas import ScanRecord, SeoFields, SeoIssue

VALID = "valid"
WARNING = "warning"
ERROR = "error"

PREDICTED_UPLIFT = 30
PREDICTED_CEILING = 95
GOOD_SCORE = 80
FAIR_SCORE = 60


@dataclass
class Check:
    name: str
    status: str
    message: str
    score: int


def _status_for(score: float) -> str:
    if score >= GOOD_SCORE:
        return VALID
    if score >= FAIR_SCORE:
        return WARNING
    return ERROR


def check_title(title: str) -> Check:
    length = len(title.strip())
    if length == 0:
        return Check("Meta title", ERROR, "Missing page title", 0)
    if length < 30:
        return Check("Meta title", WARNING, f"{length} characters - too short", 50)
    if length > 60:
        return Check("Meta title", WARNING, f"{length} characters - too long", 70)
    return Check("Meta title", VALID, f"{length} characters - well optimised", 95)


def check_meta_description(description: str) -> Check:
    length = len(description.strip())
    if length == 0:
        return Check("Meta description", ERROR, "Missing meta description", 0)
    if length < 120:
        return Check("Meta description", WARNING, f"{length} characters - too short", 60)
    if length > 160:
        return Check("Meta description", WARNING, f"{length} characters - too long", 70)
    return Check("Meta description", VALID, f"{length} characters - well optimised", 80)


def check_headings(seo: SeoFields) -> Check:
    total = len(seo.h1) + len(seo.h2) + len(seo.h3)
    if total == 0:
        return Check("Headings", ERROR, "No headings found", 0)

    score = 70
    problems = []
    if not seo.h1:
        score -= 30
        problems.append("missing H1")
    elif len(seo.h1) > 1:
        score -= 20
        problems.append(f"{len(seo.h1)} H1 tags")

    texts = [h.strip().lower() for h in seo.h1 + seo.h2 + seo.h3 if h.strip()]
    duplicates = [t for t, n in Counter(texts).items() if n > 1]
    if duplicates:
        score -= 15
        problems.append(f"{len(duplicates)} duplicate headings")

    detail = ", ".join(problems) if problems else "good structure"
    return Check("Headings", _status_for(score), f"{total} headings - {detail}", score)


def check_alt_text(seo: SeoFields) -> Check:
    total = seo.image_count
    if total == 0:
        return Check("Image alt text", VALID, "No images", 100)
    missing = min(seo.missing_alt_count, total)
    coverage = round((total - missing) / total * 100)
    if missing:
        message = f"{total} images - {missing} missing alt text"
    else:
        message = f"{total} images - all have alt text"
    return Check("Image alt text", _status_for(coverage), message, coverage)


def check_page_speed(scan: ScanRecord) -> Check:
    perf = scan.performance
    mobile = perf.mobile.percent if perf and perf.mobile else None
    desktop = perf.desktop.percent if perf and perf.desktop else None
    if mobile is None and desktop is None:
        return Check("Page speed", WARNING, "Not measured", 0)

    measured = [s for s in (mobile, desktop) if s is not None]
    average = sum(measured) / len(measured)
    label = f"Mobile: {_fmt(mobile)}/100 - Desktop: {_fmt(desktop)}/100"
    if average >= 90:
        return Check("Page speed", VALID, f"{label} - excellent", 100)
    if average >= 70:
        return Check("Page speed", WARNING, f"{label} - needs improvement", 75)
    return Check("Page speed", ERROR, f"{label} - urgent optimisation", 40)


def _fmt(value: Optional[int]) -> str:
    return "N/A" if value is None else str(value)


def technical_checks(scan: ScanRecord) -> List[Check]:
    seo = scan.seo
    return [
        check_title(seo.title),
        check_meta_description(seo.meta_description),
        check_headings(seo),
        check_alt_text(seo),
        check_page_speed(scan),
    ]


def overall_score(scan: ScanRecord) -> int:
    """Stored score when the scan has one, otherwise a mean of the field checks."""
    if scan.seo.score is not None:
        return max(0, min(100, scan.seo.score))

    parts = []
    if scan.seo.title:
        parts.append(check_title(scan.seo.title).score)
    if scan.seo.meta_description:
        parts.append(check_meta_description(scan.seo.meta_description).score)
    if scan.ai_analysis and scan.ai_analysis.score:
        parts.append(scan.ai_analysis.score)
    return round(sum(parts) / len(parts)) if parts else 0


def predicted_score(score: int) -> int:
    return min(score + PREDICTED_UPLIFT, PREDICTED_CEILING)


def collect_issues(scan: ScanRecord) -> List[SeoIssue]:
    """Stored issues first, then one issue per failing field check."""
    issues = list(scan.seo.issues)
    for check in technical_checks(scan):
        if check.status != VALID and check.score < GOOD_SCORE:
            issues.append(SeoIssue(type=f"{check.name}: {check.message}", severity=check.status))
    return issues


def needs_technical_fixes(scan: ScanRecord) -> bool:
    if overall_score(scan) < GOOD_SCORE:
        return True
    if scan.seo.missing_alt_count > 0:
        return True
    return any(c.status == ERROR for c in technical_checks(scan))
