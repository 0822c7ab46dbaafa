import math
import os
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from io import BytesIO
from typing import Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from seo_reports.core.schemas import ContentPlan, ContentPlanEntry, ScanRecord, SemanticRecord
from seo_reports.utils import scoring
from seo_reports.utils.text import pdf_safe, split_lines, truncate

PAGE_WIDTH, PAGE_HEIGHT = A4  # 595.28 x 841.89
MARGIN = 50
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
TOP = PAGE_HEIGHT - MARGIN
BOTTOM = 70
LINE_CHARS = 85

ROWS_PER_PAGE = 18
ROW_HEIGHT = 34
TITLE_BUDGET = 40
KEYWORD_BUDGET = 22
SECONDARY_BUDGET = 48

BRAND = colors.Color(0.2, 0.3, 0.8)
TEXT = colors.Color(0.2, 0.2, 0.2)
MUTED = colors.Color(0.45, 0.45, 0.45)
RULE = colors.Color(0.85, 0.86, 0.9)
HEADER_FILL = colors.Color(0.93, 0.94, 0.98)
GOOD = colors.Color(0, 0.65, 0)
FAIR = colors.Color(0.8, 0.6, 0)
BAD = colors.Color(0.8, 0, 0)

STATUS_COLORS = {
    scoring.VALID: GOOD,
    scoring.WARNING: FAIR,
    scoring.ERROR: BAD,
}

BASE_RECOMMENDATIONS = [
    "Optimise the meta title and meta description",
    "Improve the heading structure (H1, H2, H3)",
    "Add descriptive alt text to every image",
    "Improve page load speed",
    "Improve the mobile user experience",
]
AI_RECOMMENDATIONS = [
    "Add content covering the missing semantic topics",
    "Align page content with the dominant search intent",
]

FIX_TECHNICAL = "Fix critical technical SEO issues"
EXPAND_CONTENT = "Expand content depth and topical coverage"


@dataclass
class RenderedReport:
    content: bytes
    page_count: int
    sections: List[str] = field(default_factory=list)


def register_fonts(fonts_dir: Optional[str]) -> Tuple[str, str, bool]:
    """DejaVu when the TTFs are available (full Unicode), Helvetica otherwise."""
    if fonts_dir:
        body_path = os.path.join(fonts_dir, "DejaVuSans.ttf")
        bold_path = os.path.join(fonts_dir, "DejaVuSans-Bold.ttf")
        if os.path.exists(body_path) and os.path.exists(bold_path):
            pdfmetrics.registerFont(TTFont("DejaVuSans", body_path))
            pdfmetrics.registerFont(TTFont("DejaVuSans-Bold", bold_path))
            return "DejaVuSans", "DejaVuSans-Bold", True
    return "Helvetica", "Helvetica-Bold", False


def score_color(score: int):
    if score >= scoring.GOOD_SCORE:
        return GOOD
    if score >= scoring.FAIR_SCORE:
        return FAIR
    return BAD


class ReportCanvas:
    """
    Thin wrapper over a reportlab canvas: absolute-position drawing helpers,
    a page footer and a record of which section each page holds.
    """

    def __init__(self, title: str, generated_at: datetime, fonts_dir: Optional[str] = None):
        self.buffer = BytesIO()
        self.pdf = canvas.Canvas(self.buffer, pagesize=A4)
        self.pdf.setTitle(title)
        self.pdf.setAuthor("SEO Report Composer")
        self.body_font, self.bold_font, self.unicode = register_fonts(fonts_dir)
        self.generated_at = generated_at
        self.sections: List[str] = []

    @property
    def page_count(self) -> int:
        return len(self.sections)

    def clean(self, value) -> str:
        return pdf_safe(value, unicode_font=self.unicode)

    def text(self, x: float, y: float, value, size: float = 11, bold: bool = False, color=TEXT) -> None:
        self.pdf.setFont(self.bold_font if bold else self.body_font, size)
        self.pdf.setFillColor(color)
        self.pdf.drawString(x, y, self.clean(value))

    def text_right(self, x: float, y: float, value, size: float = 8, color=MUTED) -> None:
        self.pdf.setFont(self.body_font, size)
        self.pdf.setFillColor(color)
        self.pdf.drawRightString(x, y, self.clean(value))

    def heading(self, title: str, y: float = TOP, size: float = 20) -> float:
        self.text(MARGIN, y, title, size=size, bold=True, color=BRAND)
        self.pdf.setStrokeColor(RULE)
        self.pdf.setLineWidth(1)
        self.pdf.line(MARGIN, y - 10, PAGE_WIDTH - MARGIN, y - 10)
        return y - 40

    def bullets(self, x: float, y: float, items: Iterable[str], size: float = 12,
                step: float = 20, color=MUTED, marker: str = "•") -> float:
        if not self.unicode and marker == "•":
            marker = "-"
        for item in items:
            if y < BOTTOM:
                break
            self.text(x, y, f"{marker} {item}", size=size, color=color)
            y -= step
        return y

    def paragraph(self, x: float, y: float, value: str, size: float = 11, width: int = LINE_CHARS,
                  leading: float = 15, max_lines: Optional[int] = None, color=TEXT) -> float:
        lines = split_lines(value, width)
        if max_lines is not None and len(lines) > max_lines:
            lines = lines[:max_lines]
            lines[-1] = truncate(lines[-1], max(width - 3, 1))
        for line in lines:
            self.text(x, y, line, size=size, color=color)
            y -= leading
        return y

    def finish_page(self, section: str) -> None:
        page_number = self.page_count + 1
        self.pdf.setStrokeColor(RULE)
        self.pdf.setLineWidth(0.5)
        self.pdf.line(MARGIN, 42, PAGE_WIDTH - MARGIN, 42)
        stamp = self.generated_at.strftime("%Y-%m-%d %H:%M UTC")
        self.text(MARGIN, 30, f"Generated {stamp}", size=8, color=MUTED)
        self.text_right(PAGE_WIDTH - MARGIN, 30, f"Page {page_number}")
        self.pdf.showPage()
        self.sections.append(section)

    def render(self) -> RenderedReport:
        self.pdf.save()
        self.buffer.seek(0)
        return RenderedReport(
            content=self.buffer.getvalue(),
            page_count=self.page_count,
            sections=list(self.sections),
        )


# -------------------------------------------------------------
# Shared pages
# -------------------------------------------------------------
def _draw_cover(doc: ReportCanvas, title: str, subject: str, kind_label: str) -> None:
    pdf = doc.pdf
    pdf.setFillColor(BRAND)
    pdf.rect(0, PAGE_HEIGHT - 170, PAGE_WIDTH, 170, fill=1, stroke=0)
    doc.text(MARGIN, PAGE_HEIGHT - 100, title, size=32, bold=True, color=colors.white)

    y = PAGE_HEIGHT - 240
    for line in split_lines(subject, 40)[:2]:
        doc.text(MARGIN, y, line, size=20, color=colors.Color(0.3, 0.3, 0.3))
        y -= 28
    y -= 12
    doc.text(MARGIN, y, f"Report date: {doc.generated_at.strftime('%Y-%m-%d')}", size=14, color=MUTED)
    y -= 80
    doc.text(MARGIN, y, f"Report type: {kind_label}", size=16, color=TEXT)
    doc.finish_page("cover")


def _draw_contents(doc: ReportCanvas, items: Sequence[str]) -> None:
    y = doc.heading("Contents", size=24)
    for index, item in enumerate(items):
        doc.text(MARGIN + 20, y - index * 25, item, size=14, color=colors.Color(0.3, 0.3, 0.3))
    doc.finish_page("contents")


def _draw_table_grid(doc: ReportCanvas, top: float, row_count: int, row_height: float,
                     columns: Sequence[float]) -> None:
    pdf = doc.pdf
    pdf.setFillColor(HEADER_FILL)
    pdf.rect(MARGIN, top - row_height, CONTENT_WIDTH, row_height, fill=1, stroke=0)
    pdf.setStrokeColor(RULE)
    pdf.setLineWidth(0.5)
    bottom = top - row_height * (row_count + 1)
    for i in range(row_count + 2):
        y = top - i * row_height
        pdf.line(MARGIN, y, PAGE_WIDTH - MARGIN, y)
    for x in list(columns) + [PAGE_WIDTH - MARGIN]:
        pdf.line(x, top, x, bottom)


# -------------------------------------------------------------
# SEO report pages
# -------------------------------------------------------------
def hostname(url: str) -> str:
    parsed = urlparse(url if "://" in url else f"https://{url}")
    return parsed.hostname or url


def _draw_seo_summary(doc: ReportCanvas, scan: ScanRecord, score: int, issues) -> None:
    y = doc.heading("1. Executive summary")

    doc.text(MARGIN, y, f"Current SEO score: {score}/100", size=16, color=score_color(score))
    y -= 18
    pdf = doc.pdf
    bar_width = CONTENT_WIDTH * 0.6
    pdf.setStrokeColor(RULE)
    pdf.setFillColor(HEADER_FILL)
    pdf.rect(MARGIN, y - 10, bar_width, 10, fill=1, stroke=1)
    if score > 0:
        pdf.setFillColor(score_color(score))
        pdf.rect(MARGIN, y - 10, bar_width * score / 100.0, 10, fill=1, stroke=0)
    y -= 36

    doc.text(MARGIN, y, f"Scanned URL: {truncate(scan.url, 70)}", size=11, color=MUTED)
    y -= 18
    if scan.created_at:
        doc.text(MARGIN, y, f"Scan date: {scan.created_at.strftime('%Y-%m-%d')}", size=11, color=MUTED)
        y -= 18
    y -= 10

    doc.text(MARGIN, y, f"Issues found: {len(issues)}", size=14, color=colors.Color(0.3, 0.3, 0.3))
    y -= 40
    if issues:
        doc.text(MARGIN, y, "Key issues:", size=16, bold=True)
        y -= 25
        y = doc.bullets(MARGIN + 20, y, [truncate(i.label, 80) for i in issues[:5]], size=12, step=20)
    else:
        doc.text(MARGIN, y, "No significant SEO issues were detected.", size=12, color=GOOD)
    doc.finish_page("summary")


def _draw_technical(doc: ReportCanvas, scan: ScanRecord) -> None:
    y = doc.heading("2. Technical SEO analysis")
    seo = scan.seo

    doc.text(MARGIN, y, "Field checks", size=14, bold=True)
    y -= 26
    for check in scoring.technical_checks(scan):
        doc.text(MARGIN, y, check.name, size=11, bold=True)
        doc.text(MARGIN + 130, y, check.status.upper(), size=10, bold=True,
                 color=STATUS_COLORS.get(check.status, MUTED))
        doc.text(MARGIN + 200, y, truncate(check.message, 52), size=10, color=MUTED)
        y -= 22

    y -= 6
    doc.text(MARGIN, y, f"Headings - H1: {len(seo.h1)}   H2: {len(seo.h2)}   H3: {len(seo.h3)}", size=11)
    y -= 30

    doc.text(MARGIN, y, "Page title", size=12, bold=True)
    y -= 16
    y = doc.paragraph(MARGIN + 10, y, seo.title or "(missing)", size=10, leading=14, max_lines=2, color=MUTED)
    y -= 8
    doc.text(MARGIN, y, "Meta description", size=12, bold=True)
    y -= 16
    y = doc.paragraph(MARGIN + 10, y, seo.meta_description or "(missing)", size=10, leading=14,
                      max_lines=3, color=MUTED)
    y -= 14

    doc.text(MARGIN, y, "Performance", size=12, bold=True)
    y -= 18
    perf = scan.performance
    for label, probe in (("Mobile", perf.mobile if perf else None), ("Desktop", perf.desktop if perf else None)):
        value = f"{probe.percent}/100" if probe and probe.percent is not None else "N/A"
        doc.text(MARGIN + 10, y, f"{label} score: {value}", size=10, color=MUTED)
        y -= 16
    probe = (perf.mobile or perf.desktop) if perf else None
    if probe:
        for audit_id, label in (
            ("first-contentful-paint", "First Contentful Paint"),
            ("largest-contentful-paint", "Largest Contentful Paint"),
            ("total-blocking-time", "Total Blocking Time"),
            ("cumulative-layout-shift", "Cumulative Layout Shift"),
        ):
            shown = probe.display_value(audit_id)
            if shown:
                doc.text(MARGIN + 10, y, f"{label}: {shown}", size=10, color=MUTED)
                y -= 14
    y -= 14

    doc.text(MARGIN, y, "Images", size=12, bold=True)
    y -= 18
    doc.text(MARGIN + 10, y, f"Total images: {seo.image_count}   Missing alt text: {seo.missing_alt_count}",
             size=10, color=MUTED)
    y -= 16
    missing = [img.src for img in seo.images if not img.alt.strip() and img.src]
    doc.bullets(MARGIN + 20, y, [truncate(src, 75) for src in missing[:5]], size=9, step=13)
    doc.finish_page("technical")


def _draw_ai_semantic(doc: ReportCanvas, scan: ScanRecord, semantic: Optional[SemanticRecord]) -> None:
    y = doc.heading("3. AI semantic analysis")
    ai = scan.ai_analysis

    if semantic is None and ai is None:
        doc.paragraph(MARGIN, y, "No AI semantic analysis is available for this URL yet. Run a semantic "
                      "analysis to see topics, entities and search intent here.", size=12, color=MUTED)
        doc.finish_page("ai_semantic")
        return

    main_topic = semantic.main_topic if semantic else None
    intent = (semantic.search_intent if semantic else None) or (ai.search_intent if ai else None)
    if main_topic:
        doc.text(MARGIN, y, f"Main topic: {truncate(main_topic, 70)}", size=14)
        y -= 25
    if intent:
        doc.text(MARGIN, y, f"Search intent: {intent}", size=14)
        y -= 25
    if ai and ai.citation_potential:
        doc.text(MARGIN, y, f"AI citation potential: {truncate(ai.citation_potential, 60)}", size=14)
        y -= 25

    missing_topics = semantic.missing_topics if semantic else []
    if missing_topics:
        y -= 20
        doc.text(MARGIN, y, "Topics to add:", size=16, bold=True, color=colors.Color(0.8, 0.3, 0.3))
        y -= 25
        y = doc.bullets(MARGIN + 20, y, [truncate(t, 75) for t in missing_topics[:8]], size=12, step=18)

    entities = semantic.entities if semantic else []
    if entities:
        y -= 20
        doc.text(MARGIN, y, "Related entities:", size=16, bold=True, color=colors.Color(0.3, 0.6, 0.3))
        y -= 25
        y = doc.bullets(MARGIN + 20, y, [truncate(e, 75) for e in entities[:10]], size=11, step=16,
                        color=colors.Color(0.4, 0.4, 0.4))

    if ai and ai.semantic_gaps and y > BOTTOM + 40:
        y -= 16
        doc.text(MARGIN, y, "Semantic gaps:", size=13, bold=True)
        y -= 20
        y = doc.bullets(MARGIN + 20, y, [truncate(g, 75) for g in ai.semantic_gaps[:5]], size=10, step=15)

    if ai and ai.faq_suggestions and y > BOTTOM + 40:
        y -= 16
        doc.text(MARGIN, y, "FAQ suggestions:", size=13, bold=True)
        y -= 20
        doc.bullets(MARGIN + 20, y, [truncate(q, 75) for q in ai.faq_suggestions[:5]], size=10, step=15)
    doc.finish_page("ai_semantic")


def _draw_comparison(doc: ReportCanvas, scan: ScanRecord, semantic: Optional[SemanticRecord],
                     score: int, issue_count: int) -> None:
    y = doc.heading("4. Traditional SEO vs AI SEO")
    ai = scan.ai_analysis
    missing_topics = semantic.missing_topics if semantic else []
    entities = semantic.entities if semantic else []
    intent = (semantic.search_intent if semantic else None) or (ai.search_intent if ai else None)

    rows = [
        ("Focus", "Keywords, tags and markup", "Topics, entities and intent"),
        ("Score", f"{score}/100", f"{ai.score}/100" if ai and ai.score is not None else "N/A"),
        ("Search intent", "Not analysed", intent or "N/A"),
        ("Content gaps", f"{issue_count} technical issues", f"{len(missing_topics)} missing topics"),
        ("Structure", f"{len(scan.seo.h2)} H2 sections", f"{len(entities)} related entities"),
        ("Next step",
         "Fix technical issues" if scoring.needs_technical_fixes(scan) else "Maintain current setup",
         "Cover missing topics" if missing_topics else "Strengthen entity coverage"),
    ]
    columns = (MARGIN, MARGIN + 120, MARGIN + 310)
    row_height = 26
    _draw_table_grid(doc, y, len(rows), row_height, columns)

    header_y = y - row_height + 9
    for x, label in zip(columns, ("Aspect", "Traditional SEO", "AI SEO")):
        doc.text(x + 6, header_y, label, size=11, bold=True, color=BRAND)
    for index, row in enumerate(rows, start=1):
        row_y = y - (index + 1) * row_height + 9
        doc.text(columns[0] + 6, row_y, row[0], size=10, bold=True)
        doc.text(columns[1] + 6, row_y, truncate(row[1], 32), size=10, color=MUTED)
        doc.text(columns[2] + 6, row_y, truncate(row[2], 30), size=10, color=MUTED)

    y -= row_height * (len(rows) + 1) + 30
    doc.paragraph(MARGIN, y, "Traditional SEO makes a page crawlable and well described; AI SEO makes it "
                  "quotable by answer engines. Both scores improve together when technical fixes are "
                  "paired with content that covers the missing topics.", size=11, color=MUTED)
    doc.finish_page("comparison")


def _draw_seo_conclusion(doc: ReportCanvas, scan: ScanRecord, score: int, include_ai: bool,
                         number: int) -> None:
    y = doc.heading(f"{number}. Conclusion and recommendations")

    action = FIX_TECHNICAL if scoring.needs_technical_fixes(scan) else EXPAND_CONTENT
    doc.text(MARGIN, y, "Priority action:", size=14, bold=True)
    doc.text(MARGIN + 120, y, action, size=14, color=BAD if action == FIX_TECHNICAL else GOOD)
    y -= 30
    predicted = scoring.predicted_score(score)
    doc.text(MARGIN, y, f"Current score: {score}/100", size=13, color=score_color(score))
    y -= 20
    doc.text(MARGIN, y, f"Predicted score after fixes: {predicted}/100", size=13, color=score_color(predicted))
    y -= 40

    doc.text(MARGIN, y, "Recommendations", size=16, bold=True)
    y -= 25
    recommendations = BASE_RECOMMENDATIONS + (AI_RECOMMENDATIONS if include_ai else [])
    for index, rec in enumerate(recommendations):
        doc.text(MARGIN, y - index * 25, f"{index + 1}. {rec}", size=13, color=colors.Color(0.3, 0.3, 0.3))
    y -= len(recommendations) * 25 + 20

    doc.paragraph(MARGIN, y, f"Working through these items in order should lift {hostname(scan.url)} "
                  f"from {score} to around {predicted} points. Re-scan the site after each round of "
                  "changes to confirm the improvement.", size=11, color=MUTED)
    doc.finish_page("conclusion")


def build_seo_report(scan: ScanRecord, semantic: Optional[SemanticRecord], include_ai: bool,
                     generated_at: datetime, fonts_dir: Optional[str] = None) -> RenderedReport:
    """
    Draw the single-site SEO report: cover, contents, summary, technical,
    [AI semantic, comparison,] conclusion. One page per section.
    """
    domain = hostname(scan.url)
    doc = ReportCanvas(f"SEO Analysis Report - {domain}", generated_at, fonts_dir)
    score = scoring.overall_score(scan)
    issues = scoring.collect_issues(scan)

    contents = ["1. Executive summary", "2. Technical SEO analysis"]
    if include_ai:
        contents += ["3. AI semantic analysis", "4. Traditional SEO vs AI SEO"]
    conclusion_number = len(contents) + 1
    contents.append(f"{conclusion_number}. Conclusion and recommendations")

    kind_label = "SEO + AI semantic analysis" if include_ai else "Standard SEO analysis"
    _draw_cover(doc, "SEO Analysis Report", domain, kind_label)
    _draw_contents(doc, contents)
    _draw_seo_summary(doc, scan, score, issues)
    _draw_technical(doc, scan)
    if include_ai:
        _draw_ai_semantic(doc, scan, semantic)
        _draw_comparison(doc, scan, semantic, score, len(issues))
    _draw_seo_conclusion(doc, scan, score, include_ai, conclusion_number)
    return doc.render()


# -------------------------------------------------------------
# Content plan pages
# -------------------------------------------------------------
def plan_table_pages(entry_count: int) -> int:
    return math.ceil(entry_count / ROWS_PER_PAGE)


def _draw_plan_summary(doc: ReportCanvas, plan: ContentPlan) -> None:
    y = doc.heading("1. Plan summary")
    entries = plan.entries
    first = min(e.plan_date for e in entries)
    last = max(e.plan_date for e in entries)

    doc.text(MARGIN, y, f"Main topic: {truncate(plan.main_topic, 60)}", size=14)
    y -= 24
    doc.text(MARGIN, y, f"Planned articles: {len(entries)}", size=14)
    y -= 24
    doc.text(MARGIN, y, f"Schedule: {first.isoformat()} to {last.isoformat()}", size=14)
    y -= 44

    for title, counter in (
        ("By search intent", Counter(e.search_intent for e in entries)),
        ("By status", Counter(e.status for e in entries)),
    ):
        doc.text(MARGIN, y, title, size=16, bold=True)
        y -= 24
        y = doc.bullets(MARGIN + 20, y, [f"{name}: {count}" for name, count in counter.most_common()],
                        size=12, step=18)
        y -= 20
    doc.finish_page("summary")


def _draw_plan_table(doc: ReportCanvas, entries: Sequence[ContentPlanEntry], page_index: int,
                     page_total: int) -> None:
    y = doc.heading(f"2. Content calendar ({page_index}/{page_total})")
    columns = (MARGIN, MARGIN + 65, MARGIN + 300, MARGIN + 385, MARGIN + 445)
    labels = ("Date", "Title", "Intent", "Length", "Status")

    pdf = doc.pdf
    pdf.setFillColor(HEADER_FILL)
    pdf.rect(MARGIN, y - 6, CONTENT_WIDTH, 20, fill=1, stroke=0)
    for x, label in zip(columns, labels):
        doc.text(x + 4, y, label, size=10, bold=True, color=BRAND)
    y -= 26

    for entry in entries:
        doc.text(columns[0] + 4, y, entry.plan_date.isoformat(), size=9)
        doc.text(columns[1] + 4, y, truncate(entry.title, TITLE_BUDGET), size=9, bold=True)
        doc.text(columns[2] + 4, y, truncate(entry.search_intent, 13), size=9)
        doc.text(columns[3] + 4, y, truncate(entry.content_length, 10), size=9)
        doc.text(columns[4] + 4, y, truncate(entry.status, 11), size=9)
        secondary = ", ".join(entry.secondary_keywords) or "-"
        doc.text(columns[1] + 4, y - 12,
                 f"Keyword: {truncate(entry.main_keyword, KEYWORD_BUDGET)} | "
                 f"Secondary: {truncate(secondary, SECONDARY_BUDGET)}",
                 size=8, color=MUTED)
        pdf.setStrokeColor(RULE)
        pdf.setLineWidth(0.5)
        pdf.line(MARGIN, y - 20, PAGE_WIDTH - MARGIN, y - 20)
        y -= ROW_HEIGHT
    doc.finish_page("plan_table")


def _draw_plan_conclusion(doc: ReportCanvas, plan: ContentPlan) -> None:
    y = doc.heading("3. Next steps")
    entries = plan.entries
    first = min(e.plan_date for e in entries)
    last = max(e.plan_date for e in entries)
    weeks = max((last - first).days / 7.0, 1.0)
    per_week = len(entries) / weeks
    intent, intent_count = Counter(e.search_intent for e in entries).most_common(1)[0]
    done = sum(1 for e in entries if e.status == "completed")

    doc.text(MARGIN, y, f"Publishing cadence: {per_week:.1f} articles per week", size=14)
    y -= 24
    doc.text(MARGIN, y, f"Dominant intent: {intent} ({intent_count} of {len(entries)})", size=14)
    y -= 24
    doc.text(MARGIN, y, f"Completed: {done} of {len(entries)}", size=14)
    y -= 44

    steps = [
        "Brief writers with the main and secondary keywords for each article",
        "Publish in calendar order so supporting articles can link to earlier ones",
        "Link every article back to the main topic page",
        "Review rankings monthly and refresh articles that stall",
    ]
    if intent_count > len(entries) / 2:
        steps.append(f"Balance the plan: most articles target {intent} intent")
    doc.text(MARGIN, y, "Recommended actions", size=16, bold=True)
    y -= 25
    for index, step in enumerate(steps):
        doc.text(MARGIN, y - index * 25, f"{index + 1}. {step}", size=12, color=colors.Color(0.3, 0.3, 0.3))
    doc.finish_page("conclusion")


def build_content_plan_report(plan: ContentPlan, generated_at: datetime,
                              fonts_dir: Optional[str] = None) -> RenderedReport:
    """Cover, contents, summary, ceil(N / ROWS_PER_PAGE) calendar pages, next steps."""
    if not plan.entries:
        raise ValueError("content plan has no entries")

    doc = ReportCanvas(f"Content Plan - {plan.main_topic}", generated_at, fonts_dir)
    table_pages = plan_table_pages(len(plan.entries))
    first_table, last_table = 4, 3 + table_pages

    _draw_cover(doc, "Content Plan Report", plan.main_topic, f"Content plan - {len(plan.entries)} articles")
    _draw_contents(doc, [
        "1. Plan summary",
        f"2. Content calendar (pages {first_table}-{last_table})",
        "3. Next steps",
    ])
    _draw_plan_summary(doc, plan)
    for page in range(table_pages):
        chunk = plan.entries[page * ROWS_PER_PAGE:(page + 1) * ROWS_PER_PAGE]
        _draw_plan_table(doc, chunk, page + 1, table_pages)
    _draw_plan_conclusion(doc, plan)
    return doc.render()
