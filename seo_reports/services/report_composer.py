import logging
import re
from datetime import datetime, timezone
from typing import Callable

from seo_reports.core.config import Settings
from seo_reports.core.results import ErrorKind, Result
from seo_reports.core.schemas import GeneratedReport, GenerateReportRequest
from seo_reports.utils.pdf_generator import (
    RenderedReport,
    build_content_plan_report,
    build_seo_report,
    hostname,
)
from seo_reports.utils.text import slugify

logger = logging.getLogger(__name__)

SEO_ANALYSIS = "seo_analysis"
AI_ENHANCED = "ai_enhanced"
CONTENT_PLAN = "content_plan"
REPORT_TYPES = (SEO_ANALYSIS, AI_ENHANCED, CONTENT_PLAN)
HOST_CHARS = re.compile(r"[a-z0-9.-]+")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def resolve_report_type(req: GenerateReportRequest) -> str:
    if req.report_type == CONTENT_PLAN:
        return CONTENT_PLAN
    if req.report_type == AI_ENHANCED or req.include_ai:
        return AI_ENHANCED
    return SEO_ANALYSIS


def validate_request(req: GenerateReportRequest) -> Result[str]:
    if req.report_type not in REPORT_TYPES:
        return Result.failure(ErrorKind.VALIDATION, f"Unknown report_type: {req.report_type}")
    if not req.user_id:
        return Result.failure(ErrorKind.VALIDATION, "user_id is required")
    kind = resolve_report_type(req)
    if kind == CONTENT_PLAN and not (req.main_topic or "").strip():
        return Result.failure(ErrorKind.VALIDATION, "main_topic is required for content plan reports")
    if kind != CONTENT_PLAN and not (req.url or req.scan_id):
        return Result.failure(ErrorKind.VALIDATION, "URL and user_id are required")
    return Result.success(kind)


class ReportComposer:
    """
    Generates one PDF report per call:
    plan check -> record lookup -> draw -> upload -> insert row -> count usage.
    """

    def __init__(self, settings: Settings, lookup, storage, reports, plans,
                 clock: Callable[[], datetime] = _utcnow):
        self.settings = settings
        self.lookup = lookup
        self.storage = storage
        self.reports = reports
        self.plans = plans
        self.clock = clock

    async def generate(self, req: GenerateReportRequest) -> Result[GeneratedReport]:
        checked = validate_request(req)
        if not checked.ok:
            return checked
        kind = checked.value

        logger.info("Checking PDF plan limits for user: %s", req.user_id)
        plan_check = await self.plans.check_limit(req.user_id, "pdf")
        if not plan_check.ok:
            plan_check.error.payload.update(limitExceeded=True, featureRequired="pdf")
            logger.info("PDF plan check rejected user %s: %s", req.user_id, plan_check.error.message)
            return Result(error=plan_check.error)
        if plan_check.value is not None:
            logger.info("PDF plan check passed for user: %s, remaining: %s",
                        req.user_id, plan_check.value.remaining_count)

        generated_at = self.clock()
        if kind == CONTENT_PLAN:
            rendered = await self._render_content_plan(req, generated_at)
        else:
            rendered = await self._render_seo(req, kind, generated_at)
        if not rendered.ok:
            return rendered
        document, source_label, scan_id, file_name = rendered.value
        logger.info("Rendered %s report for %s: %d pages", kind, source_label, document.page_count)

        path = f"reports/{req.user_id}/{file_name}"
        uploaded = await self.storage.upload(path, document.content)
        if not uploaded.ok:
            logger.error("Error uploading PDF %s: %s", path, uploaded.error.message)
            return uploaded
        file_url = uploaded.value

        saved = await self.reports.insert(
            user_id=req.user_id,
            scan_id=scan_id,
            url=source_label,
            file_url=file_url,
            file_name=file_name,
            report_type=kind,
            include_ai=kind == AI_ENHANCED,
            page_count=document.page_count,
        )
        if not saved.ok:
            logger.error("Error saving report record, removing %s", path)
            removed = await self.storage.delete(path)
            if not removed.ok:
                logger.error("Orphaned PDF left in storage: %s (%s)", path, removed.error.message)
            return saved

        logger.info("PDF report generated successfully: %s -> %s", file_name, file_url)
        if await self.plans.increment_usage(req.user_id):
            logger.info("Usage incremented for PDF generation, user: %s", req.user_id)
        else:
            logger.error("Failed to increment usage for PDF generation, user: %s", req.user_id)

        return Result.success(GeneratedReport(
            file_url=file_url,
            report_id=str(saved.value.id),
            file_name=file_name,
            pages=document.page_count,
            report_type=kind,
        ))

    async def _render_seo(self, req: GenerateReportRequest, kind: str, generated_at: datetime):
        found = await self.lookup.get_scan(req.url, req.scan_id)
        if not found.ok:
            logger.error("Error fetching scan data for %s: %s", req.url or req.scan_id, found.error.message)
            return found
        scan = found.value

        include_ai = kind == AI_ENHANCED
        semantic = await self.lookup.get_semantic(scan.url, req.user_id) if include_ai else None
        document: RenderedReport = build_seo_report(
            scan, semantic, include_ai, generated_at, fonts_dir=self.settings.FONTS_DIR
        )
        stamp = int(generated_at.timestamp() * 1000)
        host = hostname(scan.url)
        if not HOST_CHARS.fullmatch(host):
            host = slugify(host)
        file_name = f"seo-report-{host}-{stamp}.pdf"
        return Result.success((document, scan.url, scan.id, file_name))

    async def _render_content_plan(self, req: GenerateReportRequest, generated_at: datetime):
        topic = req.main_topic.strip()
        found = await self.lookup.get_content_plan(req.user_id, topic)
        if not found.ok:
            logger.error("Error fetching content plan '%s': %s", topic, found.error.message)
            return found

        document = build_content_plan_report(found.value, generated_at, fonts_dir=self.settings.FONTS_DIR)
        stamp = int(generated_at.timestamp() * 1000)
        file_name = f"content-plan-{slugify(topic)}-{stamp}.pdf"
        return Result.success((document, topic, None, file_name))
