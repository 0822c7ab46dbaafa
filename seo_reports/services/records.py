import logging
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.future import select

from seo_reports.core.results import ErrorKind, Result
from seo_reports.core.schemas import ContentPlan, ContentPlanEntry, ScanRecord, SemanticRecord
from seo_reports.db.models import ContentPlanItem, Report, Scan, SemanticResult

logger = logging.getLogger(__name__)


def scan_to_record(row: Scan) -> ScanRecord:
    return ScanRecord.model_validate({
        "id": row.id,
        "url": row.url,
        "user_id": row.user_id,
        "seo": row.seo or {},
        "performance": row.performance,
        "ai_analysis": row.ai_analysis,
        "created_at": row.created_at,
    })


class RecordLookup:
    """Reads stored Scan / SemanticResult / ContentPlan rows as validated records."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def get_scan(self, url: Optional[str], scan_id: Optional[str]) -> Result[ScanRecord]:
        query = select(Scan)
        if url:
            query = query.where(Scan.url == url)
        if scan_id:
            query = query.where(Scan.id == scan_id)
        query = query.order_by(Scan.created_at.desc()).limit(1)

        try:
            async with self.session_factory() as db:
                row = (await db.execute(query)).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Scan lookup failed: %s", e)
            return Result.failure(ErrorKind.UPSTREAM, f"Database error: {e}")

        if row is None:
            return Result.failure(ErrorKind.NOT_FOUND, "Scan data not found")
        try:
            return Result.success(scan_to_record(row))
        except ValidationError as e:
            logger.error("Stored scan %s is malformed: %s", row.id, e)
            return Result.failure(ErrorKind.UPSTREAM, f"Stored scan {row.id} is malformed")

    async def get_semantic(self, url: str, user_id: str) -> Optional[SemanticRecord]:
        """Latest semantic analysis for the URL, or None. Absence is not an error."""
        query = (
            select(SemanticResult)
            .where(SemanticResult.url == url, SemanticResult.user_id == user_id)
            .order_by(SemanticResult.created_at.desc())
            .limit(1)
        )
        try:
            async with self.session_factory() as db:
                row = (await db.execute(query)).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Semantic lookup failed for %s, rendering without it: %s", url, e)
            return None
        if row is None:
            return None
        try:
            return SemanticRecord.model_validate({
                "id": row.id,
                "url": row.url,
                "user_id": row.user_id,
                "main_topic": row.main_topic,
                "search_intent": row.search_intent,
                "missing_topics": row.missing_topics or [],
                "entities": row.entities or [],
            })
        except ValidationError as e:
            logger.warning("Stored semantic result %s is malformed: %s", row.id, e)
            return None

    async def get_content_plan(self, user_id: str, main_topic: str) -> Result[ContentPlan]:
        query = (
            select(ContentPlanItem)
            .where(ContentPlanItem.user_id == user_id, ContentPlanItem.main_topic == main_topic)
            .order_by(ContentPlanItem.plan_date.asc(), ContentPlanItem.id.asc())
        )
        try:
            async with self.session_factory() as db:
                rows = (await db.execute(query)).scalars().all()
        except SQLAlchemyError as e:
            logger.error("Content plan lookup failed: %s", e)
            return Result.failure(ErrorKind.UPSTREAM, f"Database error: {e}")

        if not rows:
            return Result.failure(ErrorKind.NOT_FOUND, "Content plan not found")
        try:
            entries = [
                ContentPlanEntry(
                    plan_date=r.plan_date,
                    title=r.title,
                    main_keyword=r.main_keyword,
                    secondary_keywords=r.secondary_keywords or [],
                    search_intent=r.search_intent,
                    content_length=r.content_length or "",
                    status=r.status,
                )
                for r in rows
            ]
        except ValidationError as e:
            logger.error("Stored content plan for %s is malformed: %s", main_topic, e)
            return Result.failure(ErrorKind.UPSTREAM, "Stored content plan is malformed")
        return Result.success(ContentPlan(main_topic=main_topic, entries=entries))


class ReportRepository:
    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def insert(self, **fields) -> Result[Report]:
        try:
            async with self.session_factory() as db:
                report = Report(**fields)
                db.add(report)
                await db.commit()
                await db.refresh(report)
                return Result.success(report)
        except SQLAlchemyError as e:
            logger.error("Report insert failed: %s", e)
            return Result.failure(ErrorKind.UPSTREAM, f"Failed to save report record: {e}")

    async def list_for_user(self, user_id: str) -> List[Report]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(Report).where(Report.user_id == user_id).order_by(Report.created_at.desc())
            )
            return list(result.scalars().all())

    async def get(self, report_id: str) -> Optional[Report]:
        async with self.session_factory() as db:
            result = await db.execute(select(Report).where(Report.id == report_id))
            return result.scalar_one_or_none()
