import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from seo_reports.core.schemas import GenerateReportRequest, ReportOut
from seo_reports.db.models import Report
from seo_reports.services.records import RecordLookup, ReportRepository
from seo_reports.services.report_composer import ReportComposer

logger = logging.getLogger(__name__)

router = APIRouter()


def get_composer(request: Request) -> ReportComposer:
    state = request.app.state
    return ReportComposer(
        settings=state.settings,
        lookup=RecordLookup(state.session_factory),
        storage=state.storage,
        reports=ReportRepository(state.session_factory),
        plans=state.plan_service,
    )


def get_reports(request: Request) -> ReportRepository:
    return ReportRepository(request.app.state.session_factory)


def report_json(r: Report) -> dict:
    return ReportOut(
        id=str(r.id),
        user_id=r.user_id,
        scan_id=r.scan_id,
        url=r.url,
        file_url=r.file_url,
        file_name=r.file_name,
        report_type=r.report_type,
        include_ai=bool(r.include_ai),
        page_count=r.page_count,
        created_at=r.created_at.isoformat() if r.created_at else None,
    ).model_dump()


@router.post("/reports/generate")
async def generate_report(body: GenerateReportRequest, composer: ReportComposer = Depends(get_composer)):
    """
    Build a PDF report from a stored scan or content plan, upload it and
    record it. Errors come back as {error, ...} with 400/403/404/500.
    """
    logger.info("Generating PDF report for: url=%s user=%s include_ai=%s scan_id=%s type=%s",
                body.url, body.user_id, body.include_ai, body.scan_id, body.report_type)
    try:
        result = await composer.generate(body)
    except Exception as e:
        logger.exception("Error in generate report handler")
        return JSONResponse(status_code=500, content={"error": str(e)})

    if not result.ok:
        return JSONResponse(status_code=result.error.status_code, content=result.error.to_body())
    return result.value.model_dump()


@router.get("/reports", response_model=List[ReportOut])
async def list_reports(
    user_id: str = Query(..., description="Owner whose reports to list"),
    reports: ReportRepository = Depends(get_reports),
):
    """
    Returns the user's generated reports, most recent first.
    """
    try:
        return [report_json(r) for r in await reports.list_for_user(user_id)]
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Database error: {e}")


@router.get("/reports/{report_id}", response_model=ReportOut)
async def get_report(report_id: str, reports: ReportRepository = Depends(get_reports)):
    try:
        report = await reports.get(report_id)
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Database error: {e}")

    if not report:
        raise HTTPException(status_code=404, detail="Report not found")
    return report_json(report)
