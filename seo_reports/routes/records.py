import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from seo_reports.core.schemas import ContentPlanIn, ScanIn, SemanticResultIn
from seo_reports.db.database import get_db
from seo_reports.db.models import ContentPlanItem, Scan, SemanticResult
from seo_reports.utils.scoring import overall_score

logger = logging.getLogger(__name__)

router = APIRouter()


# -------------------------------------------------------------
# Ingestion
# Bodies are validated by pydantic before anything is written, so
# the report builder only ever reads well-formed rows.
# -------------------------------------------------------------
@router.post("/scans", status_code=201)
async def create_scan(body: ScanIn, db=Depends(get_db)):
    scan = Scan(
        url=body.url,
        user_id=body.user_id,
        seo=body.seo.model_dump(by_alias=True),
        performance=body.performance.model_dump() if body.performance else None,
        ai_analysis=body.ai_analysis.model_dump(by_alias=True) if body.ai_analysis else None,
    )
    if body.id:
        scan.id = body.id
    try:
        db.add(scan)
        await db.commit()
        await db.refresh(scan)
    except SQLAlchemyError as e:
        await db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {e}")

    logger.info("Stored scan %s for %s", scan.id, scan.url)
    return {"id": scan.id, "url": scan.url, "score": overall_score(body)}


@router.post("/semantic-results", status_code=201)
async def create_semantic_result(body: SemanticResultIn, db=Depends(get_db)):
    row = SemanticResult(
        url=body.url,
        user_id=body.user_id,
        main_topic=body.main_topic,
        search_intent=body.search_intent,
        missing_topics=body.missing_topics,
        entities=body.entities,
    )
    if body.id:
        row.id = body.id
    try:
        db.add(row)
        await db.commit()
        await db.refresh(row)
    except SQLAlchemyError as e:
        await db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {e}")
    return {"id": row.id}


@router.post("/content-plans", status_code=201)
async def create_content_plan(body: ContentPlanIn, db=Depends(get_db)):
    """
    Replaces the user's plan for main_topic with the posted items.
    """
    if not body.items:
        raise HTTPException(status_code=400, detail="items must not be empty")

    topic = body.main_topic.strip()
    try:
        await db.execute(
            delete(ContentPlanItem).where(
                ContentPlanItem.user_id == body.user_id,
                ContentPlanItem.main_topic == topic,
            )
        )
        db.add_all([
            ContentPlanItem(
                user_id=body.user_id,
                main_topic=topic,
                plan_date=item.plan_date,
                title=item.title,
                main_keyword=item.main_keyword,
                secondary_keywords=item.secondary_keywords,
                search_intent=item.search_intent,
                content_length=item.content_length,
                status=item.status,
            )
            for item in body.items
        ])
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {e}")

    logger.info("Stored content plan '%s' for user %s: %d items", topic, body.user_id, len(body.items))
    return {"main_topic": topic, "inserted": len(body.items)}
