import logging

from fastapi import APIRouter, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/ping")
async def ping(request: Request):
    database = True
    try:
        async with request.app.state.session_factory() as db:
            await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Database ping failed: %s", e)
        database = False
    return {"status": "ok", "database": database}
