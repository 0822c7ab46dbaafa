# --- 1. Imports ---
import logging
from pathlib import Path
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from seo_reports.core.config import Settings
from seo_reports.core.logging import configure_logging
from seo_reports.db.database import build_engine, build_session_factory, create_tables
from seo_reports.integrations.plan_service import PlanServiceClient
from seo_reports.integrations.storage import build_storage
from seo_reports.routes import ping, records, reports

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the service around one Settings object. Everything that needs
    configuration (engine, storage, plan service) is created here and
    kept on app.state.
    """
    # --- 2. Settings & logging ---
    if settings is None:
        settings = Settings.from_env()
    configure_logging(settings.LOG_LEVEL)

    # --- 3. FastAPI App Instantiation ---
    app = FastAPI(title="SEO Report Composer", version="1.0.0")

    # --- 4. Middleware ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- 5. Service Initializations ---
    engine = build_engine(settings.DATABASE_URL)
    http_client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.http_client = http_client
    app.state.storage = build_storage(settings, http_client)
    app.state.plan_service = PlanServiceClient(settings, http_client)

    if not app.state.plan_service.enabled:
        logger.warning("PLAN_SERVICE_URL not set, plan limits are not enforced")

    # --- 6. Startup / Shutdown Events ---
    @app.on_event("startup")
    async def startup_event():
        logger.info("Running startup tasks...")
        if settings.STORAGE_BACKEND == "local":
            Path(settings.STORAGE_DIR, settings.STORAGE_BUCKET).mkdir(parents=True, exist_ok=True)

        await create_tables(engine)
        logger.info("Database tables checked/created.")
        logger.info("Startup complete.")

    @app.on_event("shutdown")
    async def shutdown_event():
        await http_client.aclose()
        await engine.dispose()
        logger.info("Shutdown complete.")

    # --- 7. Routers ---
    app.include_router(ping.router, prefix="/api", tags=["Health"])
    app.include_router(records.router, prefix="/api", tags=["Records"])
    app.include_router(reports.router, prefix="/api", tags=["Reports"])

    # --- 8. Serve stored PDFs (local backend only) ---
    if settings.STORAGE_BACKEND == "local":
        app.mount("/files", StaticFiles(directory=settings.STORAGE_DIR, check_dir=False), name="files")

    return app


app = create_app()


# --- 9. Main Entry Point ---
if __name__ == "__main__":
    import uvicorn
    logger.info("Starting Uvicorn server...")
    uvicorn.run(app, host="0.0.0.0", port=8080)
