import os
import logging
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from counseltrack.core.config import Settings, settings as default_settings
from counseltrack.db.database import init_store
from counseltrack.records.store import CounselingStore
from counseltrack.auth import routes as auth_routes
from counseltrack.records import routes as record_routes
from counseltrack.records import dashboard_routes

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(store: Optional[CounselingStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the API around an explicit record store

    Without a store, one is created (and seeded from mock data unless
    SEED_MOCK_DATA is off). It is discarded when the process exits.
    """
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Counselor Interaction Tracker API",
        description="Students, contacts, counseling interactions, dashboards and reports.",
        version="1.0.0",
        debug=settings.DEBUG,
    )

    # CORS to allow external frontend(s)
    frontend_urls = [url for url in (settings.FRONTEND_URL, settings.FRONTEND_URL_8081) if url]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=frontend_urls,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include auth routes under /auth
    app.include_router(auth_routes.router, prefix="/auth", tags=["Auth"])
    app.include_router(record_routes.router, tags=["Records"])
    app.include_router(dashboard_routes.router, tags=["Dashboard"])

    init_store(app, settings, store)
    logger.info("Record store ready with %d interactions", app.state.store.stats.total_interactions)

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    @app.get("/")
    def root():
        return {"message": "API running successfully"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8080))
    uvicorn.run(app, host="0.0.0.0", port=port)
