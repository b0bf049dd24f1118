import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from .advocacy_routes import router as advocacy_router
from .analysis_queue import shutdown_analysis_queue
from .chat_routes import router as chat_router
from .config import get_settings
from .db.session import dispose_engine, get_engine, init_models
from .logging_config import configure_logging
from .profile_routes import router as profile_router
from .telemetry import recent_events


configure_logging()
logger = logging.getLogger(__name__)

settings_snapshot = get_settings()
logger.info("Chat provider configured: %s", settings_snapshot.chat_provider_configured)
logger.info("Database configured: %s", bool(settings_snapshot.database_url))


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    url = settings_snapshot.database_url or ""
    if url.startswith("sqlite"):
        init_models()
    yield
    shutdown_analysis_queue()
    dispose_engine()


app = FastAPI(title="Samvaad Backend", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(chat_router)
app.include_router(advocacy_router)
app.include_router(profile_router)


@app.get("/healthz")
def health() -> Dict[str, Any]:
    return {
        "status": "ok",
        "chat_provider": settings_snapshot.chat_provider_configured,
        "recent_analysis_failures": len(recent_events("analysis_failed")),
    }


@app.get("/healthz/database")
def database_health() -> Dict[str, str]:
    try:
        engine = get_engine()
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except Exception as exc:  # noqa: BLE001
        logger.warning("Database health check failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return {"status": "ok"}
