"""Recommendation review service entry point"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from config import settings
from services.logger_config import setup_logging
from database.session import async_engine, create_tables
from api.endpoints import router
from api.errors import register_exception_handlers

setup_logging()
logger = logging.getLogger(settings.LOGGER_NAME)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and the uploads root; release DB connections on shutdown."""
    logger.info(f"Starting {settings.APP_TITLE} v{settings.APP_VERSION}")

    await create_tables()
    Path(settings.UPLOADS_DIR).mkdir(parents=True, exist_ok=True)
    logger.info(
        f"Database ready, uploads in {settings.UPLOADS_DIR}, "
        f"LLM '{settings.LLM_MODEL_NAME}', overlap policy '{settings.DECISION_OVERLAP_POLICY}'"
    )

    yield

    await async_engine.dispose()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.APP_TITLE,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

register_exception_handlers(app)
app.include_router(router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
