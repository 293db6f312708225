import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from crewledger.fastapi.core.logger import setup_logging
from crewledger.fastapi.dependencies.database import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    setup_logging(settings.LOG_LEVEL)

    # Initialize the database connection
    init_db(settings.DB_URL, echo=settings.SQL_ECHO)
    logger.info("%s %s started (bulk generation %s)",
                settings.APP_NAME, settings.APP_VERSION,
                "enabled" if settings.ENABLE_BULK_GENERATE else "disabled")

    yield

    logger.info("%s shutting down", settings.APP_NAME)
