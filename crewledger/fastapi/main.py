from typing import Optional
from fastapi import FastAPI

from crewledger.fastapi.core.config import Settings, load_settings
from crewledger.fastapi.core.lifespan import lifespan
from crewledger.fastapi.core.middleware import setup_cors
from crewledger.fastapi.core.routers import setup_routers


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application; tests pass their own settings."""
    settings = settings or load_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=settings.APP_DESCRIPTION,
        lifespan=lifespan
    )
    app.state.settings = settings

    setup_cors(app, settings)
    setup_routers(app)

    return app


app = create_app()
