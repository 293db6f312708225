import os
from functools import lru_cache
from typing import List

from fastapi import Request
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application settings
    APP_NAME: str = "CrewLedger"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Piece-rate group payroll: daily logs, earnings and payslips"

    # Database URL (read from .env file)
    DATABASE_URL: str = ''
    SQL_ECHO: bool = False

    # Logging
    LOG_LEVEL: str = 'INFO'

    # Feature flags
    ENABLE_BULK_GENERATE: bool = True

    # Client URL for CORS
    CLIENT_URL: str = 'http://localhost:3000'
    ADDITIONAL_CORS_ORIGINS: str = ''

    model_config = SettingsConfigDict(env_file=".env", extra='ignore')

    @property
    def DB_URL(self) -> str:
        return self.DATABASE_URL or "sqlite:///./crewledger.db"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        origins = [
            self.CLIENT_URL,
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ]
        if self.ADDITIONAL_CORS_ORIGINS:
            origins.extend(origin.strip() for origin in self.ADDITIONAL_CORS_ORIGINS.split(","))
        # Remove empty strings and duplicates, keep order
        return list(dict.fromkeys(origin for origin in origins if origin))


class DevSettings(Settings):
    # Environment mode: 'dev' or 'prod'
    ENV_MODE: str = 'dev'
    LOG_LEVEL: str = 'DEBUG'


class ProdSettings(Settings):
    # Environment mode: 'dev' or 'prod'
    ENV_MODE: str = 'prod'

    # Production must point at an explicit database file or server
    @property
    def DB_URL(self) -> str:
        if not self.DATABASE_URL:
            raise RuntimeError("DATABASE_URL must be set when ENV_MODE=prod")
        return self.DATABASE_URL


def get_settings(env_mode: str = "dev") -> Settings:
    if env_mode == "dev":
        return DevSettings()
    return ProdSettings()


@lru_cache
def load_settings() -> Settings:
    """Settings for the current process, chosen by the ENV_MODE variable."""
    return get_settings(os.getenv("ENV_MODE", "dev"))


def get_app_settings(request: Request) -> Settings:
    """FastAPI dependency returning the settings the app was created with."""
    return request.app.state.settings
