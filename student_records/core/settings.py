from enum import Enum

from pydantic_settings import BaseSettings, SettingsConfigDict


class Env(str, Enum):
    DEV = "dev"
    HML = "hml"
    PROD = "prod"


class Settings(BaseSettings):
    APP_ENV: Env = Env.DEV
    DEBUG: bool = False

    DATABASE_URL: str = "sqlite:///./students.db"
    DB_POOL_PRE_PING: bool = True
    # Create missing tables on first connect (sqlite/dev); use alembic elsewhere
    DB_CREATE_TABLES: bool = False

    LOG_JSON: bool = True
    LOG_LEVEL: str = "INFO"

    ALLOWED_HOSTS: str = "localhost,127.0.0.1"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# cria instância global
settings = Settings()
