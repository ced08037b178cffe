import os
from typing import List, Dict

from dotenv import load_dotenv
from pydantic_settings import BaseSettings
from pydantic import computed_field

load_dotenv()


class Configs(BaseSettings):
    # base
    ENV: str = os.getenv("ENV", "dev")
    API: str = "/api"
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "taskflow-api"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    ENV_DATABASE_MAPPER: Dict[str, str] = {
        "prod": "taskflow",
        "stage": "stage-taskflow",
        "dev": "dev-taskflow",
        "test": "test-taskflow",
    }
    DB_ENGINE_MAPPER: Dict[str, str] = {
        "postgresql": "postgresql+asyncpg",
        "sqlite": "sqlite+aiosqlite",
    }

    PROJECT_ROOT: str = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

    # date
    DATETIME_FORMAT: str = "%Y-%m-%dT%H:%M:%S"
    DATE_FORMAT: str = "%Y-%m-%d"

    # auth
    SECRET_KEY: str = os.getenv("SECRET_KEY", "")
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 60 minutes * 24 hours * 7 days = 7 days
    OAUTH_STATE_EXPIRE_MINUTES: int = 10

    # oauth2 (GitHub)
    GITHUB_CLIENT_ID: str = os.getenv("GITHUB_CLIENT_ID", "")
    GITHUB_CLIENT_SECRET: str = os.getenv("GITHUB_CLIENT_SECRET", "")
    GITHUB_REDIRECT_URI: str = os.getenv(
        "GITHUB_REDIRECT_URI", "http://localhost:8000/api/v1/auth/oauth2/callback/github"
    )
    OAUTH2_REDIRECT_URI: str = os.getenv("OAUTH2_REDIRECT_URI", "http://localhost:5173/oauth/redirect")

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    # database
    DB: str = os.getenv("DB", "postgresql")
    DB_USER: str = os.getenv("DB_USER", "")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "")
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: str = os.getenv("DB_PORT", "5432")
    DB_ECHO: bool = False

    DATABASE_URI_FORMAT: str = "{db_engine}://{user}:{password}@{host}:{port}/{database}"

    # Support both DATABASE_URL (from env) and DATABASE_URI (constructed)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")

    # find query
    PAGE: int = 0
    PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100
    ORDERING: str = "-created_at"

    @computed_field
    @property
    def DB_ENGINE(self) -> str:
        return self.DB_ENGINE_MAPPER.get(self.DB, "postgresql+asyncpg")

    @computed_field
    @property
    def DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return self.DATABASE_URI_FORMAT.format(
            db_engine=self.DB_ENGINE,
            user=self.DB_USER,
            password=self.DB_PASSWORD,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.ENV_DATABASE_MAPPER.get(self.ENV, "dev-taskflow"),
        )

    class Config:
        case_sensitive = True


configs = Configs()
