from typing import List, Union
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings
from pydantic import validator


class Settings(BaseSettings):
    # Project settings
    PROJECT_NAME: str = "Feed Engine"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "Posts, favorites and favorite-annotated feeds"
    API_V1_STR: str = "/api/v1"

    # Security (tokens are issued by the identity provider, we only verify them)
    SECRET_KEY: str = "your-secret-key-here"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15

    # Database - prefer discrete Postgres settings; fallback to DATABASE_URL
    DATABASE_URL: str = ""  # Optional explicit URL; leave empty to assemble from fields below
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "feed_engine"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    DATABASE_DIALECT: str = "postgresql+asyncpg"  # e.g., postgresql+asyncpg, sqlite+aiosqlite

    # Migrations
    AUTO_MIGRATE_ON_STARTUP: bool = False

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Logging
    LOG_LEVEL: str = "INFO"

    # AWS S3 (post images)
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_S3_REGION: str = "ap-southeast-1"
    AWS_S3_BUCKET: str = ""
    AWS_S3_PUBLIC_URL: str = ""  # Optional CDN/base URL; if empty, build from region/bucket
    ASSET_NAMESPACE: str = "posts"

    # Draft limits
    MAX_TITLE_LENGTH: int = 200
    MAX_CONTENT_LENGTH: int = 10000
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024
    MAX_COMMENT_LENGTH: int = 2000

    @validator("BACKEND_CORS_ORIGINS", pre=True)
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()


# Helper to assemble DB URL when not explicitly provided
def get_database_url() -> str:
    if settings.DATABASE_URL:
        return settings.DATABASE_URL

    # URL-encode credentials to handle special characters like @ : /
    user = quote_plus(settings.POSTGRES_USER or "")
    password = quote_plus(settings.POSTGRES_PASSWORD or "")
    host = settings.POSTGRES_HOST
    port = settings.POSTGRES_PORT
    db = settings.POSTGRES_DB
    dialect = settings.DATABASE_DIALECT
    if password:
        cred = f"{user}:{password}@"
    elif user:
        cred = f"{user}@"
    else:
        cred = ""
    return f"{dialect}://{cred}{host}:{port}/{db}"
