# jobboard/core/config.py
from typing import Optional
from pydantic import AnyUrl
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # App
    APP_ENV: str = "development"
    SECRET_KEY: str = "change-me"  # override in .env / secrets
    LOG_LEVEL: str = "INFO"
    # Session token expiry (minutes); env values arrive as strings and are coerced
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Redis (resume match cache)
    REDIS_URL: str = "redis://localhost:6379/0"

    # MongoDB
    MONGODB_URI: Optional[str] = "mongodb://localhost:27017/jobboard"
    MONGODB_DB: Optional[str] = "jobboard"

    # S3 / R2
    S3_PROVIDER: str = "cloudflare"
    S3_BUCKET: Optional[str] = None
    S3_ENDPOINT: Optional[AnyUrl] = None
    S3_REGION: Optional[str] = None
    S3_ACCESS_KEY: Optional[str] = None
    S3_SECRET_KEY: Optional[str] = None
    # when set, attachment/avatar urls are built as <base>/<key> instead of presigned
    S3_PUBLIC_BASE_URL: Optional[str] = None
    PRESIGNED_URL_EXPIRES: int = 7 * 24 * 3600

    # MinIO dev fallback
    MINIO_ENDPOINT: Optional[str] = None
    MINIO_ACCESS_KEY: Optional[str] = None
    MINIO_SECRET_KEY: Optional[str] = None

    # Live queries: 'poll' works against any deployment, 'change_stream' needs a replica set
    LIVE_QUERY_MODE: str = "poll"
    LIVE_QUERY_POLL_INTERVAL: float = 1.0

    # Resume match service
    RESUME_MATCH_URL: Optional[AnyUrl] = None
    RESUME_MATCH_API_KEY: Optional[str] = None
    RESUME_MATCH_TIMEOUT_SEC: int = 30
    RESUME_MATCH_RETRIES: int = 2
    RESUME_MATCH_BACKOFF_FACTOR: float = 0.5
    RESUME_MATCH_CACHE_TTL: int = 60 * 60 * 24

    # Pydantic v2 settings: read from .env file
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

# single shared settings instance
settings = Settings()
