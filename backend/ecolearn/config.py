from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "ecolearn-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "EcoLearn")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/ecolearn_dev")

    # Object storage (MinIO speaks the S3 API)
    s3_endpoint: str = os.getenv("S3_ENDPOINT", "http://minio:9000")
    s3_access_key: str = os.getenv("S3_ACCESS_KEY", "minioadmin")
    s3_secret_key: str = os.getenv("S3_SECRET_KEY", "minioadmin")
    s3_bucket_uploads: str = os.getenv("S3_BUCKET_UPLOADS", "ecolearn-uploads-dev")
    s3_public_base_url: str = os.getenv("S3_PUBLIC_BASE_URL", "")  # defaults to <endpoint>/<bucket>
    s3_connect_timeout_seconds: float = float(os.getenv("S3_CONNECT_TIMEOUT_SECONDS", "5"))
    s3_read_timeout_seconds: float = float(os.getenv("S3_READ_TIMEOUT_SECONDS", "30"))
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))

    # Admin credentials
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
    admin_token_ttl_min: int = int(os.getenv("ADMIN_TOKEN_TTL_MIN", "720"))

    # Key-value store for chat state
    kv_backend: str = os.getenv("KV_BACKEND", "memory")  # memory|redis
    redis_url: str = os.getenv("REDIS_URL", "redis://redis:6379/0")

    # Chat assistant
    chat_daily_message_limit: int = int(os.getenv("CHAT_DAILY_MESSAGE_LIMIT", "100"))
    gemini_api_key: str = os.getenv("GEMINI_API_KEY", "")
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
    gemini_timeout_seconds: float = float(os.getenv("GEMINI_TIMEOUT_SECONDS", "20"))

settings = Settings()
