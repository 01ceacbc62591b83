import json

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str

    REDIS_URL: str = "redis://redis:6379/0"

    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    BACKEND_CORS_ORIGINS: str = '["http://localhost:5173","http://localhost:3000"]'

    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Charity CMS API"
    DEBUG: bool = False

    # Filesystem backend root (news attachments, gallery images)
    UPLOAD_DIR: str = "./uploads"

    # Cloudflare R2 storage (S3-compatible)
    R2_ACCOUNT_ID: str = ""
    R2_ACCESS_KEY_ID: str = ""
    R2_SECRET_ACCESS_KEY: str = ""
    R2_BUCKET_NAME: str = "charity-attachments"

    # Content store backend: "local" for development, "r2" for production
    STORAGE_BACKEND: str = "local"
    CONTENT_STORE_DIR: str = "./uploads/content-store"

    # Orphaned file reconciliation
    ORPHAN_CLEANUP_INTERVAL_MINUTES: int = 60
    ORPHAN_CLEANUP_BATCH_LIMIT: int = 50
    ORPHAN_CLEANUP_RUN_ON_STARTUP: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def cors_origins(self) -> list[str]:
        if isinstance(self.BACKEND_CORS_ORIGINS, str):
            try:
                parsed: list[str] = json.loads(self.BACKEND_CORS_ORIGINS)
                return parsed
            except json.JSONDecodeError:
                return ["http://localhost:5173", "http://localhost:3000"]
        return self.BACKEND_CORS_ORIGINS

    @property
    def r2_endpoint_url(self) -> str:
        return f"https://{self.R2_ACCOUNT_ID}.r2.cloudflarestorage.com"


settings = Settings()
