from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    PROJECT_NAME: str = "Sistem Pelanggaran Siswa"
    API_VERSION: str = "1.0.0"
    ENV: str = "development"
    FRONTEND_URL: str = "http://localhost:5173"

    # Database
    DATABASE_URL: Optional[str] = None
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "violations"

    # Auth
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12
    FIRST_ADMIN_USERNAME: str = "admin"
    FIRST_ADMIN_PASSWORD: Optional[str] = None

    # Notification
    SCHOOL_NAME: str = "Sekolah"
    SCHOOL_TIMEZONE: str = "Asia/Jakarta"
    WHATSAPP_DRY_RUN: bool = True
    WHATSAPP_TOKEN: Optional[str] = None
    WHATSAPP_PHONE_ID: Optional[str] = None
    WHATSAPP_API_URL: str = "https://graph.facebook.com/v17.0"
    WHATSAPP_TIMEOUT: int = 10

    # Photos
    PHOTO_STORAGE: str = "local"  # local | s3
    PHOTO_UPLOAD_DIR: str = "uploads/photos"
    PHOTO_PUBLIC_PREFIX: str = "/uploads/photos"
    PHOTO_MAX_BYTES: int = 5 * 1024 * 1024
    THUMBNAIL_THRESHOLD_BYTES: int = 200 * 1024
    THUMBNAIL_MAX_SIZE: int = 320
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    AWS_DEFAULT_REGION: str = "ap-southeast-1"
    AWS_S3_BUCKET_NAME: str = "violation-evidence"


settings = Settings()
