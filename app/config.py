from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./tubely.db"

    # JWT
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Frontend URL for CORS
    frontend_url: str = "http://localhost:3000"

    # Public host/port used to build thumbnail URLs
    asset_host: str = "localhost"
    port: str = "8091"

    # Thumbnails: absolute path to assets folder (empty = backend/assets)
    assets_root: str = ""

    # Video staging folder for temp files (empty = OS temp dir)
    upload_temp_dir: str = ""

    # S3
    s3_bucket: str = ""
    s3_region: str = "us-east-1"
    s3_endpoint_url: str = ""  # e.g. http://localhost:9000 for MinIO; empty = AWS

    log_level: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
