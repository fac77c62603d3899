from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings
from pydantic import field_validator

class Settings(BaseSettings):
    PORT: int = 8000
    DEBUG: bool = False
    APP_ID: str = "netsume"
    ALLOWED_ORIGINS: str = ""
    ADMIN_UIDS: str = ""

    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_MAX_OUTPUT_TOKENS: int = 8192
    GEMINI_TEMPERATURE: float = 0.4
    GEMINI_TOP_P: float = 1.0
    GEMINI_TOP_K: int = 32
    GEMINI_TIMEOUT: float = 120.0
    GEMINI_RETRY_INITIAL: float = 1.0
    GEMINI_RETRY_MAXIMUM: float = 10.0
    MAX_DOCUMENT_BYTES: int = 10 * 1024 * 1024

    REDIS_URL: str = "redis://localhost:6379/0"
    MONGO_URI: str = "mongodb://localhost:27017"
    DB_NAME: str = "netsume"

    JWT_SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""
    UPLOAD_CHUNK_SIZE: int = 6_000_000

    AI_RATE_LIMIT: str = "20/minute"

    @field_validator("ALLOWED_ORIGINS", "ADMIN_UIDS")
    def parse_comma_list(cls, v: str) -> List[str]:
        return [item.strip() for item in v.split(",") if item.strip()] if v else []

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
