from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Base
    APP_ENV: str = "dev"  # dev | test | prod
    APP_NAME: str = "LearnLang API"
    APP_VERSION: str = "0.1.0"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,https://learnlang.app,https://www.learnlang.app"

    # Security (admin endpoints only)
    API_KEY: str = "change_me"

    # Database
    DATABASE_URL: str = "sqlite:///./learnlang.db"
    DB_CONNECT_TIMEOUT: int = 5  # seconds
    DB_STATEMENT_TIMEOUT_MS: int = 5000  # postgres only
    DB_ECHO: bool = False

    # Storage
    UPLOAD_DIR: str = "./uploads"
    MAX_UPLOAD_MB: int = 10

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_MB * 1024 * 1024

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
