from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_ENV: str = "local"
    APP_NAME: str = "ordering-platform"
    API_PREFIX: str = "/api/v1"

    DATABASE_URL: str = "sqlite+pysqlite:///./ordering.db"
    CORS_ORIGINS: str = "http://localhost:3000"

    JWT_SECRET: str = "change_me"
    JWT_TTL_MINUTES: int = 240

    LISTING_DEFAULT_PAGE_SIZE: int = 20
    LISTING_MAX_PAGE_SIZE: int = 1000
    LISTING_CONSISTENCY: str = "independent"  # independent | snapshot

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

settings = Settings()
