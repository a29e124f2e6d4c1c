from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SUPABASE_JWT_SECRET: str | None = None

    FRONTEND_ORIGIN_DEV: str | None = None
    FRONTEND_ORIGIN_PROD: str | None = None

    TOMORROW_IO_API_KEY: str | None = None
    UNSPLASH_ACCESS_KEY: str | None = None
    MAPBOX_ACCESS_TOKEN: str | None = None

    REDIS_URL: str | None = None
    RATE_LIMIT_DEFAULT: int = 100
    RATE_LIMIT_WINDOW: int = 3600

    R2_ACCOUNT_ID: str | None = None
    R2_ACCESS_KEY_ID: str | None = None
    R2_SECRET_ACCESS_KEY: str | None = None
    R2_BUCKET: str = "cdn"
    R2_PUBLIC_URL: str | None = None

    LOG_LEVEL: str = "INFO"

    PUBLIC_PATHS: list[str] = [
        "/auth/login",
        "/auth/health",
        "/weather/",
        "/health",
        "/ready",
        "/docs",
        "/redoc",
        "/favicon.ico",
        "/openapi.json",
    ]

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def frontend_origins(self) -> list[str]:
        """Configured frontend origins, normalised to match the browser Origin header."""
        raw = [self.FRONTEND_ORIGIN_DEV, self.FRONTEND_ORIGIN_PROD]
        return [o.strip().rstrip("/") for o in raw if o and o.strip()]

    @property
    def storage_configured(self) -> bool:
        return all([self.R2_ACCOUNT_ID, self.R2_ACCESS_KEY_ID, self.R2_SECRET_ACCESS_KEY])


settings = Settings()
