import secrets
from typing import Annotated, Any, Literal

from pydantic import AnyUrl, BeforeValidator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "Reels Express"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api"

    SECRET_KEY: str = secrets.token_urlsafe(32)
    # 15 minutes
    ACCESS_TOKEN_EXPIRE_SECONDS: int = 60 * 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    REFRESH_COOKIE_NAME: str = "refreshToken"

    FRONTEND_HOST: str = "http://localhost:5173"
    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS] + [
            self.FRONTEND_HOST
        ]

    # Either a full DATABASE_URL or the POSTGRES_* parts.
    DATABASE_URL: str | None = None
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "reels_express"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    FIRST_SUPERUSER: str = "admin@reelsexpress.com"
    FIRST_SUPERUSER_PASSWORD: str = "changethis"
    FIRST_SUPERUSER_NAME: str = "Admin"
    DEFAULT_QUOTA: int = 10

    # External providers
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    ELEVENLABS_BASE_URL: str = "https://api.elevenlabs.io"
    GOOGLE_SHEETS_BASE_URL: str = "https://docs.google.com/spreadsheets/d"
    HTTP_TIMEOUT_SECONDS: float = 60.0
    MODEL_DEFAULT: str = "anthropic/claude-3.5-sonnet"
    ELEVEN_MODEL_DEFAULT: str = "eleven_multilingual_v2"

    MOCK_MODE: bool = False
    CONFIG_CACHE_TTL_SECONDS: int = 5 * 60

    AUDIO_DIR: str = "audios"
    FFMPEG_PATH: str = "ffmpeg"
    FFPROBE_PATH: str = "ffprobe"


settings = Settings()  # type: ignore
