from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://mentor.myapp.com,https://admin.myapp.com"
    CORS_ORIGINS: str = "*"

    # "remote" talks to the hosted data service over HTTP,
    # "sql" reads the same data from DATABASE_URL.
    DATA_SOURCE: Literal["remote", "sql"] = "remote"

    REMOTE_BASE_URL: str = "http://localhost:8080/api"
    REMOTE_API_TOKEN: str = ""
    REQUEST_TIMEOUT_SECONDS: float = 20.0

    DATABASE_URL: str = "sqlite:///./mentortrack.db"
    # Mentor whose roster the SQL source serves.
    MENTOR_ID: Optional[int] = None

    # Request pacing (milliseconds)
    SNAPSHOT_STAGGER_MS: int = 800
    EXPAND_DEBOUNCE_MS: int = 300
    WEEK_CHANGE_DELAY_MS: int = 500

    WARM_ON_STARTUP: bool = True

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
