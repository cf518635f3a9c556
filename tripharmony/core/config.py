from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "TripHarmony API"
    API_PREFIX: str = "/api"
    DATABASE_URL: str = "sqlite+aiosqlite:///./tripharmony.db"
    SQL_ECHO: bool = False
    LOG_LEVEL: str = "INFO"

    # Время жизни кода входа; None - код действует до использования
    LOGIN_CODE_TTL_MINUTES: int | None = None

    TOKEN_NAME: str = "auth_token"
    ACCESS_TOKEN_EXPIRE_MINUTES: int | None = None
    TOKEN_PRUNE_INTERVAL_SECONDS: int = 3600

    # log | twilio
    NOTIFIER: str = "log"
    TWILIO_ACCOUNT_SID: str | None = None
    TWILIO_AUTH_TOKEN: str | None = None
    TWILIO_FROM: str | None = None

    class Config:
        from_attributes = True
        env_file = ".env"

settings = Settings()
