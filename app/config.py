from functools import lru_cache
from pathlib import Path
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
DEFAULT_SA_PATH = BASE_DIR / "serviceAccountKey.json"
load_dotenv(ENV_PATH)

class Settings(BaseSettings):
    #FIREBASE
    FIREBASE_API_KEY: str | None = None
    FIREBASE_PROJECT_ID: str | None = None
    GOOGLE_APPLICATION_CREDENTIALS: str = str(DEFAULT_SA_PATH)
    FIREBASE_SERVICE_ACCOUNT_JSON: str | None = None

    #HTTP
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"
    APP_BASE_URL: str = "http://localhost:3000"

    #Gemini
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_TIMEOUT: float = 30.0

    #Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
