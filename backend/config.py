"""App configuration from environment."""
from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

# Load .env from the backend folder (where this file lives), not from cwd
_BACKEND_DIR = Path(__file__).resolve().parent
_ENV_FILE = _BACKEND_DIR / ".env"
load_dotenv(_ENV_FILE)


class Settings(BaseSettings):
    """Settings loaded from environment."""

    openai_api_key: str = ""
    openai_model: str = "gpt-4-turbo-preview"
    openai_temperature: float = 0.7
    openai_max_tokens: int = 4000
    database_url: str = "sqlite+aiosqlite:///./erdgen.db"
    frontend_url: str = "http://localhost:5173"
    supabase_timeout: float = 30.0
    log_level: str = "INFO"

    class Config:
        env_file = str(_ENV_FILE) if _ENV_FILE.exists() else ".env"
        extra = "ignore"


settings = Settings()
