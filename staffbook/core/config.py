# staffbook/core/config.py
from typing import List

from pydantic_settings import BaseSettings
from dotenv import load_dotenv
load_dotenv()

class Settings(BaseSettings):
    APP_NAME: str = "Staffbook"
    DATABASE_URL: str = "sqlite://db.sqlite3"
    GENERATE_SCHEMAS: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:8000"]

    # Import pipeline
    PREVIEW_ROWS: int = 5
    STRICT_HOLIDAY_DATES: bool = False
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

settings = Settings()
