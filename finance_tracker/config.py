from dotenv import load_dotenv
from pydantic import BaseModel
from typing import List
import os

# Load .env automatically
load_dotenv()


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "development")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./finance.db")
    sql_echo: bool = _as_bool(os.getenv("SQL_ECHO", "false"))

    jwt_secret: str = os.getenv("JWT_SECRET", "")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_json: bool = _as_bool(os.getenv("LOG_JSON", "false"))

    cors_origins: List[str] = [
        origin.strip()
        for origin in os.getenv(
            "CORS_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000",
        ).split(",")
        if origin.strip()
    ]

    default_currency: str = os.getenv("DEFAULT_CURRENCY", "INR")
    email_from: str = os.getenv("EMAIL_FROM", "no-reply@finance-tracker.local")


# Global settings instance
settings = Settings()
