import os
from typing import List
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    ENV: str = os.getenv("ENV", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: List[str] = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    # Mongo
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    MONGO_DB: str = os.getenv("MONGO_DB", "ziroplans")
    COLL_TRIPS: str = os.getenv("COLL_TRIPS", "trips")
    PERSIST_TRIPS: bool = _env_bool("PERSIST_TRIPS", "true")

    # Gemini (LangChain)
    GOOGLE_API_KEY: str = os.getenv("GOOGLE_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-flash-latest")
    GEMINI_FALLBACK_MODEL: str = os.getenv("GEMINI_FALLBACK_MODEL", "gemini-pro-latest")
    LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.4"))
    LLM_MAX_OUTPUT_TOKENS: int = int(os.getenv("LLM_MAX_OUTPUT_TOKENS", "8000"))
    LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
    LLM_MAX_RETRIES: int = int(os.getenv("LLM_MAX_RETRIES", "0"))

    # Google Places
    GOOGLE_MAPS_API_KEY: str = os.getenv("GOOGLE_MAPS_API_KEY", "")
    PLACES_TIMEOUT_SECONDS: float = float(os.getenv("PLACES_TIMEOUT_SECONDS", "10"))

    # Clerk auth
    CLERK_PUBLISHABLE_KEY: str = os.getenv("CLERK_PUBLISHABLE_KEY", "")
    CLERK_JWKS_URL: str = os.getenv("CLERK_JWKS_URL", "")
    ALLOW_ANONYMOUS: bool = _env_bool("ALLOW_ANONYMOUS", "true")
    ANONYMOUS_USER_ID: str = os.getenv("ANONYMOUS_USER_ID", "dev-user")

    # Money
    CURRENCY_CODE: str = os.getenv("CURRENCY_CODE", "INR")
    CURRENCY_SYMBOL: str = os.getenv("CURRENCY_SYMBOL", "₹")
    BUDGET_TOLERANCE_RATIO: float = float(os.getenv("BUDGET_TOLERANCE_RATIO", "0.25"))
    COST_TOLERANCE: float = float(os.getenv("COST_TOLERANCE", "1.0"))

    # Allow extra .env variables without throwing validation errors
    model_config = {"extra": "allow"}

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"


settings = Settings()
