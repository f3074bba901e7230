from pathlib import Path
from typing import List

from pydantic import BaseModel
from dotenv import load_dotenv
import os

load_dotenv()

_DEFAULT_POLICY_PATH = Path(__file__).resolve().parent.parent / "policies" / "assistant_policy_v1.yaml"


def _split_csv(value: str) -> List[str]:
    return [x.strip() for x in value.split(",") if x.strip()]


class Settings(BaseModel):
    # Supabase
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_SERVICE_ROLE_KEY: str = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")

    # Generative model (gemini | openai)
    LLM_PROVIDER: str = os.getenv("LLM_PROVIDER", "gemini").lower()

    GOOGLE_AI_API_KEY: str = os.getenv("GOOGLE_AI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
    GEMINI_API_BASE: str = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")

    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_CHAT_MODEL: str = os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini")

    LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.3"))
    LLM_MAX_OUTPUT_TOKENS: int = int(os.getenv("LLM_MAX_OUTPUT_TOKENS", "2000"))
    LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "10"))

    # Assistant
    ASSISTANT_TIMEZONE: str = os.getenv("ASSISTANT_TIMEZONE", "UTC")
    ASSISTANT_POLICY_PATH: str = os.getenv("ASSISTANT_POLICY_PATH", str(_DEFAULT_POLICY_PATH))

    # HTTP
    CORS_ALLOW_ORIGINS: List[str] = _split_csv(
        os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:5173,http://localhost:8080")
    )
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
