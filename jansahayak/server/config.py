"""
Server configuration and environment settings.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

from ..models import Language


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server settings
    app_name: str = "Jan Sahayak API"
    app_version: str = "1.0.0"
    debug: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Knowledge base and model settings
    index_dir: Path = Path("./data/index")
    schemes_file: Path = Path("./data/schemes.json")
    embedding_backend: str = "sentence-transformers"    # or "gemini"
    embedding_model: str = "sentence-transformers/paraphrase-multilingual-MiniLM-L12-v2"
    use_reranker: bool = False

    # LLM settings
    gemini_api_key: str | None = None
    llm_models: str | None = None    # comma-separated fallback order

    # Conversation settings
    session_ttl_seconds: int = 1800
    max_sessions: int = 10_000
    default_language: Language = Language.EN

    # Retrieval settings
    top_k: int = 3
    similarity_floor: float = 0.5

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
