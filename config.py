# config.py
"""Service configuration"""
from typing import List
from pydantic_settings import BaseSettings
from utils.common import get_log_file_path, get_project_root

class Settings(BaseSettings):
    """Application configuration"""

    # Logger configuration
    LOG_FILE_PATH: str = get_log_file_path()
    LOGGER_NAME: str = "recommendation_review"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./recommendations.db"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_RECYCLE: int = 3600  # Recycle connections after 1 hour

    # Blob storage for uploaded documents
    UPLOADS_DIR: str = f"{get_project_root()}/uploads"
    MAX_FILE_SIZE: int = 20 * 1024 * 1024
    ALLOWED_FILE_EXTENSIONS: List[str] = ["txt", "md", "csv", "json", "html", "xml", "rtf"]

    # LLM (Ollama compatible)
    LLM_BASE_URL: str = "http://localhost:11434"
    LLM_MODEL_NAME: str = "llama3.1:8b"
    REQUEST_TIMEOUT: int = 120

    # Recommendation extraction / regeneration
    MAX_RECOMMENDATIONS: int = 10
    MAX_PROMPT_CHARS: int = 12000
    MODIFIED_FILE_SUFFIX: str = "_modified"
    MODIFIED_FILE_EXTENSION: str = ".txt"
    APPLY_INTENT_PHRASES: List[str] = [
        "apply all",
        "apply recommendations",
        "update the document",
        "make the changes",
    ]

    # Chat
    CHAT_CONTEXT_LIMIT: int = 6
    CHAT_HISTORY_LIMIT: int = 50

    # Decisions: "error" rejects overlapping accept/reject ids, "reject_wins" rejects them
    DECISION_OVERLAP_POLICY: str = "error"

    # Security
    REQUIRE_API_KEY: bool = True
    API_KEY: str = "dev-key-12345"
    ENFORCE_ROLE_PERMISSIONS: bool = True
    DEFAULT_USER_ROLE: str = "evaluator"

    # App metadata
    APP_TITLE: str = "Recommendation Review Service"
    APP_VERSION: str = "1.0.0"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
