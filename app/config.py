"""
Configuration settings for the Stencil backend.
Loads environment variables and provides application-wide settings.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Ollama Configuration (only used when REPORT_WRITER=ollama)
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_LLM_MODEL: str = "qwen2.5:3b"
    OLLAMA_TIMEOUT: int = 300  # 5 minutes for LLM requests

    # Application Settings
    UPLOAD_DIR: str = "./uploads"

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:3001"

    # OCR Configuration
    TESSERACT_CMD: str = "/usr/bin/tesseract"
    OCR_ENABLED: bool = True

    # Upload Configuration
    MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10 MB
    SUPPORTED_FILE_TYPES: List[str] = [".pdf", ".docx"]

    # Segmentation Configuration
    # Locale bundle for default section titles, placeholders and report text
    REPORT_LOCALE: str = "ko"
    # Replaces the locale's structural keyword set when provided
    SECTION_KEYWORDS: Optional[List[str]] = None
    SECTION_HEADER_MAX_LENGTH: int = 100
    # False reproduces the legacy precedence where only the first keyword
    # is subject to the length limit
    SECTION_KEYWORD_LENGTH_ALL: bool = True

    # Report Generation Configuration
    # "template" fills content sections deterministically, "ollama" calls the LLM
    REPORT_WRITER: str = "template"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into a list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]


# Global settings instance
settings = Settings()
