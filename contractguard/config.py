"""Application configuration loaded from environment variables."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global pipeline settings."""

    tokenizer_encoding: str = "cl100k_base"
    allow_tiktoken_fallback: bool = False

    chunk_token_size: int = Field(default=1000, gt=0)
    chunk_overlap_tokens: int = Field(default=200, ge=0)

    min_digital_word_count: int = Field(
        default=50,
        ge=0,
        description="Digital PDF text with fewer words is treated as a scanned document.",
    )
    min_content_word_count: int = Field(
        default=20,
        ge=0,
        description="Extractions below this word count are rejected by the ingestion pipeline.",
    )

    ocr_language: str = "eng"
    ocr_dpi: int = Field(default=300, gt=0)
    tesseract_cmd: Optional[str] = Field(
        default=None, description="Path to the tesseract binary when it is not on PATH."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
