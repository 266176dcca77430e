# backend/citeqa/config.py
from __future__ import annotations
import logging
from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings
from pydantic import Field
from dotenv import load_dotenv

# Load .env before reading settings
load_dotenv()

logger = logging.getLogger("citeqa.config")


class Settings(BaseSettings):
    # Retrieval
    retriever_backend: Literal["search", "local"] = "search"
    search_api_url: str = Field("https://api.supermemory.ai")
    search_api_key: str | None = None
    search_limit: int = Field(8, ge=1, le=50)
    search_rerank: bool = True
    search_document_threshold: float = 0.3
    search_chunk_threshold: float = 0.4
    search_timeout: float = 30.0
    data_path: str | None = None

    # Generation
    generation_backend: Literal["ollama", "extractive"] = "ollama"
    ollama_host: str = "http://127.0.0.1:11434"
    generation_model: str = "llama3.2:3b"
    generation_temperature: float = 0.1
    generation_max_tokens: int = 2000
    generation_timeout: float = 180.0

    log_level: str = "INFO"

    def masked(self) -> dict:
        """Settings as a dict with secrets hidden, for logging."""
        data = self.model_dump()
        if data.get("search_api_key"):
            data["search_api_key"] = "*****"
        return data


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    logger.info(f"Loaded settings: {settings.masked()}")
    return settings
