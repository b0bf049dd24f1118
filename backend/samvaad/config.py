import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    azure_openai_endpoint: Optional[str] = Field(None, alias="AZURE_OPENAI_ENDPOINT")
    azure_openai_api_key: Optional[str] = Field(None, alias="AZURE_OPENAI_API_KEY")
    azure_openai_deployment: str = Field("gpt-4", alias="AZURE_OPENAI_DEPLOYMENT")
    azure_openai_api_version: str = Field("2024-02-15-preview", alias="AZURE_OPENAI_API_VERSION")
    chat_temperature: float = Field(0.7, ge=0.0, le=2.0, alias="SAMVAAD_CHAT_TEMPERATURE")
    chat_max_tokens: int = Field(1000, ge=1, alias="SAMVAAD_CHAT_MAX_TOKENS")
    database_url: Optional[str] = Field(None, alias="SAMVAAD_DATABASE_URL")
    database_pool_size: int = Field(10, alias="SAMVAAD_DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(10, alias="SAMVAAD_DATABASE_MAX_OVERFLOW")
    database_echo: bool = Field(False, alias="SAMVAAD_DATABASE_ECHO")
    analysis_workers: int = Field(2, ge=1, alias="SAMVAAD_ANALYSIS_WORKERS")

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True

    @property
    def chat_provider_configured(self) -> bool:
        return bool(self.azure_openai_endpoint and self.azure_openai_api_key)


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()  # type: ignore[arg-type]
    except ValidationError as exc:
        raise RuntimeError(f"Invalid backend configuration: {exc}") from exc
