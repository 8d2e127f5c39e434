"""
Configuration settings for the Aides Simulator
"""
import logging
from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # MongoDB Configuration
    mongodb_url: str = Field(default="mongodb://localhost:27017")
    mongodb_db_name: str = Field(default="aides_db")
    catalog_collection: str = Field(default="gov_aides")
    simulations_collection: str = Field(default="simulations")
    saved_aides_collection: str = Field(default="saved_aides")

    # OpenRouter API Configuration
    # An empty key disables the external calls; the pipeline then answers
    # through the keyword fallback and untranslated text.
    openrouter_api_key: str = Field(default="")
    openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1")
    openrouter_model: str = Field(default="openai/gpt-4o-mini")
    llm_timeout_seconds: float = Field(default=8.0, gt=0)

    # Relevance classifier cache
    relevance_cache_ttl_seconds: int = Field(default=900, gt=0)
    relevance_cache_max_entries: int = Field(default=512, gt=0)

    # Localization
    native_language: str = Field(default="fr")
    supported_languages: str = Field(default="fr,en")
    translation_batch_size: int = Field(default=10, ge=0)

    # Pipeline tuning
    senior_age_threshold: int = Field(default=60)
    default_housing_cap: int = Field(default=500)
    history_default_limit: int = Field(default=10, ge=1)

    # Application Configuration
    app_name: str = Field(default="Aides Simulator")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # API Configuration
    api_prefix: str = Field(default="/api/v1")
    cors_origins: str = Field(default="http://localhost:3000,http://localhost:5173")

    def get_supported_languages_list(self) -> List[str]:
        """Get supported languages as a list"""
        return [lang.strip().lower() for lang in self.supported_languages.split(',') if lang.strip()]

    def get_cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list"""
        return [origin.strip() for origin in self.cors_origins.split(',') if origin.strip()]

    @property
    def llm_enabled(self) -> bool:
        return bool(self.openrouter_api_key) and self.openrouter_api_key != "your_openrouter_api_key_here"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create global settings instance
settings = Settings()

if not settings.llm_enabled:
    logger.warning(
        "OPENROUTER_API_KEY not set. Relevance classification will use the keyword "
        "fallback and descriptions will not be translated."
    )
