"""Application configuration.

``GenomeServicesConfig`` is the explicit configuration handed to every client
and to ``GenomeDataService``. ``Settings`` reads the environment and is only
consulted by entry points (the CLI) to build one.
"""

from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from genome_scout.constants import (
    DEFAULT_MAX_CONCURRENT_ANALYSES,
    DEFAULT_TIMEOUT,
    GENE_SEARCH_URL,
    NCBI_BASE_URL,
    UCSC_BASE_URL,
)
from genome_scout.data_sources.base_client import ClientConfig


class GenomeServicesConfig(BaseModel):
    """Upstream endpoints and transport settings for the aggregation layer."""

    ucsc_base_url: str = UCSC_BASE_URL
    gene_search_url: str = GENE_SEARCH_URL
    ncbi_base_url: str = NCBI_BASE_URL
    analysis_url: str | None = None  # prediction backend; no default
    ncbi_api_key: str = ""
    max_concurrent_analyses: int = Field(default=DEFAULT_MAX_CONCURRENT_ANALYSES, ge=1)
    client: ClientConfig = ClientConfig()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Prediction backend
    analyze_variant_url: str = ""

    # API Keys
    ncbi_api_key: str = ""

    # Transport
    request_timeout_seconds: float = DEFAULT_TIMEOUT
    max_concurrent_analyses: int = DEFAULT_MAX_CONCURRENT_ANALYSES

    # App Settings
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        frozen = True

    def to_services_config(self) -> GenomeServicesConfig:
        """Build the explicit config object the clients consume."""
        return GenomeServicesConfig(
            analysis_url=self.analyze_variant_url or None,
            ncbi_api_key=self.ncbi_api_key,
            max_concurrent_analyses=self.max_concurrent_analyses,
            client=ClientConfig(timeout_seconds=self.request_timeout_seconds),
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
