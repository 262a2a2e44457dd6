"""Application configuration and settings."""

import os
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "WalletLink"
    app_version: str = "1.0.0"
    debug: bool = False
    port: int = Field(default=3000, description="Server port ($PORT overrides)")

    # API
    api_prefix: str = "/api/v1"

    # Helius (Solana)
    helius_api_key: SecretStr = Field(default=SecretStr(""))
    helius_base_url: str = "https://api.helius.xyz"
    helius_page_size: int = 100
    helius_max_pages: int = 10
    helius_page_delay: float = Field(
        default=0.3, description="Pause after each successful page (seconds)"
    )
    helius_requests_per_second: float = 5.0

    # Etherscan (Ethereum)
    etherscan_api_key: SecretStr = Field(default=SecretStr(""))
    etherscan_base_url: str = "https://api.etherscan.io/api"
    etherscan_page_size: int = 100
    etherscan_max_pages: int = 2
    etherscan_requests_per_second: float = 5.0

    # Shared provider behaviour
    provider_max_retries: int = 3
    provider_retry_delay: float = 1.0
    provider_timeout: float = 30.0

    # Relationship search
    default_hop_budget: int = Field(
        default=2, description="Hop budget used when the request gives none or an invalid one"
    )
    max_hop_budget: int = 10
    max_concurrent_fetches: int = Field(
        default=4, description="Frontier addresses prefetched concurrently per step"
    )

    # CORS Configuration
    allowed_origins: str = Field(
        default="",
        description="Comma-separated list of allowed origins for CORS"
    )

    @field_validator("port")
    @classmethod
    def set_port(cls, v: int) -> int:
        """Use PORT from the environment if available."""
        return int(os.getenv("PORT", v))

    @field_validator("default_hop_budget", "max_hop_budget", "max_concurrent_fetches")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
