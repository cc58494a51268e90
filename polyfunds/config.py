"""Configuration management for the Polyfunds ledger service."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
WEI = 10**18


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Platform roles
    admin_address: str = Field(default="0x00000000000000000000000000000000000000a1")
    fee_recipient: Optional[str] = Field(default=None)

    # Economics
    annual_yield_bps: int = Field(default=500, ge=0)
    platform_fee_percent: int = Field(default=3, ge=0, le=100)
    max_investment_percent: int = Field(default=25, ge=1, le=100)
    min_token_supply: int = Field(default=1_000, ge=1)
    max_token_supply: int = Field(default=1_000_000, ge=1)
    min_token_price: int = Field(default=WEI // 1000, ge=0)  # 0.001 native units
    investor_share_percent: int = Field(default=70, ge=0, le=100)

    # Server
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"]
    )
    log_level: str = Field(default="INFO")

    # Optional sqlite mirror of the event log
    event_db_path: Optional[str] = Field(default=None)

    model_config = SettingsConfigDict(
        env_prefix="POLYFUNDS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def effective_fee_recipient(self) -> str:
        return self.fee_recipient or self.admin_address


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
