"""Checkout Service Configuration"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings

from ...psp.models import PspName
from ...psp.simulator import DEFAULT_LATENCY_SECONDS

TOKENIZER_REMOTE = "remote"
TOKENIZER_SIMULATED = "simulated"


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Paylink Checkout"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Backend
    api_base_url: str = "http://localhost:8080"
    public_base_url: Optional[str] = None
    request_timeout: float = 30.0

    # Tokenization
    tokenizer_mode: str = TOKENIZER_REMOTE  # "remote" or "simulated"
    preferred_psp: PspName = PspName.STRIPE
    simulated_latency_seconds: float = DEFAULT_LATENCY_SECONDS

    # Card form
    enforce_luhn: bool = True

    class Config:
        env_prefix = "PAYLINK_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def uses_simulator(self) -> bool:
        return self.tokenizer_mode.lower() == TOKENIZER_SIMULATED


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
