"""
farmstand/config.py - Storefront configuration.

A Pydantic BaseSettings class loaded from the environment (prefix ``FARMSTAND_``)
or a ``.env`` file. Nothing is initialised at import time; callers construct
``Settings()`` and hand it to ``Storefront.from_settings``.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Storefront configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FARMSTAND_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Hosted backend (PostgREST-style REST API)
    backend_url: Optional[str] = Field(None, description="Base URL of the hosted backend")
    backend_key: Optional[str] = Field(None, description="Anon API key for the hosted backend")
    request_timeout: float = Field(10.0, gt=0, description="Backend request timeout in seconds")

    # Local database backend (SQLAlchemy async URL), used instead of the REST API when set
    database_url: Optional[str] = Field(None, description="e.g. sqlite+aiosqlite:///farmstand.db")

    # Cart persistence
    cart_slot: str = Field("farm-poultry-cart", min_length=1)
    cart_dir: Path = Field(Path.home() / ".farmstand", description="Directory holding cart slots")

    # Offline submission
    simulated_delay: float = Field(1.5, ge=0, description="Artificial delay for simulated orders")

    log_level: str = "INFO"

    @property
    def backend_configured(self) -> bool:
        """True when both the backend URL and key are present."""
        return bool(self.backend_url) and bool(self.backend_key)

    @property
    def cart_path(self) -> Path:
        return self.cart_dir / f"{self.cart_slot}.json"


__all__ = ("Settings",)
