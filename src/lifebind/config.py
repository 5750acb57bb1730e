from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ._container import Lifetime
from .identifiers import IdentifierKind  # noqa: TC001


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LIFEBIND_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="lifebind")
    log_level: str = Field(default="INFO")

    # API
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3000, ge=0, le=65535)

    # Wiring
    identifier_kind: IdentifierKind = Field(default="random")
    consumer_lifetime: Lifetime = Field(default=Lifetime.TRANSIENT)


def get_settings() -> Settings:
    return Settings()
