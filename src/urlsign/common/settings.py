"""Configuration management using pydantic-settings."""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from urlsign.common.errors import SigningNotConfiguredError
from urlsign.common.hmac import HashAlgorithm, resolve_algorithm
from urlsign.common.logging import KeyMaterialTrace

if TYPE_CHECKING:
    from urlsign.signer import SigningConfig


class Settings(BaseSettings):
    """Signing settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="URLSIGN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Signing
    secret: str | None = Field(
        default=None,
        description="Shared secret for URL signing, distributed out of band",
    )
    bucket_seconds: float = Field(
        default=60.0,
        description="Width of one validity bucket in seconds (agreed between signer and verifier)",
    )
    hash_algorithm: Literal["sha1", "sha224", "sha256", "sha384", "sha512"] = Field(
        default="sha1",
        description="Hash primitive for both HMAC layers",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Log level",
    )
    log_json: bool = Field(
        default=False,
        description="Emit JSON logs instead of console output",
    )
    expose_key_material: bool = Field(
        default=False,
        description="Log bucket keys and expected tokens at debug level (never enable in production)",
    )

    # Middleware
    protected_paths: tuple[str, ...] = Field(
        default=(),
        description="Path prefixes that require a signed URL (empty means every path)",
    )
    exempt_paths: tuple[str, ...] = Field(
        default=("/health", "/metrics"),
        description="Paths never checked for a signature",
    )

    @property
    def bucket_size(self) -> timedelta:
        """Bucket width as a timedelta."""
        return timedelta(seconds=self.bucket_seconds)

    @property
    def algorithm(self) -> HashAlgorithm:
        """Hash constructor for the configured algorithm."""
        return resolve_algorithm(self.hash_algorithm)

    def signing_config(self) -> SigningConfig:
        """Build a SigningConfig from these settings."""
        from urlsign.signer import SigningConfig

        if not self.secret:
            raise SigningNotConfiguredError("URLSIGN_SECRET is not set")
        return SigningConfig(
            secret=self.secret,
            bucket_size=self.bucket_size,
            algorithm=self.algorithm,
            trace=KeyMaterialTrace() if self.expose_key_material else None,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()
