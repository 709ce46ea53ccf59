"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from environment variables (prefix CSR_SIGNER_)
  - Fall back to a .env file
  - Validate types and constraints at startup
  - Keep the CA passphrase out of logs and reprs (SecretStr)

Only the command-line host reads these settings. The signing pipeline
itself takes explicit arguments and never looks at the environment.

Nested fields use "__": CSR_SIGNER_CA__KEY_PATH maps to ca.key_path,
CSR_SIGNER_ISSUANCE__VALIDITY_SECONDS to issuance.validity_seconds.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from csr_signer.adapters.serial_numbers import RandomSerialNumbers, SequentialSerialNumbers
from csr_signer.domain.models import DEFAULT_VALIDITY
from csr_signer.domain.ports import SerialNumberStrategy

_ENV_FILE = Path(__file__).parent.parent.parent / ".env"


class CaSettings(BaseModel):
    """Location of the signing CA material."""

    key_path: Path = Field(description="PEM file holding the CA private key")
    certificate_path: Path = Field(description="PEM file holding the CA certificate")
    passphrase: SecretStr | None = Field(
        default=None,
        description="Passphrase of the CA private key, if it is encrypted",
    )

    def passphrase_bytes(self) -> bytes | None:
        if self.passphrase is None:
            return None
        return self.passphrase.get_secret_value().encode("utf-8")


class IssuanceSettings(BaseModel):
    """Parameters applied to every issued certificate."""

    validity_seconds: int = Field(
        default=int(DEFAULT_VALIDITY.total_seconds()),
        ge=1,
        description="Lifetime of issued certificates in seconds (default 365 days)",
    )
    serial_strategy: Literal["random", "sequential"] = Field(
        default="random",
        description=(
            "How serial numbers are generated. 'sequential' counts from serial_start "
            "within one process only; the counter is not persisted, so every "
            "csr-signer run starts again at serial_start. Advance serial_start "
            "between runs or use 'random'."
        ),
    )
    serial_start: int = Field(
        default=1,
        ge=1,
        description="First serial handed out by the sequential strategy",
    )

    @property
    def validity(self) -> timedelta:
        return timedelta(seconds=self.validity_seconds)

    def serial_numbers(self) -> SerialNumberStrategy:
        """Instantiate the configured serial number strategy."""
        if self.serial_strategy == "sequential":
            return SequentialSerialNumbers(start=self.serial_start)
        return RandomSerialNumbers()


class AppSettings(BaseSettings):
    """
    Root settings for the csr-signer command.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="CSR_SIGNER_",
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    ca: CaSettings
    issuance: IssuanceSettings = Field(default_factory=lambda: IssuanceSettings())
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Accept standard logging level names, case-insensitively."""
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level
