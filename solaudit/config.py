"""
solaudit — Configuration System

All configuration is Pydantic-validated and loaded from:
1. an optional YAML file (defaults)
2. Environment variables (overrides, prefix SOLAUDIT_, nested with __)
3. Command-line flags (applied by the CLI on top of the loaded config)
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from solaudit.errors import InvalidInputError

# ─── Clusters ─────────────────────────────────────────────────────


class Cluster(str, enum.Enum):
    DEVNET = "devnet"
    TESTNET = "testnet"
    MAINNET = "mainnet"
    LOCALNET = "localnet"


CLUSTER_URLS: dict[Cluster, str] = {
    Cluster.DEVNET: "https://api.devnet.solana.com",
    Cluster.TESTNET: "https://api.testnet.solana.com",
    Cluster.MAINNET: "https://api.mainnet-beta.solana.com",
    Cluster.LOCALNET: "http://127.0.0.1:8899",
}


def parse_cluster(value: str | Cluster) -> Cluster:
    """Resolve a cluster selector, raising InvalidInputError on unknown names."""
    if isinstance(value, Cluster):
        return value
    try:
        return Cluster(value.strip().lower())
    except ValueError as exc:
        choices = ", ".join(c.value for c in Cluster)
        raise InvalidInputError(
            f"Invalid cluster: {value!r} (expected one of: {choices})", field="cluster"
        ) from exc


# ─── Sub-configs ──────────────────────────────────────────────────


class RpcConfig(BaseModel):
    cluster: Cluster = Cluster.DEVNET
    url: str | None = None  # Overrides the cluster's public endpoint when set
    commitment: str = "confirmed"  # "processed" | "confirmed" | "finalized"
    timeout_s: float = 30.0

    @property
    def endpoint(self) -> str:
        return self.url or CLUSTER_URLS[self.cluster]


class RetryPolicy(BaseModel):
    """
    How AccountPoller waits for a just-confirmed account to become readable.

    ``backoff`` multiplies the delay after every failed attempt; 1.0 keeps
    the delay fixed.
    """

    max_attempts: int = Field(default=10, ge=1)
    delay_s: float = Field(default=2.0, ge=0.0)
    backoff: float = Field(default=1.0, ge=1.0)
    max_delay_s: float = Field(default=30.0, ge=0.0)
    attempt_timeout_s: float | None = Field(default=None, gt=0.0)

    def delay_for(self, attempt: int) -> float:
        """Delay to wait after failed attempt number ``attempt`` (1-based)."""
        delay = self.delay_s * (self.backoff ** (attempt - 1))
        return min(delay, self.max_delay_s)


class LoggingConfig(BaseModel):
    level: str = "WARNING"
    format: str = "console"  # "console" | "json"


# ─── Root Config ──────────────────────────────────────────────────


class SolauditConfig(BaseSettings):
    """Root configuration. Environment variables use the SOLAUDIT_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="SOLAUDIT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    rpc: RpcConfig = Field(default_factory=RpcConfig)
    poller: RetryPolicy = Field(default_factory=RetryPolicy)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment beats the YAML values passed in as init kwargs
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @model_validator(mode="after")
    def _strip_url(self) -> SolauditConfig:
        # Secret managers can inject trailing \r\n into env vars
        if self.rpc.url:
            self.rpc.url = self.rpc.url.strip() or None
        return self


def load_config(config_path: str | Path | None = None) -> SolauditConfig:
    """
    Load configuration from YAML file, then apply environment variable overrides.
    """
    raw: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise InvalidInputError(f"Config file not found: {path}", field="config")
        try:
            with open(path) as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise InvalidInputError(
                f"Config file {path} is not valid YAML: {exc}", field="config"
            ) from exc
        if not isinstance(raw, dict):
            raise InvalidInputError(
                f"Config file {path} must contain a mapping, got {type(raw).__name__}",
                field="config",
            )

    return SolauditConfig(**raw)
