"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, itemctl.toml only contains overrides.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_DB_PATH = Path(".itemctl") / "items.db"


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    path: Path = DEFAULT_DB_PATH
    busy_timeout: float = Field(default=30.0, gt=0)


class ProcessorConfig(BaseModel):
    """[processor] section."""

    model_config = {"frozen": True}

    delay_ms: int = Field(default=100, ge=0)
    max_workers: int | None = Field(default=None, ge=1)
    timeout: float | None = Field(default=None, gt=0)

    @property
    def delay(self) -> float:
        """Per-item delay in seconds."""
        return self.delay_ms / 1000


class ServerConfig(BaseModel):
    """[server] section."""

    model_config = {"frozen": True}

    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)
