"""
Configuration loading and validation.

Loads client configuration from YAML file with environment variable resolution
for secrets (passwords are never stored in config files).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    url: str = "http://localhost:8000"
    verify_tls: bool = True
    request_timeout_seconds: int = 30


class AccountConfig(BaseModel):
    email: str | None = None
    password_env: str = "PETCONNECT_PASSWORD"

    @property
    def password(self) -> str | None:
        return os.environ.get(self.password_env)


class BoardConfig(BaseModel):
    urgency_window_days: int = Field(default=90, ge=0)


class LoggingConfig(BaseModel):
    level: str = "info"
    format: Literal["json", "text"] = "text"


class ClientConfig(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    account: AccountConfig = Field(default_factory=AccountConfig)
    board: BoardConfig = Field(default_factory=BoardConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: str | Path) -> ClientConfig:
    """Load and validate client configuration from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    return ClientConfig.model_validate(raw)
