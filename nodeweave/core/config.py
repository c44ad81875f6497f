"""Engine configuration using Pydantic Settings."""

from __future__ import annotations

import sys
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Engine settings loaded from NODEWEAVE_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="NODEWEAVE_", extra="ignore")

    # Execution limits
    default_timeout_ms: int = Field(30000, gt=0, description="Code execution timeout")
    http_timeout_ms: int = Field(30000, gt=0, description="HTTP request timeout")
    default_max_iterations: int = Field(1000, gt=0, description="Loop iteration cap")
    kill_grace_ms: int = Field(1000, ge=0, description="Delay between SIGTERM and SIGKILL")
    user_input_max_attempts: int = Field(10, gt=0, description="Re-prompts before giving up")

    # Interpreters
    python_executable: str = Field(default_factory=lambda: sys.executable or "python3")
    node_executable: str = "node"

    # Logging
    log_level: str = "info"


@lru_cache
def get_settings() -> EngineSettings:
    """Get cached engine settings."""
    return EngineSettings()
