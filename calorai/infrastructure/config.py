"""Configuration for the CalorIA relay.

Settings are read once from the process environment (optionally seeded
from a ``.env`` file) and injected into the provider factory, the
analysis service and the app.

Example .env:
    OPENAI_API_KEY=sk-...
    OPENAI_MODEL=gpt-4o
    VISION_PROVIDER=openai
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from calorai import __version__

DEFAULT_TIMEOUT_S = 30.0

_TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """
    Relay configuration.

    Attributes:
        openai_api_key: External API credential (None when not configured)
        openai_model: Model identifier (vision capable)
        max_tokens: Completion length bound
        temperature: Sampling temperature (low for concise, stable output)
        timeout_s: Timeout of one external call in seconds
        json_mode: Ask the API for a JSON object response
        vision_provider: "openai" or "stub"
        log_level: Root log level name
        app_version: Version reported by /version
    """

    model_config = ConfigDict(frozen=True)

    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    max_tokens: int = Field(1500, gt=0)
    temperature: float = Field(0.3, ge=0.0, le=2.0)
    timeout_s: float = Field(DEFAULT_TIMEOUT_S, gt=0)
    json_mode: bool = True
    vision_provider: Literal["openai", "stub"] = "openai"
    log_level: str = "INFO"
    app_version: str = __version__

    @field_validator("openai_api_key")
    @classmethod
    def blank_key_is_missing(cls, v: Optional[str]) -> Optional[str]:
        """Whitespace-only keys count as not configured."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def upper_level(cls, v: str) -> str:
        return v.upper()

    @property
    def has_api_key(self) -> bool:
        return self.openai_api_key is not None

    def masked_api_key(self) -> Optional[str]:
        """Key safe for logs: first and last 4 chars only."""
        key = self.openai_api_key
        if not key:
            return None
        if len(key) > 8:
            return key[:4] + "..." + key[-4:]
        return "***"

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        env_file: Optional[Path] = None,
    ) -> Settings:
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read instead of os.environ (tests)
            env_file: Optional .env file loaded into os.environ first;
                existing variables are not overridden

        Raises:
            ValueError: On malformed numeric or enum values
        """
        if environ is None:
            if env_file is not None and env_file.exists():
                load_dotenv(env_file)
            environ = os.environ

        values = {
            "openai_api_key": environ.get("OPENAI_API_KEY"),
            "openai_model": environ.get("OPENAI_MODEL", "gpt-4o"),
            "max_tokens": environ.get("OPENAI_MAX_TOKENS", "1500"),
            "temperature": environ.get("OPENAI_TEMPERATURE", "0.3"),
            "timeout_s": environ.get("OPENAI_TIMEOUT_S", str(DEFAULT_TIMEOUT_S)),
            "json_mode": environ.get("OPENAI_JSON_MODE", "1").strip().lower() in _TRUE_VALUES,
            "vision_provider": environ.get("VISION_PROVIDER", "openai").strip().lower(),
            "log_level": environ.get("LOG_LEVEL", "INFO"),
            "app_version": environ.get("APP_VERSION", __version__),
        }
        # pydantic's ValidationError is a ValueError subclass
        return cls.model_validate(values)
