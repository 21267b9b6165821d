"""
Configuration Module

Reads application settings from the environment (and .env via python-dotenv).
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_API_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "google/gemini-2.5-flash"
DEFAULT_MAX_FILES = 20


class Settings(BaseModel):
    openrouter_api_key: Optional[str] = None
    openrouter_api_url: str = DEFAULT_API_URL
    openrouter_model: str = DEFAULT_MODEL
    request_timeout: float = Field(default=60.0, gt=0)
    max_files: int = Field(default=DEFAULT_MAX_FILES, ge=1)
    secret_key: str = "change-this-secret-key-in-production"
    port: int = 8000
    max_sessions: int = Field(default=100, ge=1)
    session_idle_seconds: float = Field(default=3600.0, gt=0)

    @property
    def has_api_key(self) -> bool:
        return bool(self.openrouter_api_key and self.openrouter_api_key.strip())


def load_settings() -> Settings:
    """Build Settings from the process environment."""
    load_dotenv()

    values = {
        'openrouter_api_key': os.getenv('OPENROUTER_API_KEY'),
        'openrouter_api_url': os.getenv('OPENROUTER_API_URL'),
        'openrouter_model': os.getenv('OPENROUTER_MODEL'),
        'request_timeout': os.getenv('REQUEST_TIMEOUT'),
        'max_files': os.getenv('MAX_FILES'),
        'secret_key': os.getenv('SECRET_KEY'),
        'port': os.getenv('PORT'),
        'max_sessions': os.getenv('MAX_SESSIONS'),
        'session_idle_seconds': os.getenv('SESSION_IDLE_SECONDS'),
    }
    # Unset variables fall back to the model defaults
    return Settings(**{k: v for k, v in values.items() if v not in (None, '')})
