"""
Core configuration module for the job-search assistant.
Loads settings from environment variables and config files.
"""
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_name: str = "JobCoach"
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 4000

    # Gemini
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-pro"
    gemini_api_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_timeout_seconds: float = 120.0

    # Job / interview backend
    backend_base_url: str = "http://localhost:8000"
    backend_timeout_seconds: float = 60.0

    # Resume service limits
    max_resume_chars: int = 20000
    max_improved_chars: int = 1800

    # Interview session policy
    inactivity_timeout_seconds: int = 30
    min_recording_ms: int = 500
    typing_freezes_countdown: bool = False

    # Persisted key-value state
    state_store_path: str = "./storage/state.json"

    # Provider overrides
    provider_llm_model: Optional[str] = None

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def load_model_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load model configuration from YAML file.
    Environment variables can override config values.

    A missing file yields the built-in defaults so the resume endpoints
    still work from a bare checkout.
    """
    if config_path is None:
        config_path = Path(__file__).parent.parent.parent / "config" / "models.yaml"
    else:
        config_path = Path(config_path)

    config: Dict[str, Any] = {"providers": {"llm": {"provider": "gemini"}}}
    if config_path.exists():
        with open(config_path, "r") as f:
            config = yaml.safe_load(f) or config

    settings = get_settings()
    llm_config = config.setdefault("providers", {}).setdefault("llm", {})

    if settings.provider_llm_model:
        llm_config["model"] = settings.provider_llm_model
    llm_config.setdefault("model", settings.gemini_model)

    return config


def get_model_config() -> Dict[str, Any]:
    """Get model configuration."""
    return load_model_config()
