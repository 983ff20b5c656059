"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _load_env_file(path: str = ".env") -> None:
    """Populate os.environ from the provided .env file if it exists."""

    env_path = Path(path)
    if not env_path.exists():
        return

    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


@dataclass(frozen=True, slots=True)
class Settings:
    """Centralised project settings based on OS environment variables."""

    environment: str = "dev"
    log_level: str = "INFO"

    replicate_api_token: str = ""
    replicate_base_url: str = "https://api.replicate.com/v1"

    request_timeout: float = 60.0
    poll_interval: float = 1.0
    chat_timeout: float = 30.0

    uploads_dir: str = "uploads"
    host: str = "0.0.0.0"
    port: int = 3000


def _build_settings() -> Settings:
    _load_env_file()

    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        replicate_api_token=os.getenv("REPLICATE_API_TOKEN", ""),
        replicate_base_url=os.getenv("REPLICATE_BASE_URL", "https://api.replicate.com/v1"),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "60")),
        poll_interval=float(os.getenv("POLL_INTERVAL", "1")),
        chat_timeout=float(os.getenv("CHAT_TIMEOUT", "30")),
        uploads_dir=os.getenv("UPLOADS_DIR", "uploads"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance to avoid re-reading configuration."""

    return _build_settings()
