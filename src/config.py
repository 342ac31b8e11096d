"""Runtime configuration read from the environment (and an optional .env file)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

SUPPORTED_PROVIDERS = ("gemini", "openai", "anthropic")
SUPPORTED_LANGUAGES = ("en", "fr")


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    val = os.environ.get(name, default)
    return val


def _get_int(name: str, default: int) -> int:
    raw = _get_env(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    provider: str = "gemini"
    gemini_model: str = "gemini-2.5-flash"
    openai_model: str = "gpt-4.1-mini"
    anthropic_model: str = "claude-sonnet-4-20250514"
    google_api_key: Optional[str] = field(default=None, repr=False)
    openai_api_key: Optional[str] = field(default=None, repr=False)
    anthropic_api_key: Optional[str] = field(default=None, repr=False)
    request_timeout: int = 120
    max_output_tokens: int = 8192
    min_content_chars: int = 20
    max_content_chars: int = 10_000
    max_template_bytes: int = 50 * 1024 * 1024
    language: str = "en"
    upload_folder: Optional[str] = None
    secret_key: str = field(default="dev-secret-key", repr=False)
    host: str = "127.0.0.1"
    port: int = 5000
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.provider not in SUPPORTED_PROVIDERS:
            raise RuntimeError(
                f"Unsupported provider {self.provider!r}; expected one of {', '.join(SUPPORTED_PROVIDERS)}"
            )
        if self.language not in SUPPORTED_LANGUAGES:
            raise RuntimeError(
                f"Unsupported language {self.language!r}; expected one of {', '.join(SUPPORTED_LANGUAGES)}"
            )
        if self.min_content_chars < 0 or self.max_content_chars < self.min_content_chars:
            raise RuntimeError("Content length limits are inconsistent")


def load_settings() -> Settings:
    """Build :class:`Settings` from environment variables.

    Env:
      - ARCHITECT_PROVIDER: gemini | openai | anthropic (default gemini)
      - ARCHITECT_GEMINI_MODEL / ARCHITECT_OPENAI_MODEL / ARCHITECT_ANTHROPIC_MODEL
      - GOOGLE_API_KEY / OPENAI_API_KEY / ANTHROPIC_API_KEY
      - ARCHITECT_REQUEST_TIMEOUT (seconds), ARCHITECT_MAX_OUTPUT_TOKENS
      - ARCHITECT_MIN_CONTENT_CHARS, ARCHITECT_MAX_CONTENT_CHARS
      - ARCHITECT_MAX_TEMPLATE_MB, ARCHITECT_LANGUAGE (en | fr)
      - ARCHITECT_UPLOAD_FOLDER, FLASK_SECRET_KEY, FLASK_HOST, FLASK_PORT, LOG_LEVEL
    """
    load_dotenv()
    defaults = Settings()
    return Settings(
        provider=(_get_env("ARCHITECT_PROVIDER") or defaults.provider).lower(),
        gemini_model=_get_env("ARCHITECT_GEMINI_MODEL", defaults.gemini_model),
        openai_model=_get_env("ARCHITECT_OPENAI_MODEL", defaults.openai_model),
        anthropic_model=_get_env("ARCHITECT_ANTHROPIC_MODEL", defaults.anthropic_model),
        google_api_key=_get_env("GOOGLE_API_KEY"),
        openai_api_key=_get_env("OPENAI_API_KEY"),
        anthropic_api_key=_get_env("ANTHROPIC_API_KEY"),
        request_timeout=_get_int("ARCHITECT_REQUEST_TIMEOUT", defaults.request_timeout),
        max_output_tokens=_get_int("ARCHITECT_MAX_OUTPUT_TOKENS", defaults.max_output_tokens),
        min_content_chars=_get_int("ARCHITECT_MIN_CONTENT_CHARS", defaults.min_content_chars),
        max_content_chars=_get_int("ARCHITECT_MAX_CONTENT_CHARS", defaults.max_content_chars),
        max_template_bytes=_get_int("ARCHITECT_MAX_TEMPLATE_MB", 50) * 1024 * 1024,
        language=(_get_env("ARCHITECT_LANGUAGE") or defaults.language).lower(),
        upload_folder=_get_env("ARCHITECT_UPLOAD_FOLDER"),
        secret_key=_get_env("FLASK_SECRET_KEY", defaults.secret_key),
        host=_get_env("FLASK_HOST", defaults.host),
        port=_get_int("FLASK_PORT", defaults.port),
        log_level=(_get_env("LOG_LEVEL") or defaults.log_level).upper(),
    )


__all__ = ["Settings", "load_settings", "SUPPORTED_LANGUAGES", "SUPPORTED_PROVIDERS"]
