import os
from dataclasses import dataclass, field
from functools import lru_cache


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    return int(raw) if raw.strip() else default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    return float(raw) if raw.strip() else default


@dataclass
class Settings:
    """Application settings. Every field falls back to an environment variable."""

    app_env: str = field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    cors_origins: str = field(default_factory=lambda: os.getenv("CORS_ORIGINS", "*"))

    model_provider: str = field(default_factory=lambda: os.getenv("MODEL_PROVIDER", "openai").lower())
    openai_api_key: str = field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY")
        or os.getenv("OPENAI_API_KEY_ENV_VAR")
        or "default_key"
    )
    chat_model: str = field(default_factory=lambda: os.getenv("CHAT_MODEL", "gpt-4o"))
    ollama_host: str = field(default_factory=lambda: os.getenv("OLLAMA_HOST", "http://ollama-dev:11434"))

    # Generation parameters are fixed per process, never per request.
    max_tokens: int = field(default_factory=lambda: _env_int("MODEL_MAX_TOKENS", 1000))
    temperature: float = field(default_factory=lambda: _env_float("MODEL_TEMPERATURE", 0.7))

    # 0 forwards the whole session on every turn.
    history_max_messages: int = field(default_factory=lambda: _env_int("HISTORY_MAX_MESSAGES", 0))

    def get_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()] or ["*"]

    def get_history_limit(self) -> int | None:
        return self.history_max_messages if self.history_max_messages > 0 else None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
