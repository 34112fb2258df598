"""
Environment-driven settings for Voter Vault.

Values come from the process environment, then from a `.env` file in the
working directory (never overriding what the environment already has),
then from the defaults below.

Usage:
    from voter_vault.config import get_config
    config = get_config()
    config.ingest.max_document_pages   # MAX_DOCUMENT_PAGES, default 10
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional


GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _load_dotenv(path: Optional[Path] = None) -> None:
    """Read KEY=VALUE lines into os.environ; blank lines and # comments are skipped."""
    path = path or Path.cwd() / ".env"
    if not path.is_file():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key or os.environ.get(key):
            continue
        os.environ[key] = value.strip().strip("'\"")


_load_dotenv()


def _as_bool(raw: str, default: bool) -> bool:
    raw = raw.lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    return default


def env(key: str, default: Any, cast: Callable[[str], Any] = str) -> Any:
    """
    Typed environment lookup.

    Empty or malformed values fall back to `default`.
    """
    raw = os.environ.get(key, "").strip()
    if not raw:
        return default
    if cast is bool:
        return _as_bool(raw, default)
    try:
        return cast(raw)
    except ValueError:
        return default


def _from_env(key: str, default: Any, cast: Callable[[str], Any] = str):
    """Dataclass field read from the environment when the instance is built."""
    return field(default_factory=lambda: env(key, default, cast))


@dataclass
class AIConfig:
    """Generative extraction service."""
    provider: str = _from_env("AI_PROVIDER", "Gemini")
    api_key: str = _from_env("AI_API_KEY", "")
    model: str = _from_env("AI_MODEL", "gemini-2.5-flash")
    base_url: str = _from_env("AI_BASE_URL", "")
    timeout_sec: int = _from_env("AI_TIMEOUT_SEC", 120, int)
    # json_object asks the endpoint for strict JSON; anything else sends plain chat
    response_format: str = _from_env("AI_RESPONSE_FORMAT", "json_object", str.lower)
    max_retries: int = _from_env("AI_MAX_RETRIES", 3, int)
    retry_delay_sec: float = _from_env("AI_RETRY_DELAY_SEC", 2.0, float)

    @property
    def is_groq(self) -> bool:
        return self.provider.strip().lower() == "groq"

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key.strip())

    def get_normalized_base_url(self) -> str:
        """
        Base URL for the OpenAI SDK.

        A trailing /chat/completions is removed. Gemini gets its
        OpenAI-compatible endpoint when no URL is configured.
        """
        url = (self.base_url or "").strip().rstrip("/")
        if not url:
            return GEMINI_OPENAI_BASE_URL if self.provider.strip().lower() == "gemini" else ""
        url = url.removesuffix("/chat/completions")
        return url.rstrip("/") + "/"


@dataclass
class OCRConfig:
    """Tesseract settings for the legacy image path."""
    languages: str = _from_env("OCR_LANGUAGES", "eng+mar")
    tesseract_path: str = _from_env("TESSERACT_PATH", "")


@dataclass
class DBConfig:
    """PostgreSQL connection and target table."""
    host: str = _from_env("DB_HOST", "")
    port: int = _from_env("DB_PORT", 5432, int)
    name: str = _from_env("DB_NAME", "")
    user: str = _from_env("DB_USER", "")
    password: str = _from_env("DB_PASSWORD", "")
    ssl_mode: str = _from_env("DB_SSL_MODE", "prefer")
    table: str = _from_env("DB_TABLE", "voters_table")

    @property
    def is_configured(self) -> bool:
        return all((self.host, self.name, self.user))


@dataclass
class IngestConfig:
    """Batch ingestion limits."""
    # Pages past this index are never sent for extraction
    max_document_pages: int = _from_env("MAX_DOCUMENT_PAGES", 10, int)
    log_capacity: int = _from_env("OPERATOR_LOG_SIZE", 8, int)
    preview_size: int = _from_env("PREVIEW_SIZE", 10, int)
    use_legacy_ocr: bool = _from_env("USE_LEGACY_OCR", False, bool)


@dataclass
class Config:
    """
    Top-level settings.

    Paths are relative to VAULT_HOME (default: the working directory).
    """

    base_dir: Path = field(
        default_factory=lambda: Path(env("VAULT_HOME", "") or Path.cwd()).resolve()
    )
    logs_dir: Optional[Path] = None
    json_store_path: Optional[Path] = None

    debug: bool = _from_env("DEBUG", False, bool)
    log_to_file: bool = _from_env("LOG_TO_FILE", True, bool)
    # json | postgres
    store_backend: str = _from_env("STORE_BACKEND", "json", str.lower)

    ai: AIConfig = field(default_factory=AIConfig)
    ocr: OCRConfig = field(default_factory=OCRConfig)
    db: DBConfig = field(default_factory=DBConfig)
    ingest: IngestConfig = field(default_factory=IngestConfig)

    def __post_init__(self):
        self.logs_dir = self.logs_dir or self.base_dir / env("LOG_DIR", "logs")
        self.json_store_path = self.json_store_path or self.base_dir / env(
            "JSON_STORE_PATH", "vault/voters.json"
        )


_config: Optional[Config] = None


def get_config() -> Config:
    """Process-wide settings, built on first use."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Forget cached settings so the next get_config() re-reads the environment."""
    global _config
    _config = None
