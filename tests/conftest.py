import os
import sys

# Keep test runs from writing log files into the repo
os.environ.setdefault("LOG_TO_FILE", "0")

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

from voter_vault.config import AIConfig, Config, reset_config


@pytest.fixture
def config(tmp_path, monkeypatch):
    """Isolated config rooted at tmp_path with AI credentials present."""
    monkeypatch.setenv("VAULT_HOME", str(tmp_path))
    monkeypatch.setenv("AI_API_KEY", "test-key")
    monkeypatch.setenv("STORE_BACKEND", "json")
    monkeypatch.delenv("USE_LEGACY_OCR", raising=False)
    monkeypatch.delenv("MAX_DOCUMENT_PAGES", raising=False)
    reset_config()
    cfg = Config()
    yield cfg
    reset_config()


@pytest.fixture
def ai_config():
    return AIConfig(provider="Gemini", api_key="test-key", max_retries=2, retry_delay_sec=1.0)
