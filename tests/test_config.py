from voter_vault.config import AIConfig, GEMINI_OPENAI_BASE_URL


def test_defaults(config, tmp_path):
    assert config.store_backend == "json"
    assert config.json_store_path == tmp_path.resolve() / "vault" / "voters.json"
    assert config.ingest.max_document_pages == 10
    assert config.ingest.log_capacity >= 1
    assert config.ai.has_credentials


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("AI_MAX_RETRIES", "5")
    monkeypatch.setenv("AI_RETRY_DELAY_SEC", "0.5")
    monkeypatch.setenv("AI_TIMEOUT_SEC", "not a number")

    ai = AIConfig()

    assert ai.max_retries == 5
    assert ai.retry_delay_sec == 0.5
    assert ai.timeout_sec == 120


def test_base_url_normalization():
    assert AIConfig(provider="Gemini", base_url="").get_normalized_base_url() == GEMINI_OPENAI_BASE_URL
    assert AIConfig(provider="OpenAI", base_url="").get_normalized_base_url() == ""
    url = AIConfig(base_url="https://api.example.com/v1/chat/completions/").get_normalized_base_url()
    assert url == "https://api.example.com/v1/"


def test_groq_provider():
    assert AIConfig(provider="groq").is_groq
    assert not AIConfig(provider="Gemini").is_groq
