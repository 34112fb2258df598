import json
from types import SimpleNamespace

import pytest

from voter_vault.config import AIConfig
from voter_vault.exceptions import ConfigurationError, QuotaExceededError
from voter_vault.processors.ai_extractor import (
    VoterExtractor,
    is_authorization_error,
    is_quota_error,
)


class FakeAPIError(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class FakeClient:
    """Chat-completions stand-in that replays queued outcomes."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **payload):
        self.calls.append(payload)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        message = SimpleNamespace(content=outcome)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=None)


def make_extractor(ai_config, outcomes):
    client = FakeClient(outcomes)
    sleeps = []
    extractor = VoterExtractor(ai_config, client_factory=lambda cfg: client, sleep=sleeps.append)
    return extractor, client, sleeps


def test_extract_text_normalizes_response(ai_config):
    body = json.dumps({
        "voters": [{"epicNo": "LMN0001112", "name": "R. Singh", "age": 52, "gender": "प"}],
        "meta": {"assemblyConstituency": "Kothrud", "partNo": "7"},
    })
    extractor, client, _ = make_extractor(ai_config, [body])

    result = extractor.extract_text("page words")

    assert [v.epic_no for v in result.voters] == ["LMN0001112"]
    assert result.voters[0].assembly_constituency == "Kothrud"
    payload = client.calls[0]
    assert payload["model"] == ai_config.model
    assert payload["response_format"] == {"type": "json_object"}
    assert payload["messages"][1]["content"] == "CONTENT TO PROCESS:\npage words"


def test_extract_image_sends_data_url(ai_config):
    extractor, client, _ = make_extractor(ai_config, ['{"voters": []}'])

    result = extractor.extract_image("aGVsbG8=", "image/png")

    assert result.voters == []
    content = client.calls[0]["messages"][1]["content"]
    assert content[1]["image_url"]["url"] == "data:image/png;base64,aGVsbG8="


def test_fenced_response_is_parsed(ai_config):
    body = '```json\n{"voters": [{"epicNo": "ABC1234567", "name": "A"}]}\n```'
    extractor, _, _ = make_extractor(ai_config, [body])

    assert len(extractor.extract_text("x")) == 1


def test_unparseable_response_gives_no_voters(ai_config):
    extractor, _, _ = make_extractor(ai_config, ["sorry, I cannot help"])

    assert extractor.extract_text("x").voters == []


def test_quota_error_not_retried(ai_config):
    extractor, client, sleeps = make_extractor(
        ai_config, [FakeAPIError("Resource exhausted", status_code=429)]
    )

    with pytest.raises(QuotaExceededError) as exc_info:
        extractor.extract_text("x")

    assert str(exc_info.value) == "QUOTA_EXCEEDED"
    assert len(client.calls) == 1
    assert sleeps == []


def test_quota_detected_from_message(ai_config):
    extractor, _, _ = make_extractor(ai_config, [FakeAPIError("You exceeded your current quota")])

    with pytest.raises(QuotaExceededError):
        extractor.extract_text("x")


def test_auth_error_propagates_unchanged(ai_config):
    error = FakeAPIError("Requested entity was not found.", status_code=404)
    extractor, client, sleeps = make_extractor(ai_config, [error])

    with pytest.raises(FakeAPIError) as exc_info:
        extractor.extract_text("x")

    assert exc_info.value is error
    assert len(client.calls) == 1
    assert sleeps == []


def test_transient_errors_retried_with_backoff(ai_config):
    extractor, client, sleeps = make_extractor(
        ai_config,
        [FakeAPIError("upstream 500"), FakeAPIError("upstream 503"), '{"voters": []}'],
    )

    assert extractor.extract_text("x").voters == []
    assert len(client.calls) == 3
    assert sleeps == [1.0, 2.0]


def test_transient_error_reraised_after_retries(ai_config):
    errors = [FakeAPIError(f"timeout {i}") for i in range(3)]
    extractor, client, _ = make_extractor(ai_config, errors)

    with pytest.raises(FakeAPIError) as exc_info:
        extractor.extract_text("x")

    assert exc_info.value is errors[-1]
    assert len(client.calls) == 3


def test_missing_key_is_configuration_error():
    extractor = VoterExtractor(AIConfig(api_key=""), client_factory=lambda cfg: None)

    with pytest.raises(ConfigurationError):
        extractor.extract_text("x")


def test_complete_without_json_format(ai_config):
    extractor, client, _ = make_extractor(ai_config, ["- bullet"])

    assert extractor.complete("prompt", "data", json_output=False) == "- bullet"
    assert "response_format" not in client.calls[0]


def test_error_classifiers():
    assert is_authorization_error(FakeAPIError("denied", status_code=401))
    assert is_authorization_error(FakeAPIError("API key not valid. Please pass a valid API key."))
    assert not is_authorization_error(FakeAPIError("upstream 500", status_code=500))
    assert is_quota_error(FakeAPIError("429 Too Many Requests"))
    assert not is_quota_error(FakeAPIError("bad gateway", status_code=502))
