"""
Generative voter extraction.

Sends page text or a scanned image to a multimodal model and normalizes
the returned JSON into voter records.

A fresh SDK client is built from the AIConfig on every call, so a key
changed between calls is always picked up and no connection state is
held between calls.

Error policy:
- Invalid/unknown credential: re-raised unchanged, never retried
- Rate limit or quota (429 / "quota"): raised as QuotaExceededError, never retried
- Anything else: retried with exponential backoff, then re-raised unchanged
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

from groq import Groq
from openai import OpenAI

from ..config import AIConfig
from ..exceptions import ConfigurationError, ExtractionError, QuotaExceededError
from ..logger import get_logger
from ..models import ExtractionResponse
from ..utils.ai_parser import parse_json_object
from ..utils.image_utils import to_data_url
from ..utils.timing import timed_operation
from .ai_normalizer import normalize_response


EXTRACTION_PROMPT = """
You read pages of Indian electoral rolls (often in Marathi) and return voter data as JSON.

Document level, look for: Assembly Constituency, Parliamentary Constituency,
Part No, Part Name and Polling Station (name and address).
For each voter: EPIC No, Name, Age, Gender (M/F), Parent/Spouse Name, Serial No.
Transliterate Marathi names and details to English.

Respond with a single JSON object and nothing else:
{
  "voters": [
    {
      "epicNo": "ABC1234567",
      "name": "",
      "age": 0,
      "gender": "M",
      "parentSpouseName": "",
      "serialNo": "",
      "partNo": "",
      "partName": "",
      "assemblyConstituency": "",
      "parliamentaryConstituency": "",
      "pollingStation": {"name": "", "address": ""}
    }
  ],
  "meta": {
    "assemblyConstituency": "",
    "parliamentaryConstituency": "",
    "partNo": "",
    "partName": ""
  }
}
Omit a field rather than guessing it.
""".strip()

AUTH_STATUS_CODES = {401, 403, 404}
AUTH_MESSAGES = (
    "requested entity was not found",
    "api key not valid",
    "invalid api key",
    "incorrect api key",
)


ClientFactory = Callable[[AIConfig], Any]


def create_ai_client(ai_config: AIConfig) -> Any:
    """
    Build a chat-completions client for the configured provider.

    Groq uses its own SDK; every other provider goes through the OpenAI SDK
    against an OpenAI-compatible endpoint (Gemini by default).
    """
    if ai_config.is_groq:
        return Groq(
            api_key=ai_config.api_key,
            timeout=ai_config.timeout_sec,
            max_retries=0,
        )

    return OpenAI(
        api_key=ai_config.api_key,
        base_url=ai_config.get_normalized_base_url() or None,
        timeout=ai_config.timeout_sec,
        max_retries=0,
    )


def _status_code(error: BaseException) -> Optional[int]:
    code = getattr(error, "status_code", None)
    if code is None:
        code = getattr(getattr(error, "response", None), "status_code", None)
    return code if isinstance(code, int) else None


def is_authorization_error(error: BaseException) -> bool:
    """True when the upstream rejected the credential itself."""
    if _status_code(error) in AUTH_STATUS_CODES:
        return True
    message = str(error).lower()
    return any(token in message for token in AUTH_MESSAGES)


def is_quota_error(error: BaseException) -> bool:
    if _status_code(error) == 429:
        return True
    message = str(error)
    return "429" in message or "quota" in message.lower()


class VoterExtractor:
    """
    Extract voter records from page text or images with a generative model.
    """

    name = "VoterExtractor"

    def __init__(
        self,
        ai_config: AIConfig,
        client_factory: ClientFactory = create_ai_client,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.ai_config = ai_config
        self.client_factory = client_factory
        self.sleep = sleep
        self.logger = get_logger(self.name)

    def extract_text(self, text: str) -> ExtractionResponse:
        """Extract voters from flattened page text."""
        content = f"CONTENT TO PROCESS:\n{text}"
        return self._extract(content, source="text")

    def extract_image(self, image_b64: str, mime_type: str) -> ExtractionResponse:
        """Extract voters from a base64-encoded page image."""
        content = [
            {"type": "text", "text": "Electoral roll page image."},
            {"type": "image_url", "image_url": {"url": to_data_url(image_b64, mime_type)}},
        ]
        return self._extract(content, source="image")

    def complete(self, system_prompt: str, user_content: Any, json_output: bool = True) -> str:
        """
        Run one chat completion with the extraction error policy applied.

        Returns:
            Raw message content
        """
        if not self.ai_config.has_credentials:
            raise ConfigurationError("AI_API_KEY not set", config_key="AI_API_KEY")

        max_retries = max(self.ai_config.max_retries, 0)
        retry_delay = self.ai_config.retry_delay_sec

        for attempt in range(max_retries + 1):
            try:
                return self._call_ai(system_prompt, user_content, json_output)
            except Exception as e:
                if is_authorization_error(e):
                    self.logger.error(f"AI credential rejected: {e}")
                    raise
                if is_quota_error(e):
                    self.logger.warning(f"AI quota exhausted: {e}")
                    raise QuotaExceededError(str(e)) from e
                if attempt == max_retries:
                    self.logger.error(f"AI call failed after {max_retries + 1} attempts: {e}")
                    raise

                wait = retry_delay * (2 ** attempt)
                self.logger.warning(
                    f"AI call failed (attempt {attempt + 1}/{max_retries + 1}), "
                    f"retrying in {wait:.1f}s: {e}"
                )
                self.sleep(wait)

        raise ExtractionError("AI call did not run", ai_provider=self.ai_config.provider)

    def _extract(self, user_content: Any, source: str) -> ExtractionResponse:
        with timed_operation(f"AI extraction ({source})", self.logger):
            content = self.complete(EXTRACTION_PROMPT, user_content)

        raw = parse_json_object(content)
        if not raw:
            self.logger.warning(f"AI returned no usable JSON for {source} input")
        return normalize_response(raw)

    def _call_ai(self, system_prompt: str, user_content: Any, json_output: bool) -> str:
        ai_config = self.ai_config
        client = self.client_factory(ai_config)

        payload: dict[str, Any] = {
            "model": ai_config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
        }
        if json_output and ai_config.response_format == "json_object":
            payload["response_format"] = {"type": "json_object"}

        self.logger.debug(f"Calling AI model={ai_config.model} provider={ai_config.provider}")
        resp = client.chat.completions.create(**payload)

        try:
            content = resp.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise ExtractionError(
                f"Unexpected response shape: {e}", ai_provider=ai_config.provider
            ) from e

        usage = getattr(resp, "usage", None)
        if usage is not None:
            self.logger.debug(
                f"Usage prompt_tokens={getattr(usage, 'prompt_tokens', 0)} "
                f"completion_tokens={getattr(usage, 'completion_tokens', 0)}"
            )

        return str(content or "")
