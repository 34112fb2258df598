"""
Exception hierarchy for Voter Vault.

Everything raised by this package derives from VoterVaultError. Upstream
SDK errors that reject the AI credential are deliberately left unwrapped
so callers see the provider's own exception and can re-authorize.
"""

from __future__ import annotations

from typing import Any, Optional


QUOTA_EXCEEDED = "QUOTA_EXCEEDED"


class VoterVaultError(Exception):
    """
    Base application error.

    Attributes:
        message: Human-readable error message
        details: Context for logs (file, page, operation...)
        recoverable: True when the batch can carry on past this error
    """

    recoverable_default = False

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        recoverable: Optional[bool] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = {k: v for k, v in (details or {}).items() if v is not None}
        self.recoverable = self.recoverable_default if recoverable is None else recoverable

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} | Details: {self.details}"


class ConfigurationError(VoterVaultError):
    """Missing or invalid setting, e.g. no AI_API_KEY or an unknown STORE_BACKEND."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message, {"config_key": config_key})


class SourceReadError(VoterVaultError):
    """A source file (or one of its pages) could not be read."""

    def __init__(self, message: str, file_name: Optional[str] = None, page_number: Optional[int] = None):
        super().__init__(message, {"file_name": file_name or None, "page_number": page_number})


class UnsupportedFileError(SourceReadError):
    def __init__(self, file_name: str):
        super().__init__(f"Unsupported file type: {file_name}", file_name=file_name)


class ExtractionError(VoterVaultError):
    """The generative call failed or answered in an unusable shape."""

    recoverable_default = True

    def __init__(self, message: str, ai_provider: Optional[str] = None, response_text: Optional[str] = None):
        preview = response_text[:500] if response_text else None
        super().__init__(message, {"ai_provider": ai_provider or None, "response_preview": preview})


class QuotaExceededError(ExtractionError):
    """
    Upstream rate limit or quota exhausted (HTTP 429 / "quota").

    Renders as the bare QUOTA_EXCEEDED kind; the provider's text stays on
    `upstream_message`.
    """

    kind = QUOTA_EXCEEDED

    def __init__(self, upstream_message: str = ""):
        super().__init__(QUOTA_EXCEEDED)
        self.upstream_message = upstream_message

    def __str__(self) -> str:
        return self.kind


class OCRError(VoterVaultError):
    def __init__(self, message: str, languages: Optional[str] = None):
        super().__init__(message, {"languages": languages or None})


class TesseractNotFoundError(OCRError):
    """The tesseract binary is missing or not on PATH."""

    def __init__(self, tesseract_path: Optional[str] = None):
        super().__init__(
            "Tesseract OCR not found. Install it with Marathi data "
            "(e.g. `sudo apt install tesseract-ocr tesseract-ocr-mar`) "
            "or point TESSERACT_PATH at the binary."
        )
        if tesseract_path:
            self.details["tesseract_path_tried"] = tesseract_path


class DataPersistenceError(VoterVaultError):
    """
    Voter store read or write failed.

    `operation` names the store call (upsert, delete, restore...).
    """

    def __init__(self, message: str, operation: Optional[str] = None, file_path: Optional[str] = None):
        super().__init__(message, {"operation": operation or None, "file_path": file_path or None})
        self.operation = operation or ""
