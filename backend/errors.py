"""Failure kinds raised by services. Route handlers turn these into HTTP errors."""
from __future__ import annotations


class UpstreamError(Exception):
    """LLM call or data store failed, or the model produced no text."""


class LLMResponseError(UpstreamError):
    """Model returned text that is not valid JSON for the expected schema."""

    def __init__(self, message: str, raw: str | None = None):
        super().__init__(message)
        self.raw = raw


class ColumnMappingError(LLMResponseError):
    """Column mapping inference failed; nothing was imported."""


class ImportValidationError(ValueError):
    """Payload is empty or a row is missing a required field."""
