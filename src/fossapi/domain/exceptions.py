"""
Exception hierarchy for fossapi.

All exceptions inherit from FossaError for easy catching. Locator parse
errors and entity validation errors are also ValueErrors so they surface
naturally through pydantic validators.
"""

from __future__ import annotations

from typing import Any


class FossaError(Exception):
    """Base exception for all fossapi errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- Locator grammar ---


class ParseError(FossaError, ValueError):
    """Raised when text is not a well-formed locator."""

    def __init__(self, message: str, text: str, field: str | None = None) -> None:
        super().__init__(message, {"text": text, "field": field})
        self.text = text
        self.field = field


class MalformedLocator(ParseError):
    """The locator text does not match any locator shape."""


class InvalidNamespace(ParseError):
    """The namespace belongs to a different locator family than requested."""

    def __init__(self, message: str, text: str, namespace: str) -> None:
        super().__init__(message, text, field="namespace")
        self.namespace = namespace
        self.details["namespace"] = namespace


class EmptyField(ParseError):
    """A required locator segment is zero-length."""


class LocatorKindMismatch(FossaError, ValueError):
    """A valid locator was supplied where a different kind was expected."""

    def __init__(self, message: str, expected: str, actual: str, locator: str) -> None:
        super().__init__(
            message,
            {"expected": expected, "actual": actual, "locator": locator},
        )
        self.expected = expected
        self.actual = actual
        self.locator = locator


# --- Entities and state ---


class ValidationError(FossaError, ValueError):
    """Raised when an entity or request payload fails validation."""

    def __init__(self, message: str, entity_type: str | None = None, errors: list[Any] | None = None) -> None:
        super().__init__(message, {"entity_type": entity_type, "errors": errors or []})
        self.entity_type = entity_type
        self.errors = errors or []


class NotFound(FossaError):
    """The requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: str, message: str | None = None) -> None:
        super().__init__(
            message or f"{entity_type} not found: {entity_id}",
            {"entity_type": entity_type, "id": entity_id},
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class IntegrityError(FossaError):
    """A write would break referential integrity between entities."""

    def __init__(self, message: str, locator: str, missing: str) -> None:
        super().__init__(message, {"locator": locator, "missing": missing})
        self.locator = locator
        self.missing = missing


class OrphanRevision(IntegrityError):
    """A revision was inserted whose derived project does not exist."""


class OrphanDependency(IntegrityError):
    """A dependency was inserted under a revision that does not exist."""


class ConfigError(FossaError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, config_key: str | None = None) -> None:
        super().__init__(message, {"config_key": config_key})
        self.config_key = config_key


# --- Transport ---


class TransportError(FossaError):
    """The request could not be completed or the API returned an error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, {"status_code": status_code})
        self.status_code = status_code


class Unauthorized(TransportError):
    """The API rejected the credentials (401/403)."""


class RateLimited(TransportError):
    """The API throttled the request (429)."""

    def __init__(self, message: str, retry_after: int | None = None) -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after
        self.details["retry_after"] = retry_after


class ApiError(TransportError):
    """Any other non-success response from the API."""
