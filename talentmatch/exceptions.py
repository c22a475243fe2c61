"""
Exceptions
Errors raised by the matching pipeline.
"""

from typing import Any, Dict, Optional


class MatchError(Exception):
    """Base class for errors surfaced to callers of the matching pipeline."""

    error_code = "MATCH_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "code": self.error_code,
            "details": self.details,
        }


class NotFoundError(MatchError):
    """A job or candidate id did not resolve."""

    error_code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: str):
        super().__init__(
            f"{entity.capitalize()} not found: {entity_id}",
            details={"entity": entity, "id": entity_id},
        )
        self.entity = entity
        self.entity_id = entity_id


class InvalidInputError(MatchError):
    """Malformed request, rejected before any scoring."""

    error_code = "INVALID_INPUT"


class InternalMatchError(MatchError):
    """Unexpected failure inside the pipeline."""

    error_code = "MATCHING_ERROR"
    PREFIX = "Matching failed: "

    def __init__(self, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"{self.PREFIX}{reason}", details=details)


class AugmentationUnavailableError(Exception):
    """The LLM backend cannot be reached or returned an error."""
    pass
