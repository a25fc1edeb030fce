"""Custom exceptions for the application."""
from typing import Any


class EntityNotFound(Exception):
    """Raised when an entity is not found in the database."""

    def __init__(self, entity_name: str, entity_id: Any):
        """
        Initialize the exception.

        Args:
            entity_name: Name of the entity that was not found
            entity_id: ID of the entity that was not found
        """
        super().__init__(f"{entity_name} with ID {entity_id} not found")
        self.entity_name = entity_name
        self.entity_id = entity_id


class ConflictingEntityFound(Exception):
    """Raised when an entity with a conflicting field already exists."""

    def __init__(self, entity_name: str, message: str, **fields: Any):
        """
        Initialize the exception.

        Args:
            entity_name: Name of the entity
            message: Human readable conflict description
            fields: The conflicting field values
        """
        super().__init__(message)
        self.entity_name = entity_name
        self.fields = fields


class MissingRequiredFields(ValueError):
    """Raised when required input fields are absent or blank."""

    def __init__(self, field_names: list[str]):
        super().__init__(f"Missing required fields: {', '.join(field_names)}")
        self.field_names = field_names


class InvalidDocument(ValueError):
    """Raised when an uploaded document is rejected before storage."""

    def __init__(self, field_name: str, reason: str):
        super().__init__(f"Invalid document '{field_name}': {reason}")
        self.field_name = field_name
        self.reason = reason


class AuthenticationError(Exception):
    """Base class for failures while resolving the caller's identity."""

    status_code: int = 401

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthorized(AuthenticationError):
    """Missing, malformed, invalid or expired credentials."""

    status_code = 401


class Forbidden(AuthenticationError):
    """Valid identity without a permitted role."""

    status_code = 403


class AuthServiceError(AuthenticationError):
    """The auth service could not be used for a reason other than connectivity."""

    status_code = 500


class UpstreamAuthError(Exception):
    """
    The remote auth service rejected the token.

    The upstream status code and body are passed back to the caller unchanged.
    """

    def __init__(self, status_code: int, body: Any):
        super().__init__(f"Auth service responded with status {status_code}")
        self.status_code = status_code
        self.body = body
