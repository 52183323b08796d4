"""
Domain Exceptions

Every error the scheduling core surfaces synchronously to its callers.
They are translated to HTTP responses in bookwise.api.exception_handlers.
"""

from typing import Any


class DomainException(Exception):
    """
    Base of the scheduling error taxonomy.

    ``code`` is the stable machine-readable identifier clients branch on
    (e.g. "BOOKING_CONFLICT", "POLICY_VIOLATION"); ``details`` carries the
    structured fields a caller needs to render or recover from the error.
    """

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(DomainException):
    """
    Raised when input is missing or malformed.

    Always raised before any mutation takes place.
    """

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field


class EntityNotFoundException(DomainException):
    """Raised when a referenced entity is absent."""

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        message: str | None = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        msg = message or f"{entity_type} with ID {entity_id} not found"
        super().__init__(
            msg,
            "ENTITY_NOT_FOUND",
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class InvalidOperationException(DomainException):
    """Raised when an operation is not valid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None):
        self.operation = operation
        self.current_state = current_state
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(
            msg,
            "INVALID_OPERATION",
            {"operation": operation, "current_state": current_state},
        )


class AuthorizationException(DomainException):
    """Raised when an actor's role does not allow the operation."""

    def __init__(self, operation: str, resource: str | None = None, message: str | None = None):
        self.operation = operation
        self.resource = resource
        msg = message or f"Not authorized to perform '{operation}'"
        if resource and not message:
            msg += f" on '{resource}'"
        super().__init__(
            msg,
            "AUTHORIZATION_ERROR",
            {
                "operation": operation,
                "resource": resource,
            },
        )


class DuplicateEntityException(DomainException):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: Any, message: str | None = None):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(
            message or f"{entity_type} with {field}='{value}' already exists",
            "DUPLICATE_ENTITY",
            {
                "entity_type": entity_type,
                "field": field,
                "value": str(value),
            },
        )


class BookingConflictException(DomainException):
    """Raised when a booking would overlap another blocking booking of the same staff."""

    def __init__(
        self,
        staff_id: str | None = None,
        time_slot: str | None = None,
        message: str | None = None,
    ):
        self.staff_id = staff_id
        self.time_slot = time_slot
        msg = message or "Time slot conflicts with an existing booking"
        details: dict[str, Any] = {}
        if staff_id:
            details["staff_id"] = staff_id
        if time_slot:
            details["time_slot"] = time_slot
        super().__init__(msg, "BOOKING_CONFLICT", details)


class PolicyViolationException(DomainException):
    """
    Raised when a time-window policy blocks an action.

    Carries the tenant-facing policy text and whether an admin
    could still perform the action with an override reason.
    """

    def __init__(
        self,
        message: str,
        policy_text: str | None = None,
        hours_remaining: float | None = None,
        admin_can_override: bool = True,
    ):
        self.policy_text = policy_text
        self.hours_remaining = hours_remaining
        self.admin_can_override = admin_can_override
        super().__init__(
            message,
            "POLICY_VIOLATION",
            {
                "policy_text": policy_text,
                "hours_remaining": hours_remaining,
                "admin_can_override": admin_can_override,
            },
        )


class TokenInvalidException(DomainException):
    """Raised for a self-serve token of the wrong type, expired, or already used."""

    def __init__(self, message: str = "Invalid token", token_type: str | None = None):
        self.token_type = token_type
        details: dict[str, Any] = {}
        if token_type:
            details["token_type"] = token_type
        super().__init__(message, "TOKEN_INVALID", details)


class IntegrationException(DomainException):
    """Raised when an external integration fails."""

    def __init__(self, service: str, message: str, original_error: Exception | None = None):
        self.service = service
        self.original_error = original_error
        details: dict[str, Any] = {"service": service}
        if original_error:
            details["original_error"] = str(original_error)
        super().__init__(message, "INTEGRATION_ERROR", details)
