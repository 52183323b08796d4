"""
Domain Layer - Core DDD building blocks

This module provides base classes for Domain-Driven Design:
- Entities: Objects with identity and lifecycle
- Value Objects: Immutable objects compared by value
- Exceptions: Domain-specific error handling
"""

from bookwise.core.domain.entities import (
    AggregateRoot,
    Entity,
    generate_uuid_str,
)
from bookwise.core.domain.exceptions import (
    AuthorizationException,
    BookingConflictException,
    DomainException,
    DuplicateEntityException,
    EntityNotFoundException,
    IntegrationException,
    InvalidOperationException,
    PolicyViolationException,
    TokenInvalidException,
    ValidationException,
)
from bookwise.core.domain.value_objects import (
    StatusEnum,
    ValueObject,
)

__all__ = [
    # Entities
    "Entity",
    "AggregateRoot",
    "generate_uuid_str",
    # Value Objects
    "ValueObject",
    "StatusEnum",
    # Exceptions
    "DomainException",
    "ValidationException",
    "EntityNotFoundException",
    "InvalidOperationException",
    "AuthorizationException",
    "DuplicateEntityException",
    "BookingConflictException",
    "PolicyViolationException",
    "TokenInvalidException",
    "IntegrationException",
]
