"""
Value object base classes

Time ranges, quiet hours, tenant settings and audit log entries are frozen
dataclasses validated on construction; statuses are string enums stored by
value in the database and in JSON payloads.
"""

from abc import ABC
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class ValueObject(ABC):
    """Frozen, compared by value. Subclasses put their checks in ``_validate``."""

    def __post_init__(self):
        self._validate()

    def _validate(self) -> None:
        pass


class StatusEnum(str, Enum):
    """String enum that renders as its raw value in logs and f-strings."""

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str):
        """Look up a member by value, ignoring case. Raises ValueError when unknown."""
        normalized = value.strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        raise ValueError(f"Unknown {cls.__name__}: {value!r}")
