"""
Database package: declarative base and async session plumbing.
"""

from bookwise.database.base import Base, TimestampMixin

__all__ = ["Base", "TimestampMixin"]
