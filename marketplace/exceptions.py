"""Errors surfaced by the bid services."""

from __future__ import annotations

from typing import Any, Iterable


class MarketplaceError(Exception):
    """Base class for errors raised to callers of the services."""


class NotFoundException(MarketplaceError):
    """Raised when an id or hash lookup misses."""

    def __init__(self, key: Any) -> None:
        super().__init__(f"Entity with identifier {key} does not exist")
        self.key = key


class ValidationException(MarketplaceError):
    """Raised when a request fails validation; carries every violation."""

    def __init__(self, message: str, errors: Iterable[str]) -> None:
        super().__init__(message)
        self.errors = list(errors)


class MessageException(MarketplaceError):
    """Raised when an operation is not allowed for the entity's current state."""
