"""Exceptions raised by the EHR domain layer.

Everything derives from EhrDomainError so callers such as the CLI can catch
domain failures uniformly.
"""


class EhrDomainError(Exception):
    """Base class for all domain errors."""


class AuthorizationError(EhrDomainError):
    """The caller lacks a required capability or is not authenticated."""

    def __init__(self, message: str, capability: str | None = None) -> None:
        super().__init__(message)
        self.capability = capability


class ValidationError(EhrDomainError):
    """A mandatory field is missing or invalid.

    Args:
        key: Machine-readable message key, e.g. ``Cohort.save.nameRequired``
        field: Name of the offending attribute
    """

    def __init__(self, key: str, field: str | None = None) -> None:
        super().__init__(key)
        self.key = key
        self.field = field


class StorageError(EhrDomainError):
    """The backing store is unreachable or rejected the operation."""


class EntityNotFoundError(StorageError):
    """The entity to modify does not exist in the backing store."""
