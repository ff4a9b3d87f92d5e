"""Validated save pipeline shared by the domain services."""

import copy
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import structlog

from ehr_domain.auth import Authorizer
from ehr_domain.context import UserContext
from ehr_domain.errors import ValidationError

logger = structlog.get_logger()

T = TypeVar("T")


def is_missing(value: Any) -> bool:
    """A required value is missing when it is None or a blank string."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


class BaseService:
    """Base class for services that persist entities through a storage collaborator."""

    def __init__(self, authorizer: Authorizer) -> None:
        self.authorizer = authorizer

    def _save(
        self,
        entity: T,
        context: UserContext,
        *,
        create: str,
        edit: str,
        required: Sequence[tuple[str, str]],
        persist: Callable[[T], T],
    ) -> T:
        """Authorize, validate, stamp and persist an entity.

        Args:
            entity: Entity to save; new when its ``id`` is None. It is not modified
            context: Caller performing the save
            create: Capability required to insert a new entity
            edit: Capability required to update an existing entity
            required: ``(attribute, message_key)`` pairs checked in order
            persist: Storage upsert whose result is returned as-is

        Returns:
            The entity as returned by storage

        Raises:
            AuthorizationError: If the caller lacks the capability
            ValidationError: For the first missing required field
        """
        is_new = getattr(entity, "id", None) is None
        self.authorizer.require(context, create if is_new else edit)

        for attribute, key in required:
            if is_missing(getattr(entity, attribute)):
                logger.debug("Validation failed", entity_type=type(entity).__name__, field=attribute, key=key)
                raise ValidationError(key, field=attribute)

        # The caller's entity is never modified; stamping and persistence act on a copy.
        pending = copy.copy(entity)
        self._stamp_audit(pending, context, is_new)
        persisted = persist(pending)
        self._log_saved(persisted, is_new)
        return persisted

    def _stamp_audit(self, entity: Any, context: UserContext, is_new: bool) -> None:
        if is_new:
            if entity.creator is None:
                entity.creator = context.user
            if entity.date_created is None:
                entity.date_created = context.now()
        else:
            entity.changed_by = context.user
            entity.date_changed = context.now()

    def _log_saved(self, entity: Any, is_new: bool) -> None:
        # A logging failure must never fail the save.
        try:
            logger.info(
                "Entity saved",
                entity_type=type(entity).__name__,
                entity_id=getattr(entity, "id", None),
                created=is_new,
            )
        except Exception:
            pass
