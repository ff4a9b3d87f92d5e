"""Explicit actor context passed to every mutating service operation."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from ehr_domain.models import User


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class UserContext:
    """The caller on whose behalf an operation runs.

    ``user`` is None for an unauthenticated caller. ``clock`` supplies the
    timestamp used for audit stamping.
    """

    user: User | None
    clock: Callable[[], datetime] = field(default=utc_now, compare=False)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def now(self) -> datetime:
        return self.clock()
