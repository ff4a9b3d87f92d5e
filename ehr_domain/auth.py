"""Authorization collaborator used by the services."""

from abc import ABC, abstractmethod

import structlog

from ehr_domain.context import UserContext
from ehr_domain.errors import AuthorizationError

logger = structlog.get_logger()


class Authorizer(ABC):
    """Abstract base class for capability checks."""

    @abstractmethod
    def require(self, context: UserContext, capability: str) -> None:
        """Raise AuthorizationError unless the caller holds the capability."""
        pass


class PrivilegeAuthorizer(Authorizer):
    """Checks capabilities against the privileges carried by the context user."""

    def require(self, context: UserContext, capability: str) -> None:
        user = context.user
        if user is None:
            logger.warning("Unauthenticated caller denied", capability=capability)
            raise AuthorizationError(f"Authentication required for privilege: {capability}", capability=capability)

        if not user.has_privilege(capability):
            logger.warning("Privilege check failed", username=user.username, capability=capability)
            raise AuthorizationError(f"User {user.username} lacks privilege: {capability}", capability=capability)

        logger.debug("Privilege check passed", username=user.username, capability=capability)
