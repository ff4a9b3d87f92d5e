"""CLI for managing cohorts."""

import sys
from typing import Annotated, Literal

import structlog
from cyclopts import App, Parameter

from ehr_domain.auth import PrivilegeAuthorizer
from ehr_domain.backend import CohortStore
from ehr_domain.backends import InMemoryCohortStore, YamlCohortStore
from ehr_domain.config import get_config
from ehr_domain.config_commands import config_app
from ehr_domain.context import UserContext
from ehr_domain.errors import EhrDomainError, EntityNotFoundError
from ehr_domain.member_commands import member_app
from ehr_domain.models import Cohort, User
from ehr_domain.services import CohortService

logger = structlog.get_logger()

app = App(
    help="ehr - manage patient cohorts",
)

app.command(member_app)
app.command(config_app)


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))


def get_store() -> CohortStore:
    """Get the configured cohort store."""
    config = get_config()
    backend_type = config.get("storage.backend")

    if backend_type == "yaml":
        return YamlCohortStore(config.get("storage.path"))
    elif backend_type == "memory":
        return InMemoryCohortStore()
    else:
        raise ValueError(f"Unknown storage backend: {backend_type}")


def get_service() -> CohortService:
    return CohortService(get_store(), PrivilegeAuthorizer())


def get_context() -> UserContext:
    """Build the caller context from the user.* configuration keys."""
    config = get_config()
    username = config.get("user.name")
    if not username:
        logger.debug("No user configured, running unauthenticated")
        return UserContext(user=None)

    user = User(
        user_id=None,
        username=username,
        privileges=frozenset(config.get_list("user.privileges")),
        superuser=config.get_bool("user.superuser"),
    )
    return UserContext(user=user)


def require_cohort(service: CohortService, cohort_id: int) -> Cohort:
    cohort = service.get_cohort(cohort_id)
    if cohort is None:
        raise EntityNotFoundError(f"Cohort {cohort_id} does not exist")
    return cohort


def format_cohort(cohort: Cohort) -> str:
    marker = "○" if cohort.voided else "●"
    return f"{marker} {cohort.cohort_id}: {cohort.name} ({cohort.size()} member(s))"


@app.command
def create(name: str, description: str) -> None:
    """Create a new cohort."""
    service = get_service()
    cohort = service.save_cohort(Cohort(name=name, description=description), get_context())
    print(f"Created cohort {cohort.cohort_id}: {cohort.name}")


@app.command
def show(cohort_id: int) -> None:
    """Show a cohort by ID."""
    cohort = require_cohort(get_service(), cohort_id)

    print(f"Cohort: {cohort.cohort_id}")
    print(f"UUID: {cohort.uuid}")
    print(f"Name: {cohort.name}")
    print(f"Description: {cohort.description}")
    print(f"Members: {', '.join(str(m) for m in sorted(cohort.member_ids)) or '-'}")
    if cohort.creator:
        print(f"Created by: {cohort.creator.username} at {cohort.date_created}")
    if cohort.voided:
        print(f"Voided: {cohort.void_reason}")


@app.command(name="list")
def list_cohorts(include_voided: bool = False) -> None:
    """List cohorts."""
    cohorts = get_service().get_all_cohorts(include_voided=include_voided)

    print(f"Found {len(cohorts)} cohort(s):\n")
    for cohort in cohorts:
        print(format_cohort(cohort))


@app.command
def search(name_fragment: str) -> None:
    """Find cohorts whose name contains a fragment."""
    cohorts = get_service().get_cohorts(name_fragment)

    print(f"Found {len(cohorts)} cohort(s):\n")
    for cohort in cohorts:
        print(format_cohort(cohort))


@app.command
def void(cohort_id: int, reason: str) -> None:
    """Void a cohort."""
    service = get_service()
    cohort = service.void_cohort(require_cohort(service, cohort_id), reason, get_context())
    print(f"Voided cohort {cohort.cohort_id}: {cohort.name}")


@app.command
def unvoid(cohort_id: int) -> None:
    """Restore a voided cohort."""
    service = get_service()
    cohort = service.unvoid_cohort(require_cohort(service, cohort_id), get_context())
    print(f"Unvoided cohort {cohort.cohort_id}: {cohort.name}")


@app.command
def purge(cohort_id: int) -> None:
    """Permanently delete a cohort."""
    service = get_service()
    cohort = service.purge_cohort(require_cohort(service, cohort_id), get_context())
    print(f"Purged cohort {cohort.cohort_id}: {cohort.name}")


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    try:
        app(tokens)
    except EhrDomainError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def run() -> None:
    app.meta()


if __name__ == "__main__":
    run()
