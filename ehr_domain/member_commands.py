"""Cohort membership commands for the ehr CLI."""

from cyclopts import App

member_app = App(name="member", help="Manage cohort members")


@member_app.command
def add(cohort_id: int, *patient_ids: int) -> None:
    """Add patients to a cohort."""
    from ehr_domain.cli import get_context, get_service, require_cohort

    service = get_service()
    context = get_context()
    cohort = require_cohort(service, cohort_id)
    before = cohort.size()
    for patient_id in patient_ids:
        cohort = service.add_member(cohort, patient_id, context)
    print(f"Added {cohort.size() - before} patient(s) to cohort {cohort_id}")


@member_app.command
def remove(cohort_id: int, *patient_ids: int) -> None:
    """Remove patients from a cohort."""
    from ehr_domain.cli import get_context, get_service, require_cohort

    service = get_service()
    context = get_context()
    cohort = require_cohort(service, cohort_id)
    before = cohort.size()
    for patient_id in patient_ids:
        cohort = service.remove_member(cohort, patient_id, context)
    print(f"Removed {before - cohort.size()} patient(s) from cohort {cohort_id}")


@member_app.command(name="list")
def list_cohorts(patient_id: int) -> None:
    """List the cohorts a patient belongs to."""
    from ehr_domain.cli import format_cohort, get_service

    cohorts = get_service().get_cohorts_containing_patient_id(patient_id)

    if not cohorts:
        print(f"Patient {patient_id} is not in any cohort")
        return

    print(f"Cohorts containing patient {patient_id}:\n")
    for cohort in cohorts:
        print(f"  {format_cohort(cohort)}")
