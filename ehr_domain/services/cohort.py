"""Cohort management service."""

import dataclasses
import warnings

import structlog

from ehr_domain import privileges
from ehr_domain.auth import Authorizer
from ehr_domain.backend import CohortStore
from ehr_domain.context import UserContext
from ehr_domain.errors import ValidationError
from ehr_domain.models import Cohort, Patient
from ehr_domain.services.base import BaseService, is_missing

logger = structlog.get_logger()

COHORT_REQUIRED_FIELDS = (
    ("name", "Cohort.save.nameRequired"),
    ("description", "Cohort.save.descriptionRequired"),
)


class CohortService(BaseService):
    """Saves, queries, voids and purges cohorts.

    Every mutating operation takes the calling UserContext explicitly. Read
    operations pass straight through to the store.
    """

    def __init__(self, store: CohortStore, authorizer: Authorizer) -> None:
        super().__init__(authorizer)
        self.store = store

    def save_cohort(self, cohort: Cohort, context: UserContext) -> Cohort:
        """Create or update a cohort.

        Requires ``Add Cohorts`` for a new cohort and ``Edit Cohorts`` for an
        existing one. Name and description are mandatory.
        """
        logger.debug("Saving cohort", cohort_id=cohort.cohort_id, name=cohort.name)
        return self._save(
            cohort,
            context,
            create=privileges.ADD_COHORTS,
            edit=privileges.EDIT_COHORTS,
            required=COHORT_REQUIRED_FIELDS,
            persist=self.store.save_cohort,
        )

    def create_cohort(self, cohort: Cohort, context: UserContext) -> Cohort:
        """Deprecated alias of save_cohort."""
        warnings.warn("create_cohort is deprecated, use save_cohort", DeprecationWarning, stacklevel=2)
        return self.save_cohort(cohort, context)

    def update_cohort(self, cohort: Cohort, context: UserContext) -> Cohort:
        """Deprecated alias of save_cohort."""
        warnings.warn("update_cohort is deprecated, use save_cohort", DeprecationWarning, stacklevel=2)
        return self.save_cohort(cohort, context)

    def add_member(self, cohort: Cohort, patient_id: int, context: UserContext) -> Cohort:
        """Add a patient id to a cohort, saving only if it was not already a member."""
        if cohort.contains(patient_id):
            logger.debug("Patient already in cohort", cohort_id=cohort.cohort_id, patient_id=patient_id)
            return cohort

        logger.info("Adding patient to cohort", cohort_id=cohort.cohort_id, patient_id=patient_id)
        updated = dataclasses.replace(cohort, member_ids=cohort.member_ids | {patient_id})
        return self.save_cohort(updated, context)

    def remove_member(self, cohort: Cohort, patient_id: int, context: UserContext) -> Cohort:
        """Remove a patient id from a cohort, saving only if it was a member."""
        if not cohort.contains(patient_id):
            logger.debug("Patient not in cohort", cohort_id=cohort.cohort_id, patient_id=patient_id)
            return cohort

        logger.info("Removing patient from cohort", cohort_id=cohort.cohort_id, patient_id=patient_id)
        updated = dataclasses.replace(cohort, member_ids=cohort.member_ids - {patient_id})
        return self.save_cohort(updated, context)

    def add_patient_to_cohort(self, cohort: Cohort, patient: Patient, context: UserContext) -> Cohort:
        return self.add_member(cohort, patient.patient_id, context)

    def remove_patient_from_cohort(self, cohort: Cohort, patient: Patient, context: UserContext) -> Cohort:
        return self.remove_member(cohort, patient.patient_id, context)

    def void_cohort(self, cohort: Cohort, reason: str, context: UserContext) -> Cohort:
        """Mark a cohort as voided, keeping it in storage.

        Raises:
            ValidationError: If no reason is given
        """
        if is_missing(reason):
            raise ValidationError("Cohort.void.reasonRequired", field="void_reason")

        logger.info("Voiding cohort", cohort_id=cohort.cohort_id, reason=reason)
        voided = dataclasses.replace(
            cohort,
            voided=True,
            void_reason=reason,
            voided_by=context.user,
            date_voided=context.now(),
        )
        return self.save_cohort(voided, context)

    def unvoid_cohort(self, cohort: Cohort, context: UserContext) -> Cohort:
        """Restore a voided cohort."""
        logger.info("Unvoiding cohort", cohort_id=cohort.cohort_id)
        restored = dataclasses.replace(cohort, voided=False, void_reason=None, voided_by=None, date_voided=None)
        return self.save_cohort(restored, context)

    def purge_cohort(self, cohort: Cohort, context: UserContext) -> Cohort:
        """Permanently delete a cohort. Requires ``Purge Cohorts``."""
        self.authorizer.require(context, privileges.PURGE_COHORTS)
        logger.info("Purging cohort", cohort_id=cohort.cohort_id)
        return self.store.delete_cohort(cohort)

    def get_cohort(self, cohort_id: int) -> Cohort | None:
        return self.store.get_cohort(cohort_id)

    def get_cohort_by_uuid(self, uuid: str) -> Cohort | None:
        return self.store.get_cohort_by_uuid(uuid)

    def get_cohort_by_name(self, name: str) -> Cohort | None:
        return self.store.get_cohort_by_name(name)

    def get_cohorts(self, name_fragment: str | None = None) -> list[Cohort]:
        """Get cohorts whose name contains the fragment.

        Calling without a fragment is the deprecated spelling of get_all_cohorts().
        """
        if name_fragment is None:
            warnings.warn("get_cohorts() is deprecated, use get_all_cohorts", DeprecationWarning, stacklevel=2)
            return self.get_all_cohorts()
        return self.store.get_cohorts(name_fragment)

    def get_all_cohorts(self, include_voided: bool = False) -> list[Cohort]:
        return self.store.get_all_cohorts(include_voided)

    def get_cohorts_containing_patient(self, patient: Patient) -> list[Cohort]:
        return self.store.get_cohorts_containing_patient_id(patient.patient_id)

    def get_cohorts_containing_patient_id(self, patient_id: int) -> list[Cohort]:
        return self.store.get_cohorts_containing_patient_id(patient_id)
