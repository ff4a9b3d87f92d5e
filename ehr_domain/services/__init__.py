"""Domain services."""

from ehr_domain.services.cohort import CohortService
from ehr_domain.services.concept import ConceptService

__all__ = ["CohortService", "ConceptService"]
