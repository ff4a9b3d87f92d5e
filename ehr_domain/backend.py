"""Storage interfaces consumed by the services."""

from abc import ABC, abstractmethod

from ehr_domain.models import Cohort, Concept, ConceptAnswer


class CohortStore(ABC):
    """Abstract base class for cohort storage backends.

    Implementations hand out detached copies: a mutation is only persisted
    when the cohort is saved again.
    """

    @abstractmethod
    def save_cohort(self, cohort: Cohort) -> Cohort:
        """Insert or update a cohort.

        Assigns ``cohort_id`` and ``uuid`` on first insert, copying them onto
        ``cohort`` only once the write succeeds, and returns the persisted cohort.
        """
        pass

    @abstractmethod
    def get_cohort(self, cohort_id: int) -> Cohort | None:
        """Get a cohort by its surrogate id."""
        pass

    @abstractmethod
    def get_cohort_by_uuid(self, uuid: str) -> Cohort | None:
        """Get a cohort by its global id."""
        pass

    @abstractmethod
    def get_cohort_by_name(self, name: str) -> Cohort | None:
        """Get a cohort by exact name."""
        pass

    @abstractmethod
    def get_cohorts(self, name_fragment: str) -> list[Cohort]:
        """Get cohorts whose name contains the fragment, ignoring case."""
        pass

    @abstractmethod
    def get_all_cohorts(self, include_voided: bool = False) -> list[Cohort]:
        """Get every cohort, optionally including voided ones."""
        pass

    @abstractmethod
    def get_cohorts_containing_patient_id(self, patient_id: int) -> list[Cohort]:
        """Get the non-voided cohorts that have the patient as a member."""
        pass

    @abstractmethod
    def delete_cohort(self, cohort: Cohort) -> Cohort:
        """Permanently delete a cohort.

        Raises:
            EntityNotFoundError: If the cohort was never persisted
        """
        pass


class ConceptAnswerStore(ABC):
    """Abstract base class for concept answer storage backends."""

    @abstractmethod
    def save_concept_answer(self, answer: ConceptAnswer) -> ConceptAnswer:
        """Insert or update a concept answer, assigning ids on first insert."""
        pass

    @abstractmethod
    def get_concept_answer(self, concept_answer_id: int) -> ConceptAnswer | None:
        """Get a concept answer by its surrogate id."""
        pass

    @abstractmethod
    def get_concept_answer_by_uuid(self, uuid: str) -> ConceptAnswer | None:
        """Get a concept answer by its global id."""
        pass

    @abstractmethod
    def get_concept_answers(self, concept: Concept) -> list[ConceptAnswer]:
        """Get all answers recorded for a question concept."""
        pass

    @abstractmethod
    def delete_concept_answer(self, answer: ConceptAnswer) -> ConceptAnswer:
        """Permanently delete a concept answer."""
        pass
