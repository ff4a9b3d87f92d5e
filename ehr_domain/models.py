"""Data models for the EHR domain layer."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class User:
    """An actor that can be authorized and recorded in audit fields."""

    user_id: int | None
    username: str
    privileges: frozenset[str] = frozenset()
    superuser: bool = False

    def has_privilege(self, privilege: str) -> bool:
        """Check whether the user holds a privilege."""
        return self.superuser or privilege in self.privileges


@dataclass(frozen=True)
class Patient:
    """A subject that cohorts refer to by id."""

    patient_id: int


@dataclass(frozen=True)
class Concept:
    """A coded concept, e.g. a question or an answer. Identified by ``concept_id``."""

    concept_id: int | None
    name: str = field(default="", compare=False)


@dataclass(frozen=True)
class Drug:
    """A drug, usable as an alternate form of a coded answer. Identified by ``drug_id``."""

    drug_id: int | None
    name: str = field(default="", compare=False)


@runtime_checkable
class Auditable(Protocol):
    """Objects that record who created and last changed them."""

    creator: User | None
    date_created: datetime | None
    changed_by: User | None
    date_changed: datetime | None


@dataclass(eq=False)
class Cohort:
    """A named collection of patient ids.

    Voiding is a soft delete: the cohort stays in storage with ``voided`` set.
    """

    name: str | None = None
    description: str | None = None
    member_ids: set[int] = field(default_factory=set)
    cohort_id: int | None = None
    uuid: str | None = None
    voided: bool = False
    voided_by: User | None = None
    date_voided: datetime | None = None
    void_reason: str | None = None
    creator: User | None = None
    date_created: datetime | None = None
    changed_by: User | None = None
    date_changed: datetime | None = None

    @property
    def id(self) -> int | None:
        return self.cohort_id

    @id.setter
    def id(self, value: int | None) -> None:
        self.cohort_id = value

    def contains(self, patient: Patient | int) -> bool:
        """Check whether a patient (or patient id) is a member."""
        patient_id = patient.patient_id if isinstance(patient, Patient) else patient
        return patient_id in self.member_ids

    def size(self) -> int:
        return len(self.member_ids)

    def is_empty(self) -> bool:
        return not self.member_ids


@dataclass(eq=False)
class ConceptAnswer:
    """Associates a question concept with one of its answers.

    The answer is a concept, optionally refined by a drug. Until storage
    assigns ``concept_answer_id`` the object compares structurally over
    ``concept``, ``answer_concept`` and ``answer_drug``. Fields missing on
    either side are skipped, so two answers with no overlapping fields are
    equal.
    """

    concept: Concept | None = None
    answer_concept: Concept | None = None
    answer_drug: Drug | None = None
    concept_answer_id: int | None = None
    uuid: str | None = None
    creator: User | None = None
    date_created: datetime | None = None

    @property
    def id(self) -> int | None:
        return self.concept_answer_id

    @id.setter
    def id(self, value: int | None) -> None:
        self.concept_answer_id = value

    # Change tracking is not recorded for concept answers.
    @property
    def changed_by(self) -> User | None:
        return None

    @changed_by.setter
    def changed_by(self, value: User | None) -> None:
        pass

    @property
    def date_changed(self) -> datetime | None:
        return None

    @date_changed.setter
    def date_changed(self, value: datetime | None) -> None:
        pass

    def _references(self) -> tuple[Any, Any, Any]:
        return (self.concept, self.answer_concept, self.answer_drug)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConceptAnswer):
            return NotImplemented
        if self.concept_answer_id is not None and other.concept_answer_id is not None:
            return self.concept_answer_id == other.concept_answer_id
        for mine, theirs in zip(self._references(), other._references()):
            if mine is not None and theirs is not None and mine != theirs:
                return False
        return True

    def __hash__(self) -> int:
        if self.concept_answer_id is not None:
            return hash(self.concept_answer_id)
        result = 9
        for reference in self._references():
            if reference is not None:
                result = result * hash(reference) + 31
        return hash(result)
