"""In-memory storage backends."""

import copy
import threading
import uuid as uuid_lib
from collections.abc import Callable

import structlog

from ehr_domain.backend import CohortStore, ConceptAnswerStore
from ehr_domain.errors import EntityNotFoundError
from ehr_domain.models import Cohort, Concept, ConceptAnswer

logger = structlog.get_logger()


class InMemoryCohortStore(CohortStore):
    """Dict-backed cohort store. Useful for tests and short-lived sessions."""

    def __init__(self) -> None:
        self._cohorts: dict[int, Cohort] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        logger.debug("Initializing in-memory cohort store")

    def save_cohort(self, cohort: Cohort) -> Cohort:
        with self._lock:
            if cohort.cohort_id is not None and cohort.cohort_id not in self._cohorts:
                raise EntityNotFoundError(f"Cohort {cohort.cohort_id} does not exist")

            stored = copy.deepcopy(cohort)
            if stored.cohort_id is None:
                stored.cohort_id = self._next_id
                self._next_id += 1
                logger.debug("Assigned cohort id", cohort_id=stored.cohort_id)
            if stored.uuid is None:
                stored.uuid = str(uuid_lib.uuid4())
            self._cohorts[stored.cohort_id] = stored

        cohort.cohort_id, cohort.uuid = stored.cohort_id, stored.uuid
        logger.info("Cohort stored", cohort_id=stored.cohort_id)
        return copy.deepcopy(stored)

    def get_cohort(self, cohort_id: int) -> Cohort | None:
        with self._lock:
            cohort = self._cohorts.get(cohort_id)
            return copy.deepcopy(cohort) if cohort is not None else None

    def get_cohort_by_uuid(self, uuid: str) -> Cohort | None:
        return self._first(lambda c: c.uuid == uuid)

    def get_cohort_by_name(self, name: str) -> Cohort | None:
        return self._first(lambda c: c.name == name)

    def get_cohorts(self, name_fragment: str) -> list[Cohort]:
        fragment = name_fragment.lower()
        return self._select(lambda c: fragment in (c.name or "").lower())

    def get_all_cohorts(self, include_voided: bool = False) -> list[Cohort]:
        return self._select(lambda c: include_voided or not c.voided)

    def get_cohorts_containing_patient_id(self, patient_id: int) -> list[Cohort]:
        return self._select(lambda c: not c.voided and patient_id in c.member_ids)

    def delete_cohort(self, cohort: Cohort) -> Cohort:
        with self._lock:
            if cohort.cohort_id is None or cohort.cohort_id not in self._cohorts:
                raise EntityNotFoundError(f"Cohort {cohort.cohort_id} does not exist")
            del self._cohorts[cohort.cohort_id]
            logger.info("Cohort deleted", cohort_id=cohort.cohort_id)
            return cohort

    def _select(self, predicate: Callable[[Cohort], bool]) -> list[Cohort]:
        with self._lock:
            return [copy.deepcopy(c) for _, c in sorted(self._cohorts.items()) if predicate(c)]

    def _first(self, predicate: Callable[[Cohort], bool]) -> Cohort | None:
        matches = self._select(predicate)
        return matches[0] if matches else None


class InMemoryConceptAnswerStore(ConceptAnswerStore):
    """Dict-backed concept answer store."""

    def __init__(self) -> None:
        self._answers: dict[int, ConceptAnswer] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def save_concept_answer(self, answer: ConceptAnswer) -> ConceptAnswer:
        with self._lock:
            if answer.concept_answer_id is not None and answer.concept_answer_id not in self._answers:
                raise EntityNotFoundError(f"Concept answer {answer.concept_answer_id} does not exist")

            stored = copy.deepcopy(answer)
            if stored.concept_answer_id is None:
                stored.concept_answer_id = self._next_id
                self._next_id += 1
            if stored.uuid is None:
                stored.uuid = str(uuid_lib.uuid4())
            self._answers[stored.concept_answer_id] = stored

        answer.concept_answer_id, answer.uuid = stored.concept_answer_id, stored.uuid
        logger.info("Concept answer stored", concept_answer_id=stored.concept_answer_id)
        return copy.deepcopy(stored)

    def get_concept_answer(self, concept_answer_id: int) -> ConceptAnswer | None:
        with self._lock:
            answer = self._answers.get(concept_answer_id)
            return copy.deepcopy(answer) if answer is not None else None

    def get_concept_answer_by_uuid(self, uuid: str) -> ConceptAnswer | None:
        with self._lock:
            for answer in self._answers.values():
                if answer.uuid == uuid:
                    return copy.deepcopy(answer)
        return None

    def get_concept_answers(self, concept: Concept) -> list[ConceptAnswer]:
        with self._lock:
            return [copy.deepcopy(a) for _, a in sorted(self._answers.items()) if a.concept == concept]

    def delete_concept_answer(self, answer: ConceptAnswer) -> ConceptAnswer:
        with self._lock:
            if answer.concept_answer_id is None or answer.concept_answer_id not in self._answers:
                raise EntityNotFoundError(f"Concept answer {answer.concept_answer_id} does not exist")
            del self._answers[answer.concept_answer_id]
            logger.info("Concept answer deleted", concept_answer_id=answer.concept_answer_id)
            return answer
