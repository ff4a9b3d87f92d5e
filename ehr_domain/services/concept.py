"""Concept answer service."""

import structlog

from ehr_domain import privileges
from ehr_domain.auth import Authorizer
from ehr_domain.backend import ConceptAnswerStore
from ehr_domain.context import UserContext
from ehr_domain.models import Concept, ConceptAnswer
from ehr_domain.services.base import BaseService

logger = structlog.get_logger()

CONCEPT_ANSWER_REQUIRED_FIELDS = (
    ("concept", "ConceptAnswer.save.conceptRequired"),
    ("answer_concept", "ConceptAnswer.save.answerRequired"),
)


class ConceptService(BaseService):
    """Manages the answers attached to question concepts."""

    def __init__(self, store: ConceptAnswerStore, authorizer: Authorizer) -> None:
        super().__init__(authorizer)
        self.store = store

    def save_concept_answer(self, answer: ConceptAnswer, context: UserContext) -> ConceptAnswer:
        """Create or update a concept answer. Requires ``Manage Concepts``."""
        logger.debug("Saving concept answer", concept_answer_id=answer.concept_answer_id)
        return self._save(
            answer,
            context,
            create=privileges.MANAGE_CONCEPTS,
            edit=privileges.MANAGE_CONCEPTS,
            required=CONCEPT_ANSWER_REQUIRED_FIELDS,
            persist=self.store.save_concept_answer,
        )

    def purge_concept_answer(self, answer: ConceptAnswer, context: UserContext) -> ConceptAnswer:
        """Permanently delete a concept answer. Requires ``Purge Concepts``."""
        self.authorizer.require(context, privileges.PURGE_CONCEPTS)
        logger.info("Purging concept answer", concept_answer_id=answer.concept_answer_id)
        return self.store.delete_concept_answer(answer)

    def get_concept_answer(self, concept_answer_id: int) -> ConceptAnswer | None:
        return self.store.get_concept_answer(concept_answer_id)

    def get_concept_answer_by_uuid(self, uuid: str) -> ConceptAnswer | None:
        return self.store.get_concept_answer_by_uuid(uuid)

    def get_concept_answers(self, concept: Concept) -> list[ConceptAnswer]:
        return self.store.get_concept_answers(concept)
