"""Tests for data models."""

from datetime import datetime, timezone

from ehr_domain.models import Auditable, Cohort, Concept, ConceptAnswer, Drug, Patient, User

FEVER = Concept(concept_id=1, name="FEVER")
YES = Concept(concept_id=2, name="YES")
NO = Concept(concept_id=3, name="NO")
ASPIRIN = Drug(drug_id=10, name="Aspirin")


def test_cohort_defaults() -> None:
    """Test cohort creation with defaults."""
    cohort = Cohort(name="Diabetics", description="Type 2")
    assert cohort.cohort_id is None
    assert cohort.id is None
    assert cohort.uuid is None
    assert cohort.member_ids == set()
    assert cohort.voided is False
    assert cohort.is_empty()


def test_cohort_membership_helpers() -> None:
    """Test contains accepts patients and raw ids."""
    cohort = Cohort(name="Trial", description="Arm A", member_ids={5, 7})
    assert cohort.contains(5)
    assert cohort.contains(Patient(patient_id=7))
    assert not cohort.contains(Patient(patient_id=8))
    assert cohort.size() == 2


def test_cohort_id_alias() -> None:
    """Test id is an alias of cohort_id."""
    cohort = Cohort()
    cohort.id = 4
    assert cohort.cohort_id == 4


def test_cohorts_compare_by_identity() -> None:
    """Test two cohorts with equal fields are distinct objects."""
    assert Cohort(name="A", description="B") != Cohort(name="A", description="B")


def test_user_privileges() -> None:
    """Test privilege lookup and superuser override."""
    clerk = User(user_id=1, username="clerk", privileges=frozenset({"Add Cohorts"}))
    admin = User(user_id=2, username="admin", superuser=True)
    assert clerk.has_privilege("Add Cohorts")
    assert not clerk.has_privilege("Purge Cohorts")
    assert admin.has_privilege("Purge Cohorts")


def test_persisted_answers_compare_by_id_only() -> None:
    """Test persisted answers ignore every other field."""
    a = ConceptAnswer(concept=FEVER, answer_concept=YES, concept_answer_id=1)
    b = ConceptAnswer(concept=FEVER, answer_concept=NO, answer_drug=ASPIRIN, concept_answer_id=1)
    c = ConceptAnswer(concept=FEVER, answer_concept=YES, concept_answer_id=2)
    assert a == b
    assert a != c
    assert hash(a) == hash(b)


def test_transient_answers_compare_structurally() -> None:
    """Test answers without ids compare over the shared populated fields."""
    a = ConceptAnswer(concept=FEVER, answer_concept=YES)
    b = ConceptAnswer(concept=FEVER, answer_concept=YES)
    c = ConceptAnswer(concept=FEVER, answer_concept=NO)
    assert a == b
    assert hash(a) == hash(b)
    assert a != c


def test_missing_fields_are_skipped() -> None:
    """Test a field absent on one side does not count as a mismatch."""
    a = ConceptAnswer(concept=FEVER, answer_concept=YES)
    b = ConceptAnswer(answer_concept=YES, answer_drug=ASPIRIN)
    assert a == b


def test_answers_with_no_fields_are_equal() -> None:
    """Test empty transient answers are vacuously equal."""
    assert ConceptAnswer() == ConceptAnswer()
    assert hash(ConceptAnswer()) == hash(ConceptAnswer())


def test_disjoint_answers_are_equal() -> None:
    """Test answers with no populated field in common are equal."""
    assert ConceptAnswer(concept=FEVER) == ConceptAnswer(answer_drug=ASPIRIN)


def test_mixed_persisted_and_transient_compare_structurally() -> None:
    """Test the id is only authoritative when both sides have one."""
    persisted = ConceptAnswer(concept=FEVER, answer_concept=YES, concept_answer_id=9)
    assert persisted == ConceptAnswer(concept=FEVER, answer_concept=YES)
    assert persisted != ConceptAnswer(concept=FEVER, answer_concept=NO)


def test_answer_not_equal_to_other_types() -> None:
    """Test comparison with unrelated objects."""
    assert ConceptAnswer() != "answer"
    assert ConceptAnswer(concept_answer_id=1) != 1


def test_hash_ignores_fields_outside_the_active_branch() -> None:
    """Test hash stability under mutations that don't affect equality."""
    persisted = ConceptAnswer(concept=FEVER, answer_concept=YES, concept_answer_id=3)
    before = hash(persisted)
    persisted.answer_concept = NO
    persisted.answer_drug = ASPIRIN
    persisted.creator = User(user_id=1, username="admin")
    assert hash(persisted) == before

    transient = ConceptAnswer(concept=FEVER, answer_concept=YES)
    before = hash(transient)
    transient.uuid = "abc"
    transient.date_created = datetime.now(timezone.utc)
    assert hash(transient) == before


def test_answers_deduplicate_in_sets() -> None:
    """Test transient answers can be deduplicated before persistence."""
    answers = {ConceptAnswer(concept=FEVER, answer_concept=YES), ConceptAnswer(concept=FEVER, answer_concept=YES)}
    assert len(answers) == 1


def test_answer_change_tracking_is_not_recorded() -> None:
    """Test changed_by and date_changed always read None."""
    answer = ConceptAnswer(concept=FEVER, answer_concept=YES)
    answer.changed_by = User(user_id=1, username="admin")
    answer.date_changed = datetime.now(timezone.utc)
    assert answer.changed_by is None
    assert answer.date_changed is None


def test_entities_are_auditable() -> None:
    """Test both entity kinds satisfy the Auditable protocol."""
    assert isinstance(Cohort(), Auditable)
    assert isinstance(ConceptAnswer(), Auditable)


def test_concepts_compare_by_id() -> None:
    """Test display names do not affect concept or drug identity."""
    assert Concept(concept_id=1, name="FEVER") == Concept(concept_id=1)
    assert hash(Concept(concept_id=1, name="FEVER")) == hash(Concept(concept_id=1, name="Fièvre"))
    assert Concept(concept_id=1, name="FEVER") != Concept(concept_id=4, name="FEVER")
    assert Drug(drug_id=10, name="Aspirin") == Drug(drug_id=10, name="ASA")


def test_renamed_concepts_match_in_answers() -> None:
    """Test transient answers match when only a concept's display name differs."""
    a = ConceptAnswer(concept=FEVER, answer_concept=YES, answer_drug=ASPIRIN)
    b = ConceptAnswer(concept=Concept(concept_id=1), answer_concept=YES, answer_drug=Drug(drug_id=10))
    assert a == b
    assert hash(a) == hash(b)
