"""Storage backend implementations."""

from ehr_domain.backends.memory import InMemoryCohortStore, InMemoryConceptAnswerStore
from ehr_domain.backends.yaml_file import YamlCohortStore

__all__ = ["InMemoryCohortStore", "InMemoryConceptAnswerStore", "YamlCohortStore"]
