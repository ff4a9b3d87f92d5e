"""Names of the capabilities checked by the services."""

ADD_COHORTS = "Add Cohorts"
EDIT_COHORTS = "Edit Cohorts"
PURGE_COHORTS = "Purge Cohorts"

MANAGE_CONCEPTS = "Manage Concepts"
PURGE_CONCEPTS = "Purge Concepts"

ALL_PRIVILEGES = frozenset(
    {
        ADD_COHORTS,
        EDIT_COHORTS,
        PURGE_COHORTS,
        MANAGE_CONCEPTS,
        PURGE_CONCEPTS,
    }
)
