"""Cohort backend persisting to a YAML document using PyYAML."""

import os
import tempfile
import threading
import uuid as uuid_lib
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog
import yaml

from ehr_domain.backend import CohortStore
from ehr_domain.errors import EntityNotFoundError, StorageError
from ehr_domain.models import Cohort, User

logger = structlog.get_logger()


class YamlCohortStore(CohortStore):
    """File-based cohort store.

    The whole document is read on every call and rewritten on every mutation.
    Writes go to a temporary file that replaces the document in one step, so
    a crash never leaves a half-written file behind.

    Document layout::

        next_id: 3
        cohorts:
          - cohort_id: 1
            uuid: ...
            name: ...
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize YAML cohort store.

        Args:
            path: Location of the YAML document (created on first write)
        """
        self.path = Path(path)
        self._lock = threading.Lock()
        logger.debug("Initializing YAML cohort store", path=str(self.path))

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"next_id": 1, "cohorts": []}

        try:
            with open(self.path, "r") as f:
                document = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to read cohort store", path=str(self.path), error=str(e))
            raise StorageError(f"Failed to read cohorts from {self.path}: {e}") from e

        document.setdefault("next_id", 1)
        document.setdefault("cohorts", [])
        return document

    def _write(self, document: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".cohorts-", suffix=".yaml")
            with os.fdopen(fd, "w") as f:
                yaml.safe_dump(document, f, default_flow_style=False, sort_keys=False)
            os.replace(tmp_name, self.path)
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to write cohort store", path=str(self.path), error=str(e))
            raise StorageError(f"Failed to write cohorts to {self.path}: {e}") from e
        logger.debug("Cohort store written", path=str(self.path), count=len(document["cohorts"]))

    def _cohort_to_record(self, cohort: Cohort) -> dict[str, Any]:
        return {
            "cohort_id": cohort.cohort_id,
            "uuid": cohort.uuid,
            "name": cohort.name,
            "description": cohort.description,
            "member_ids": sorted(cohort.member_ids),
            "voided": cohort.voided,
            "voided_by": _user_to_record(cohort.voided_by),
            "date_voided": _format_datetime(cohort.date_voided),
            "void_reason": cohort.void_reason,
            "creator": _user_to_record(cohort.creator),
            "date_created": _format_datetime(cohort.date_created),
            "changed_by": _user_to_record(cohort.changed_by),
            "date_changed": _format_datetime(cohort.date_changed),
        }

    def _record_to_cohort(self, record: dict[str, Any]) -> Cohort:
        return Cohort(
            cohort_id=record["cohort_id"],
            uuid=record.get("uuid"),
            name=record.get("name"),
            description=record.get("description"),
            member_ids=set(record.get("member_ids") or []),
            voided=bool(record.get("voided", False)),
            voided_by=_record_to_user(record.get("voided_by")),
            date_voided=_parse_datetime(record.get("date_voided")),
            void_reason=record.get("void_reason"),
            creator=_record_to_user(record.get("creator")),
            date_created=_parse_datetime(record.get("date_created")),
            changed_by=_record_to_user(record.get("changed_by")),
            date_changed=_parse_datetime(record.get("date_changed")),
        )

    def _records(self) -> list[dict[str, Any]]:
        with self._lock:
            return self._load()["cohorts"]

    def _select(self, records: list[dict[str, Any]]) -> list[Cohort]:
        return [self._record_to_cohort(r) for r in sorted(records, key=lambda r: r["cohort_id"])]

    def save_cohort(self, cohort: Cohort) -> Cohort:
        logger.info("Saving cohort to YAML store", cohort_id=cohort.cohort_id, name=cohort.name)
        with self._lock:
            document = self._load()
            records: list[dict[str, Any]] = document["cohorts"]

            record = self._cohort_to_record(cohort)
            if cohort.cohort_id is None:
                record["cohort_id"] = document["next_id"]
                document["next_id"] += 1
                index = None
            else:
                index = next((i for i, r in enumerate(records) if r["cohort_id"] == cohort.cohort_id), None)
                if index is None:
                    raise EntityNotFoundError(f"Cohort {cohort.cohort_id} does not exist")
            if record["uuid"] is None:
                record["uuid"] = str(uuid_lib.uuid4())

            if index is None:
                records.append(record)
            else:
                records[index] = record
            self._write(document)

        # Ids reach the caller only once the document is on disk.
        cohort.cohort_id, cohort.uuid = record["cohort_id"], record["uuid"]
        logger.info("Cohort saved to YAML store", cohort_id=cohort.cohort_id)
        return self._record_to_cohort(record)

    def get_cohort(self, cohort_id: int) -> Cohort | None:
        matches = self._select([r for r in self._records() if r["cohort_id"] == cohort_id])
        return matches[0] if matches else None

    def get_cohort_by_uuid(self, uuid: str) -> Cohort | None:
        matches = self._select([r for r in self._records() if r.get("uuid") == uuid])
        return matches[0] if matches else None

    def get_cohort_by_name(self, name: str) -> Cohort | None:
        matches = self._select([r for r in self._records() if r.get("name") == name])
        return matches[0] if matches else None

    def get_cohorts(self, name_fragment: str) -> list[Cohort]:
        fragment = name_fragment.lower()
        return self._select([r for r in self._records() if fragment in (r.get("name") or "").lower()])

    def get_all_cohorts(self, include_voided: bool = False) -> list[Cohort]:
        return self._select([r for r in self._records() if include_voided or not r.get("voided")])

    def get_cohorts_containing_patient_id(self, patient_id: int) -> list[Cohort]:
        return self._select(
            [r for r in self._records() if not r.get("voided") and patient_id in (r.get("member_ids") or [])]
        )

    def delete_cohort(self, cohort: Cohort) -> Cohort:
        logger.info("Deleting cohort from YAML store", cohort_id=cohort.cohort_id)
        with self._lock:
            document = self._load()
            remaining = [r for r in document["cohorts"] if r["cohort_id"] != cohort.cohort_id]
            if cohort.cohort_id is None or len(remaining) == len(document["cohorts"]):
                raise EntityNotFoundError(f"Cohort {cohort.cohort_id} does not exist")
            document["cohorts"] = remaining
            self._write(document)
        return cohort


def _user_to_record(user: User | None) -> dict[str, Any] | None:
    if user is None:
        return None
    return {"user_id": user.user_id, "username": user.username}


def _record_to_user(record: dict[str, Any] | None) -> User | None:
    if not record:
        return None
    return User(user_id=record.get("user_id"), username=record["username"])


def _format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_datetime(value: str | datetime | None) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)
