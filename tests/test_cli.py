"""Tests for CLI commands."""

from pathlib import Path

import pytest

from ehr_domain import cli, config_commands, member_commands
from ehr_domain.backends import InMemoryCohortStore, YamlCohortStore
from ehr_domain.config import Config
from ehr_domain.context import UserContext
from ehr_domain.errors import AuthorizationError, EntityNotFoundError
from ehr_domain.models import User


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def store(monkeypatch: pytest.MonkeyPatch) -> InMemoryCohortStore:
    """Share one in-memory store across commands run by a test."""
    store = InMemoryCohortStore()
    monkeypatch.setattr(cli, "get_store", lambda: store)
    return store


@pytest.fixture
def admin(monkeypatch: pytest.MonkeyPatch) -> UserContext:
    context = UserContext(user=User(user_id=1, username="admin", superuser=True))
    monkeypatch.setattr(cli, "get_context", lambda: context)
    return context


def test_get_store_uses_config(workspace: Path) -> None:
    """Test the configured backend is built."""
    assert isinstance(cli.get_store(), YamlCohortStore)
    Config().set("storage.backend", "memory")
    assert isinstance(cli.get_store(), InMemoryCohortStore)
    Config().set("storage.backend", "postgres")
    with pytest.raises(ValueError, match="Unknown storage backend"):
        cli.get_store()


def test_get_context_from_config(workspace: Path) -> None:
    """Test the caller is assembled from user.* keys."""
    assert cli.get_context().user is None

    config = Config()
    config.set("user.name", "nurse")
    config.set("user.privileges", "Add Cohorts,Edit Cohorts")
    user = cli.get_context().user
    assert user.username == "nurse"
    assert user.privileges == frozenset({"Add Cohorts", "Edit Cohorts"})
    assert not user.superuser


def test_create_show_and_list(
    store: InMemoryCohortStore, admin: UserContext, capsys: pytest.CaptureFixture[str]
) -> None:
    """Test creating a cohort and displaying it."""
    cli.create("Diabetics", "Type 2 patients")
    cli.show(1)
    cli.list_cohorts()
    out = capsys.readouterr().out
    assert "Created cohort 1: Diabetics" in out
    assert "Description: Type 2 patients" in out
    assert "Created by: admin" in out
    assert "Found 1 cohort(s)" in out


def test_search(store: InMemoryCohortStore, admin: UserContext, capsys: pytest.CaptureFixture[str]) -> None:
    """Test searching by name fragment."""
    cli.create("Diabetics", "d")
    cli.create("Asthma", "a")
    capsys.readouterr()
    cli.search("asth")
    out = capsys.readouterr().out
    assert "Found 1 cohort(s)" in out
    assert "Asthma" in out


def test_members(store: InMemoryCohortStore, admin: UserContext, capsys: pytest.CaptureFixture[str]) -> None:
    """Test adding, listing and removing members."""
    cli.create("Trial", "Arm A")
    member_commands.add(1, 10, 11, 10)
    member_commands.list_cohorts(10)
    member_commands.remove(1, 11, 12)
    out = capsys.readouterr().out
    assert "Added 2 patient(s) to cohort 1" in out
    assert "Cohorts containing patient 10" in out
    assert "Removed 1 patient(s) from cohort 1" in out
    assert store.get_cohort(1).member_ids == {10}


def test_void_unvoid_purge(
    store: InMemoryCohortStore, admin: UserContext, capsys: pytest.CaptureFixture[str]
) -> None:
    """Test lifecycle commands."""
    cli.create("Trial", "Arm A")
    cli.void(1, "entered in error")
    assert store.get_cohort(1).voided
    cli.unvoid(1)
    assert not store.get_cohort(1).voided
    cli.purge(1)
    assert store.get_cohort(1) is None
    assert "Purged cohort 1: Trial" in capsys.readouterr().out


def test_unknown_cohort(store: InMemoryCohortStore, admin: UserContext) -> None:
    """Test commands on a missing cohort raise EntityNotFoundError."""
    with pytest.raises(EntityNotFoundError):
        cli.show(42)


def test_unauthenticated_create(store: InMemoryCohortStore, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test the CLI enforces privileges."""
    monkeypatch.setattr(cli, "get_context", lambda: UserContext(user=None))
    with pytest.raises(AuthorizationError):
        cli.create("Trial", "Arm A")


def test_config_commands(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test config get falls back to the defaults once a key is unset."""
    config_commands.get("storage.backend")
    assert capsys.readouterr().out == "storage.backend = yaml\n"

    config_commands.set("storage.backend", "memory")
    config_commands.get("storage.backend")
    assert capsys.readouterr().out == "Set storage.backend = memory (local)\nstorage.backend = memory\n"

    config_commands.list_config()
    out = capsys.readouterr().out
    assert "Local settings:\n\nstorage.backend = memory\n" in out
    assert "Defaults:\n\nstorage.path = .ehr-domain/cohorts.yaml\n" in out

    config_commands.unset("storage.backend")
    config_commands.get("storage.backend")
    config_commands.get("user.name")
    assert capsys.readouterr().out == (
        "Unset storage.backend (local)\nstorage.backend = yaml\nuser.name is not set\n"
    )
