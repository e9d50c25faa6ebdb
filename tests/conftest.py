from __future__ import annotations

import fnmatch
from pathlib import Path

import pytest

from arbor.database.client import DatabaseConnectionError, DatabaseExistsError, DatabaseOptions
from arbor.interviewer.models import Answer, AnswerValue, Question
from arbor.models.context import ScaffoldContext


class FakeDatabaseClient:
    """Records calls; ``existing`` holds database names the fake server already has."""

    def __init__(
        self,
        existing: list[str] | None = None,
        *,
        reachable: bool = True,
        create_errors: list[Exception] | None = None,
        drop_errors: dict[str, Exception] | None = None,
    ) -> None:
        self.existing = list(existing or [])
        self.reachable = reachable
        self.create_errors = list(create_errors or [])
        self.drop_errors = dict(drop_errors or {})
        self.created: list[str] = []
        self.dropped: list[str] = []
        self.patterns: list[str] = []
        self.closed = False

    def ping(self) -> None:
        if not self.reachable:
            raise DatabaseConnectionError("connection refused")

    def create_database(self, name: str) -> None:
        self.created.append(name)
        if self.create_errors:
            raise self.create_errors.pop(0)
        if name in self.existing:
            raise DatabaseExistsError(f"database {name!r} already exists")
        self.existing.append(name)

    def list_databases(self, pattern: str) -> list[str]:
        self.patterns.append(pattern)
        glob = pattern.replace("%", "*").replace("_", "?")
        return sorted(name for name in self.existing if fnmatch.fnmatchcase(name, glob))

    def drop_database(self, name: str) -> None:
        if name in self.drop_errors:
            raise self.drop_errors[name]
        self.dropped.append(name)
        self.existing.remove(name)

    def close(self) -> None:
        self.closed = True


class ScriptedInterviewer:
    """Hands out answers in order, then SKIPPED; keeps every question asked."""

    def __init__(self, answers: list[Answer]) -> None:
        self.answers = list(answers)
        self.questions: list[Question] = []

    def ask(self, question: Question) -> Answer:
        self.questions.append(question)
        if self.answers:
            return self.answers.pop(0)
        return Answer(value=AnswerValue.SKIPPED)


class FakeClientFactory:
    def __init__(self, client: FakeDatabaseClient) -> None:
        self.client = client
        self.calls: list[tuple[str, DatabaseOptions]] = []

    def __call__(self, engine: str, options: DatabaseOptions) -> FakeDatabaseClient:
        self.calls.append((engine, options))
        return self.client


@pytest.fixture()
def worktree(tmp_path: Path) -> Path:
    path = tmp_path / "myproject" / "feature-x"
    path.mkdir(parents=True)
    return path


@pytest.fixture()
def context(worktree: Path) -> ScaffoldContext:
    return ScaffoldContext(worktree, branch="feature-x", repo_name="myproject", site_name="myapp")


@pytest.fixture()
def fake_client() -> FakeDatabaseClient:
    return FakeDatabaseClient()


@pytest.fixture()
def client_factory(fake_client: FakeDatabaseClient) -> FakeClientFactory:
    return FakeClientFactory(fake_client)


@pytest.fixture()
def make_client_factory():
    def make(existing: list[str] | None = None, **kwargs: object) -> FakeClientFactory:
        return FakeClientFactory(FakeDatabaseClient(existing, **kwargs))  # type: ignore[arg-type]

    return make


@pytest.fixture()
def make_interviewer():
    def make(*values: str) -> ScriptedInterviewer:
        return ScriptedInterviewer([Answer(value=v) for v in values])

    return make
