"""Pytest configuration and fixtures."""

from contextlib import contextmanager
from datetime import datetime, timezone

import pytest

from git_scribe.config import Settings
from git_scribe.context import FlowContext
from git_scribe.errors import NoChangesError
from git_scribe.models import CommitRecord, FileAnalysis


@pytest.fixture(scope="session")
def anyio_backend():
    """Configure anyio backend for async tests."""
    return "asyncio"


class FakeTerminal:
    """Scripted stand-in for ``git_scribe.ui.Terminal``."""

    def __init__(self, choices=None):
        self.choices = list(choices or [])
        self.menus: list[tuple[str, list[str], int]] = []
        self.output: list[str] = []
        self.statuses: list[str] = []
        self.waits = 0
        self.clears = 0

    async def select(self, prompt, options, default=0):
        self.menus.append((prompt, list(options), default))
        if not self.choices:
            raise AssertionError(f"unexpected menu: {prompt}")
        return self.choices.pop(0)

    def wait_for_enter(self):
        self.waits += 1

    def print_section(self, title):
        self.output.append(title)

    def print_subsection(self, title):
        self.output.append(title)

    def print_text(self, text):
        self.output.append(text)

    def print_markdown(self, text):
        self.output.append(text)

    def print_error(self, text):
        self.output.append(text)

    @contextmanager
    def status(self, message):
        self.statuses.append(message)
        yield

    def clear(self):
        self.clears += 1

    @property
    def text(self) -> str:
        return "\n".join(self.output)


class FakeRepository:
    """In-memory repository with call recording."""

    def __init__(self, diff="diff --git a/x b/x", contributors=None, commits=None):
        self.diff = diff
        self.contributors = list(contributors or [])
        self.commits = dict(commits or {})
        self.committed: list[str] = []

    def get_diff(self):
        if not self.diff:
            raise NoChangesError()
        return self.diff

    def get_file_diffs(self):
        if not self.diff:
            raise NoChangesError()
        return []

    def get_contributors(self):
        return list(self.contributors)

    def get_contributor_commits(self, name, email):
        return list(self.commits.get((name, email), []))

    def stage_and_commit(self, message):
        self.committed.append(message)
        return "abc1234"


class FakeBackend:
    """Backend returning queued messages, recording every call."""

    def __init__(self, messages=None, summary="A focused contributor.", analyses=None):
        self.messages = list(messages or ["feat: add retry logic"])
        self.summary = summary
        self.analyses = list(analyses or [])
        self.diffs: list[str] = []
        self.reports: list[str] = []
        self.closed = False

    async def generate_commit_message(self, diff):
        self.diffs.append(diff)
        return self.messages.pop(0) if len(self.messages) > 1 else self.messages[0]

    async def analyze_changes(self, repository):
        repository.get_file_diffs()
        return [FileAnalysis(path=p, explanation=e) for p, e in self.analyses]

    async def analyze_contributor(self, report):
        self.reports.append(report)
        return self.summary

    async def close(self):
        self.closed = True


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def make_ctx(settings):
    def _make(terminal=None, repository=None, backend=None):
        return FlowContext(
            settings=settings,
            repository=repository or FakeRepository(),
            backend=backend or FakeBackend(),
            terminal=terminal or FakeTerminal(),
        )

    return _make


@pytest.fixture
def history():
    base = datetime(2025, 1, 15, tzinfo=timezone.utc)
    return [
        CommitRecord(
            sha="aaa111aaa111",
            message="feat: add auth",
            author_name="Alice",
            author_email="alice@test.com",
            date=base,
            additions=200,
            deletions=10,
            files_changed=["src/auth.py", "src/models.py"],
        ),
        CommitRecord(
            sha="bbb222bbb222",
            message="fix: login bug",
            author_name="Bob",
            author_email="bob@test.com",
            date=base,
            additions=15,
            deletions=5,
            files_changed=["src/auth.py"],
        ),
        CommitRecord(
            sha="ccc333ccc333",
            message="docs: update readme",
            author_name="Alice",
            author_email="alice@test.com",
            date=base,
            additions=30,
            deletions=0,
            files_changed=["README.md", "src/auth.py"],
        ),
        CommitRecord(
            sha="ddd444ddd444",
            message="chore: add Makefile",
            author_name="Alice",
            author_email="alice@test.com",
            date=base,
            additions=12,
            deletions=3,
            files_changed=["Makefile"],
        ),
    ]
