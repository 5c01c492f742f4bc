"""Data models for git-scribe."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ── Raw git data ──────────────────────────────────────────────────────────

class CommitRecord(BaseModel):
    """A single commit read from local history."""

    sha: str
    short_sha: str = ""
    message: str
    author_name: str
    author_email: str = ""
    date: datetime
    additions: int = 0
    deletions: int = 0
    files_changed: list[str] = Field(default_factory=list)

    def model_post_init(self, _ctx: object) -> None:
        if not self.short_sha:
            self.short_sha = self.sha[:7]

    @property
    def size(self) -> int:
        """Total changed lines."""
        return self.additions + self.deletions

    @property
    def summary_line(self) -> str:
        return f"{self.short_sha} {self.message}"


class FileDiff(BaseModel):
    """Pending diff for one path in the working tree."""

    path: str
    diff: str = ""


# ── Contributor statistics ────────────────────────────────────────────────

class FileModification(BaseModel):
    """How many commits touched a path."""

    model_config = ConfigDict(frozen=True)

    path: str
    count: int = 0


class CommitSize(BaseModel):
    """Line counts of one commit, kept for the largest-commits view."""

    model_config = ConfigDict(frozen=True)

    additions: int = 0
    deletions: int = 0
    message: str = ""

    @property
    def total(self) -> int:
        return self.additions + self.deletions


class ContributorStats(BaseModel):
    """Deterministic stats for one (name, email) identity."""

    model_config = ConfigDict(frozen=True)

    name: str
    email: str = ""
    commit_count: int = Field(default=0, ge=0)
    additions: int = Field(default=0, ge=0)
    deletions: int = Field(default=0, ge=0)
    files_changed: frozenset[str] = Field(default_factory=frozenset)
    most_modified_files: list[FileModification] = Field(default_factory=list)
    file_types: dict[str, int] = Field(default_factory=dict)
    largest_commits: list[CommitSize] = Field(default_factory=list)

    @property
    def identity(self) -> tuple[str, str]:
        return (self.name, self.email)

    @property
    def menu_label(self) -> str:
        return f"{self.name} <{self.email}> ({self.commit_count} commits)"

    def sorted_file_types(self) -> list[tuple[str, int]]:
        """File types by count, descending; ties keep insertion order."""
        return sorted(self.file_types.items(), key=lambda item: -item[1])


# ── Commit drafting ───────────────────────────────────────────────────────

class CommitDraft(BaseModel):
    """A candidate commit message, split on its first colon.

    ``"feat: add retry logic"`` has type ``feat`` and description
    ``add retry logic``. Text without a colon has no type and the whole
    (trimmed) text is the description.
    """

    model_config = ConfigDict(frozen=True)

    text: str

    @property
    def commit_type(self) -> Optional[str]:
        head, sep, _ = self.text.partition(":")
        if not sep:
            return None
        return head.strip() or None

    @property
    def description(self) -> str:
        _, sep, tail = self.text.partition(":")
        if not sep:
            return self.text.strip()
        return tail.strip()

    def with_type(self, commit_type: str) -> "CommitDraft":
        """Return a new draft using ``commit_type``, description untouched."""
        return CommitDraft(text=f"{commit_type}: {self.description}")


# ── Backend results ───────────────────────────────────────────────────────

class FileAnalysis(BaseModel):
    """LLM explanation of one changed file."""

    path: str
    explanation: str = ""
