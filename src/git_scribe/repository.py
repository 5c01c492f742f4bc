"""Local repository access via GitPython."""

import logging
from pathlib import Path
from typing import Optional

import git  # GitPython

from git_scribe.analysis.stats import aggregate_contributor, compute_contributor_stats
from git_scribe.errors import NoChangesError, RepositoryAccessError
from git_scribe.models import CommitRecord, ContributorStats, FileDiff

logger = logging.getLogger(__name__)


def _text(value: str | bytes) -> str:
    if isinstance(value, bytes):
        return value.decode(errors="replace")
    return value


class GitRepository:
    """Reads pending changes and history from a local git working tree."""

    def __init__(
        self,
        path: str | Path = ".",
        largest_limit: int = 5,
        most_modified_limit: int = 10,
        max_untracked_chars: int = 4000,
    ) -> None:
        self.path = Path(path).expanduser().resolve()
        self.largest_limit = largest_limit
        self.most_modified_limit = most_modified_limit
        self.max_untracked_chars = max_untracked_chars
        try:
            self._repo = git.Repo(self.path, search_parent_directories=True)
        except git.exc.NoSuchPathError as e:
            raise RepositoryAccessError(f"Repository path does not exist: {self.path}") from e
        except git.exc.InvalidGitRepositoryError as e:
            raise RepositoryAccessError(f"Not a git repository: {self.path}") from e
        self._history: Optional[list[CommitRecord]] = None

    @property
    def working_dir(self) -> Path:
        return Path(self._repo.working_tree_dir or self.path)

    @property
    def has_head(self) -> bool:
        """False for a freshly initialised repo with no commits."""
        return self._repo.head.is_valid()

    # ── Pending changes ───────────────────────────────────────────────────

    def _tracked_diff(self, *paths: str) -> str:
        if self.has_head:
            return self._repo.git.diff("HEAD", "--", *paths)
        # No HEAD yet: everything staged is new.
        return self._repo.git.diff("--cached", "--", *paths)

    def _changed_paths(self) -> list[str]:
        if self.has_head:
            out = self._repo.git.diff("HEAD", "--name-only")
        else:
            out = self._repo.git.diff("--cached", "--name-only")
        return [p.strip() for p in out.splitlines() if p.strip()]

    def _untracked_excerpt(self, relpath: str) -> str:
        fpath = self.working_dir / relpath
        try:
            text = fpath.read_text(errors="replace")
        except OSError:
            return f"new file: {relpath}"
        if len(text) > self.max_untracked_chars:
            text = text[: self.max_untracked_chars] + "\n... (truncated)"
        body = "\n".join(f"+{line}" for line in text.splitlines())
        return f"new file: {relpath}\n{body}"

    def get_diff(self) -> str:
        """Diff of every pending change (staged, unstaged and untracked)."""
        try:
            if not self._repo.is_dirty(untracked_files=True):
                raise NoChangesError()
            parts = [self._tracked_diff()]
            parts.extend(self._untracked_excerpt(p) for p in self._repo.untracked_files)
        except git.exc.GitError as e:
            raise RepositoryAccessError(f"Could not read changes: {e}") from e
        diff = "\n".join(p for p in parts if p.strip())
        if not diff.strip():
            raise NoChangesError()
        logger.debug("Read %d chars of pending diff", len(diff))
        return diff

    def get_file_diffs(self) -> list[FileDiff]:
        """Pending diff split per path."""
        try:
            if not self._repo.is_dirty(untracked_files=True):
                raise NoChangesError()
            diffs = [FileDiff(path=p, diff=self._tracked_diff(p)) for p in self._changed_paths()]
            diffs.extend(
                FileDiff(path=p, diff=self._untracked_excerpt(p))
                for p in self._repo.untracked_files
            )
        except git.exc.GitError as e:
            raise RepositoryAccessError(f"Could not read changes: {e}") from e
        if not diffs:
            raise NoChangesError()
        return diffs

    def stage_and_commit(self, message: str) -> str:
        """Stage everything and commit; return the new commit's short sha."""
        try:
            self._repo.git.add(A=True)
            self._repo.git.commit("-m", message)
            sha = self._repo.head.commit.hexsha
        except git.exc.GitError as e:
            raise RepositoryAccessError(f"git commit failed: {e}") from e
        self._history = None
        logger.debug("Committed %s", sha)
        return sha[:7]

    # ── History ───────────────────────────────────────────────────────────

    def iter_history(self) -> list[CommitRecord]:
        """All commits reachable from HEAD, newest first (cached per instance)."""
        if self._history is not None:
            return self._history
        records: list[CommitRecord] = []
        if not self.has_head:
            self._history = records
            return records
        try:
            for c in self._repo.iter_commits("HEAD"):
                stats = c.stats
                records.append(
                    CommitRecord(
                        sha=c.hexsha,
                        message=_text(c.summary),
                        author_name=c.author.name or "",
                        author_email=c.author.email or "",
                        date=c.committed_datetime,
                        additions=stats.total.get("insertions", 0),
                        deletions=stats.total.get("deletions", 0),
                        files_changed=[str(p) for p in stats.files],
                    )
                )
        except (git.exc.GitError, ValueError) as e:
            raise RepositoryAccessError(f"Could not walk history: {e}") from e
        logger.debug("Loaded %d commits from history", len(records))
        self._history = records
        return records

    def get_contributors(self) -> list[ContributorStats]:
        """Stats for every identity in history, most commits first."""
        return compute_contributor_stats(
            self.iter_history(),
            largest_limit=self.largest_limit,
            most_modified_limit=self.most_modified_limit,
        )

    def get_contributor_stats(self, name: str, email: str) -> ContributorStats:
        return aggregate_contributor(
            self.iter_history(),
            name,
            email,
            largest_limit=self.largest_limit,
            most_modified_limit=self.most_modified_limit,
        )

    def get_contributor_commits(self, name: str, email: str) -> list[str]:
        """``"<short sha> <summary>"`` for the identity's commits, newest first."""
        return [
            c.summary_line
            for c in self.iter_history()
            if c.author_name == name and c.author_email == email
        ]
