"""Contributor analysis: deterministic stats from local commit history."""

from collections import Counter
from typing import Iterable

from git_scribe.models import CommitRecord, CommitSize, ContributorStats, FileModification

NO_EXTENSION = "no extension"


def file_extension(path: str) -> str:
    """Return the text after the final dot of the last path segment."""
    name = path.replace("\\", "/").rsplit("/", 1)[-1]
    _, dot, ext = name.rpartition(".")
    if not dot or not ext:
        return NO_EXTENSION
    return ext


class _LargestCommits:
    """Bounded top-N of commits by total changed lines.

    A newcomer evicts the smallest held entry only when strictly larger.
    When several held entries share the smallest size, the latest one
    inserted is evicted, so earlier commits win ties.
    """

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self._held: list[tuple[int, CommitSize]] = []  # (arrival order, entry)
        self._arrivals = 0

    def offer(self, entry: CommitSize) -> None:
        order = self._arrivals
        self._arrivals += 1
        if self.limit <= 0:
            return
        if len(self._held) < self.limit:
            self._held.append((order, entry))
            return
        victim = min(
            range(len(self._held)),
            key=lambda i: (self._held[i][1].total, -self._held[i][0]),
        )
        if entry.total > self._held[victim][1].total:
            self._held[victim] = (order, entry)

    def ranked(self) -> list[CommitSize]:
        ordered = sorted(self._held, key=lambda held: (-held[1].total, held[0]))
        return [entry for _, entry in ordered]


def aggregate_contributor(
    commits: Iterable[CommitRecord],
    name: str,
    email: str,
    *,
    largest_limit: int = 5,
    most_modified_limit: int = 10,
) -> ContributorStats:
    """Build stats for one identity from the commits attributed to it.

    Identity matching is exact and case-sensitive on both name and email.
    """
    commit_count = 0
    additions = 0
    deletions = 0
    files_changed: set[str] = set()
    modifications: Counter[str] = Counter()
    file_types: dict[str, int] = {}
    largest = _LargestCommits(largest_limit)
    seen: set[str] = set()

    for c in commits:
        if c.author_name != name or c.author_email != email:
            continue
        if c.sha in seen:
            continue
        seen.add(c.sha)

        commit_count += 1
        additions += c.additions
        deletions += c.deletions

        for path in c.files_changed:
            files_changed.add(path)
            modifications[path] += 1
            ext = file_extension(path)
            file_types[ext] = file_types.get(ext, 0) + 1

        largest.offer(
            CommitSize(additions=c.additions, deletions=c.deletions, message=c.message)
        )

    # Counter.most_common is stable for equal counts (insertion order).
    most_modified = [
        FileModification(path=path, count=count)
        for path, count in modifications.most_common(most_modified_limit)
    ]

    return ContributorStats(
        name=name,
        email=email,
        commit_count=commit_count,
        additions=additions,
        deletions=deletions,
        files_changed=frozenset(files_changed),
        most_modified_files=most_modified,
        file_types=file_types,
        largest_commits=largest.ranked(),
    )


def discover_identities(commits: Iterable[CommitRecord]) -> list[tuple[str, str]]:
    """Unique (name, email) pairs in order of first appearance."""
    seen: dict[tuple[str, str], None] = {}
    for c in commits:
        seen.setdefault((c.author_name, c.author_email), None)
    return list(seen)


def compute_contributor_stats(
    commits: list[CommitRecord],
    *,
    largest_limit: int = 5,
    most_modified_limit: int = 10,
) -> list[ContributorStats]:
    """Stats for every identity in ``commits``, most commits first."""
    stats = [
        aggregate_contributor(
            commits,
            name,
            email,
            largest_limit=largest_limit,
            most_modified_limit=most_modified_limit,
        )
        for name, email in discover_identities(commits)
    ]
    return sorted(stats, key=lambda s: -s.commit_count)
