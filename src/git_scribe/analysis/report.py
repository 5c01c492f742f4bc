"""Contributor report rendering: stats in, markdown out.

``format_contributor_report`` builds the text block sent to the backend;
the ``render_*`` helpers build what the terminal shows. All are pure.
"""

from typing import Iterable, Sequence

from git_scribe.models import ContributorStats


def _bullets(lines: Iterable[str], prefix: str = "- ") -> str:
    return "\n".join(f"{prefix}{line}" for line in lines)


def format_contributor_report(
    stats: ContributorStats,
    recent_commits: Sequence[str],
    files_changed: Iterable[str],
) -> str:
    """Render one contributor's stats as the analysis report.

    Every section header is always present; an empty list yields an
    empty section body. ``recent_commits`` is used as given, callers bound it.
    """
    most_modified = _bullets(
        f"{m.path} ({m.count} modifications)" for m in stats.most_modified_files
    )
    file_types = _bullets(
        f"{ext}: {count} files" for ext, count in stats.sorted_file_types()
    )
    largest = _bullets(
        f"+{c.additions} -{c.deletions} : {c.message}" for c in stats.largest_commits
    )
    recent = _bullets(recent_commits)
    modified = _bullets(sorted(files_changed))

    sections = [
        f"## Contributor: {stats.name} <{stats.email}>",
        "### Statistics\n"
        f"- Total commits: {stats.commit_count}\n"
        f"- Lines added: {stats.additions}\n"
        f"- Lines deleted: {stats.deletions}\n"
        f"- Files modified: {len(stats.files_changed)}",
        f"### Most frequently modified files\n{most_modified}",
        f"### File type distribution\n{file_types}",
        f"### Largest contributions\n{largest}",
        f"### Recent commits\n{recent}",
        f"### Modified files\n{modified}",
    ]
    return "\n\n".join(sections)


def render_contributor_details(stats: ContributorStats) -> str:
    """Markdown for the on-screen contributor detail view."""
    lines: list[str] = [
        f"# 👤 Contributor Details: {stats.name}",
        "",
        f"📧 Email: {stats.email}",
        "",
        "## 📊 Statistics",
        "",
        f"- Commits: {stats.commit_count}",
        f"- Lines added: {stats.additions}",
        f"- Lines deleted: {stats.deletions}",
        f"- Files changed: {len(stats.files_changed)}",
        "",
        "## 📁 Most Modified Files",
        "",
    ]
    lines.extend(
        f"- {m.path} ({m.count} modifications)" for m in stats.most_modified_files
    )
    lines += ["", "## 🔧 File Types", ""]
    lines.extend(f"- {ext}: {count} files" for ext, count in stats.sorted_file_types())
    lines += ["", "## 📈 Largest Contributions", ""]
    lines.extend(
        f"- +{c.additions} -{c.deletions} : {c.message}" for c in stats.largest_commits
    )
    return "\n".join(lines)


def render_recent_commits(commits: Sequence[str]) -> str:
    if not commits:
        return "_No commits found._"
    return _bullets(commits)
