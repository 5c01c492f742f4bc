"""Contributor browsing: pick a contributor, get an AI summary, repeat."""

from git_scribe.analysis.report import (
    format_contributor_report,
    render_contributor_details,
    render_recent_commits,
)
from git_scribe.context import FlowContext
from git_scribe.models import ContributorStats

EXIT_LABEL = "❌ Exit"


async def show_contributor(ctx: FlowContext, contributor: ContributorStats) -> None:
    """Detail view for one contributor; returns after the user presses Enter."""
    terminal = ctx.terminal
    terminal.print_markdown(render_contributor_details(contributor))

    commits = ctx.repository.get_contributor_commits(contributor.name, contributor.email)
    recent = commits[: ctx.settings.recent_commits]
    terminal.print_subsection("🔄 Recent Commits")
    terminal.print_markdown(render_recent_commits(recent))

    report = format_contributor_report(contributor, recent, contributor.files_changed)
    with terminal.status("Analyzing contributor's work"):
        summary = await ctx.backend.analyze_contributor(report)

    terminal.print_section("🤖 AI Analysis")
    terminal.print_markdown(summary)

    terminal.wait_for_enter()
    terminal.clear()


async def handle_contributor_analysis(ctx: FlowContext) -> None:
    contributors = ctx.repository.get_contributors()

    ctx.terminal.print_section("👥 Repository Contributors")
    items = [c.menu_label for c in contributors]
    items.append(EXIT_LABEL)
    exit_index = len(items) - 1

    while True:
        selection = await ctx.terminal.select("Select a contributor to view details", items, 0)
        if selection == exit_index:
            break
        await show_contributor(ctx, contributors[selection])
