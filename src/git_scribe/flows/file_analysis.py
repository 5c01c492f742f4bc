"""File analysis: explain every pending change, file by file."""

from git_scribe.context import FlowContext
from git_scribe.errors import NoChangesError


async def handle_file_analysis(ctx: FlowContext) -> None:
    terminal = ctx.terminal
    try:
        with terminal.status("Analyzing changes"):
            analyses = await ctx.backend.analyze_changes(ctx.repository)
    except NoChangesError:
        terminal.print_section("📊 Repository Status")
        terminal.print_text("No changes to analyze. Your working directory is clean.\n")
        return

    terminal.print_section("📊 File Analysis Results")
    for analysis in analyses:
        terminal.print_markdown(f"## 📁 {analysis.path}\n{analysis.explanation}")
