"""Top-level modes and their handlers."""

from enum import Enum
from typing import Any, Awaitable, Callable

from git_scribe.context import FlowContext
from git_scribe.flows.commit_message import handle_commit_message
from git_scribe.flows.contributors import handle_contributor_analysis
from git_scribe.flows.file_analysis import handle_file_analysis

Handler = Callable[[FlowContext], Awaitable[Any]]


class Mode(str, Enum):
    commit_message = "commit_message"
    file_analysis = "file_analysis"
    contributor_analysis = "contributor_analysis"

    @property
    def description(self) -> str:
        return MODE_DESCRIPTIONS[self]


MODE_DESCRIPTIONS: dict[Mode, str] = {
    Mode.commit_message: "📝 Generate commit message",
    Mode.file_analysis: "🔍 Analyze file changes",
    Mode.contributor_analysis: "👥 Analyze contributors",
}

HANDLERS: dict[Mode, Handler] = {
    Mode.commit_message: handle_commit_message,
    Mode.file_analysis: handle_file_analysis,
    Mode.contributor_analysis: handle_contributor_analysis,
}


async def choose_mode(ctx: FlowContext) -> Mode:
    modes = list(Mode)
    index = await ctx.terminal.select(
        "What would you like to do?", [m.description for m in modes], 0
    )
    return modes[index]


async def execute(mode: Mode, ctx: FlowContext) -> Any:
    return await HANDLERS[mode](ctx)
