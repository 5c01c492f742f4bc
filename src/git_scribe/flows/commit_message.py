"""Commit-message refinement: generate, review, retype, commit.

The loop is an explicit state machine. Menu answers are mapped to a
``Choice`` and the next state is looked up in ``TRANSITIONS``; the only
durable side effect is the commit made on entering ``COMMITTED``.
"""

from enum import Enum
from typing import Optional

from git_scribe.context import FlowContext
from git_scribe.errors import NoChangesError
from git_scribe.models import CommitDraft


class RefinementState(str, Enum):
    drafting = "drafting"
    presenting = "presenting"
    type_selection = "type_selection"
    confirm_edited = "confirm_edited"
    committed = "committed"
    cancelled = "cancelled"


class RefinementOutcome(str, Enum):
    """How a refinement run ended."""

    committed = "committed"
    cancelled = "cancelled"
    clean = "clean"  # nothing to commit; the loop never started


class Choice(str, Enum):
    regenerate = "regenerate"
    edit_type = "edit_type"
    commit = "commit"
    start_over = "start_over"
    cancel = "cancel"


PRESENT_OPTIONS: list[tuple[Choice, str]] = [
    (Choice.regenerate, "✨ Regenerate message"),
    (Choice.edit_type, "📝 Edit commit type"),
    (Choice.commit, "✅ Stage and commit"),
    (Choice.cancel, "❌ Cancel"),
]

CONFIRM_OPTIONS: list[tuple[Choice, str]] = [
    (Choice.commit, "✅ Confirm and commit"),
    (Choice.start_over, "🔄 Start over"),
    (Choice.cancel, "❌ Cancel"),
]

COMMIT_TYPES: list[tuple[str, str]] = [
    ("feat", "✨ New feature"),
    ("fix", "🐛 Bug fix"),
    ("docs", "📚 Documentation"),
    ("style", "💅 Formatting"),
    ("refactor", "♻️ Code restructure"),
    ("test", "🧪 Testing"),
    ("chore", "🔧 Maintenance"),
]

TRANSITIONS: dict[tuple[RefinementState, Choice], RefinementState] = {
    (RefinementState.presenting, Choice.regenerate): RefinementState.drafting,
    (RefinementState.presenting, Choice.edit_type): RefinementState.type_selection,
    (RefinementState.presenting, Choice.commit): RefinementState.committed,
    (RefinementState.presenting, Choice.cancel): RefinementState.cancelled,
    (RefinementState.confirm_edited, Choice.commit): RefinementState.committed,
    (RefinementState.confirm_edited, Choice.start_over): RefinementState.drafting,
    (RefinementState.confirm_edited, Choice.cancel): RefinementState.cancelled,
}


class CommitRefinement:
    """One run of the refinement loop over the current pending diff."""

    def __init__(self, ctx: FlowContext) -> None:
        self.ctx = ctx
        self.state = RefinementState.drafting
        self.draft: Optional[CommitDraft] = None
        self.commit_sha: Optional[str] = None

    async def _choose(self, prompt: str, options: list[tuple[Choice, str]], default: int) -> Choice:
        labels = [label for _, label in options]
        index = await self.ctx.terminal.select(prompt, labels, default)
        return options[index][0]

    def _advance(self, choice: Choice) -> None:
        self.state = TRANSITIONS[(self.state, choice)]

    async def _generate(self, diff: str) -> CommitDraft:
        terminal = self.ctx.terminal
        with terminal.status("Generating commit message"):
            message = await self.ctx.backend.generate_commit_message(diff)
        terminal.print_section("📝 Generated Commit Message")
        terminal.print_text(f"{message}\n")
        return CommitDraft(text=message)

    async def _select_type(self) -> CommitDraft:
        assert self.draft is not None
        labels = [f"{name}: {label}" for name, label in COMMIT_TYPES]
        index = await self.ctx.terminal.select("Select commit type", labels, 0)
        edited = self.draft.with_type(COMMIT_TYPES[index][0])
        self.ctx.terminal.print_section("📝 New Commit Message")
        self.ctx.terminal.print_text(f"{edited.text}\n")
        return edited

    def _commit(self) -> None:
        assert self.draft is not None
        if self.commit_sha is not None:
            raise RuntimeError("refinement run already committed")
        self.commit_sha = self.ctx.repository.stage_and_commit(self.draft.text)
        self.ctx.terminal.print_text("Changes committed successfully!")

    async def run(self) -> RefinementOutcome:
        terminal = self.ctx.terminal
        try:
            diff = self.ctx.repository.get_diff()
        except NoChangesError:
            terminal.print_section("📝 Repository Status")
            terminal.print_text("No changes to commit. Your working directory is clean.\n")
            return RefinementOutcome.clean

        while True:
            if self.state is RefinementState.drafting:
                # A fresh draft replaces the previous one entirely.
                self.draft = await self._generate(diff)
                self.state = RefinementState.presenting
            elif self.state is RefinementState.presenting:
                self._advance(await self._choose("What would you like to do?", PRESENT_OPTIONS, 2))
            elif self.state is RefinementState.type_selection:
                self.draft = await self._select_type()
                self.state = RefinementState.confirm_edited
            elif self.state is RefinementState.confirm_edited:
                self._advance(
                    await self._choose(
                        "Would you like to proceed with this commit message?",
                        CONFIRM_OPTIONS,
                        0,
                    )
                )
            elif self.state is RefinementState.committed:
                self._commit()
                return RefinementOutcome.committed
            else:
                terminal.print_text("Commit cancelled.")
                return RefinementOutcome.cancelled


async def handle_commit_message(ctx: FlowContext) -> RefinementOutcome:
    return await CommitRefinement(ctx).run()
