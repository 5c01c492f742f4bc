"""Terminal presentation: inline Textual menus and rich output."""

from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

from rich.console import Console
from rich.markdown import Markdown
from rich.text import Text
from textual import on
from textual.app import App, ComposeResult
from textual.widgets import Label, OptionList
from textual.widgets.option_list import Option

from git_scribe.errors import SelectionAborted


class SelectionMenu(App[int]):
    """One-question menu; exits with the chosen option index."""

    CSS = """
    SelectionMenu {
        height: auto;
    }
    #menu-prompt {
        text-style: bold;
        color: $accent;
        margin: 0 1;
    }
    #menu-options {
        height: auto;
        max-height: 16;
        border: round $primary;
    }
    """

    BINDINGS = [
        ("escape", "abort", "Cancel"),
    ]

    def __init__(self, prompt: str, options: Sequence[str], default: int = 0) -> None:
        super().__init__()
        if not options:
            raise ValueError("a selection menu needs at least one option")
        self.prompt = prompt
        self.options = list(options)
        self.default = min(max(default, 0), len(self.options) - 1)

    def compose(self) -> ComposeResult:
        yield Label(Text(self.prompt), id="menu-prompt")
        yield OptionList(*(Option(Text(o)) for o in self.options), id="menu-options")

    def on_mount(self) -> None:
        menu = self.query_one("#menu-options", OptionList)
        menu.highlighted = self.default
        menu.focus()

    @on(OptionList.OptionSelected, "#menu-options")
    def choose(self, event: OptionList.OptionSelected) -> None:
        self.exit(event.option_index)

    def action_abort(self) -> None:
        self.exit(None)


class Terminal:
    """Menus, text output and the progress spinner used by every flow."""

    def __init__(self, console: Optional[Console] = None, inline: bool = True) -> None:
        self.console = console or Console()
        self.inline = inline

    # ── Input ─────────────────────────────────────────────────────────────

    async def select(self, prompt: str, options: Sequence[str], default: int = 0) -> int:
        """Show a menu and return the selected index."""
        menu = SelectionMenu(prompt, options, default)
        choice = await menu.run_async(inline=self.inline)
        if choice is None:
            raise SelectionAborted("Selection cancelled")
        self.console.print(Text.assemble((f"{prompt} ", "bold"), options[choice]))
        return choice

    def wait_for_enter(self) -> None:
        self.console.input("\nPress Enter to continue...")

    # ── Output ────────────────────────────────────────────────────────────

    def print_section(self, title: str) -> None:
        self.console.print()
        self.console.rule(Text(title, style="bold cyan"))

    def print_subsection(self, title: str) -> None:
        self.console.print(Text(f"\n{title}", style="bold"))

    def print_text(self, text: str) -> None:
        self.console.print(text, markup=False, highlight=False)

    def print_markdown(self, text: str) -> None:
        self.console.print(Markdown(text))

    def print_error(self, text: str) -> None:
        self.console.print(Text(text, style="bold red"))

    @contextmanager
    def status(self, message: str) -> Iterator[None]:
        """Spinner shown while the block runs, cleared afterwards."""
        with self.console.status(f"{message} …"):
            yield

    def clear(self) -> None:
        self.console.clear()
