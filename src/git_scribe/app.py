"""Session orchestration: open the repo, pick a mode, run it, report errors."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from git_scribe.backend import GenerationBackend, create_backend
from git_scribe.config import Settings
from git_scribe.context import FlowContext
from git_scribe.errors import (
    BackendError,
    ConfigError,
    RepositoryAccessError,
    SelectionAborted,
)
from git_scribe.modes import Mode, choose_mode, execute
from git_scribe.repository import GitRepository
from git_scribe.ui import Terminal

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_ABORTED = 130


class ScribeApp:
    """One git-scribe invocation."""

    def __init__(
        self,
        settings: Settings,
        repo_path: str | Path = ".",
        terminal: Optional[Terminal] = None,
    ) -> None:
        self.settings = settings
        self.repo_path = repo_path
        self.terminal = terminal or Terminal()

    def _build_context(self) -> FlowContext:
        repository = GitRepository(
            self.repo_path,
            largest_limit=self.settings.largest_commits,
            most_modified_limit=self.settings.most_modified_files,
        )
        backend: GenerationBackend = create_backend(self.settings)
        return FlowContext(
            settings=self.settings,
            repository=repository,
            backend=backend,
            terminal=self.terminal,
        )

    async def run_session(self, ctx: FlowContext, mode: Optional[Mode] = None) -> None:
        """Choose a mode (unless given) and run it; always closes the backend."""
        try:
            if mode is None:
                mode = await choose_mode(ctx)
            logger.debug("Running mode %s", mode.value)
            await execute(mode, ctx)
        finally:
            await ctx.backend.close()

    def run(self, mode: Optional[Mode] = None) -> int:
        """Run the session and return a process exit code."""
        try:
            ctx = self._build_context()
            asyncio.run(self.run_session(ctx, mode))
        except SelectionAborted:
            return EXIT_ABORTED
        except ConfigError as e:
            self.terminal.print_error(f"❌ Configuration error: {e}")
            return EXIT_ERROR
        except RepositoryAccessError as e:
            self.terminal.print_error(f"❌ Repository error: {e}")
            return EXIT_ERROR
        except BackendError as e:
            self.terminal.print_error(f"❌ {e}")
            return EXIT_ERROR
        return EXIT_OK
