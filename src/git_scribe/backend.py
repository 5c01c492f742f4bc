"""LLM generation backends.

``GenerationBackend`` owns the prompts and response clean-up; subclasses
only implement ``_ask_llm`` (send one prompt, return the raw text).
"""

import asyncio
import logging
import os
import stat
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import httpx

from git_scribe.config import Settings
from git_scribe.errors import BackendError, ConfigError
from git_scribe.models import FileAnalysis

if TYPE_CHECKING:
    from git_scribe.repository import GitRepository

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a git assistant for the git-scribe tool. "
    "You ONLY analyze data provided to you in the prompt. "
    "You NEVER use tools, browse the filesystem, run commands, or "
    "access external resources. You respond ONLY with the requested "
    "format. Be concise and precise."
)


def strip_fences(raw: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    text = raw.strip()
    if text.startswith("```"):
        lines = text.splitlines()
        text = "\n".join(lines[1:])
        if text.endswith("```"):
            text = text[:-3]
    return text.strip()


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + f"\n... ({len(text) - limit} chars truncated)"


class GenerationBackend(ABC):
    """Turns diffs and reports into natural-language output."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.model = settings.model

    @abstractmethod
    async def _ask_llm(self, prompt: str) -> str:
        """Send a prompt and return the full response text."""

    async def close(self) -> None:
        """Tear down resources."""

    async def _ask(self, prompt: str) -> str:
        try:
            raw = await self._ask_llm(prompt)
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"Generation backend failed: {e}") from e
        text = strip_fences(raw or "")
        if not text:
            raise BackendError("Generation backend returned an empty response")
        return text

    # ── Operations ────────────────────────────────────────────────────────

    async def generate_commit_message(self, diff: str) -> str:
        prompt = (
            "Here is a git diff of pending changes:\n\n"
            f"{truncate(diff, self.settings.max_diff_chars)}\n\n"
            "Write a single-line Conventional Commit message:\n"
            "- Format exactly: <type>: <description>\n"
            "- <type> is one of: feat, fix, docs, style, refactor, test, chore\n"
            "- The description is imperative and at most 72 characters\n"
            "- Do NOT include markdown, code fences, quotes or a body"
        )
        message = await self._ask(prompt)
        logger.debug("Generated commit message: %s", message)
        return message

    async def analyze_changes(self, repository: "GitRepository") -> list[FileAnalysis]:
        """Explain each pending file change, one backend call per file.

        Raises ``NoChangesError`` (from the repository) when nothing is pending.
        """
        file_diffs = repository.get_file_diffs()
        budget = max(self.settings.max_diff_chars // max(len(file_diffs), 1), 2000)
        analyses: list[FileAnalysis] = []
        for fd in file_diffs:
            prompt = (
                f"Explain the following pending change to `{fd.path}`.\n\n"
                f"{truncate(fd.diff, budget)}\n\n"
                "In 2-4 short markdown bullet points, describe what changed and "
                "why it likely matters. Do not repeat the diff."
            )
            analyses.append(FileAnalysis(path=fd.path, explanation=await self._ask(prompt)))
        return analyses

    async def analyze_contributor(self, report: str) -> str:
        prompt = (
            "Below are statistics and recent history for one contributor "
            "to a git repository.\n\n"
            f"{report}\n\n"
            "Write a short markdown summary (one paragraph plus up to 5 bullets) of "
            "this contributor's focus areas, working style and impact. Base every "
            "claim on the data above."
        )
        return await self._ask(prompt)


class CopilotBackend(GenerationBackend):
    """Backend powered by a GitHub Copilot SDK session with tools denied."""

    def __init__(self, settings: Settings) -> None:
        super().__init__(settings)
        self._copilot_client: object | None = None
        self._copilot_session: object | None = None

    async def _ensure_copilot(self) -> None:
        """Lazily start the CopilotClient and create a session."""
        if self._copilot_session is not None:
            return
        from copilot import CopilotClient  # type: ignore[import-untyped]

        # The pip-installed SDK may ship the CLI binary without execute permission.
        try:
            import copilot.bin as _bin_pkg
            cli_bin = Path(_bin_pkg.__file__).parent / "copilot"
            if cli_bin.exists() and not os.access(cli_bin, os.X_OK):
                cli_bin.chmod(cli_bin.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        except (ImportError, OSError):
            logger.debug("Could not adjust Copilot CLI permissions", exc_info=True)

        # Keep the CLI's state files out of the user's working tree.
        copilot_cwd = tempfile.mkdtemp(prefix="git-scribe-copilot-")
        self._copilot_client = CopilotClient({
            "cwd": copilot_cwd,
        })
        await self._copilot_client.start()  # type: ignore[union-attr]

        async def deny_all_tools(input: dict, invocation: object) -> dict:
            return {
                "permissionDecision": "deny",
            }

        self._copilot_session = await self._copilot_client.create_session(  # type: ignore[union-attr]
            {
                "model": self.model,
                "infinite_sessions": {"enabled": False},
                "system_message": {"content": SYSTEM_PROMPT},
                "hooks": {
                    "on_pre_tool_use": deny_all_tools,
                },
            }
        )
        logger.debug("Copilot session started with model %s", self.model)

    async def _ask_llm(self, prompt: str) -> str:
        """Send a prompt to Copilot and collect the full response."""
        await self._ensure_copilot()
        session = self._copilot_session
        done = asyncio.Event()
        result_parts: list[str] = []

        def _on_event(event: object) -> None:
            etype = getattr(getattr(event, "type", None), "value", "")
            data = getattr(event, "data", None)
            if etype == "assistant.message" and data:
                content = getattr(data, "content", "") or ""
                if content:
                    result_parts.append(content)
                done.set()
            elif etype == "session.idle":
                done.set()

        # Unsubscribe after each call so handlers don't stack up.
        unsubscribe = session.on(_on_event)  # type: ignore[union-attr]
        try:
            await session.send({"prompt": prompt})  # type: ignore[union-attr]
            await done.wait()
        finally:
            if callable(unsubscribe):
                unsubscribe()

        return "".join(result_parts).strip()

    async def close(self) -> None:
        if self._copilot_session:
            try:
                await self._copilot_session.destroy()  # type: ignore[union-attr]
            except Exception:
                logger.debug("Copilot session teardown failed", exc_info=True)
            self._copilot_session = None
        if self._copilot_client:
            try:
                await self._copilot_client.stop()  # type: ignore[union-attr]
            except Exception:
                logger.debug("Copilot client teardown failed", exc_info=True)
            self._copilot_client = None


class ChatCompletionsBackend(GenerationBackend):
    """Backend for any OpenAI-compatible ``/chat/completions`` endpoint."""

    def __init__(self, settings: Settings) -> None:
        super().__init__(settings)
        if not settings.api_key:
            raise ConfigError(
                "OPENAI_API_KEY is not set. "
                "Set it with: export OPENAI_API_KEY='your-api-key'"
            )
        self.base_url = settings.base_url.rstrip("/")
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
        }

    async def _client_instance(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.headers,
                timeout=self.settings.timeout,
            )
        return self._client

    async def _ask_llm(self, prompt: str) -> str:
        client = await self._client_instance()
        payload = {
            "model": self.model,
            "temperature": 0.2,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        }
        try:
            resp = await client.post("/chat/completions", json=payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise BackendError(
                f"Backend API error ({e.response.status_code}): {e.response.reason_phrase}"
            ) from e
        except httpx.HTTPError as e:
            raise BackendError(f"Could not reach the generation backend: {e}") from e

        try:
            return resp.json()["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise BackendError("Unexpected response shape from the generation backend") from e

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None


def create_backend(settings: Settings) -> GenerationBackend:
    """Pick the backend named in ``settings.backend``."""
    if settings.backend == "openai":
        return ChatCompletionsBackend(settings)
    return CopilotBackend(settings)
