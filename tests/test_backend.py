"""Tests for the generation backends."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import respx

from git_scribe.backend import (
    ChatCompletionsBackend,
    CopilotBackend,
    create_backend,
    strip_fences,
    truncate,
)
from git_scribe.config import Settings
from git_scribe.errors import BackendError, ConfigError, NoChangesError
from git_scribe.models import FileDiff

API = "https://llm.test/v1"


@pytest.fixture
def openai_settings():
    return Settings(backend="openai", api_key="sk-test", base_url=API + "/", model="test-model")


def _completion(content):
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


class TestHelpers:
    def test_strip_fences(self):
        assert strip_fences("```\nfeat: add x\n```") == "feat: add x"
        assert strip_fences("```text\nfix: y\n```\n") == "fix: y"
        assert strip_fences("  chore: z  ") == "chore: z"

    def test_truncate(self):
        assert truncate("abc", 10) == "abc"
        cut = truncate("x" * 20, 5)
        assert cut.startswith("xxxxx\n")
        assert "15 chars truncated" in cut


class TestCreateBackend:
    def test_copilot_default(self):
        assert isinstance(create_backend(Settings()), CopilotBackend)

    def test_openai(self, openai_settings):
        assert isinstance(create_backend(openai_settings), ChatCompletionsBackend)

    def test_openai_requires_key(self):
        with pytest.raises(ConfigError, match="OPENAI_API_KEY"):
            create_backend(Settings(backend="openai"))


class TestChatCompletionsBackend:
    @pytest.mark.asyncio
    @respx.mock
    async def test_generate_commit_message(self, openai_settings):
        route = respx.post(f"{API}/chat/completions").mock(return_value=_completion("feat: add retry logic"))
        backend = ChatCompletionsBackend(openai_settings)
        message = await backend.generate_commit_message("diff --git a/x b/x")
        await backend.close()

        assert message == "feat: add retry logic"
        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = request.read().decode()
        assert "test-model" in body
        assert "diff --git a/x b/x" in body

    @pytest.mark.asyncio
    @respx.mock
    async def test_strips_code_fences(self, openai_settings):
        respx.post(f"{API}/chat/completions").mock(return_value=_completion("```\nfix: typo\n```"))
        backend = ChatCompletionsBackend(openai_settings)
        assert await backend.generate_commit_message("d") == "fix: typo"
        await backend.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_becomes_backend_error(self, openai_settings):
        respx.post(f"{API}/chat/completions").mock(return_value=httpx.Response(500))
        backend = ChatCompletionsBackend(openai_settings)
        with pytest.raises(BackendError, match="500"):
            await backend.analyze_contributor("report")
        await backend.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_connect_error_becomes_backend_error(self, openai_settings):
        respx.post(f"{API}/chat/completions").mock(side_effect=httpx.ConnectError("refused"))
        backend = ChatCompletionsBackend(openai_settings)
        with pytest.raises(BackendError, match="Could not reach"):
            await backend.generate_commit_message("d")
        await backend.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_unexpected_shape(self, openai_settings):
        respx.post(f"{API}/chat/completions").mock(return_value=httpx.Response(200, json={"oops": True}))
        backend = ChatCompletionsBackend(openai_settings)
        with pytest.raises(BackendError, match="Unexpected response"):
            await backend.generate_commit_message("d")
        await backend.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_empty_response(self, openai_settings):
        respx.post(f"{API}/chat/completions").mock(return_value=_completion(""))
        backend = ChatCompletionsBackend(openai_settings)
        with pytest.raises(BackendError, match="empty"):
            await backend.generate_commit_message("d")
        await backend.close()

    @pytest.mark.asyncio
    async def test_close_without_client(self, openai_settings):
        await ChatCompletionsBackend(openai_settings).close()  # should not raise


class TestBackendOperations:
    def setup_method(self):
        self.backend = CopilotBackend(Settings(max_diff_chars=50))

    @pytest.mark.asyncio
    async def test_commit_prompt_truncates_diff(self):
        self.backend._ask_llm = AsyncMock(return_value="feat: x")
        await self.backend.generate_commit_message("+" * 500)
        prompt = self.backend._ask_llm.await_args.args[0]
        assert "450 chars truncated" in prompt
        assert "<type>: <description>" in prompt

    @pytest.mark.asyncio
    async def test_analyze_changes_one_call_per_file(self):
        self.backend._ask_llm = AsyncMock(side_effect=["- explains a", "- explains b"])
        repo = MagicMock()
        repo.get_file_diffs.return_value = [
            FileDiff(path="a.py", diff="+a"),
            FileDiff(path="b.md", diff="+b"),
        ]
        analyses = await self.backend.analyze_changes(repo)
        assert [(a.path, a.explanation) for a in analyses] == [
            ("a.py", "- explains a"),
            ("b.md", "- explains b"),
        ]
        assert "`a.py`" in self.backend._ask_llm.await_args_list[0].args[0]

    @pytest.mark.asyncio
    async def test_analyze_changes_no_changes(self):
        self.backend._ask_llm = AsyncMock()
        repo = MagicMock()
        repo.get_file_diffs.side_effect = NoChangesError()
        with pytest.raises(NoChangesError):
            await self.backend.analyze_changes(repo)
        self.backend._ask_llm.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_analyze_contributor_includes_report(self):
        self.backend._ask_llm = AsyncMock(return_value="Summary.")
        assert await self.backend.analyze_contributor("## Contributor: A <a@x>") == "Summary."
        assert "## Contributor: A <a@x>" in self.backend._ask_llm.await_args.args[0]

    @pytest.mark.asyncio
    async def test_sdk_failure_becomes_backend_error(self):
        self.backend._ask_llm = AsyncMock(side_effect=RuntimeError("cli crashed"))
        with pytest.raises(BackendError, match="cli crashed"):
            await self.backend.generate_commit_message("d")


class TestCopilotLifecycle:
    @pytest.mark.asyncio
    async def test_close_tears_down_session_and_client(self):
        backend = CopilotBackend(Settings())
        session, client = AsyncMock(), AsyncMock()
        backend._copilot_session = session
        backend._copilot_client = client
        await backend.close()
        session.destroy.assert_awaited_once()
        client.stop.assert_awaited_once()
        assert backend._copilot_session is None

    @pytest.mark.asyncio
    async def test_close_ignores_teardown_errors(self):
        backend = CopilotBackend(Settings())
        backend._copilot_session = AsyncMock()
        backend._copilot_session.destroy.side_effect = RuntimeError("gone")
        await backend.close()  # should not raise

    @pytest.mark.asyncio
    async def test_ask_collects_assistant_message(self):
        backend = CopilotBackend(Settings())
        backend._ensure_copilot = AsyncMock()
        handlers = []
        session = MagicMock()
        session.on.side_effect = lambda handler: handlers.append(handler) or (lambda: None)

        async def send(payload):
            event = MagicMock()
            event.type.value = "assistant.message"
            event.data.content = "docs: refresh guide"
            handlers[0](event)

        session.send = send
        backend._copilot_session = session
        assert await backend.generate_commit_message("d") == "docs: refresh guide"
