"""
Tests for the chat-completions client. No network: _post_chat is patched.
"""
import asyncio
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from joinery.core.config import settings
from joinery.core.errors import NLUProviderError
from joinery.services import llm


def _envelope(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.mark.unit
class TestBuildMessages:

    def test_context_is_serialised_into_system_prompt(self):
        messages = llm.build_messages({"client": "Holly Parry"}, [])

        assert len(messages) == 1
        assert messages[0]["role"] == "system"
        assert json.dumps({"client": "Holly Parry"}) in messages[0]["content"]

    def test_history_follows_system_prompt_in_order(self):
        history = [
            {"role": "user", "content": "Create a project"},
            {"role": "assistant", "content": "Who is the client?"},
            {"role": "user", "content": "Holly Parry"},
        ]

        messages = llm.build_messages({}, history)

        assert [m["content"] for m in messages[1:]] == [
            "Create a project", "Who is the client?", "Holly Parry",
        ]
        assert "Current context: {}" in messages[0]["content"]


@pytest.mark.unit
@pytest.mark.asyncio
class TestCompleteChat:

    async def test_returns_content(self):
        with patch.object(llm, "_post_chat", AsyncMock(return_value=_envelope('{"action": "unknown"}'))) as post:
            text = await llm.complete_chat([{"role": "user", "content": "hi"}])

        assert text == '{"action": "unknown"}'
        payload = post.await_args.args[0]
        assert payload["model"] == settings.OPENAI_MODEL
        assert payload["temperature"] == settings.OPENAI_TEMPERATURE
        assert payload["messages"] == [{"role": "user", "content": "hi"}]

    async def test_empty_content_passes_through(self):
        with patch.object(llm, "_post_chat", AsyncMock(return_value=_envelope(None))):
            assert await llm.complete_chat([]) == ""

    async def test_missing_api_key(self, monkeypatch):
        monkeypatch.setattr(settings, "OPENAI_API_KEY", None)
        with pytest.raises(NLUProviderError):
            await llm.complete_chat([])

    async def test_timeout(self):
        async def slow(*args, **kwargs):
            await asyncio.sleep(1)

        with patch.object(llm, "_post_chat", slow):
            with pytest.raises(NLUProviderError, match="timed out"):
                await llm.complete_chat([], timeout=0.01)

    async def test_http_error_status(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        response = httpx.Response(429, request=request)
        error = httpx.HTTPStatusError("rate limited", request=request, response=response)

        with patch.object(llm, "_post_chat", AsyncMock(side_effect=error)):
            with pytest.raises(NLUProviderError, match="429"):
                await llm.complete_chat([])

    async def test_network_error(self):
        with patch.object(llm, "_post_chat", AsyncMock(side_effect=httpx.ConnectError("refused"))):
            with pytest.raises(NLUProviderError):
                await llm.complete_chat([])

    async def test_malformed_envelope(self):
        with patch.object(llm, "_post_chat", AsyncMock(return_value={"choices": ["nope"]})):
            with pytest.raises(NLUProviderError):
                await llm.complete_chat([])
