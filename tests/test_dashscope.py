from types import SimpleNamespace

import httpx
import openai
import pytest
from tenacity import wait_none

from ai.dashscope import DashScopeClient, LLMError, verify_api_configuration

URL = "https://dashscope.example/compatible-mode/v1/chat/completions"


def reply(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeCompletions:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_client(*outcomes):
    completions = FakeCompletions(outcomes)
    sdk = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return DashScopeClient(api_key="sk-test", sdk_client=sdk), completions


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    monkeypatch.setattr(DashScopeClient._create.retry, "wait", wait_none())


async def test_complete_strips_reply_and_passes_options():
    client, completions = make_client(reply("  Hola  "))

    text = await client.complete(
        "qwen-mt-turbo",
        [{"role": "user", "content": "hi"}],
        max_tokens=50,
        temperature=0.3,
        timeout=8,
        extra_body={"translation_options": {"target_lang": "Spanish"}},
    )

    assert text == "Hola"
    sent = completions.calls[0]
    assert sent["model"] == "qwen-mt-turbo"
    assert sent["max_tokens"] == 50
    assert sent["timeout"] == 8
    assert sent["extra_body"] == {"translation_options": {"target_lang": "Spanish"}}


async def test_optional_arguments_are_omitted():
    client, completions = make_client(reply("ok"))
    await client.complete("qwen-flash", [{"role": "user", "content": "x"}])
    assert set(completions.calls[0]) == {"model", "messages"}


async def test_transient_error_is_retried():
    error = openai.APIConnectionError(request=httpx.Request("POST", URL))
    client, completions = make_client(error, reply("OK"))

    assert await client.complete("qwen-flash", []) == "OK"
    assert len(completions.calls) == 2


async def test_client_error_is_not_retried():
    request = httpx.Request("POST", URL)
    error = openai.BadRequestError(
        "bad request",
        response=httpx.Response(400, request=request),
        body=None,
    )
    client, completions = make_client(error, reply("unused"))

    with pytest.raises(LLMError, match="API request failed"):
        await client.complete("qwen-flash", [])
    assert len(completions.calls) == 1


async def test_empty_reply_raises():
    client, _ = make_client(reply("   "))
    with pytest.raises(LLMError, match="Empty response"):
        await client.complete("qwen-flash", [])


async def test_missing_key_raises():
    client = DashScopeClient(api_key="")
    assert not client.configured
    with pytest.raises(LLMError, match="not configured"):
        await client.complete("qwen-flash", [])


async def test_ping():
    client, completions = make_client(reply("OK"))
    assert await client.ping() == "OK"
    assert completions.calls[0]["messages"][-1] == {"role": "user", "content": "test"}


def test_verify_api_configuration():
    assert verify_api_configuration("")["configured"] is False
    assert "start with" in verify_api_configuration("abc")["error"]

    result = verify_api_configuration("sk-1234567890abcd")
    assert result == {"configured": True, "keyPreview": "sk-123...abcd"}
