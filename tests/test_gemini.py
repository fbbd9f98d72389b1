import asyncio
import json

import httpx
import pytest

from profilecoach.errors import (
    ConfigurationError,
    InvalidResponseError,
    NotFoundError,
    ProfileNotFoundError,
    RateLimitError,
    UpstreamError,
    UpstreamTimeoutError,
)
from profilecoach.gemini import generate_analysis
from profilecoach.prompts import SYSTEM_INSTRUCTION


@pytest.fixture(autouse=True)
def gemini_env(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.setenv("GEMINI_MODEL", "gemini-test")
    monkeypatch.setenv("UPSTREAM_MAX_RETRIES", "1")
    monkeypatch.setenv("UPSTREAM_RETRY_BACKOFF", "0")


def _reply(*texts: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": t} for t in texts]}}]}


def _generate(prompt, handler):
    return asyncio.run(generate_analysis(prompt, transport=httpx.MockTransport(handler)))


def test_generate_analysis_sends_prompt_and_system_instruction() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["key"] = request.headers["x-goog-api-key"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_reply("Score: 80/100\n\n", "Strengths:\n- Clear headline"))

    text = _generate("Jane Doe - Data Engineer", handler)

    assert text == "Score: 80/100\n\nStrengths:\n- Clear headline"
    assert seen["path"] == "/v1beta/models/gemini-test:generateContent"
    assert seen["key"] == "test-key"
    assert seen["body"]["systemInstruction"]["parts"][0]["text"] == SYSTEM_INSTRUCTION
    assert seen["body"]["contents"][0]["parts"][0]["text"] == "Jane Doe - Data Engineer"


def test_missing_api_key(monkeypatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY")

    with pytest.raises(ConfigurationError):
        _generate("prompt", lambda request: httpx.Response(200, json=_reply("ok")))


def test_model_not_found() -> None:
    with pytest.raises(NotFoundError) as excinfo:
        _generate("prompt", lambda request: httpx.Response(404))
    assert not isinstance(excinfo.value, ProfileNotFoundError)


def test_rate_limit_is_retried_then_raised() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(429)

    with pytest.raises(RateLimitError):
        _generate("prompt", handler)
    assert len(calls) == 2


def test_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(UpstreamTimeoutError):
        _generate("prompt", handler)


def test_api_error_message_is_surfaced() -> None:
    body = {"error": {"code": 400, "message": "API key not valid."}}

    with pytest.raises(UpstreamError) as excinfo:
        _generate("prompt", lambda request: httpx.Response(400, json=body))
    assert "API key not valid." in excinfo.value.message


@pytest.mark.parametrize(
    "body",
    [
        {"candidates": []},
        {"candidates": [{"finishReason": "SAFETY"}]},
        _reply("   "),
        ["unexpected"],
    ],
)
def test_malformed_response(body) -> None:
    with pytest.raises(InvalidResponseError):
        _generate("prompt", lambda request: httpx.Response(200, json=body))
