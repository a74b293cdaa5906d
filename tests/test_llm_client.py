import json

import httpx
import pytest

from autocli.llm.client import LLMClient, LLMError


def make_client(handler, api_key="test-key"):
    return LLMClient(
        model="test/model",
        base_url="https://llm.example/v1",
        api_key=api_key,
        transport=httpx.MockTransport(handler),
    )


def completion(content, usage=None):
    body = {"model": "test/model", "choices": [{"message": {"role": "assistant", "content": content}, "finish_reason": "stop"}]}
    if usage:
        body["usage"] = usage
    return httpx.Response(200, json=body)


def test_chat_sends_history_and_returns_text():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return completion("hi!", {"prompt_tokens": 10, "completion_tokens": 3})

    client = make_client(handler)
    messages = [{"role": "system", "content": "sys"}, {"role": "user", "content": "hello"}]
    reply = client.send_message(messages)

    assert not reply.is_error
    assert reply.content == "hi!"
    assert seen["url"] == "https://llm.example/v1/chat/completions"
    assert seen["auth"] == "Bearer test-key"
    assert seen["body"]["messages"] == messages
    assert seen["body"]["model"] == "test/model"
    assert seen["body"]["temperature"] == 0.5
    stats = client.get_stats()
    assert stats["request_count"] == 1
    assert stats["input_tokens"] == 10
    assert stats["output_tokens"] == 3


@pytest.mark.parametrize(
    "status, code",
    [(401, "authentication_error"), (429, "rate_limit"), (500, "server_error"), (400, "api_error")],
)
def test_http_errors_map_to_codes(status, code):
    client = make_client(lambda request: httpx.Response(status, json={"error": {"message": "nope"}}))
    with pytest.raises(LLMError) as excinfo:
        client.chat([{"role": "user", "content": "x"}])
    assert excinfo.value.code == code


def test_missing_message_is_invalid_response():
    client = make_client(lambda request: httpx.Response(200, json={"choices": []}))
    reply = client.send_message([{"role": "user", "content": "x"}])
    assert reply.is_error
    assert reply.code == "invalid_response"


def test_non_json_body_is_invalid_response():
    client = make_client(lambda request: httpx.Response(200, text="<html>"))
    reply = client.send_message([])
    assert reply.code == "invalid_response"


def test_transport_failure_never_raises_from_send_message():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    client = make_client(handler)
    reply = client.send_message([{"role": "user", "content": "x"}])
    assert reply.is_error
    assert reply.code == "connection_error"
    assert client.get_stats()["error_count"] == 1


def test_timeout_is_reported():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    reply = make_client(handler).send_message([])
    assert reply.code == "timeout"


def test_missing_credential(monkeypatch):
    monkeypatch.delenv("CHUTES_API_KEY", raising=False)
    monkeypatch.delenv("CHUTES_API_TOKEN", raising=False)
    calls = []
    client = make_client(lambda request: calls.append(request), api_key=None)

    assert not client.has_credential
    reply = client.send_message([])
    assert reply.code == "missing_credential"
    assert calls == []
