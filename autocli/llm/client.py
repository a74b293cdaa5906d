"""LLM Client using httpx for the Chutes API (OpenAI-compatible).

One blocking request per model turn: the whole history goes out, one
assistant message comes back. No streaming, no native function calling
(tool calls travel inside the message text) and no automatic retry.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """LLM API error."""

    def __init__(self, message: str, code: str = "unknown"):
        super().__init__(message)
        self.message = message
        self.code = code


@dataclass
class LLMResponse:
    """Response from the LLM."""

    text: str = ""
    tokens: Optional[Dict[str, int]] = None
    model: str = ""
    finish_reason: str = ""
    raw: Optional[Dict[str, Any]] = None


@dataclass
class AssistantMessage:
    """What the conversation driver gets back from one model turn.

    Exactly one of ``content`` (on success) or ``error`` is meaningful.
    """

    content: str = ""
    error: Optional[str] = None
    code: Optional[str] = None
    tokens: Dict[str, int] = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.error is not None


class LLMClient:
    """LLM Client using httpx for Chutes API (OpenAI-compatible format).

    Args:
        model: Model identifier sent with every request
        base_url: API base URL
        temperature: Sampling temperature
        timeout: Per-request timeout in seconds
        api_key: Credential; read from the environment when omitted
        transport: Optional httpx transport, used in tests
    """

    DEFAULT_BASE_URL = "https://llm.chutes.ai/v1"
    # Accepted env var names for the API key (checked in order)
    API_KEY_ENV_VARS = ("CHUTES_API_KEY", "CHUTES_API_TOKEN")

    def __init__(
        self,
        model: str,
        base_url: Optional[str] = None,
        temperature: Optional[float] = 0.5,
        timeout: Optional[float] = 120.0,
        api_key: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.model = model
        self.base_url = base_url or self.DEFAULT_BASE_URL
        self.temperature = temperature
        self.timeout = timeout

        self._api_key = api_key
        if not self._api_key:
            for env_var in self.API_KEY_ENV_VARS:
                self._api_key = os.environ.get(env_var)
                if self._api_key:
                    break

        self._total_tokens = 0
        self._input_tokens = 0
        self._output_tokens = 0
        self._request_count = 0
        self._error_count = 0

        self._client = httpx.Client(
            base_url=self.base_url,
            headers={"Content-Type": "application/json"},
            timeout=httpx.Timeout(timeout=self.timeout, connect=30.0),
            transport=transport,
        )

    @property
    def has_credential(self) -> bool:
        return bool(self._api_key)

    @staticmethod
    def _raise_http_error(status_code: int, error_msg: str) -> None:
        """Map HTTP status to an LLMError code and raise."""
        if status_code in (401, 403):
            raise LLMError(error_msg, code="authentication_error")
        elif status_code == 429:
            raise LLMError(error_msg, code="rate_limit")
        elif status_code >= 500:
            raise LLMError(error_msg, code="server_error")
        else:
            raise LLMError(f"HTTP {status_code}: {error_msg}", code="api_error")

    def chat(self, messages: List[Dict[str, Any]], model: Optional[str] = None) -> LLMResponse:
        """Send a chat request.

        Raises:
            LLMError: On a missing credential, transport failure, non-2xx
                status or a response without an assistant message
        """
        if not self._api_key:
            raise LLMError(
                f"API key required. Set one of {', '.join(self.API_KEY_ENV_VARS)}.",
                code="missing_credential",
            )

        payload: Dict[str, Any] = {
            "model": model or self.model,
            "messages": messages,
            "stream": False,
        }
        if self.temperature is not None:
            payload["temperature"] = self.temperature

        try:
            response = self._client.post(
                "/chat/completions",
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
            self._request_count += 1

            if not response.is_success:
                error_body = response.text
                try:
                    error_json = response.json()
                    error_msg = error_json.get("error", {}).get("message", error_body)
                except (json.JSONDecodeError, AttributeError):
                    error_msg = error_body

                self._raise_http_error(response.status_code, error_msg or response.reason_phrase)

            data = response.json()

        except LLMError:
            raise
        except httpx.TimeoutException as e:
            raise LLMError(f"Request timed out: {e}", code="timeout")
        except httpx.ConnectError as e:
            raise LLMError(f"Connection error: {e}", code="connection_error")
        except httpx.HTTPError as e:
            raise LLMError(f"HTTP error: {e}", code="api_error")
        except json.JSONDecodeError as e:
            raise LLMError(f"Response is not valid JSON: {e}", code="invalid_response")

        if not isinstance(data, dict):
            raise LLMError("Response body is not a JSON object", code="invalid_response")

        result = LLMResponse(raw=data, model=data.get("model", payload["model"]))

        usage = data.get("usage") or {}
        if usage:
            input_tokens = usage.get("prompt_tokens", 0) or 0
            output_tokens = usage.get("completion_tokens", 0) or 0
            self._input_tokens += input_tokens
            self._output_tokens += output_tokens
            self._total_tokens += input_tokens + output_tokens
            result.tokens = {"input": input_tokens, "output": output_tokens}

        choices = data.get("choices") or []
        message = choices[0].get("message") if choices and isinstance(choices[0], dict) else None
        if not isinstance(message, dict) or not isinstance(message.get("content"), str):
            raise LLMError("Response has no assistant message content", code="invalid_response")

        result.text = message["content"]
        result.finish_reason = choices[0].get("finish_reason", "") or ""
        return result

    def send_message(self, messages: List[Dict[str, Any]]) -> AssistantMessage:
        """Run :meth:`chat` and fold any failure into the returned message.

        Never raises; the driver ends the turn when ``is_error`` is set.
        """
        try:
            response = self.chat(messages)
        except LLMError as e:
            self._error_count += 1
            logger.error("Model call failed (%s): %s", e.code, e.message)
            return AssistantMessage(error=e.message, code=e.code)
        return AssistantMessage(content=response.text, tokens=response.tokens or {})

    def get_stats(self) -> Dict[str, Any]:
        """Get usage statistics."""
        return {
            "model": self.model,
            "request_count": self._request_count,
            "error_count": self._error_count,
            "total_tokens": self._total_tokens,
            "input_tokens": self._input_tokens,
            "output_tokens": self._output_tokens,
        }

    def close(self):
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
