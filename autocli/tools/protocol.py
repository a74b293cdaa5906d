"""Extraction of tool calls, plans and thinking blocks from model text.

The model embeds requests in its reply as tagged blocks::

    <plan>["inspect the repo", "fix the bug"]</plan>
    <tool_call>{"name": "Read", "parameters": {"filePath": "a.txt"}}</tool_call>

Scanning uses ``re.finditer`` on compiled patterns, so no cursor state is
shared between calls and every function here is safe to call repeatedly.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

TOOL_CALL_RE = re.compile(r"<tool_call>(.*?)</tool_call>", re.DOTALL)
PLAN_RE = re.compile(r"<plan>(.*?)</plan>", re.DOTALL)
THINK_RE = re.compile(r"<think>(.*?)</think>\n?", re.DOTALL)

INVALID_TOOL_CALL = "InvalidToolCall"


@dataclass
class ToolCall:
    """One tool request, or a parse failure standing in for one."""

    name: str = ""
    parameters: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    raw: str = ""

    @property
    def is_valid(self) -> bool:
        return self.error is None

    @classmethod
    def invalid(cls, error: str, raw: str) -> "ToolCall":
        return cls(name=INVALID_TOOL_CALL, parameters={"raw": raw}, error=error, raw=raw)


@dataclass
class ParsedReply:
    """Result of :func:`parse_reply`."""

    calls: List[ToolCall]
    plan: Optional[List[str]]
    text: str


def strip_thinking(text: str) -> Tuple[str, List[str]]:
    """Remove ``<think>`` blocks (and one trailing newline each).

    Returns:
        The remaining text and the stripped thoughts, in order.
    """
    thoughts = [m.group(1).strip() for m in THINK_RE.finditer(text)]
    if not thoughts:
        return text, []
    return THINK_RE.sub("", text), thoughts


def _parse_call(raw: str) -> ToolCall:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Invalid JSON in tool_call: %s", e)
        return ToolCall.invalid(f"Invalid JSON in tool_call: {e}", raw)

    if not isinstance(parsed, dict) or not parsed.get("name") or parsed.get("parameters") is None:
        logger.warning("Malformed tool call (missing name or parameters): %s", raw)
        return ToolCall.invalid("Malformed tool call: missing name or parameters.", raw)

    name, parameters = parsed["name"], parsed["parameters"]
    if not isinstance(name, str):
        return ToolCall.invalid("Malformed tool call: name must be a string.", raw)
    if not isinstance(parameters, dict):
        return ToolCall.invalid("Malformed tool call: parameters must be an object.", raw)
    return ToolCall(name=name, parameters=parameters, raw=raw)


def iter_tool_calls(text: str) -> Iterator[ToolCall]:
    """Lazily yield the tool calls in ``text`` in order of appearance."""
    for match in TOOL_CALL_RE.finditer(text):
        yield _parse_call(match.group(1).strip())


def _parse_plan(raw: str) -> Optional[List[str]]:
    try:
        steps = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Ignoring plan with invalid JSON: %s", e)
        return None
    if not isinstance(steps, list) or not all(isinstance(s, str) for s in steps):
        logger.warning("Ignoring plan that is not a list of strings: %s", raw)
        return None
    steps = [s.strip() for s in steps if s.strip()]
    return steps or None


def extract_plan(text: str) -> Tuple[Optional[List[str]], str]:
    """Take the first ``<plan>`` block and remove every plan block.

    Returns:
        The plan steps (None when absent or invalid) and the remaining text.
    """
    match = PLAN_RE.search(text)
    if match is None:
        return None, text
    return _parse_plan(match.group(1).strip()), PLAN_RE.sub("", text)


def parse_reply(text: str) -> ParsedReply:
    """Split model text into plan, tool calls and the human-visible remainder.

    Text without tags comes back with no calls, no plan and only trimmed.
    """
    plan, remaining = extract_plan(text)
    calls = list(iter_tool_calls(remaining))
    visible = TOOL_CALL_RE.sub("", remaining).strip()
    return ParsedReply(calls=calls, plan=plan, text=visible)


def format_tool_responses(responses: List[Dict[str, Any]]) -> str:
    """Serialize one turn's results as the single reply message."""
    return json.dumps({"tool_responses": responses}, ensure_ascii=False, default=str)
