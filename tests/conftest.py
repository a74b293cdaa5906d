from __future__ import annotations

import copy
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import pytest
from rich.console import Console

from autocli.config.models import PlanConfig, ToolsConfig
from autocli.core.loop import ConversationDriver
from autocli.core.session import Session
from autocli.llm.client import AssistantMessage
from autocli.output.processor import OutputProcessor
from autocli.tools.policy import ApprovalOutcome
from autocli.tools.registry import ToolRegistry


class FakeModel:
    """Scripted model endpoint (no network).

    ``replies`` are consumed in order; each is either reply text or an
    ``AssistantMessage``. A ``factory`` callable, when given, produces the
    reply for every call instead. Once the script runs out ``fallback``
    text is returned.
    """

    def __init__(self, replies=None, factory: Callable[[int], Any] | None = None, fallback="Done."):
        self.replies = list(replies or [])
        self.factory = factory
        self.fallback = fallback
        self.calls: list[list[dict]] = []

    def send_message(self, messages):
        self.calls.append(copy.deepcopy(messages))
        if self.factory is not None:
            reply = self.factory(len(self.calls))
        elif self.replies:
            reply = self.replies.pop(0)
        else:
            reply = self.fallback
        if isinstance(reply, AssistantMessage):
            return reply
        return AssistantMessage(content=reply)


class RecordingGate:
    """Confirmation gate that replays scripted answers and records requests."""

    def __init__(self, answers=None, default: bool = True):
        self.answers = list(answers or [])
        self.default = default
        self.requests: list[tuple[str, dict]] = []

    def confirm(self, tool_name, parameters):
        self.requests.append((tool_name, parameters))
        approved = self.answers.pop(0) if self.answers else self.default
        return ApprovalOutcome.APPROVED if approved else ApprovalOutcome.DENIED


@dataclass
class DriverHarness:
    driver: ConversationDriver
    model: FakeModel
    gate: RecordingGate
    session: Session
    project: Path
    output: io.StringIO


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    """Temporary project root with a small tree."""
    root = tmp_path / "project"
    (root / "src" / "pkg").mkdir(parents=True)
    (root / "docs").mkdir()
    (root / "node_modules" / "dep").mkdir(parents=True)
    (root / "README.md").write_text("# Demo\nhello world\n")
    (root / "src" / "main.py").write_text("def main():\n    return 42\n")
    (root / "src" / "pkg" / "util.py").write_text("VALUE = 1\nOTHER = 2\n")
    (root / "docs" / "guide.md").write_text("guide\n")
    (root / "node_modules" / "dep" / "index.js").write_text("module.exports = 1;\n")
    (root / ".env.example").write_text("KEY=\n")
    return root


@pytest.fixture()
def tools_config() -> ToolsConfig:
    return ToolsConfig(shell_timeout=10, kill_grace=0.5)


@pytest.fixture()
def registry(project: Path, tools_config: ToolsConfig) -> ToolRegistry:
    return ToolRegistry(project, tools_config)


@pytest.fixture()
def context(registry: ToolRegistry):
    return registry.build_context()


@pytest.fixture()
def quiet_output():
    buffer = io.StringIO()
    return OutputProcessor(Console(file=buffer, width=120)), buffer


@pytest.fixture()
def make_driver(project: Path, registry: ToolRegistry, quiet_output):
    """Build a driver around a FakeModel and RecordingGate."""

    def _make(
        replies=None,
        *,
        factory=None,
        answers=None,
        max_iterations: int = 70,
        plan: PlanConfig | None = None,
    ) -> DriverHarness:
        output, buffer = quiet_output
        model = FakeModel(replies, factory=factory)
        gate = RecordingGate(answers)
        session = Session("system prompt")
        driver = ConversationDriver(
            model=model,
            registry=registry,
            gate=gate,
            session=session,
            output=output,
            max_iterations=max_iterations,
            plan_config=plan,
        )
        return DriverHarness(driver, model, gate, session, project, buffer)

    return _make
