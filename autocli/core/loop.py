"""
Conversation driver - the heart of autocli.

Implements the bounded request/response cycle:
1. Append the user request to the history
2. Call the model with the full history
3. Strip thinking blocks, record the reply, extract tool calls and a plan
4. Confirm and execute each tool call, send all results back in one message
5. Repeat until the model stops asking for tools or the ceiling is hit

When the model proposed a plan, each step then gets its own nested cycle
that ends when the model replies with the completion token.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol

from autocli.config.models import PlanConfig
from autocli.core.session import Session
from autocli.output.processor import OutputProcessor
from autocli.tools.base import ToolResult
from autocli.tools.policy import DENIED_OUTPUT, ApprovalOutcome, ConfirmationGate
from autocli.tools.protocol import (
    ParsedReply,
    ToolCall,
    format_tool_responses,
    parse_reply,
    strip_thinking,
)
from autocli.utils.truncate import preview

if TYPE_CHECKING:
    from autocli.llm.client import AssistantMessage
    from autocli.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

SOFT_STOP_DIRECTIVE = (
    "TOOL_EXECUTION_ERROR: Max tool iterations reached. "
    "Please summarize your current state or ask the user for guidance."
)
STEP_DIRECTIVE = (
    "Plan step {index}/{total}: {description}\n"
    'Complete this step now. When it is finished, reply with "{token}".'
)
STEP_REMINDER = (
    "Reminder: you are working on plan step {index}/{total}: {description}. "
    'Continue, and reply with "{token}" once this step is finished.'
)


class ModelEndpoint(Protocol):
    """Anything that turns a message history into one assistant reply."""

    def send_message(self, messages: List[Dict[str, Any]]) -> "AssistantMessage": ...


class DriverState(str, Enum):
    AWAITING_USER = "awaiting_user"
    MODEL_TURN = "model_turn"
    TOOL_TURN = "tool_turn"
    PLAN_STEP_TURN = "plan_step_turn"


@dataclass
class TurnOutcome:
    """Summary of one handled user request."""

    iterations: int = 0
    final_text: str = ""
    error: Optional[str] = None
    stopped_by_ceiling: bool = False
    plan: Optional[List[str]] = None
    steps_completed: int = 0
    tool_calls: int = 0


@dataclass
class _Cycle:
    iterations: int = 0
    error: Optional[str] = None
    stopped_by_ceiling: bool = False
    completed: bool = False
    last_text: str = ""
    tool_calls: int = 0


@dataclass
class _RequestState:
    plan: Optional[List[str]] = None
    plan_seen: bool = False


class ConversationDriver:
    """Owns the history and runs the tool-use cycle for each user request.

    Args:
        model: Model endpoint; ``send_message`` must not raise
        registry: Tool registry used for execution
        gate: Confirmation gate consulted before every valid tool call
        session: Conversation history, already holding the system prompt
        output: Terminal renderer
        max_iterations: Model calls per request before the soft stop
        plan_config: Plan sub-loop settings
    """

    def __init__(
        self,
        model: ModelEndpoint,
        registry: "ToolRegistry",
        gate: ConfirmationGate,
        session: Session,
        output: Optional[OutputProcessor] = None,
        max_iterations: int = 70,
        plan_config: Optional[PlanConfig] = None,
    ):
        if max_iterations < 1:
            raise ValueError("max_iterations must be >= 1")
        self.model = model
        self.registry = registry
        self.gate = gate
        self.session = session
        self.output = output or OutputProcessor()
        self.max_iterations = max_iterations
        self.plan_config = plan_config or PlanConfig()
        self.state = DriverState.AWAITING_USER
        self._context = registry.build_context()
        self._request = _RequestState()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def handle_user_request(self, text: str) -> TurnOutcome:
        """Run the full cycle for one user request, plan steps included."""
        self._request = _RequestState()
        self.session.add_user_message(text)

        try:
            cycle = self._run_cycle(self.max_iterations)
            outcome = TurnOutcome(
                iterations=cycle.iterations,
                final_text=cycle.last_text,
                error=cycle.error,
                stopped_by_ceiling=cycle.stopped_by_ceiling,
                tool_calls=cycle.tool_calls,
            )

            plan = self._request.plan
            if plan and cycle.error is None and self.plan_config.enabled:
                outcome.plan = plan
                self._run_plan(plan, outcome)
            elif plan:
                outcome.plan = plan
        finally:
            self.state = DriverState.AWAITING_USER

        return outcome

    # ------------------------------------------------------------------
    # Cycles
    # ------------------------------------------------------------------

    def _run_cycle(
        self,
        ceiling: int,
        step: Optional[tuple[int, int, str]] = None,
    ) -> _Cycle:
        """Model/tool cycle bounded by ``ceiling`` plus one soft-stop call.

        With ``step`` set (index, total, description) the cycle belongs to a
        plan step: it ends on the completion token and nudges the model with
        a reminder when a reply has neither tools nor the token.
        """
        cycle = _Cycle()
        token = self.plan_config.completion_token

        while True:
            final = cycle.iterations >= ceiling
            if final:
                logger.warning("Iteration ceiling %d reached; injecting soft stop", ceiling)
                self.output.emit_warning("Max tool iterations reached; asking the model to wrap up.")
                self.session.add_user_message(SOFT_STOP_DIRECTIVE)

            cycle.iterations += 1
            logger.info(
                "Model call %d/%d%s",
                cycle.iterations,
                ceiling,
                f" (plan step {step[0]}/{step[1]})" if step else "",
            )
            reply = self._call_model(DriverState.PLAN_STEP_TURN if step else DriverState.MODEL_TURN)
            if isinstance(reply, str):
                cycle.error = reply
                return cycle

            cycle.last_text = reply.text
            if final:
                if reply.calls:
                    logger.warning(
                        "Ignoring %d tool call(s) requested after the soft stop", len(reply.calls)
                    )
                cycle.stopped_by_ceiling = True
                cycle.completed = step is not None and token in reply.text
                return cycle

            if reply.calls:
                cycle.tool_calls += len(reply.calls)
                self._execute_calls(reply.calls)
                if step is None:
                    continue
                if token in reply.text:
                    cycle.completed = True
                    return cycle
                continue

            if step is None or token in reply.text:
                cycle.completed = step is not None
                return cycle

            index, total, description = step
            self.session.add_user_message(
                STEP_REMINDER.format(index=index, total=total, description=description, token=token)
            )

    def _run_plan(self, plan: List[str], outcome: TurnOutcome) -> None:
        """Drive the plan steps strictly in order."""
        total = len(plan)
        token = self.plan_config.completion_token
        logger.info("Executing plan with %d step(s)", total)

        for index, description in enumerate(plan, start=1):
            self.output.emit_info(f"Plan step {index}/{total}: {description}")
            self.session.add_user_message(
                STEP_DIRECTIVE.format(index=index, total=total, description=description, token=token)
            )
            cycle = self._run_cycle(
                self.plan_config.max_step_iterations, step=(index, total, description)
            )
            outcome.iterations += cycle.iterations
            outcome.tool_calls += cycle.tool_calls
            outcome.final_text = cycle.last_text or outcome.final_text

            if cycle.error is not None:
                logger.error("Plan aborted at step %d/%d: %s", index, total, cycle.error)
                outcome.error = cycle.error
                return
            if cycle.completed:
                outcome.steps_completed += 1
            else:
                logger.warning(
                    "Plan step %d/%d hit its iteration ceiling; moving on", index, total
                )

    # ------------------------------------------------------------------
    # Model and tools
    # ------------------------------------------------------------------

    def _call_model(self, state: DriverState) -> ParsedReply | str:
        """One model call. Returns the parsed reply, or the error text."""
        self.state = state
        message = self.model.send_message(self.session.get_messages_for_api())

        if message.is_error:
            error = message.error or "Unknown model error"
            self.session.add_assistant_message(f"Error: {error}")
            self.output.emit_error(error)
            return error

        if message.tokens:
            self.session.update_usage(
                message.tokens.get("input", 0), message.tokens.get("output", 0)
            )

        content, thoughts = strip_thinking(message.content or "")
        content = content.strip()
        for thought in thoughts:
            logger.debug("Model thinking: %s", preview(thought, 500))
            self.output.emit_thinking(thought)

        self.session.add_assistant_message(content)
        reply = parse_reply(content)

        if reply.plan is not None:
            if self._request.plan_seen:
                logger.warning("Ignoring additional plan in the same request")
            else:
                self._request.plan_seen = True
                self._request.plan = reply.plan
                logger.info("Captured plan: %s", reply.plan)

        self.output.emit_assistant_message(reply.text)
        return reply

    def _execute_calls(self, calls: List[ToolCall]) -> None:
        """Confirm and run each call in order; send every result back at once."""
        self.state = DriverState.TOOL_TURN
        responses: List[Dict[str, Any]] = []

        for call in calls:
            if not call.is_valid:
                logger.warning("Reporting invalid tool call: %s", call.error)
                responses.append(ToolResult.fail(call.error).to_response(call.name, call.parameters))
                continue

            logger.info("Tool call %s %s", call.name, preview(call.parameters))
            self.output.emit_tool_call_start(call.name, call.parameters)

            if self.gate.confirm(call.name, call.parameters) == ApprovalOutcome.DENIED:
                result = ToolResult.fail(DENIED_OUTPUT)
            else:
                result = self.registry.execute(call.name, call.parameters, self._context)

            logger.info("Tool %s -> %s", call.name, result.status.value)
            self.output.emit_tool_call_end(call.name, result)
            responses.append(result.to_response(call.name, call.parameters))

        self.session.add_user_message(format_tool_responses(responses))
