"""Confirmation policy for tool execution."""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Protocol

from rich.markup import escape

if TYPE_CHECKING:
    from autocli.core.session import ConsoleSession

logger = logging.getLogger(__name__)

DENIED_OUTPUT = "User denied tool execution"


class ApprovalOutcome(str, Enum):
    APPROVED = "approved"
    DENIED = "denied"


class ConfirmationGate(Protocol):
    """Decides whether a requested tool call may run."""

    def confirm(self, tool_name: str, parameters: Dict[str, Any]) -> ApprovalOutcome: ...


class AutoApproveGate:
    """Approves everything without asking (``--brave``)."""

    def confirm(self, tool_name: str, parameters: Dict[str, Any]) -> ApprovalOutcome:
        return ApprovalOutcome.APPROVED


class InteractiveGate:
    """Shows the call on the console session and asks yes/no.

    Args:
        session: Interactive console handle owned by the caller
    """

    def __init__(self, session: "ConsoleSession"):
        self.session = session

    def confirm(self, tool_name: str, parameters: Dict[str, Any]) -> ApprovalOutcome:
        rendered = json.dumps(parameters, indent=2, ensure_ascii=False, default=str)
        approved = self.session.confirm(
            f"Execute tool [bold]{escape(tool_name)}[/bold] with parameters:\n"
            f"{escape(rendered)}\nProceed?",
            default=True,
        )
        outcome = ApprovalOutcome.APPROVED if approved else ApprovalOutcome.DENIED
        logger.info("Tool %s %s by user", tool_name, outcome.value)
        return outcome

