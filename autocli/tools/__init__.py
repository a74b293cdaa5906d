"""Tools for autocli."""

from .base import BaseTool, ToolContext, ToolResult, ToolStatus
from .guards import PathGuard, PathTraversalError
from .policy import ApprovalOutcome, AutoApproveGate, ConfirmationGate, InteractiveGate
from .protocol import ParsedReply, ToolCall, parse_reply, strip_thinking
from .registry import ToolRegistry
from .specs import TOOL_SPECS, get_all_tools

__all__ = [
    "ApprovalOutcome",
    "AutoApproveGate",
    "BaseTool",
    "ConfirmationGate",
    "InteractiveGate",
    "ParsedReply",
    "PathGuard",
    "PathTraversalError",
    "TOOL_SPECS",
    "ToolCall",
    "ToolContext",
    "ToolRegistry",
    "ToolResult",
    "ToolStatus",
    "get_all_tools",
    "parse_reply",
    "strip_thinking",
]
