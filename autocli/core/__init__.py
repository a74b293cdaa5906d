"""Conversation core: history, driver and slash commands."""

from .commands import CommandKind, CommandProcessor, CommandResult
from .loop import ConversationDriver, DriverState, TurnOutcome
from .session import ConsoleSession, Message, Role, Session

__all__ = [
    "CommandKind",
    "CommandProcessor",
    "CommandResult",
    "ConsoleSession",
    "ConversationDriver",
    "DriverState",
    "Message",
    "Role",
    "Session",
    "TurnOutcome",
]
