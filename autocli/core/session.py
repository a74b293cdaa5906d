"""Conversation state for autocli.

``Session`` is the message history the driver resends on every model
call. ``ConsoleSession`` is the interactive terminal handle that the REPL
and the confirmation gate share; it is passed in explicitly rather than
kept as a module global.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List, Tuple

from rich.console import Console
from rich.prompt import Confirm, Prompt


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """A message in the conversation history."""

    role: Role
    content: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to API format."""
        return {"role": self.role.value, "content": self.content}


@dataclass
class TokenUsage:
    """Token usage tracking."""

    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class Session:
    """Append-only conversation history.

    The first message is always the system prompt; nothing can be removed
    or reordered afterwards. The history lives only as long as the process.
    """

    def __init__(self, system_prompt: str):
        self.id = str(uuid.uuid4())
        self.started_at = datetime.now()
        self.usage = TokenUsage()
        self._messages: List[Message] = [Message(Role.SYSTEM, system_prompt)]

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def add_user_message(self, content: str) -> None:
        """Add a user message."""
        self._messages.append(Message(Role.USER, content))

    def add_assistant_message(self, content: str) -> None:
        """Add an assistant message."""
        self._messages.append(Message(Role.ASSISTANT, content))

    def get_messages_for_api(self) -> list[dict[str, Any]]:
        """Get messages formatted for the API."""
        return [msg.to_dict() for msg in self._messages]

    def update_usage(self, input_tokens: int, output_tokens: int) -> None:
        self.usage.input_tokens += input_tokens
        self.usage.output_tokens += output_tokens

    @property
    def elapsed_time(self) -> float:
        """Get elapsed time in seconds."""
        return (datetime.now() - self.started_at).total_seconds()


@dataclass
class ConsoleSession:
    """Interactive terminal input backed by a rich console."""

    console: Console = field(default_factory=Console)

    def ask(self, prompt: str = "You") -> str:
        return Prompt.ask(f"[bold cyan]{prompt}[/bold cyan]", console=self.console)

    def confirm(self, question: str, default: bool = True) -> bool:
        return Confirm.ask(question, console=self.console, default=default)
