"""Slash commands typed at the REPL prompt."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

CLIENT_SIDE_HANDLER = "client_side_handler"

DEFAULT_COMMANDS: Dict[str, Dict[str, Any]] = {
    "help": {
        "description": "Show the available commands.",
        "type": CLIENT_SIDE_HANDLER,
    },
    "plan-feature": {
        "description": "Plan and implement a feature: /plan-feature <idea>",
        "prompt_template": (
            "Implement this feature: {{args}}. First locate the relevant code and "
            "propose a <plan>, then carry it out step by step, updating tests as you go."
        ),
        "arg_placeholder": "{{args}}",
    },
    "explain": {
        "description": "Explain a file or symbol: /explain <path or name>",
        "prompt_template": "Read and explain {{args}}: its purpose, main pieces and how it is used.",
        "arg_placeholder": "{{args}}",
    },
    "review": {
        "description": "Review uncommitted changes.",
        "prompt_template": (
            "Run `git diff` and review the changes for bugs, missing tests and style problems."
        ),
    },
    "test": {
        "description": "Run the test suite and fix failures.",
        "prompt_template": (
            "Find how this project runs its tests, run them, and fix any failures until they pass."
        ),
    },
}


class CommandKind(str, Enum):
    NO_COMMAND = "no_command"
    CLIENT_HANDLED = "client_handled"
    LLM_PROMPT = "llm_prompt"
    UNKNOWN_COMMAND = "unknown_command"


@dataclass
class CommandResult:
    """Outcome of :meth:`CommandProcessor.process_input`.

    ``content`` is what should be sent to the model (empty for
    client-handled commands).
    """

    kind: CommandKind
    content: str = ""
    command_name: Optional[str] = None


class CommandProcessor:
    """Looks up ``/name args`` input in a command table.

    Args:
        commands: Command table; defaults to :data:`DEFAULT_COMMANDS`
    """

    def __init__(self, commands: Optional[Dict[str, Dict[str, Any]]] = None):
        self.commands: Dict[str, Dict[str, Any]] = dict(
            DEFAULT_COMMANDS if commands is None else commands
        )

    @classmethod
    def from_file(cls, path: Path) -> "CommandProcessor":
        """Load a command table from a JSON object file.

        Falls back to the built-in table when the file cannot be used.
        """
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not load commands from %s: %s", path, e)
            return cls()
        if not isinstance(data, dict) or not all(isinstance(v, dict) for v in data.values()):
            logger.warning("Ignoring commands file %s: expected an object of objects", path)
            return cls()
        logger.info("Loaded %d commands from %s", len(data), path)
        return cls(data)

    def help_rows(self) -> List[Tuple[str, str]]:
        return [
            (name, str(spec.get("description") or "No description."))
            for name, spec in self.commands.items()
        ]

    def process_input(self, user_input: str) -> CommandResult:
        if not user_input.startswith("/"):
            return CommandResult(CommandKind.NO_COMMAND, user_input)

        head, _, raw_args = user_input.partition(" ")
        name = head[1:]
        args = raw_args.strip()
        spec = self.commands.get(name)

        if spec is None:
            logger.info("Unknown command: %s", head)
            return CommandResult(CommandKind.UNKNOWN_COMMAND, user_input, name)

        if spec.get("type") == CLIENT_SIDE_HANDLER:
            if name == "help":
                return CommandResult(CommandKind.CLIENT_HANDLED, "", name)
            logger.warning("No client-side handler for /%s", name)
            return CommandResult(CommandKind.UNKNOWN_COMMAND, user_input, name)

        template = spec.get("prompt_template")
        if not template:
            logger.warning("Command /%s has no prompt_template", name)
            return CommandResult(CommandKind.UNKNOWN_COMMAND, user_input, name)

        placeholder = spec.get("arg_placeholder")
        content = str(template)
        if placeholder and args:
            content = content.replace(placeholder, args)
        elif placeholder:
            logger.info("Command /%s expects arguments but none were given", name)
        elif args:
            logger.info("Command /%s takes no arguments; ignoring %r", name, args)

        return CommandResult(CommandKind.LLM_PROMPT, content, name)
