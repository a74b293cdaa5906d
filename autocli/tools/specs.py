"""Tool specifications for autocli - defines JSON schemas for all tools.

The schemas are rendered into the system prompt (the model calls tools
through ``<tool_call>`` blocks, not a native function-calling API) and
used to check required parameters before dispatch.
"""

from __future__ import annotations

from typing import Any

# Bash tool
BASH_SPEC: dict[str, Any] = {
    "name": "Bash",
    "description": """Executes a shell command in the project directory.
For commands that run indefinitely (dev servers, watchers) set "background": true.
Foreground commands are terminated after the timeout.""",
    "parameters": {
        "type": "object",
        "properties": {
            "command": {
                "type": "string",
                "description": "The command to execute",
            },
            "background": {
                "type": "boolean",
                "description": "Start detached and return the PID immediately; output is not captured",
                "default": False,
            },
            "timeout": {
                "type": "number",
                "description": "Foreground timeout in seconds (default: 30)",
            },
        },
        "required": ["command"],
    },
}

# Batch tool
BATCH_SPEC: dict[str, Any] = {
    "name": "Batch",
    "description": """Executes multiple independent tool calls in parallel.
Bash and Batch cannot be used inside a batch. Results come back in input order.""",
    "parameters": {
        "type": "object",
        "properties": {
            "calls": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "parameters": {"type": "object"},
                    },
                },
                "description": "Tool call objects, each with name and parameters",
            },
        },
        "required": ["calls"],
    },
}

# Glob tool
GLOB_SPEC: dict[str, Any] = {
    "name": "Glob",
    "description": """Finds files and directories matching a glob pattern within the project.
VCS and build directories are ignored by default; extra ignore patterns are added to the defaults.""",
    "parameters": {
        "type": "object",
        "properties": {
            "pattern": {
                "type": "string",
                "description": "Glob pattern, e.g. 'src/**/*.py' or '*.md'",
            },
            "path": {
                "type": "string",
                "description": "Directory to search from (default: project root)",
                "default": ".",
            },
            "ignore": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Additional glob patterns to ignore",
            },
        },
        "required": ["pattern"],
    },
}

# Grep tool
GREP_SPEC: dict[str, Any] = {
    "name": "Grep",
    "description": """Searches for a regular expression line by line in one file or a list of files.
Each match lists the full match followed by its capture groups.""",
    "parameters": {
        "type": "object",
        "properties": {
            "filePath": {
                "type": "string",
                "description": "File to search (relative to project root)",
            },
            "paths": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Several files to search; used instead of filePath",
            },
            "regex": {
                "type": "string",
                "description": "Regular expression without delimiters",
            },
            "flags": {
                "type": "string",
                "description": "Any of g (all matches per line), i, m, s",
                "default": "",
            },
        },
        "required": ["regex"],
    },
}

# LS tool
LS_SPEC: dict[str, Any] = {
    "name": "LS",
    "description": "Lists the entries of one directory (not recursive).",
    "parameters": {
        "type": "object",
        "properties": {
            "dirPath": {
                "type": "string",
                "description": "Directory relative to the project root",
                "default": ".",
            },
        },
        "required": [],
    },
}

# Tree tool
TREE_SPEC: dict[str, Any] = {
    "name": "Tree",
    "description": """Shows a directory as a tree, directories first.
Common dependency and build directories are skipped; ignoreDirs adds to that list.""",
    "parameters": {
        "type": "object",
        "properties": {
            "dirPath": {
                "type": "string",
                "description": "Directory relative to the project root",
                "default": ".",
            },
            "maxDepth": {
                "type": "number",
                "description": "Maximum depth between 1 and 10 (default: 3)",
            },
            "ignoreDirs": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Directory names to skip",
            },
        },
        "required": [],
    },
}

# Read tool
READ_SPEC: dict[str, Any] = {
    "name": "Read",
    "description": "Reads the entire content of a file.",
    "parameters": {
        "type": "object",
        "properties": {
            "filePath": {
                "type": "string",
                "description": "File relative to the project root",
            },
        },
        "required": ["filePath"],
    },
}

# Write tool
WRITE_SPEC: dict[str, Any] = {
    "name": "Write",
    "description": """Writes content to a file, creating parent directories if needed.
Existing files are overwritten.""",
    "parameters": {
        "type": "object",
        "properties": {
            "filePath": {
                "type": "string",
                "description": "File relative to the project root",
            },
            "content": {
                "type": "string",
                "description": "Full new content of the file",
            },
        },
        "required": ["filePath", "content"],
    },
}

# WebFetch tool
WEB_FETCH_SPEC: dict[str, Any] = {
    "name": "WebFetch",
    "description": """Fetches a public http(s) URL and returns its text.
Binary content is refused and long bodies are truncated.""",
    "parameters": {
        "type": "object",
        "properties": {
            "url": {
                "type": "string",
                "description": "Full URL to fetch",
            },
        },
        "required": ["url"],
    },
}

# All tool specs
TOOL_SPECS: dict[str, dict[str, Any]] = {
    "Bash": BASH_SPEC,
    "Batch": BATCH_SPEC,
    "Glob": GLOB_SPEC,
    "Grep": GREP_SPEC,
    "LS": LS_SPEC,
    "Tree": TREE_SPEC,
    "Read": READ_SPEC,
    "Write": WRITE_SPEC,
    "WebFetch": WEB_FETCH_SPEC,
}


def get_all_tools() -> list[dict[str, Any]]:
    """Get all tool specifications as a list."""
    return list(TOOL_SPECS.values())


def get_tool_spec(name: str) -> dict[str, Any] | None:
    """Get a specific tool specification.

    Args:
        name: Name of the tool

    Returns:
        Tool specification dict or None if not found
    """
    return TOOL_SPECS.get(name)


def validate_tool_arguments(name: str, arguments: dict[str, Any]) -> list[str]:
    """Return one message per required parameter missing from ``arguments``."""
    spec = get_tool_spec(name)
    if spec is None:
        return []
    required = spec.get("parameters", {}).get("required", [])
    return [
        f'{name} tool error: "{param}" parameter is required.'
        for param in required
        if arguments.get(param) is None
    ]
