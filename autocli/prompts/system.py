"""System prompt for autocli."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from autocli.tools.specs import get_all_tools

ASSISTANT_BASE = """You are an autonomous software assistant running in a terminal.
You help the user with development tasks, file changes and information lookup
inside one project directory: "{project_path}".

All file paths given to tools are relative to that directory. Paths that are
absolute or contain ".." are rejected."""

TOOL_CALL_FORMAT = """## Calling tools
Request an action by writing a <tool_call> tag around a JSON object with a
"name" (the tool name) and "parameters" (an object):

<tool_call>{{"name": "Read", "parameters": {{"filePath": "src/app.py"}}}}</tool_call>

You may write several <tool_call> tags in one reply. They run in order and
every result comes back together in one message shaped like:

{{"tool_responses": [{{"tool_name": "...", "parameters": {{}}, "status": "success" | "error", "output": ...}}]}}

The user may decline a call; you then get status "error" with output
"User denied tool execution". Adjust your approach instead of repeating it."""

PLAN_FORMAT = """## Multi-step plans
For larger tasks you may propose a plan once, as a JSON array of step
descriptions:

<plan>["Locate the failing module", "Fix the bug", "Run the tests"]</plan>

After your reply the steps are handed back to you one at a time. Finish each
step, then reply with "{completion_token}" so the next one can start."""

WORKFLOW = """## Working on code
- Inspect before changing: use LS, Tree, Glob and Read to find the relevant files.
- Use Grep to find every usage of what you modify and update the callers too.
- Follow the style of the surrounding code.
- Run the project's tests with Bash (foreground) and iterate until they pass.
- Use Batch for independent reads; Bash and Batch cannot run inside a batch.
- Start servers and watchers with "background": true; their output is not captured.
- Ask the user when the request is ambiguous."""


def render_tool(spec: Dict[str, Any]) -> str:
    """Render one tool spec as a prompt section."""
    params = spec.get("parameters", {})
    required = set(params.get("required", []))
    lines = [f"### {spec['name']}", spec.get("description", "").strip(), "Parameters:"]
    properties: Dict[str, Any] = params.get("properties", {})
    if not properties:
        lines.append("- (none)")
    for name, schema in properties.items():
        flag = "required" if name in required else "optional"
        default = schema.get("default")
        suffix = f", default={json.dumps(default)}" if default is not None else ""
        lines.append(
            f"- {name} ({schema.get('type', 'any')}, {flag}{suffix}): {schema.get('description', '')}"
        )
    return "\n".join(lines)


def get_system_prompt(
    project_path: Path,
    completion_token: str = "TASK COMPLETE",
    tools: Optional[List[Dict[str, Any]]] = None,
) -> str:
    """Build the system prompt for a project.

    Args:
        project_path: Project root shown to the model
        completion_token: Token the model uses to finish a plan step
        tools: Tool specs to document (defaults to every registered tool)

    Returns:
        The prompt text
    """
    sections = [
        ASSISTANT_BASE.format(project_path=project_path),
        TOOL_CALL_FORMAT.format(),
        PLAN_FORMAT.format(completion_token=completion_token),
        WORKFLOW,
        "## Available tools",
    ]
    sections.extend(render_tool(spec) for spec in (tools or get_all_tools()))
    return "\n\n".join(sections)
