"""Batch tool for autocli: runs independent tool calls concurrently."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, List, Optional

from .base import BaseTool, ToolContext, ToolResult

if TYPE_CHECKING:
    from .registry import ToolRegistry

logger = logging.getLogger(__name__)

# Lower-cased names refused inside a batch (no nested spawning or batching)
DISALLOWED_IN_BATCH: FrozenSet[str] = frozenset({"bash", "batch"})


class BatchExecutor:
    """Runs sub-calls through a registry on a thread pool.

    Every sub-call is collected, whether it fails or not, and the entries
    come back in input order. Sub-calls are not coordinated with each
    other: two writes to the same file race and the last one wins.
    """

    def __init__(self, registry: "ToolRegistry", max_concurrent: int = 8):
        self.registry = registry
        self.max_concurrent = max(1, max_concurrent)

    def run(self, calls: List[Any], context: ToolContext) -> List[Dict[str, Any]]:
        """Execute ``calls`` and return one response entry per call."""
        entries: List[Optional[Dict[str, Any]]] = [None] * len(calls)
        pending: Dict[int, tuple[str, Dict[str, Any]]] = {}

        for index, call in enumerate(calls):
            name, parameters, problem = _unpack(call)
            if problem is not None:
                entries[index] = ToolResult.fail(problem).to_response(name, parameters)
            elif name.lower() in DISALLOWED_IN_BATCH:
                entries[index] = ToolResult.fail(
                    f'Tool "{name}" cannot be used within batch.'
                ).to_response(name, parameters)
            else:
                pending[index] = (name, parameters)

        if pending:
            workers = min(self.max_concurrent, len(pending))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                future_to_index = {
                    executor.submit(self.registry.execute, name, parameters, context): index
                    for index, (name, parameters) in pending.items()
                }
                for future in as_completed(future_to_index):
                    index = future_to_index[future]
                    name, parameters = pending[index]
                    try:
                        result = future.result()
                    except Exception as e:
                        logger.exception("Batch sub-call %s failed", name)
                        result = ToolResult.fail(f"Batch execution failed: {e}")
                    entries[index] = result.to_response(name, parameters)

        return [entry for entry in entries if entry is not None]


def _unpack(call: Any) -> tuple[str, Dict[str, Any], Optional[str]]:
    if not isinstance(call, dict):
        return "InvalidToolCall", {"raw": call}, "Each batch call must be an object with name and parameters."
    name = call.get("name")
    parameters = call.get("parameters", {})
    if not isinstance(name, str) or not name:
        return "InvalidToolCall", {"raw": call}, 'Batch call is missing a "name".'
    if not isinstance(parameters, dict):
        return name, {"raw": parameters}, f'Batch call "{name}" has non-object parameters.'
    return name, parameters, None


class BatchTool(BaseTool):
    """Tool wrapper around :class:`BatchExecutor`."""

    name = "Batch"
    description = "Execute multiple tool calls in parallel"

    def execute(self, parameters: Dict[str, Any], context: ToolContext) -> ToolResult:
        calls = parameters.get("calls")
        if not isinstance(calls, list):
            return self.error('"calls" parameter must be a list of tool calls.')
        if not calls:
            return self.error('"calls" must contain at least one tool call.')
        if context.registry is None:
            return self.error("no tool registry available.")

        executor = BatchExecutor(context.registry, context.config.batch_max_concurrent)
        return ToolResult.ok(executor.run(calls, context))
