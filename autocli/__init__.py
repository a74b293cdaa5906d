"""
autocli - an interactive CLI assistant that edits files and runs commands
inside one project directory on behalf of a remote language model.

Usage:
    autocli --project-path ./my-project

Heavy modules (tools registry, core loop) are NOT re-exported here to
avoid circular imports.  Import them directly::

    from autocli.tools.registry import ToolRegistry
    from autocli.core.loop import ConversationDriver
"""

__version__ = "1.0.0"

# Only re-export lightweight, leaf-node modules that don't trigger cycles.
from autocli.config.models import AgentConfig

__all__ = [
    "AgentConfig",
    "__version__",
]
