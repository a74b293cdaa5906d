"""Output processor for autocli - renders the conversation with rich."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from autocli.tools.base import ToolResult
from autocli.utils.truncate import preview


class OutputProcessor:
    """Processes and formats user-facing output.

    Logging goes through the stdlib ``logging`` module; this class only
    handles what the user sees in the terminal.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def print_banner(self, project_path: str, model: str, brave: bool) -> None:
        """Print the startup banner."""
        lines = [
            f"[bold]Project:[/bold] {escape(project_path)}",
            f"[bold]Model:[/bold]   {escape(model)}",
            f"[bold]Brave:[/bold]   {'on' if brave else 'off'}",
            "",
            "[dim]Type /help for commands, 'exit' or 'quit' to leave.[/dim]",
        ]
        self.console.print(Panel("\n".join(lines), title="autocli", border_style="cyan"))
        if brave:
            self.console.print(
                "[bold yellow]Brave mode is on: tool calls run without confirmation.[/bold yellow]"
            )

    def emit_assistant_message(self, content: str) -> None:
        if content:
            self.console.print()
            self.console.print(Panel(Text(content), border_style="blue", title="assistant"))

    def emit_thinking(self, thought: str) -> None:
        if thought:
            self.console.print(thought, markup=False, highlight=False, style="dim italic")

    def emit_tool_call_start(self, name: str, parameters: Dict[str, Any]) -> None:
        self.console.print(
            f"[yellow]> {escape(name)}[/yellow] "
            f"[dim]{escape(preview(json.dumps(parameters, default=str), 160))}[/dim]",
            highlight=False,
        )

    def emit_tool_call_end(self, name: str, result: ToolResult) -> None:
        status = "[green]OK[/green]" if result.success else "[red]FAILED[/red]"
        self.console.print(f"[dim]  {escape(name)} {status}[/dim]")

        output = result.output
        text = output if isinstance(output, str) else json.dumps(output, indent=2, default=str)
        if not text:
            return
        lines = text.split("\n")
        if len(lines) > 10:
            text = "\n".join(lines[:5] + ["...", f"({len(lines) - 5} more lines)"])
        self.console.print(text, markup=False, highlight=False, style="dim")

    def emit_info(self, message: str) -> None:
        self.console.print(f"[cyan]{escape(message)}[/cyan]")

    def emit_warning(self, message: str) -> None:
        self.console.print(f"[yellow]{escape(message)}[/yellow]")

    def emit_error(self, message: str) -> None:
        self.console.print(f"[red]Error: {escape(message)}[/red]")

    def print_commands(self, commands: Iterable[Tuple[str, str]]) -> None:
        """Render the slash command table."""
        table = Table(title="Commands", show_header=True, header_style="bold")
        table.add_column("Command")
        table.add_column("Description")
        for name, description in commands:
            table.add_row(escape(f"/{name}"), escape(description))
        self.console.print(table)

    def print_stats(self, stats: Dict[str, Any]) -> None:
        self.console.print(
            f"[dim]Requests: {stats.get('request_count', 0)} "
            f"(errors: {stats.get('error_count', 0)}) | "
            f"Tokens: {stats.get('input_tokens', 0)} in / "
            f"{stats.get('output_tokens', 0)} out | "
            f"{stats.get('elapsed', 0.0):.0f}s[/dim]"
        )
