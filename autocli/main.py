"""Main CLI entry point for autocli."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from dotenv import find_dotenv, load_dotenv
from rich.console import Console
from rich.markup import escape

from autocli import __version__
from autocli.config.loader import find_config_file, load_config
from autocli.config.models import AgentConfig, LoggingConfig
from autocli.core.commands import CommandKind, CommandProcessor
from autocli.core.loop import ConversationDriver
from autocli.core.session import ConsoleSession, Session
from autocli.llm.client import LLMClient
from autocli.output.processor import OutputProcessor
from autocli.prompts.system import get_system_prompt
from autocli.tools.policy import AutoApproveGate, ConfirmationGate, InteractiveGate
from autocli.tools.registry import ToolRegistry

app = typer.Typer(
    name="autocli",
    help="Interactive assistant that edits files and runs commands in one project",
    add_completion=False,
)

console = Console(stderr=True)
logger = logging.getLogger(__name__)

EXIT_WORDS = ("exit", "quit")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def version_callback(value: bool):
    if value:
        console.print(f"autocli v{__version__}")
        raise typer.Exit()


def setup_logging(config: LoggingConfig, verbose: bool = False) -> None:
    """Configure the root logger: stderr always, plus a file when configured."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.file:
        log_file = Path(config.file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def run_repl(
    driver: ConversationDriver,
    commands: CommandProcessor,
    session: ConsoleSession,
    output: OutputProcessor,
) -> None:
    """Read requests until the user types exit/quit or closes the input."""
    while True:
        try:
            user_input = session.ask("\nYou").strip()
        except (EOFError, KeyboardInterrupt):
            output.console.print()
            break

        if not user_input:
            continue
        if user_input.lower() in EXIT_WORDS:
            break

        result = commands.process_input(user_input)
        if result.kind == CommandKind.CLIENT_HANDLED:
            output.print_commands(commands.help_rows())
            continue
        if result.kind == CommandKind.UNKNOWN_COMMAND:
            output.emit_warning(f"Unknown command /{result.command_name}; sending it as is.")

        outcome = driver.handle_user_request(result.content)
        logger.info(
            "Request finished after %d model call(s), %d tool call(s)%s",
            outcome.iterations,
            outcome.tool_calls,
            " (soft stop)" if outcome.stopped_by_ceiling else "",
        )


def build_driver(
    config: AgentConfig,
    llm: LLMClient,
    gate: ConfirmationGate,
    output: OutputProcessor,
) -> ConversationDriver:
    """Wire the registry, history and model client into a driver."""
    project_root = config.project_root
    registry = ToolRegistry(project_root, config.tools)
    session = Session(get_system_prompt(project_root, config.plan.completion_token))
    return ConversationDriver(
        model=llm,
        registry=registry,
        gate=gate,
        session=session,
        output=output,
        max_iterations=config.max_iterations,
        plan_config=config.plan,
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    project_path: Optional[Path] = typer.Option(
        None, "--project-path", "-p", help="Project directory the tools are confined to"
    ),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model to use"),
    brave: bool = typer.Option(False, "--brave", "-b", help="Run tools without confirmation"),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to config file"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging"),
    version: bool = typer.Option(
        None,
        "--version",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
):
    """autocli - chat with a model that works inside your project."""
    if ctx.invoked_subcommand is not None:
        return

    load_dotenv(find_dotenv(usecwd=True))

    overrides: dict = {}
    if project_path:
        overrides["paths.project_path"] = str(project_path)
    if model:
        overrides["model"] = model
    if brave:
        overrides["brave"] = True

    try:
        config = load_config(config_file or find_config_file(), overrides)
    except Exception as e:
        console.print(f"[red]Error loading configuration: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    setup_logging(config.logging, verbose)

    if not config.has_api_key():
        console.print(
            "[red]No API key found. Set CHUTES_API_KEY (or CHUTES_API_TOKEN) "
            "in the environment or a .env file.[/red]"
        )
        raise typer.Exit(1)

    project_root = config.project_root
    if not project_root.is_dir():
        console.print(f"[red]Project path is not a directory: {escape(str(project_root))}[/red]")
        raise typer.Exit(1)

    terminal = ConsoleSession()
    output = OutputProcessor(terminal.console)
    gate: ConfirmationGate = AutoApproveGate() if config.brave else InteractiveGate(terminal)
    commands = (
        CommandProcessor.from_file(Path(config.paths.commands_file))
        if config.paths.commands_file
        else CommandProcessor()
    )

    with LLMClient(
        model=config.model,
        base_url=config.base_url,
        temperature=config.temperature,
        timeout=config.timeout,
        api_key=config.get_api_key(),
    ) as llm:
        driver = build_driver(config, llm, gate, output)
        output.print_banner(str(project_root), config.model, config.brave)
        run_repl(driver, commands, terminal, output)
        output.print_stats({**llm.get_stats(), "elapsed": driver.session.elapsed_time})

    output.console.print("[cyan]Goodbye![/cyan]")


@app.command("config")
def show_config(
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """Show current configuration."""
    path = config_file or find_config_file()
    if path:
        console.print(f"Loading config from: {escape(str(path))}")
    else:
        console.print("No config file found, using defaults")
    try:
        config = load_config(path)
    except Exception as e:
        console.print(f"[red]Error loading configuration: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    print(config.model_dump_json(indent=2), file=sys.stdout)


if __name__ == "__main__":
    app()
