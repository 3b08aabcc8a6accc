"""
AgentGate CLI
=============

Text-mode runner for the two-phase flow.

Usage:
    agentgate run --agent task-agent --input "Mark task-001 done" --responses config/responses.yaml
    agentgate run ... --model gemini-3       # Override the agent's default model
    agentgate run ... --yes                  # Skip the confirmation prompt
    agentgate agents                         # List configured agents
    agentgate tools                          # List registered tools

Model output comes from a replay file; tool calls are executed by an echo
executor that reports what would have run.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence
import argparse
import asyncio
import json
import logging

from rich.console import Console
from rich.json import JSON
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from agentgate import __version__
from agentgate.core.errors import ConfigError, ProviderError
from agentgate.core.models import DiscussionResult, ExecutionResult, LogType, RunRequest, ToolCallStatus
from agentgate.core.orchestrator import Orchestrator
from agentgate.core.state_machine import RunState
from agentgate.infra.audit import LogEntry
from agentgate.infra.config import Catalogue, default_catalogue, load_catalogue
from agentgate.infra.logging import configure_logging, get_logger
from agentgate.providers.replay import load_replay_providers
from agentgate.tools.executor import HandlerToolExecutor
from agentgate.tools.registry import ToolRegistry


console = Console()
logger = get_logger("cli")

LOG_STYLES = {
    LogType.PLAN: "cyan",
    LogType.TOOL_CALL: "green",
    LogType.VALIDATION: "magenta",
    LogType.EXECUTION: "blue",
    LogType.ERROR: "bold red",
    LogType.BLOCKED: "red",
}

STATUS_STYLES = {
    ToolCallStatus.PENDING: "dim",
    ToolCallStatus.APPROVED: "green",
    ToolCallStatus.REJECTED: "red",
    ToolCallStatus.EXECUTED: "blue",
}


def echo_handlers(registry: ToolRegistry) -> Dict[str, Callable[..., Any]]:
    """One handler per registered tool that reports the call instead of performing it."""

    def make(name: str) -> Callable[..., Any]:
        def handler(**arguments: Any) -> Dict[str, Any]:
            return {"success": True, "message": f"Executed {name} successfully", "arguments": arguments}
        return handler

    return {name: make(name) for name in registry.names()}


def render_logs(entries: Sequence[LogEntry], title: str) -> None:
    table = Table(title=title, show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Phase")
    table.add_column("Type")
    table.add_column("Message", overflow="fold")

    for entry in entries:
        style = LOG_STYLES.get(entry.type, "")
        table.add_row(
            str(entry.id), entry.phase.value, f"[{style}]{entry.type.value}[/{style}]", escape(entry.message)
        )

    console.print(table)


def render_plan(discussion: DiscussionResult) -> None:
    result = discussion.result
    header = f"[bold]{discussion.agent_name}[/bold] via {discussion.model_id}  (run {discussion.run_id})"
    if result.reasoning:
        header += f"\n\n{escape(result.reasoning)}"
    console.print(Panel(header, title="Plan", border_style="cyan"))

    console.print(Panel(JSON.from_data(result.data), title="Structured output", border_style="magenta"))

    table = Table(title="Proposed tool calls")
    table.add_column("Tool")
    table.add_column("Arguments", overflow="fold")
    table.add_column("Status")
    for call in result.tool_calls:
        style = STATUS_STYLES[call.status]
        table.add_row(escape(call.tool_name), escape(json.dumps(call.arguments)), f"[{style}]{call.status.value}[/{style}]")
    console.print(table)


def render_outcome(execution: ExecutionResult) -> None:
    if execution.aborted:
        console.print("[bold red]Execution aborted.[/bold red] No tool calls were executed.")
        return

    failed = execution.failed_calls
    if failed:
        console.print(
            f"[yellow]Completed with {len(failed)} failed call(s) "
            f"out of {len(execution.approved_calls)}.[/yellow]"
        )
    else:
        console.print(f"[green]Completed. {len(execution.executed_calls)} call(s) executed.[/green]")


def _catalogue(path: Optional[str]) -> Catalogue:
    return load_catalogue(path) if path else default_catalogue()


def cmd_run(args: argparse.Namespace) -> int:
    catalogue = _catalogue(args.catalogue)
    providers = load_replay_providers(args.responses)
    orchestrator = Orchestrator(
        registry=catalogue.registry,
        agents=catalogue.agents,
        providers=providers,
        executor=HandlerToolExecutor(echo_handlers(catalogue.registry)),
        config=catalogue.settings,
    )
    request = RunRequest(agent=args.agent, input=args.input, model=args.model)

    try:
        discussion = asyncio.run(orchestrator.run_discussion(request))
    except ProviderError as e:
        if e.logs:
            render_logs(e.logs, "Discussion")
        console.print(f"[bold red]Provider error:[/bold red] {e.message}")
        return 1

    render_plan(discussion)
    render_logs(discussion.logs, "Discussion")

    if not discussion.validation_passed:
        console.print("[yellow]Structured output failed validation; execution will be refused.[/yellow]")

    confirmed = args.yes or Confirm.ask(
        f"Execute {len(discussion.approved_calls)} approved call(s)?", console=console, default=False
    )
    if not confirmed:
        orchestrator.abandon(discussion, "Declined by user")
        logger.debug(discussion.state.get_history_summary())
        console.print("[dim]Plan discarded. Nothing was executed.[/dim]")
        return 0

    execution = asyncio.run(orchestrator.run_execution(discussion, request))
    render_logs(execution.logs[len(discussion.logs):], "Execution")
    render_outcome(execution)
    logger.debug(execution.state.get_history_summary())
    return 0 if execution.run_state is RunState.COMPLETED else 2


def cmd_agents(args: argparse.Namespace) -> int:
    catalogue = _catalogue(args.catalogue)
    table = Table(title="Agents")
    table.add_column("Name", style="bold")
    table.add_column("Model")
    table.add_column("Allowed tools", overflow="fold")
    table.add_column("Output schema")
    table.add_column("Permissions", overflow="fold")
    for agent in catalogue.agents:
        table.add_row(
            agent.name,
            agent.model_id,
            ", ".join(sorted(agent.allowed_tools)),
            agent.output_schema_name,
            ", ".join(sorted(p.value for p in agent.permissions)),
        )
    console.print(table)
    return 0


def cmd_tools(args: argparse.Namespace) -> int:
    catalogue = _catalogue(args.catalogue)
    table = Table(title="Tools")
    table.add_column("Name", style="bold")
    table.add_column("Required permissions")
    table.add_column("Description", overflow="fold")
    for tool in catalogue.registry:
        table.add_row(tool.name, ", ".join(p.value for p in tool.required_permissions), tool.description)
    console.print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agentgate",
        description="AgentGate - two-phase, permission-checked agent runs",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # Shared by every subcommand
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--catalogue", "-c",
        default=None,
        help="Path to a catalogue YAML file (default: built-in catalogue)"
    )
    common.add_argument(
        "--log-level", "-l",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", parents=[common], help="Plan, confirm and execute one request")
    run.add_argument("--agent", "-a", required=True, help="Agent name")
    run.add_argument("--input", "-i", required=True, help="User request text")
    run.add_argument("--responses", "-r", required=True, help="Replay responses YAML file")
    run.add_argument("--model", "-m", default=None, help="Override the agent's default model")
    run.add_argument("--yes", "-y", action="store_true", help="Execute without asking for confirmation")
    run.set_defaults(handler=cmd_run)

    agents = sub.add_parser("agents", parents=[common], help="List configured agents")
    agents.set_defaults(handler=cmd_agents)

    tools = sub.add_parser("tools", parents=[common], help="List registered tools")
    tools.set_defaults(handler=cmd_tools)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    configure_logging(level=getattr(logging, args.log_level))

    try:
        return args.handler(args)
    except ConfigError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e.message}")
        return 2
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130
    except Exception as e:
        logger.exception("Fatal error")
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
