"""CLI entry point for the agent dashboard."""

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from dataclasses import asdict, is_dataclass
from typing import Any, TypeVar

import click
import structlog

from agent_dashboard.agents.catalog import AgentCatalog
from agent_dashboard.agents.git_info import collect_git_info
from agent_dashboard.agents.launcher import AgentLauncher
from agent_dashboard.agents.monitor import ProcessMonitor
from agent_dashboard.config.settings import DashboardSettings
from agent_dashboard.engine.dashboard import DashboardService
from agent_dashboard.exceptions import ConfigurationError, DashboardError
from agent_dashboard.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)

T = TypeVar("T")


def _to_jsonable(data: Any) -> Any:
    if is_dataclass(data) and not isinstance(data, type):
        return asdict(data)
    if isinstance(data, list):
        return [_to_jsonable(item) for item in data]
    return data


def emit(data: Any) -> None:
    """Print a result as indented JSON."""
    click.echo(json.dumps(_to_jsonable(data), indent=2, default=str))


def run_async(name: str, func: Callable[[], Awaitable[T]]) -> T:
    """Run an async command body with the CLI's error conventions."""
    try:
        return asyncio.run(func())
    except DashboardError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug(f"{name}_error", exc_info=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        log.error(f"{name}_unexpected", exc_info=True)
        sys.exit(1)


async def _with_service(settings: DashboardSettings, func: Callable[[DashboardService], Awaitable[T]]) -> T:
    service = DashboardService.from_settings(settings)
    await service.connect()
    try:
        return await func(service)
    finally:
        await service.disconnect()


@click.group()
@click.option("--config", default=None, help="Path to YAML configuration file")
@click.option("--log-level", default="WARNING", help="Logging level")
@click.option("--json-logs/--console-logs", default=False, help="Render logs as JSON lines")
@click.pass_context
def cli(ctx: click.Context, config: str | None, log_level: str, json_logs: bool) -> None:
    """agent-dashboard: coding-agent sessions and GitHub manager analytics."""
    configure_logging(log_level, json_output=json_logs)

    try:
        settings = DashboardSettings.from_yaml(config) if config else DashboardSettings()
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug("config_error", exc_info=True)
        sys.exit(1)

    ctx.obj = {"settings": settings}


@cli.command()
@click.option("--host", default=None, help="Bind address (default from config)")
@click.option("--port", type=int, default=None, help="Port (default from config)")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Run the dashboard HTTP server."""
    import uvicorn

    from agent_dashboard.server import create_app

    settings: DashboardSettings = ctx.obj["settings"]
    host = host or settings.server.host
    port = port or settings.server.port
    click.echo(f"Dashboard listening on http://{host}:{port}")
    uvicorn.run(create_app(settings), host=host, port=port, log_level="warning")


@cli.command()
@click.option("--project", default=None, help="Limit to one project")
@click.pass_context
def issues(ctx: click.Context, project: str | None) -> None:
    """List board issues with workflow stage and analytics."""
    settings = ctx.obj["settings"]
    result = run_async("issues", lambda: _with_service(settings, lambda s: s.list_board_issues(project)))
    emit(result)


@cli.command()
@click.option("--project", default=None, help="Limit to one project")
@click.pass_context
def track(ctx: click.Context, project: str | None) -> None:
    """Estimate-versus-reality tracking with manager alerts."""
    settings = ctx.obj["settings"]
    emit(run_async("track", lambda: _with_service(settings, lambda s: s.issue_tracking(project))))


@cli.command()
@click.option("--project", default=None, help="Limit to one project")
@click.pass_context
def commits(ctx: click.Context, project: str | None) -> None:
    """Team commit analysis per project."""
    settings = ctx.obj["settings"]
    emit(run_async("commits", lambda: _with_service(settings, lambda s: s.commit_analysis(project))))


@cli.command()
@click.option("--weeks", type=click.IntRange(min=1), default=4, help="Look-back period in weeks")
@click.pass_context
def performance(ctx: click.Context, weeks: int) -> None:
    """Per-developer performance across all projects."""
    settings = ctx.obj["settings"]
    emit(run_async("performance", lambda: _with_service(settings, lambda s: s.developer_performance(weeks))))


@cli.command("git-info")
@click.pass_context
def git_info(ctx: click.Context) -> None:
    """Current branch and GitHub link of every project checkout."""
    settings: DashboardSettings = ctx.obj["settings"]
    emit(run_async("git_info", lambda: collect_git_info(settings.projects, settings.agents.command_timeout)))


@cli.group()
def agents() -> None:
    """Launch, list and focus agent sessions."""


def _launcher(settings: DashboardSettings) -> AgentLauncher:
    return AgentLauncher(AgentCatalog(settings.projects, settings.agents), settings.agents)


@agents.command("list")
@click.option("--project", default=None, help="Limit to one project")
@click.pass_context
def list_agents(ctx: click.Context, project: str | None) -> None:
    """List launchable agents."""
    settings: DashboardSettings = ctx.obj["settings"]
    catalog = AgentCatalog(settings.projects, settings.agents)
    for agent in catalog.list_agents(project):
        click.echo(f"{agent.id:<32} {agent.project:<10} {agent.name}")


@agents.command("launch")
@click.argument("agent_id")
@click.option("--name", "agent_name", default=None, help="Agent name (required for unknown ids)")
@click.option("--project", default=None, help="Project (required for unknown ids)")
@click.option("--path", "project_path", default=None, help="Override the working directory")
@click.pass_context
def launch(
    ctx: click.Context, agent_id: str, agent_name: str | None, project: str | None, project_path: str | None
) -> None:
    """Open an agent session in a new terminal window."""
    launcher = _launcher(ctx.obj["settings"])
    result = run_async("launch", lambda: launcher.launch(agent_id, agent_name, project, project_path))
    click.echo(f"{result.message} (pid {result.pid}, window '{result.window_title}')")


@agents.command("running")
@click.pass_context
def running(ctx: click.Context) -> None:
    """Show agent sessions found in the process table."""
    settings: DashboardSettings = ctx.obj["settings"]
    monitor = ProcessMonitor(settings.projects, settings.agents.universal_path)
    sessions = monitor.running_agents()
    if not sessions:
        click.echo("No running agent sessions")
        return
    for session in sessions:
        click.echo(f"{session.process_id:>7}  {session.window_title}")


@agents.command("focus")
@click.argument("window_title")
@click.pass_context
def focus(ctx: click.Context, window_title: str) -> None:
    """Raise the terminal window of a running session."""
    launcher = _launcher(ctx.obj["settings"])
    if not run_async("focus", lambda: launcher.focus(window_title)):
        click.echo(f"Error: Terminal window not found for {window_title}", err=True)
        sys.exit(1)
    click.echo(f"Focused {window_title}")


if __name__ == "__main__":
    cli()
