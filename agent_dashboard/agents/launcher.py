"""Open agent sessions and dev servers in terminal windows.

A session is a terminal process started from an argv template. The window
title encodes project, agent and launch time (``"AIBL - SOD - 09:15"``) so
the process monitor can recognise the session later and the focus helper can
raise its window.
"""

from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

import structlog

from agent_dashboard.agents.catalog import AgentCatalog
from agent_dashboard.config.settings import AgentsConfig
from agent_dashboard.exceptions import AgentLaunchError
from agent_dashboard.models.agents import AgentDefinition, LaunchResult
from agent_dashboard.utils.async_subprocess import run_command, spawn_detached

log = structlog.get_logger(__name__)

COMMAND_PLACEHOLDER = "{command}"


def build_window_title(project: str, agent_name: str, now: datetime | None = None) -> str:
    now = now or datetime.now()
    return f"{project} - {agent_name} - {now:%H:%M}"


def expand_command(template: Sequence[str], command: Sequence[str] = (), **values: str) -> list[str]:
    """Fill an argv template.

    An element equal to ``{command}`` is replaced by all of ``command``;
    ``{name}`` placeholders inside other elements are replaced by ``values``.

    Example:
        >>> expand_command(["xterm", "-T", "{title}", "-e", "{command}"], ["claude"], title="AIBL - SOD - 09:15")
        ['xterm', '-T', 'AIBL - SOD - 09:15', '-e', 'claude']
    """
    argv: list[str] = []
    for element in template:
        if element == COMMAND_PLACEHOLDER:
            argv.extend(command)
            continue
        for name, value in values.items():
            element = element.replace(f"{{{name}}}", value)
        argv.append(element)
    return argv


class AgentLauncher:
    """Launch catalog agents and development servers.

    Attributes:
        catalog: Agent definitions and project working directories
        config: Command templates and timeouts
    """

    def __init__(self, catalog: AgentCatalog, config: AgentsConfig | None = None) -> None:
        self.catalog = catalog
        self.config = config or catalog.config

    def agent_command(self, agent: AgentDefinition) -> list[str]:
        """Agent CLI argv; plain launch entries and empty prompts start it interactively."""
        argv = list(self.config.agent_command)
        if agent.prompt and not agent.is_plain_launch:
            argv.append(agent.prompt)
        return argv

    def _working_directory(self, project: str, project_path: str | None, agent_id: str) -> Path:
        path = Path(project_path).expanduser() if project_path else self.catalog.project_path(project)
        if path is None:
            raise AgentLaunchError(f"No working directory configured for project {project}", agent_id)
        if not path.is_dir():
            raise AgentLaunchError(f"Project path does not exist: {path}", agent_id)
        return path

    async def _spawn(self, argv: list[str], cwd: Path, agent_id: str) -> int:
        try:
            return await spawn_detached(*argv, cwd=cwd)
        except (FileNotFoundError, PermissionError) as e:
            log.error("terminal_spawn_failed", agent=agent_id, argv=argv, error=str(e))
            raise AgentLaunchError(f"Cannot start {argv[0]}: {e}", agent_id) from e

    async def launch(
        self,
        agent_id: str,
        agent_name: str | None = None,
        project: str | None = None,
        project_path: str | None = None,
        now: datetime | None = None,
    ) -> LaunchResult:
        """Open a terminal running an agent.

        Args:
            agent_id: Catalog id; unknown ids are launched with a generic prompt
            agent_name: Display name, required for unknown ids
            project: Project name, required for unknown ids
            project_path: Working directory overriding the configured one
            now: Launch time used in the window title

        Raises:
            AgentLaunchError: Unknown id without name/project, missing working
                directory, or the terminal could not be started
        """
        known = self.catalog.get(agent_id)
        if known is None and not (agent_name and project):
            raise AgentLaunchError("Unknown agent; agent name and project are required", agent_id)
        agent = known or self.catalog.resolve(agent_id, agent_name or agent_id, project or "")

        cwd = self._working_directory(agent.project, project_path, agent.id)
        title = build_window_title(agent.project, agent.name, now)
        command = self.agent_command(agent)
        argv = expand_command(self.config.terminal_command, command, title=title, cwd=str(cwd))

        pid = await self._spawn(argv, cwd, agent.id)
        log.info("agent_launched", agent=agent.id, project=agent.project, pid=pid, title=title)

        return LaunchResult(
            success=True,
            message=f"Launched {agent.name} in {cwd}",
            agent_id=agent.id,
            agent_name=agent.name,
            project=agent.project,
            project_path=str(cwd),
            window_title=title,
            command=argv,
            pid=pid,
        )

    async def start_dev_server(
        self,
        project_path: str | None = None,
        server_name: str = "Dashboard Server",
        port: int = 3500,
        project: str | None = None,
    ) -> LaunchResult:
        """Open a terminal running the project's development server."""
        if project_path is None and project is None:
            project_path = str(Path.cwd())
        cwd = self._working_directory(project or "", project_path, server_name)

        title = f"{server_name} - port {port}"
        command = expand_command(self.config.dev_server_command, port=str(port))
        argv = expand_command(self.config.terminal_command, command, title=title, cwd=str(cwd))

        pid = await self._spawn(argv, cwd, server_name)
        url = f"http://localhost:{port}"
        log.info("dev_server_launched", server=server_name, pid=pid, url=url)

        return LaunchResult(
            success=True,
            message=f"Launched {server_name} on port {port} in background terminal",
            agent_id=server_name,
            agent_name=server_name,
            project=project or "",
            project_path=str(cwd),
            window_title=title,
            command=argv,
            pid=pid,
            url=url,
        )

    async def focus(self, window_title: str) -> bool:
        """Raise the terminal window with this title; False if it could not be focused."""
        argv = expand_command(self.config.focus_command, title=window_title)
        try:
            _, stderr, code = await run_command(*argv, check=False, timeout=self.config.command_timeout)
        except (FileNotFoundError, PermissionError, TimeoutError) as e:
            log.warning("focus_failed", title=window_title, error=str(e))
            return False

        if code != 0:
            log.info("focus_window_not_found", title=window_title, code=code, stderr=stderr.strip())
            return False
        log.info("terminal_focused", title=window_title)
        return True
