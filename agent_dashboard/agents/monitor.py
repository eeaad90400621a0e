"""Find running agent sessions by polling OS processes.

Sessions are recognised by their window title, which the launcher passes on
the terminal's command line (``xterm -T "AIBL - SOD - 09:15" ...``). Any
process with an argument shaped like ``<Project> - <Agent> - HH:MM`` counts
as a session.
"""

import re
from datetime import datetime
from pathlib import Path

import psutil
import structlog

from agent_dashboard.config.settings import ProjectConfig
from agent_dashboard.models.agents import RunningAgent

log = structlog.get_logger(__name__)

WINDOW_TITLE_PATTERN = re.compile(r"^(\w+)\s*-\s*(.+?)\s*-\s*\d+:\d+$")


def parse_window_title(title: str) -> tuple[str, str] | None:
    """Split a session title into ``(project, agent)``; None if it is not one."""
    match = WINDOW_TITLE_PATTERN.match(title.strip())
    if not match:
        return None
    return match.group(1), match.group(2)


class ProcessMonitor:
    """Report agent sessions currently running on this machine."""

    def __init__(self, projects: list[ProjectConfig], universal_path: str | None = None) -> None:
        self.project_paths: dict[str, Path] = {project.name: project.local_path for project in projects}
        if universal_path:
            self.project_paths.setdefault("Universal", Path(universal_path).expanduser())

    def _running_agent(self, info: dict) -> RunningAgent | None:
        cmdline = info.get("cmdline") or []
        for arg in cmdline:
            parsed = parse_window_title(arg)
            if parsed is None:
                continue

            project, agent = parsed
            path = self.project_paths.get(project)
            create_time = info.get("create_time")
            return RunningAgent(
                process_id=info["pid"],
                window_title=arg.strip(),
                agent_name=agent,
                project_name=project,
                project_path=str(path) if path else "",
                command_line=" ".join(cmdline),
                start_time=datetime.fromtimestamp(create_time) if create_time else None,
            )
        return None

    def running_agents(self) -> list[RunningAgent]:
        """Scan the process table once.

        Processes that exit or deny access while being inspected are skipped.
        """
        agents = []
        for proc in psutil.process_iter(["pid", "name", "cmdline", "create_time"]):
            try:
                agent = self._running_agent(proc.info)
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
            if agent is not None:
                agents.append(agent)

        log.debug("running_agents_scanned", count=len(agents))
        return sorted(agents, key=lambda agent: (agent.project_name, agent.window_title))
