"""Models describing agent sessions and the local projects they run in."""

from dataclasses import dataclass, field
from datetime import datetime

from agent_dashboard.enums import AgentKind


@dataclass
class AgentDefinition:
    """A catalog entry: something the dashboard can launch in a terminal.

    An empty ``prompt`` launches the agent CLI interactively with no initial
    instruction.
    """

    id: str
    name: str
    project: str
    kind: AgentKind
    prompt: str = ""

    @property
    def is_plain_launch(self) -> bool:
        return self.id.endswith("-launch")


@dataclass
class LaunchResult:
    success: bool
    message: str
    agent_id: str
    agent_name: str
    project: str
    project_path: str
    window_title: str
    command: list[str]
    pid: int | None = None
    url: str | None = None
    launched_at: datetime = field(default_factory=datetime.now)


@dataclass
class RunningAgent:
    """An agent session found while polling OS processes."""

    process_id: int
    window_title: str
    agent_name: str
    project_name: str
    project_path: str
    command_line: str
    start_time: datetime | None = None


@dataclass
class GitInfo:
    project: str
    branch: str | None
    github_url: str | None
    has_git: bool

    @property
    def repository_url(self) -> str | None:
        """GitHub URL without the ``/tree/<branch>`` suffix."""
        if not self.github_url:
            return None
        return self.github_url.split("/tree/")[0]
