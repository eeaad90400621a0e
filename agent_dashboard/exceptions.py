"""Custom exception hierarchy for agent-dashboard.

Exception Hierarchy:
    DashboardError (base)
    ├── ConfigurationError
    ├── ProjectNotFoundError
    ├── IssueNotFoundError
    ├── GitHubError
    └── AgentError
        └── AgentLaunchError

Per-project fetch failures are usually caught close to where they happen and
degrade to an empty result, so most of these surface only from the CLI and
the HTTP API.

Example Usage:
    >>> from agent_dashboard.exceptions import ConfigurationError
    >>> try:
    ...     load_config(path)
    ... except FileNotFoundError as e:
    ...     raise ConfigurationError(f"Config file not found: {path}") from e
"""


class DashboardError(Exception):
    """Base exception for all agent-dashboard errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(DashboardError):
    """Configuration-related errors.

    Examples:
        - Configuration file not found
        - Invalid YAML syntax
        - Missing environment variable referenced from the config file
        - Invalid heuristic threshold values
    """

    pass


class ProjectNotFoundError(DashboardError):
    """A project name does not match any configured project."""

    def __init__(self, project: str) -> None:
        self.project = project
        super().__init__(f"Unknown project: {project}")


class IssueNotFoundError(DashboardError):
    """An issue id or number does not exist in the project's repository."""

    def __init__(self, project: str, issue: int) -> None:
        self.project = project
        self.issue = issue
        super().__init__(f"Issue {issue} not found in {project}")


class GitHubError(DashboardError):
    """GitHub API communication errors.

    Wraps ``github.GithubException`` so that callers outside the provider
    layer do not need to import PyGithub.

    Attributes:
        message: Human-readable error description
        status_code: HTTP status code returned by GitHub (if any)
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
        """
        self.status_code = status_code

        full_message = message
        if status_code:
            full_message = f"{message} (HTTP {status_code})"

        super().__init__(full_message)
        self.message = message


class AgentError(DashboardError):
    """Base exception for agent session errors.

    Attributes:
        message: Human-readable error description
        agent_id: Catalog id of the agent involved (if any)
    """

    def __init__(self, message: str, agent_id: str | None = None) -> None:
        self.agent_id = agent_id

        full_message = message if not agent_id else f"{message} (agent: {agent_id})"
        super().__init__(full_message)
        self.message = message


class AgentLaunchError(AgentError):
    """Spawning a terminal session for an agent failed.

    Examples:
        - Terminal executable not found
        - Project path does not exist
        - Permission denied starting the process
    """

    pass
