"""
Configuration system using Pydantic for type-safe settings management.

The defaults describe the hard-coded project table the dashboard was first
built around; a YAML file (or ``AGENT_DASHBOARD_*`` environment variables)
can replace any section.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from agent_dashboard.config.heuristics import HeuristicsConfig
from agent_dashboard.exceptions import ConfigurationError, ProjectNotFoundError


def _token_from_env() -> SecretStr | None:
    token = os.getenv("GITHUB_TOKEN")
    return SecretStr(token) if token else None


class GitHubConfig(BaseModel):
    """GitHub API access.

    The token falls back to the ``GITHUB_TOKEN`` environment variable. Without
    a token the API is used anonymously (60 requests/hour).
    """

    token: SecretStr | None = Field(default_factory=_token_from_env, description="Personal access token")
    base_url: str = Field(default="https://api.github.com", description="API base URL (GitHub Enterprise)")
    per_page: int = Field(default=100, ge=1, le=100, description="Page size for list endpoints")
    max_pages: int = Field(default=50, ge=1, description="Safety limit when paginating issues")
    board_issue_limit: int = Field(default=50, ge=1, description="Open issues listed for a single project")
    tracking_commit_days: int = Field(default=30, ge=1, description="Commit window for issue correlation")
    commit_analysis_days: int = Field(default=14, ge=1, description="Commit window for team commit analysis")
    commit_limit: int = Field(default=100, ge=1, description="Commits fetched per repository and window")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class ProjectConfig(BaseModel):
    """A dashboard project: an optional GitHub repository plus a local checkout."""

    name: str = Field(..., description="Short project name shown in the dashboard")
    owner: str | None = Field(default=None, description="GitHub repository owner")
    repo: str | None = Field(default=None, description="GitHub repository name")
    path: str = Field(..., description="Local checkout where agents are launched")
    complexity_factor: float = Field(default=1.0, gt=0, description="Delivery complexity multiplier")

    @property
    def has_repository(self) -> bool:
        return bool(self.owner and self.repo)

    @property
    def full_repo(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def local_path(self) -> Path:
        return Path(self.path).expanduser()


def _default_projects() -> list[ProjectConfig]:
    return [
        ProjectConfig(name="AIBL", owner="BaliLove", repo="chat-langchain", path="~/apps/aibl", complexity_factor=1.5),
        ProjectConfig(name="BL2", owner="BaliLove", repo="BaliLove_v2.0", path="~/apps/bl2", complexity_factor=2.0),
        ProjectConfig(name="Blxero", owner="BaliLove", repo="x", path="~/apps/blxero", complexity_factor=1.2),
        ProjectConfig(name="Upify", owner="tomhay", repo="upify", path="~/apps/upify", complexity_factor=1.3),
        ProjectConfig(
            name="BaliLove", owner="BaliLove", repo="balilove-website", path="~/apps/balilove", complexity_factor=1.4
        ),
        ProjectConfig(name="PureZone", path="~/Shopify/purezone"),
        ProjectConfig(name="MyDiff", path="~/Shopify/mydiff"),
    ]


class CacheConfig(BaseModel):
    """Freshness windows for cached GitHub data and derived analytics."""

    issues_max_age_minutes: int = Field(default=30, ge=0)
    commits_max_age_minutes: int = Field(default=30, ge=0)
    analytics_max_age_minutes: int = Field(default=15, ge=0)
    developer_max_age_minutes: int = Field(default=60, ge=0)
    alerts_max_age_minutes: int = Field(default=10, ge=0)
    max_size: int = Field(default=1000, ge=1, description="Maximum cached entries")


class AgentsConfig(BaseModel):
    """How agent sessions are launched, found and focused.

    Command templates are argv lists. ``{title}``, ``{cwd}`` and ``{port}`` are
    substituted inside elements; an element that is exactly ``{command}`` is
    replaced by the whole agent (or dev server) argv.
    """

    agent_command: list[str] = Field(default_factory=lambda: ["claude"], description="Agent CLI argv")
    terminal_command: list[str] = Field(
        default_factory=lambda: ["xterm", "-T", "{title}", "-e", "{command}"],
        description="Terminal argv template used to open a session window",
    )
    focus_command: list[str] = Field(
        default_factory=lambda: ["wmctrl", "-a", "{title}"],
        description="Argv template that raises a session window by title",
    )
    dev_server_command: list[str] = Field(
        default_factory=lambda: ["npm", "run", "dev", "--", "--port", "{port}"],
        description="Argv template for a project development server",
    )
    prompts: dict[str, str] = Field(default_factory=dict, description="Prompt overrides keyed by agent id")
    universal_path: str = Field(default="~/apps", description="Working directory of cross-project agents")
    command_timeout: float = Field(default=5.0, gt=0, description="Timeout for git and focus helpers")


class ServerConfig(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3500, ge=1, le=65535)


class DashboardSettings(BaseSettings):
    """Main dashboard settings.

    Combines all configuration sections and provides loading from YAML files
    with environment variable interpolation.
    """

    model_config = SettingsConfigDict(
        env_prefix="AGENT_DASHBOARD_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    projects: list[ProjectConfig] = Field(default_factory=_default_projects)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    heuristics: HeuristicsConfig = Field(default_factory=HeuristicsConfig)
    agents: AgentsConfig = Field(default_factory=AgentsConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    priority_project: str | None = Field(
        default="AIBL", description="Project whose staleness raises a critical alert"
    )

    @field_validator("projects")
    @classmethod
    def unique_project_names(cls, projects: list[ProjectConfig]) -> list[ProjectConfig]:
        names = [project.name for project in projects]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate project names: {', '.join(duplicates)}")
        return projects

    @property
    def repo_projects(self) -> list[ProjectConfig]:
        """Projects backed by a GitHub repository."""
        return [project for project in self.projects if project.has_repository]

    def get_project(self, name: str) -> ProjectConfig:
        """Look up a project by name.

        Raises:
            ProjectNotFoundError: If no project has that name
        """
        for project in self.projects:
            if project.name == name:
                return project
        raise ProjectNotFoundError(name)

    def get_repo_project(self, name: str) -> ProjectConfig:
        """Look up a project that has a GitHub repository."""
        project = self.get_project(name)
        if not project.has_repository:
            raise ProjectNotFoundError(name)
        return project

    @classmethod
    def from_yaml(cls, config_path: str) -> DashboardSettings:
        """Load settings from YAML file with environment variable interpolation.

        Supports ${VAR_NAME} syntax for environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            DashboardSettings instance

        Raises:
            ConfigurationError: If config file is invalid or missing required fields
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file) as f:
                yaml_content = f.read()
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

        if config_dict is None:
            config_dict = {}
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        try:
            return cls(**config_dict)
        except Exception as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Interpolate ${VAR_NAME} placeholders with environment variables.

        Supports two syntaxes:
        - ${VAR_NAME} - Required environment variable (raises if not set)
        - ${VAR_NAME:-default} - Optional with default value

        YAML comment lines are left unchanged.

        Raises:
            ValueError: If a required environment variable is not set
        """
        pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            value = os.getenv(var_name)

            if value is not None:
                return value
            elif default_value is not None:
                return default_value
            else:
                raise ValueError(f"Environment variable {var_name} is not set")

        def process_line(line: str) -> str:
            if line.lstrip().startswith("#"):
                return line
            return pattern.sub(replace_var, line)

        return "\n".join(process_line(line) for line in content.split("\n"))
