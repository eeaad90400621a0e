"""Catalog of launchable agents.

Agents are either universal (they work across every project from a shared
parent directory) or bound to one project. Every configured project also
gets a plain ``<project>-launch`` entry that opens the agent CLI without an
initial prompt.
"""

from pathlib import Path

from agent_dashboard.config.settings import AgentsConfig, ProjectConfig
from agent_dashboard.enums import AgentKind
from agent_dashboard.models.agents import AgentDefinition

UNIVERSAL_PROJECT = "Universal"

# (id, name, project, kind, prompt)
_BUILTIN_AGENTS: list[tuple[str, str, str, AgentKind, str]] = [
    (
        "universal-sod-reviewer",
        "SOD Agent Reviewer",
        UNIVERSAL_PROJECT,
        AgentKind.WORKFLOW,
        "Review all SOD agents across projects. Read each project CLAUDE.md, analyze SOD agent effectiveness, "
        "and update SOD agents to be more project-specific and relevant. Generate comprehensive review report.",
    ),
    (
        "universal-agent-updater",
        "Agent Updater",
        UNIVERSAL_PROJECT,
        AgentKind.WORKFLOW,
        "Scan all .claude/agents/ directories across projects, analyze agent effectiveness, remove outdated "
        "agents, and update agent definitions based on current project needs.",
    ),
    (
        "universal-cross-project",
        "Cross-Project Sync",
        UNIVERSAL_PROJECT,
        AgentKind.CORE,
        "Analyze patterns across all projects, identify shared opportunities, synchronize common agent "
        "improvements, and maintain consistency in agent quality.",
    ),
    ("universal-run-all-sod", "Run All SOD", UNIVERSAL_PROJECT, AgentKind.DAILY, ""),
    ("universal-run-all-eod", "Run All EOD", UNIVERSAL_PROJECT, AgentKind.DAILY, ""),
    ("universal-run-all-dca", "Run All DCA", UNIVERSAL_PROJECT, AgentKind.DAILY, ""),
    (
        "universal-issue-planner",
        "Issue Planner",
        UNIVERSAL_PROJECT,
        AgentKind.WORKFLOW,
        "Analyze GitHub issues across all projects, create detailed implementation plans, and update issues "
        "with technical approach and acceptance criteria.",
    ),
    (
        "universal-issue-executor",
        "Issue Executor",
        UNIVERSAL_PROJECT,
        AgentKind.WORKFLOW,
        "Execute complete development cycle for GitHub issues: analyze, plan, implement, test, open a PR, "
        "deploy and close the issue with a summary.",
    ),
    (
        "universal-issue-reviewer",
        "Issue Reviewer",
        UNIVERSAL_PROJECT,
        AgentKind.WORKFLOW,
        "Review GitHub issues and PRs across projects, ensure code quality, run tests, approve deployments, "
        "and close issues.",
    ),
    ("aibl-sod", "SOD", "AIBL", AgentKind.DAILY, "@sod-agent Generate AIBL start of day report"),
    ("aibl-eod", "EOD", "AIBL", AgentKind.DAILY, "@eod-agent Generate AIBL end of day report"),
    ("aibl-dca", "DCA", "AIBL", AgentKind.DAILY, "@aibl-daily-cleanup-agent Generate daily cleanup analysis"),
    (
        "aibl-pr",
        "PR & Deploy",
        "AIBL",
        AgentKind.WORKFLOW,
        "@pr-deploy-pipeline-agent Review current branch and execute full pipeline",
    ),
    (
        "aibl-sync",
        "Data Sync Review",
        "AIBL",
        AgentKind.CORE,
        "@data-sync-review-agent Review sync health and diagnose issues",
    ),
    (
        "aibl-langgraph",
        "LangGraph Integration",
        "AIBL",
        AgentKind.CORE,
        "@langgraph-integration-agent Maintain AI chat functionality",
    ),
    ("aibl-monitoring", "Monitoring", "AIBL", AgentKind.CORE, "@monitoring-observability-agent Check system health"),
    ("aibl-shadcn", "Shadcn Expert", "AIBL", AgentKind.CORE, "@shadcn-expert Provide UI component guidance"),
    (
        "aibl-ticket-plan",
        "Ticket Planning",
        "AIBL",
        AgentKind.TICKET,
        "@ticket-planning-step Plan project implementation",
    ),
    (
        "aibl-ticket-dev",
        "Ticket Development",
        "AIBL",
        AgentKind.TICKET,
        "@ticket-development-step Guide development phase",
    ),
    ("bl2-sod", "SOD", "BL2", AgentKind.DAILY, "@sod-agent Generate BL2 start of day report"),
    ("bl2-eod", "EOD", "BL2", AgentKind.DAILY, "@eod-agent Generate BL2 end of day report"),
    ("bl2-dca", "DCA", "BL2", AgentKind.DAILY, "@daily-cleanup-agent Generate cleanup analysis"),
    ("bl2-github", "GitHub Issues", "BL2", AgentKind.CORE, "@github-issue-tracker Show current project status"),
    ("blxero-sod", "SOD", "Blxero", AgentKind.DAILY, "@sod-agent Generate Blxero start of day report"),
    ("blxero-eod", "EOD", "Blxero", AgentKind.DAILY, "@eod-agent Generate Blxero end of day report"),
    ("blxero-dca", "DCA", "Blxero", AgentKind.DAILY, "@daily-cleanup-agent Generate cleanup analysis"),
    ("blxero-sync", "Automated Sync", "Blxero", AgentKind.CORE, "Review automated sync engine status"),
    ("blxero-currency", "Currency Audit", "Blxero", AgentKind.CORE, "Run currency audit system analysis"),
    ("purezone-sod", "SOD", "PureZone", AgentKind.DAILY, "@sod-agent Generate PureZone start of day report"),
    ("purezone-eod", "EOD", "PureZone", AgentKind.DAILY, "@eod-agent Generate PureZone end of day report"),
    ("purezone-theme", "Theme Analyzer", "PureZone", AgentKind.CORE, "@shopify-theme-agent Analyze theme optimization"),
    ("upify-sod", "SOD", "Upify", AgentKind.DAILY, "@sod-agent Generate Upify start of day report"),
    ("upify-speed", "Speed Test", "Upify", AgentKind.CORE, "Run Speed Test Agent for client analysis"),
    ("upify-seo", "SEO Optimizer", "Upify", AgentKind.CORE, "Run SEO optimization analysis"),
    ("upify-conversion", "Conversion Optimizer", "Upify", AgentKind.CORE, "Run conversion rate optimization"),
    ("mydiff-sod", "SOD", "MyDiff", AgentKind.DAILY, "@sod-agent Generate MyDiff start of day report"),
    ("mydiff-theme", "Theme Analyzer", "MyDiff", AgentKind.CORE, "@shopify-theme-analyzer Analyze MyDiff theme"),
]


def launch_agent_id(project: str) -> str:
    return f"{project.lower()}-launch"


def fallback_prompt(agent_name: str) -> str:
    """Prompt used for an agent id the catalog does not know."""
    return f"Run {agent_name} agent"


class AgentCatalog:
    """Agent definitions for the configured projects.

    Built-in agents of projects that are not configured are left out.
    Prompts can be overridden per agent id from configuration.
    """

    def __init__(self, projects: list[ProjectConfig], config: AgentsConfig | None = None) -> None:
        self.config = config or AgentsConfig()
        self.projects = {project.name: project for project in projects}
        self._agents: dict[str, AgentDefinition] = {}

        self._add(AgentDefinition(launch_agent_id(UNIVERSAL_PROJECT), "Launch", UNIVERSAL_PROJECT, AgentKind.LAUNCH))
        for project in projects:
            self._add(AgentDefinition(launch_agent_id(project.name), "Launch", project.name, AgentKind.LAUNCH))

        for agent_id, name, project_name, kind, prompt in _BUILTIN_AGENTS:
            if project_name == UNIVERSAL_PROJECT or project_name in self.projects:
                self._add(AgentDefinition(agent_id, name, project_name, kind, prompt))

    def _add(self, agent: AgentDefinition) -> None:
        if agent.id in self.config.prompts:
            agent.prompt = self.config.prompts[agent.id]
        self._agents[agent.id] = agent

    def list_agents(self, project: str | None = None) -> list[AgentDefinition]:
        agents = list(self._agents.values())
        if project:
            return [agent for agent in agents if agent.project == project]
        return agents

    def get(self, agent_id: str) -> AgentDefinition | None:
        return self._agents.get(agent_id)

    def resolve(self, agent_id: str, agent_name: str, project: str) -> AgentDefinition:
        """Definition for an agent id, synthesizing one for unknown ids.

        Unknown ``*-launch`` ids launch without a prompt; any other unknown id
        gets ``Run <name> agent``.
        """
        agent = self.get(agent_id)
        if agent is not None:
            return agent

        if agent_id.endswith("-launch"):
            return AgentDefinition(agent_id, agent_name, project, AgentKind.LAUNCH)
        return AgentDefinition(agent_id, agent_name, project, AgentKind.CORE, fallback_prompt(agent_name))

    def project_path(self, project: str) -> Path | None:
        """Working directory for a project's agents."""
        if project == UNIVERSAL_PROJECT:
            return Path(self.config.universal_path).expanduser()
        config = self.projects.get(project)
        return config.local_path if config else None
