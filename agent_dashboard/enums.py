"""Enumerations shared by the analytics engine, the API and the CLI."""

from enum import Enum


class ComplexityLevel(str, Enum):
    """Complexity bucket derived from the issue complexity score."""

    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"

    def __str__(self) -> str:
        return self.value


class WorkPattern(str, Enum):
    """Shape of the commit activity correlated to an issue."""

    NO_ACTIVITY = "no-activity"
    STALE = "stale"
    HIGH_VELOCITY = "high-velocity"
    SLOW_PROGRESS = "slow-progress"
    STEADY = "steady"

    def __str__(self) -> str:
        return self.value


class TrackingStatus(str, Enum):
    """Manager-facing status of an issue.

    A pure function of the agent estimate and the observed commit reality.
    """

    ON_TRACK = "on-track"
    AT_RISK = "at-risk"
    OVERDUE = "overdue"
    NOT_STARTED = "not-started"

    def __str__(self) -> str:
        return self.value


class PredictionMethod(str, Enum):
    """How a completion date was predicted, in order of preference."""

    AGENT_ESTIMATE_ONLY = "agent-estimate-only"
    VELOCITY_BASED = "velocity-based"
    PROGRESS_ADJUSTED = "progress-adjusted"

    def __str__(self) -> str:
        return self.value


class WorkflowStage(str, Enum):
    """Board column an issue belongs to, derived from its labels."""

    BACKLOG = "backlog"
    PLANNING = "planning"
    DEVELOPMENT = "development"
    REVIEW = "review"
    DEPLOY = "deploy"

    def __str__(self) -> str:
        return self.value


class AgentKind(str, Enum):
    """Category of a catalog agent, used for grouping in the dashboard."""

    LAUNCH = "launch"
    DAILY = "daily"
    WORKFLOW = "workflow"
    CORE = "core"
    TICKET = "ticket"

    def __str__(self) -> str:
        return self.value
