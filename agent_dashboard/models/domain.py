"""
Domain models for the dashboard.

Issues and commits are normalized from the GitHub API by the provider layer.
Everything else in this module is derived: it is recomputed on every request
from already-fetched data and never persisted.

Example:
    Building an issue by hand (handy in tests)::

        issue = Issue(
            id=1001,
            number=42,
            title="Add feature: OAuth integration",
            body="Wire the API client to the identity provider",
            state=IssueState.OPEN,
            labels=["enhancement"],
            created_at=datetime(2026, 10, 1, tzinfo=UTC),
            updated_at=datetime(2026, 10, 2, tzinfo=UTC),
            project="AIBL",
        )
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from agent_dashboard.enums import ComplexityLevel, PredictionMethod, TrackingStatus, WorkflowStage, WorkPattern


class IssueState(str, Enum):
    """Enumeration of possible issue states."""

    OPEN = "open"
    CLOSED = "closed"


@dataclass
class Issue:
    """A GitHub issue, sourced verbatim and tagged with its dashboard project."""

    id: int
    number: int
    title: str
    body: str
    state: IssueState
    labels: list[str]
    created_at: datetime
    updated_at: datetime
    closed_at: datetime | None = None
    assignee: str | None = None
    author: str = "unknown"
    author_avatar_url: str | None = None
    url: str = ""
    project: str = ""
    """Dashboard project name (e.g. ``AIBL``), not the repository name."""

    repo_name: str = ""

    @property
    def is_open(self) -> bool:
        return self.state == IssueState.OPEN


@dataclass
class Commit:
    """A repository commit.

    ``additions``, ``deletions`` and ``files_changed`` are only known once the
    commit-detail endpoint has been queried; list endpoints leave them at zero.
    """

    sha: str
    message: str
    author: str
    date: datetime
    additions: int = 0
    deletions: int = 0
    files_changed: int = 0
    url: str = ""
    project: str = ""

    @property
    def changes(self) -> int:
        """Lines added plus lines deleted."""
        return self.additions + self.deletions

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def summary(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0]


@dataclass
class ComplexityAnalysis:
    """Raw output of the complexity scorer, before the base-estimate lookup."""

    level: ComplexityLevel
    score: int
    multiplier: float
    confidence: float
    factors: list[str] = field(default_factory=list)
    reasoning: list[str] = field(default_factory=list)


@dataclass
class AgentEstimate:
    """Heuristic effort estimate for an issue."""

    estimated_hours: float
    confidence: float
    complexity: ComplexityLevel
    score: int
    reasoning: list[str] = field(default_factory=list)
    factors: list[str] = field(default_factory=list)

    @property
    def estimated_days(self) -> float:
        """Estimate expressed in 8-hour working days."""
        return self.estimated_hours / 8


@dataclass
class Reality:
    """Observed commit activity correlated to an issue.

    When ``has_started`` is False only ``days_worked``, ``total_changes``,
    ``velocity`` and ``pattern`` are meaningful (all zero / no-activity).
    """

    has_started: bool
    days_worked: int
    total_changes: int
    velocity: float
    pattern: WorkPattern
    commit_count: int = 0
    days_from_issue_to_first_commit: int | None = None
    days_since_last_commit: int | None = None
    avg_commit_size: float = 0.0
    first_commit_date: datetime | None = None
    last_commit_date: datetime | None = None


@dataclass
class CompletionPrediction:
    """Predicted completion date and the method used to derive it."""

    predicted_date: datetime
    confidence: float
    method: PredictionMethod
    remaining_commits_estimate: float | None = None
    adjusted_estimate_hours: float | None = None


@dataclass
class Tracking:
    """Status, prediction and advice derived from estimate and reality."""

    status: TrackingStatus
    completion_prediction: CompletionPrediction
    coaching_insights: list[str] = field(default_factory=list)
    manager_flags: list[str] = field(default_factory=list)


@dataclass
class IssueTracking:
    """Everything the dashboard knows about one issue."""

    project: str
    issue: Issue
    commits: list[Commit]
    agent_estimate: AgentEstimate
    reality: Reality
    tracking: Tracking

    @property
    def status(self) -> TrackingStatus:
        return self.tracking.status


@dataclass
class ManagerAlerts:
    """Daily roll-up of tracked issues into critical/attention/positive buckets."""

    date: str
    critical: list[str] = field(default_factory=list)
    attention: list[str] = field(default_factory=list)
    positive: list[str] = field(default_factory=list)
    summary: str = ""


@dataclass
class TrackingSummary:
    """Counts by status plus average estimation accuracy (0-100)."""

    total_issues: int
    on_track: int
    at_risk: int
    overdue: int
    avg_accuracy: int


@dataclass
class IssueTrackingReport:
    """Response of the issue-tracking view."""

    issue_tracking: list[IssueTracking]
    manager_alerts: ManagerAlerts
    summary: TrackingSummary
    errors: dict[str, str] = field(default_factory=dict)
    """Per-project error messages for projects that degraded to no data."""


@dataclass
class BoardIssue:
    """Issue as shown on the issue board, enriched with manager analytics."""

    issue: Issue
    stage: WorkflowStage
    assigned_agent: str | None
    agent_estimate: AgentEstimate | None = None
    commit_reality: Reality | None = None
    manager_status: str = "unknown"
    completion_prediction: CompletionPrediction | None = None
    coaching_insights: list[str] = field(default_factory=list)
    manager_flags: list[str] = field(default_factory=list)
    commit_count: int = 0
    last_commit_date: datetime | None = None
