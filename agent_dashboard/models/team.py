"""
Team-level analytics records.

Two views share these records: the per-repository commit analysis (who
committed what in the last two weeks, project health) and the cross-project
developer performance report (productivity scores over a window of weeks).
"""

from dataclasses import dataclass, field
from datetime import datetime

from agent_dashboard.models.domain import Commit


@dataclass
class DeveloperMetrics:
    """One developer's recent activity in a single repository."""

    name: str
    commit_count: int
    last_commit_date: datetime
    days_since_last_commit: int
    commits_per_day: float
    avg_commit_size: float
    active_days: int
    consistency_score: float
    velocity_score: float
    activity_score: float
    quality_score: float
    overall_score: float
    recent_commits: list[Commit] = field(default_factory=list)
    insights: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


@dataclass
class ProjectHealth:
    commit_frequency: str
    team_activity: str
    recent_activity: str


@dataclass
class CompletionEstimates:
    """Capacity-based delivery estimates for a project."""

    team_velocity: float
    complexity_factor: float
    estimated_days_per_feature: float
    estimated_days_per_bug: float
    current_capacity: int
    capacity_utilization: float
    recommendations: list[str] = field(default_factory=list)


@dataclass
class ProjectCommitAnalysis:
    """Commit analysis for one project.

    A project whose fetch failed is represented with ``error`` set and every
    metric left at its empty default.
    """

    project: str
    owner: str = ""
    repo: str = ""
    last_commit: datetime | None = None
    days_since_last_commit: int = 999
    velocity: float = 0.0
    total_commits: int = 0
    unique_developers: int = 0
    developers: list[DeveloperMetrics] = field(default_factory=list)
    project_health: ProjectHealth | None = None
    manager_insights: list[str] = field(default_factory=list)
    completion_estimates: CompletionEstimates | None = None
    error: str | None = None


@dataclass
class CrossProjectSummary:
    total_projects: int
    active_projects: int
    stale_projects: int
    total_active_developers: int
    average_velocity: float
    health_score: float
    top_performer: DeveloperMetrics | None
    critical_alerts: list[str] = field(default_factory=list)


@dataclass
class CommitAnalysisReport:
    commit_analysis: list[ProjectCommitAnalysis]
    summary: CrossProjectSummary


@dataclass
class ProductivityScores:
    """0-100 scores; ``overall`` is the mean of the first five."""

    velocity: float
    quality: float
    focus: float
    efficiency: float
    consistency: float
    workflow_discipline: float
    overall: float


@dataclass
class WeeklyStats:
    total_commits: int
    active_days: int
    commits_per_day: float
    avg_commit_size: float
    estimated_hours_per_week: float
    hours_per_day: float
    issues_worked: int
    tracked_commits: int
    untracked_commits: int
    issue_workflow_ratio: float
    productivity: ProductivityScores


@dataclass
class DailyActivity:
    date: str
    commits: int
    estimated_hours: float


@dataclass
class UntrackedCommitExample:
    sha: str
    message: str
    url: str


@dataclass
class WorkflowAnalysis:
    """How disciplined a developer is about linking commits to issues."""

    tracked_commits: int
    untracked_commits: int
    issue_workflow_ratio: float
    untracked_commit_examples: list[UntrackedCommitExample] = field(default_factory=list)


@dataclass
class DeveloperPerformance:
    name: str
    projects: list[str]
    issues: list[str]
    weekly_stats: WeeklyStats
    flags: list[str] = field(default_factory=list)
    daily_breakdown: list[DailyActivity] = field(default_factory=list)
    coaching_suggestions: list[str] = field(default_factory=list)
    workflow_analysis: WorkflowAnalysis | None = None


@dataclass
class TeamSummary:
    total_developers: int
    active_developers: int
    avg_velocity: float
    avg_quality: float
    top_performer: str | None
    needs_attention: list[str] = field(default_factory=list)


@dataclass
class PerformancePeriod:
    start_date: datetime
    end_date: datetime
    weeks: int


@dataclass
class DeveloperPerformanceReport:
    period: PerformancePeriod
    developers: list[DeveloperPerformance]
    summary: TeamSummary
