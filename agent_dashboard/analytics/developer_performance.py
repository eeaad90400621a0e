"""Cross-project developer performance over a window of weeks.

Activity is first collected per developer from every project's commits and
issues (``collect_activity``); the caller then fetches line statistics for a
sample of each developer's commits and turns the activity into productivity
scores, flags and coaching suggestions (``calculate_developer_performance``).
"""

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from agent_dashboard.models.domain import Commit, Issue
from agent_dashboard.models.team import (
    DailyActivity,
    DeveloperPerformance,
    DeveloperPerformanceReport,
    PerformancePeriod,
    ProductivityScores,
    TeamSummary,
    UntrackedCommitExample,
    WeeklyStats,
    WorkflowAnalysis,
)

DETAILED_COMMITS_PER_DEVELOPER = 20
MIN_WEEKLY_HOURS = 10.0
MAX_WEEKLY_HOURS = 60.0
LINES_PER_HOUR = 50
LARGE_COMMIT_LINES = 500
HOURS_PER_LARGE_COMMIT = 3
ISSUE_REFERENCE_MARKERS = ("#", "fixes", "closes", "resolves", "issue")


@dataclass
class DeveloperActivity:
    """Raw activity of one developer across projects, before scoring."""

    name: str
    projects: list[str] = field(default_factory=list)
    commits: list[Commit] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)
    daily_commits: Counter[str] = field(default_factory=Counter)

    def add_commit(self, project: str, commit: Commit) -> None:
        if project not in self.projects:
            self.projects.append(project)
        self.commits.append(commit)
        self.daily_commits[commit.date.date().isoformat()] += 1

    def add_issue(self, key: str) -> None:
        if key not in self.issues:
            self.issues.append(key)


def collect_activity(project_data: Iterable[tuple[str, Sequence[Commit], Sequence[Issue]]]) -> list[DeveloperActivity]:
    """Group commits and assigned issues by developer.

    Args:
        project_data: ``(project, commits, issues)`` per project. Issues are
            only linked to developers that committed somewhere in the window.
    """
    developers: dict[str, DeveloperActivity] = {}
    for project, commits, issues in project_data:
        for commit in commits:
            name = commit.author or "Unknown"
            developers.setdefault(name, DeveloperActivity(name=name)).add_commit(project, commit)

        for issue in issues:
            if issue.assignee and issue.assignee in developers:
                developers[issue.assignee].add_issue(f"{project}-{issue.number}")

    return list(developers.values())


def is_tracked_commit(message: str) -> bool:
    """True if a commit message references an issue."""
    message = message.lower()
    return any(marker in message for marker in ISSUE_REFERENCE_MARKERS)


def estimate_working_hours(detailed: Sequence[Commit], active_days: int) -> float:
    """Rough hours per week from code volume, large commits and files touched.

    The result is bounded to 10-60 hours.
    """
    total_lines = sum(commit.changes for commit in detailed)
    hours_from_volume = total_lines / LINES_PER_HOUR
    large_commits = sum(1 for commit in detailed if commit.changes > LARGE_COMMIT_LINES)
    hours_from_large_commits = large_commits * HOURS_PER_LARGE_COMMIT

    avg_files_changed = sum(commit.files_changed for commit in detailed) / max(len(detailed), 1)
    complexity_multiplier = min(2.0, avg_files_changed / 5)

    adjusted_hours = max(hours_from_volume, hours_from_large_commits) * complexity_multiplier
    weekly_hours = adjusted_hours / max(active_days / 7, 1)
    return max(MIN_WEEKLY_HOURS, min(MAX_WEEKLY_HOURS, weekly_hours))


def performance_quality(avg_commit_size: float) -> float:
    if 50 < avg_commit_size < 300:
        return 100.0
    if avg_commit_size > 1000:
        return max(20.0, 100 - avg_commit_size / 10)
    if avg_commit_size < 20:
        return 60.0
    return 85.0


def performance_flags(
    avg_commit_size: float,
    commits_per_day: float,
    total_commits: int,
    consistency: float,
    working_hours: float,
    workflow_ratio: float,
    tracked: int,
    untracked: int,
    detailed: int,
) -> list[str]:
    flags = []
    if avg_commit_size > 500:
        flags.append("Large commits (break into smaller pieces)")
    if commits_per_day < 1:
        flags.append("Low frequency (aim for daily commits)")
    if total_commits == 0:
        flags.append("No activity this period")
    if avg_commit_size > 1500:
        flags.append("Massive commits (review atomic commit practices)")
    if consistency < 50:
        flags.append("Inconsistent schedule")
    if working_hours > 50:
        flags.append("High hours (monitor for burnout)")

    if workflow_ratio < 50:
        flags.append("Low issue tracking (link commits to issues)")
    if untracked > 5:
        flags.append(f"{untracked} untracked commits (use #123 format)")
    if workflow_ratio < 30:
        flags.append("Poor workflow discipline (work from issues)")
    if tracked == 0 and detailed > 0:
        flags.append("No issue-linked commits (review workflow)")
    return flags


def coaching_suggestions(
    scores: ProductivityScores, flags: Sequence[str], workflow_ratio: float, untracked: int
) -> list[str]:
    suggestions = []
    if scores.quality < 70:
        suggestions.append("Aim for 50-300 line commits for better reviewability and debugging")
    if scores.velocity < 50:
        suggestions.append("Consider daily commit goals to maintain development momentum")
    if scores.focus < 60:
        suggestions.append("Work on fewer issues simultaneously for deeper focus")
    if scores.consistency < 60:
        suggestions.append("Establish regular coding schedule for predictable delivery")
    if scores.efficiency < 50:
        suggestions.append("Break larger tasks into smaller, time-boxed commits")

    if any("Large commits" in flag for flag in flags):
        suggestions.append("Try a 25-minute commit timer: work, test, commit, repeat")

    if workflow_ratio < 70:
        suggestions.append('Link commits to issues using "fixes #123" or "#123" in commit messages')
    if untracked > 5:
        suggestions.append("Create GitHub issues for untracked work to improve project visibility")
    if workflow_ratio < 30:
        suggestions.append("Adopt issue-driven development: create issue, work, commit, link, close")
    if workflow_ratio > 90:
        suggestions.append("Excellent issue workflow discipline - great project tracking!")
    return suggestions


def calculate_developer_performance(
    activity: DeveloperActivity, detailed: Sequence[Commit], weeks: int
) -> DeveloperPerformance:
    """Score a developer.

    Args:
        activity: Collected activity
        detailed: Up to ``DETAILED_COMMITS_PER_DEVELOPER`` of the developer's
            commits with line statistics (failed lookups carry zeros)
        weeks: Length of the window in weeks
    """
    total_commits = len(activity.commits)
    active_days = len(activity.daily_commits)
    commits_per_day = total_commits / max(active_days, 1)

    total_lines = sum(commit.changes for commit in detailed)
    avg_commit_size = total_lines / max(len(detailed), 1)
    working_hours = estimate_working_hours(detailed, active_days)

    tracked = [commit for commit in detailed if is_tracked_commit(commit.message)]
    untracked = [commit for commit in detailed if not is_tracked_commit(commit.message)]
    workflow_ratio = len(tracked) / max(len(detailed), 1) * 100

    velocity = min(100.0, commits_per_day * 25)
    quality = performance_quality(avg_commit_size)
    focus = min(100.0, len(activity.issues) / max(total_commits / 5, 1) * 100)
    efficiency = min(100.0, total_commits / working_hours * 50) if working_hours > 0 else 0.0
    consistency = active_days / (weeks * 7) * 100
    overall = (velocity + quality + focus + efficiency + consistency) / 5

    scores = ProductivityScores(
        velocity=round(velocity, 1),
        quality=round(quality, 1),
        focus=round(focus, 1),
        efficiency=round(efficiency, 1),
        consistency=round(consistency, 1),
        workflow_discipline=round(workflow_ratio, 1),
        overall=round(overall, 1),
    )
    flags = performance_flags(
        avg_commit_size,
        commits_per_day,
        total_commits,
        consistency,
        working_hours,
        workflow_ratio,
        len(tracked),
        len(untracked),
        len(detailed),
    )

    daily_breakdown = [
        DailyActivity(date=day, commits=count, estimated_hours=count * (avg_commit_size / 100))
        for day, count in sorted(activity.daily_commits.items())
    ]

    return DeveloperPerformance(
        name=activity.name,
        projects=list(activity.projects),
        issues=list(activity.issues),
        weekly_stats=WeeklyStats(
            total_commits=total_commits,
            active_days=active_days,
            commits_per_day=round(commits_per_day, 2),
            avg_commit_size=float(round(avg_commit_size)),
            estimated_hours_per_week=round(working_hours, 1),
            hours_per_day=round(working_hours / max(active_days, 1), 1),
            issues_worked=len(activity.issues),
            tracked_commits=len(tracked),
            untracked_commits=len(untracked),
            issue_workflow_ratio=round(workflow_ratio, 1),
            productivity=scores,
        ),
        flags=flags,
        daily_breakdown=daily_breakdown,
        coaching_suggestions=coaching_suggestions(scores, flags, workflow_ratio, len(untracked)),
        workflow_analysis=WorkflowAnalysis(
            tracked_commits=len(tracked),
            untracked_commits=len(untracked),
            issue_workflow_ratio=round(workflow_ratio, 1),
            untracked_commit_examples=[
                UntrackedCommitExample(sha=commit.short_sha, message=commit.summary[:60], url=commit.url)
                for commit in untracked[:3]
            ],
        ),
    )


def generate_team_summary(developers: Sequence[DeveloperPerformance]) -> TeamSummary:
    """Team roll-up. ``developers`` must already be sorted best first."""
    active = [d for d in developers if d.weekly_stats.total_commits > 0]
    divisor = max(len(active), 1)

    return TeamSummary(
        total_developers=len(developers),
        active_developers=len(active),
        avg_velocity=round(sum(d.weekly_stats.productivity.velocity for d in active) / divisor, 1),
        avg_quality=round(sum(d.weekly_stats.productivity.quality for d in active) / divisor, 1),
        top_performer=active[0].name if active else None,
        needs_attention=[d.name for d in developers if len(d.flags) > 2],
    )


def build_performance_report(
    developers: list[DeveloperPerformance], start_date: datetime, end_date: datetime, weeks: int
) -> DeveloperPerformanceReport:
    ranked = sorted(developers, key=lambda d: d.weekly_stats.productivity.overall, reverse=True)
    return DeveloperPerformanceReport(
        period=PerformancePeriod(start_date=start_date, end_date=end_date, weeks=weeks),
        developers=ranked,
        summary=generate_team_summary(ranked),
    )
