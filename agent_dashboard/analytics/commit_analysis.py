"""Per-repository commit analysis and the cross-project summary.

Developers are scored on three 0-100 axes over a short window (two weeks by
default): velocity (commits per active day), activity (how recently they
committed) and quality (how close their average commit size is to a
reviewable size). Project-level health, manager insights and capacity-based
completion estimates are derived from those developer metrics.
"""

from collections.abc import Sequence
from datetime import UTC, datetime

from agent_dashboard.analytics.reality import whole_days
from agent_dashboard.config.settings import ProjectConfig
from agent_dashboard.models.domain import Commit
from agent_dashboard.models.team import (
    CommitAnalysisReport,
    CompletionEstimates,
    CrossProjectSummary,
    DeveloperMetrics,
    ProjectCommitAnalysis,
    ProjectHealth,
)

DETAILED_COMMITS_PER_DEVELOPER = 10
STALE_DAYS = 7
OPTIMAL_COMMITS_PER_DEVELOPER_DAY = 2
COMMITS_PER_FEATURE = 15
COMMITS_PER_BUG = 3


def group_commits_by_author(commits: Sequence[Commit]) -> dict[str, list[Commit]]:
    """Group commits by author, preserving the order in which authors appear."""
    groups: dict[str, list[Commit]] = {}
    for commit in commits:
        groups.setdefault(commit.author or "Unknown", []).append(commit)
    return groups


def quality_score(avg_commit_size: float) -> float:
    if 50 < avg_commit_size < 500:
        return 100.0
    if avg_commit_size > 1000:
        return 50.0
    if avg_commit_size < 10:
        return 30.0
    return 80.0


def developer_insights(
    days_since_last_commit: int, commits_per_day: float, avg_commit_size: float, consistency: float
) -> list[str]:
    insights = []
    if days_since_last_commit > STALE_DAYS:
        insights.append(
            f"No activity for {days_since_last_commit} days - may be blocked or on different project"
        )
    if commits_per_day > 3:
        insights.append(f"High velocity developer - {commits_per_day:g} commits/day")
    if commits_per_day < 0.2:
        insights.append("Low commit frequency - may need support or clearer tasks")
    if avg_commit_size > 1000:
        insights.append("Large commits detected - suggest breaking down work into smaller pieces")
    if consistency < 20:
        insights.append(f"Inconsistent work pattern - only active {consistency:g}% of days")
    if consistency > 80:
        insights.append(f"Highly consistent - active {consistency:g}% of days")
    return insights


def workflow_suggestions(
    commits_per_day: float, avg_commit_size: float, consistency: float, days_since_last_commit: int
) -> list[str]:
    suggestions = []
    if days_since_last_commit > 3:
        suggestions.append("Schedule daily check-in to identify blockers")
    if avg_commit_size > 500:
        suggestions.append("Break work into smaller, reviewable commits (aim for <300 lines)")
    if commits_per_day < 0.5:
        suggestions.append("Consider daily commit goals or pair programming sessions")
    if consistency < 50:
        suggestions.append("Establish daily coding routine for more predictable delivery")
    if commits_per_day > 5:
        suggestions.append("High activity - ensure adequate code review and testing")
    return suggestions


def calculate_developer_metrics(
    name: str,
    commits: Sequence[Commit],
    detailed: Sequence[Commit],
    window_days: int = 14,
    now: datetime | None = None,
) -> DeveloperMetrics:
    """Score one developer from their commits in the window.

    Args:
        name: Developer login or name
        commits: All of the developer's commits in the window (non-empty)
        detailed: The subset with line statistics, used for commit size
        window_days: Length of the analysis window
        now: Reference time
    """
    now = now or datetime.now(UTC)

    last_commit_date = max(commit.date for commit in commits)
    active_days = len({commit.date.date() for commit in commits})
    total_changes = sum(commit.changes for commit in detailed)
    avg_commit_size = total_changes / len(detailed) if detailed else 0.0

    days_since_last_commit = whole_days(now - last_commit_date)
    commits_per_day = len(commits) / max(active_days, 1)
    consistency = active_days / window_days * 100

    velocity_score = min(100.0, commits_per_day * 50)
    activity_score = max(0.0, 100.0 - days_since_last_commit * 10)
    quality = quality_score(avg_commit_size)
    overall = (velocity_score + activity_score + quality) / 3

    commits_per_day = round(commits_per_day, 2)
    avg_commit_size = float(round(avg_commit_size))
    consistency = round(consistency, 1)

    return DeveloperMetrics(
        name=name,
        commit_count=len(commits),
        last_commit_date=last_commit_date,
        days_since_last_commit=days_since_last_commit,
        commits_per_day=commits_per_day,
        avg_commit_size=avg_commit_size,
        active_days=active_days,
        consistency_score=consistency,
        velocity_score=round(velocity_score, 1),
        activity_score=round(activity_score, 1),
        quality_score=round(quality, 1),
        overall_score=round(overall, 1),
        recent_commits=list(detailed),
        insights=developer_insights(days_since_last_commit, commits_per_day, avg_commit_size, consistency),
        suggestions=workflow_suggestions(commits_per_day, avg_commit_size, consistency, days_since_last_commit),
    )


def manager_insights(developers: Sequence[DeveloperMetrics], project_velocity: float) -> list[str]:
    insights = []
    active = [d for d in developers if d.days_since_last_commit < STALE_DAYS]
    stale = [d for d in developers if d.days_since_last_commit >= STALE_DAYS]

    if stale:
        names = ", ".join(d.name for d in stale)
        insights.append(f"{len(stale)} developers inactive for {STALE_DAYS}+ days: {names}")
    if project_velocity < 0.5:
        insights.append(f"Low project velocity ({project_velocity:g} commits/day) - investigate blockers")
    if len(active) == 1:
        insights.append("Single developer project - consider knowledge sharing or backup support")

    struggling = [d for d in developers if d.overall_score < 40 and d.days_since_last_commit < STALE_DAYS]
    high_performers = [d for d in developers if d.overall_score > 70]
    if struggling:
        names = ", ".join(d.name for d in struggling)
        insights.append(f"Developers needing support: {names} - consider mentoring or task adjustment")
    if high_performers:
        names = ", ".join(d.name for d in high_performers)
        insights.append(f"High performers: {names} - potential mentors for team")

    return insights


def capacity_recommendations(team_velocity: float, active_developers: int) -> list[str]:
    recommendations = []
    optimal = active_developers * OPTIMAL_COMMITS_PER_DEVELOPER_DAY

    if team_velocity < optimal * 0.5:
        recommendations.append(f"Low team output: {team_velocity:.1f} vs optimal {optimal} commits/day")
        recommendations.append("Consider: Remove blockers, simplify tasks, or add developer support")
    if active_developers == 0:
        recommendations.append("No active developers - project requires immediate attention")
    if active_developers == 1:
        recommendations.append("Bus factor risk - single developer project needs backup or knowledge sharing")
    if team_velocity > optimal * 1.5:
        recommendations.append("High velocity team - ensure code quality and prevent burnout")

    return recommendations


def completion_estimates(developers: Sequence[DeveloperMetrics], complexity_factor: float) -> CompletionEstimates:
    """Delivery estimates from the combined velocity of active developers."""
    active = [d for d in developers if d.days_since_last_commit < STALE_DAYS]
    team_velocity = sum(d.commits_per_day for d in active)
    velocity_floor = max(team_velocity, 0.1)
    utilization = team_velocity / (len(active) * OPTIMAL_COMMITS_PER_DEVELOPER_DAY) if active else 0.0

    return CompletionEstimates(
        team_velocity=round(team_velocity, 2),
        complexity_factor=complexity_factor,
        estimated_days_per_feature=round(COMMITS_PER_FEATURE * complexity_factor / velocity_floor, 1),
        estimated_days_per_bug=round(COMMITS_PER_BUG * complexity_factor / velocity_floor, 1),
        current_capacity=len(active),
        capacity_utilization=round(utilization, 1),
        recommendations=capacity_recommendations(team_velocity, len(active)),
    )


def analyze_repository(
    project: ProjectConfig,
    commits: Sequence[Commit],
    details: dict[str, Commit],
    window_days: int = 14,
    now: datetime | None = None,
) -> ProjectCommitAnalysis:
    """Analyze a repository's commits over the window.

    Args:
        project: The project being analyzed
        commits: Commits in the window, newest first
        details: Detailed commits keyed by sha. A commit selected for detail
            but missing here counts as zero changes.
        window_days: Length of the analysis window
        now: Reference time
    """
    now = now or datetime.now(UTC)

    developers = []
    for name, author_commits in group_commits_by_author(commits).items():
        detailed = [
            details.get(commit.sha, commit) for commit in author_commits[:DETAILED_COMMITS_PER_DEVELOPER]
        ]
        developers.append(calculate_developer_metrics(name, author_commits, detailed, window_days, now))
    developers.sort(key=lambda d: d.overall_score, reverse=True)

    last_commit = commits[0].date if commits else None
    days_since_last_commit = whole_days(now - last_commit) if last_commit else 999
    velocity = len(commits) / window_days

    if velocity > 1:
        frequency = "high"
    elif velocity > 0.5:
        frequency = "medium"
    else:
        frequency = "low"
    recently_active = last_commit is not None and (now - last_commit).total_seconds() < STALE_DAYS * 86400

    return ProjectCommitAnalysis(
        project=project.name,
        owner=project.owner or "",
        repo=project.repo or "",
        last_commit=last_commit,
        days_since_last_commit=days_since_last_commit,
        velocity=round(velocity, 2),
        total_commits=len(commits),
        unique_developers=len(developers),
        developers=developers,
        project_health=ProjectHealth(
            commit_frequency=frequency,
            team_activity="collaborative" if len(developers) > 1 else "solo",
            recent_activity="active" if recently_active else "stale",
        ),
        manager_insights=manager_insights(developers, round(velocity, 2)),
        completion_estimates=completion_estimates(developers, project.complexity_factor),
    )


def critical_alerts(
    analyses: Sequence[ProjectCommitAnalysis],
    stale_projects: int,
    total_developers: int,
    priority_project: str | None,
) -> list[str]:
    alerts = []
    if stale_projects > len(analyses) * 0.5:
        alerts.append(f"{stale_projects} projects have no recent activity - requires immediate attention")
    if total_developers < 3:
        alerts.append(f"Only {total_developers} active developers across all projects - capacity risk")

    priority = next((a for a in analyses if a.project == priority_project), None)
    if priority is not None and priority.error is None and priority.days_since_last_commit > 3:
        alerts.append(
            f"{priority.project} project stale for {priority.days_since_last_commit} days"
            " - priority project needs attention"
        )
    return alerts


def cross_project_summary(
    analyses: Sequence[ProjectCommitAnalysis], priority_project: str | None = None
) -> CrossProjectSummary:
    """Summarize every project's analysis; failed projects only count towards the total."""
    valid = [a for a in analyses if a.error is None]
    total_developers = len({d.name for a in valid for d in a.developers})
    stale = [a for a in valid if a.days_since_last_commit > STALE_DAYS]
    average_velocity = sum(a.velocity for a in valid) / max(len(valid), 1)
    health_score = (len(valid) - len(stale)) / max(len(valid), 1) * 100

    all_developers = [d for a in valid for d in a.developers]
    top_performer = max(all_developers, key=lambda d: d.overall_score) if all_developers else None

    return CrossProjectSummary(
        total_projects=len(analyses),
        active_projects=sum(1 for a in valid if a.days_since_last_commit <= STALE_DAYS),
        stale_projects=len(stale),
        total_active_developers=total_developers,
        average_velocity=round(average_velocity, 2),
        health_score=round(health_score, 1),
        top_performer=top_performer,
        critical_alerts=critical_alerts(analyses, len(stale), total_developers, priority_project),
    )


def build_commit_analysis_report(
    analyses: list[ProjectCommitAnalysis], priority_project: str | None = None
) -> CommitAnalysisReport:
    return CommitAnalysisReport(commit_analysis=analyses, summary=cross_project_summary(analyses, priority_project))
