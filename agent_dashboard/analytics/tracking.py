"""Issue status, completion prediction and manager reporting.

Everything here is a pure function of an issue, its agent estimate, its
commit reality and the current time. Callers pass ``now`` explicitly when
they need reproducible results.
"""

import math
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from agent_dashboard.analytics.estimation import generate_agent_estimate
from agent_dashboard.analytics.reality import calculate_issue_reality, whole_days
from agent_dashboard.config.heuristics import HeuristicsConfig
from agent_dashboard.enums import PredictionMethod, TrackingStatus
from agent_dashboard.models.domain import (
    AgentEstimate,
    Commit,
    CompletionPrediction,
    Issue,
    IssueState,
    IssueTracking,
    ManagerAlerts,
    Reality,
    Tracking,
    TrackingSummary,
)

LARGE_COMMIT_LINES = 500
HUGE_COMMIT_LINES = 1000
LOW_VELOCITY = 0.3
HIGH_VELOCITY = 3.0
QUIET_DAYS = 3
MANY_COMMITS = 20
TOO_MANY_COMMITS = 30


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (62.5 -> 63)."""
    return math.floor(value + 0.5)


def issue_age_days(issue: Issue, now: datetime) -> int:
    return whole_days(now - issue.created_at)


def determine_issue_status(
    estimate: AgentEstimate,
    reality: Reality,
    issue: Issue,
    config: HeuristicsConfig | None = None,
    now: datetime | None = None,
) -> TrackingStatus:
    """Classify an issue as on-track, at-risk, overdue or not-started."""
    config = config or HeuristicsConfig()
    now = now or datetime.now(UTC)

    if not reality.has_started:
        if issue_age_days(issue, now) > config.not_started_grace_days:
            return TrackingStatus.AT_RISK
        return TrackingStatus.NOT_STARTED

    estimated_days = estimate.estimated_hours / config.hours_per_day

    if issue.state == IssueState.CLOSED:
        if reality.days_worked <= estimated_days * config.closed_on_track_ratio:
            return TrackingStatus.ON_TRACK
        return TrackingStatus.OVERDUE

    if (reality.days_since_last_commit or 0) > config.stale_days:
        return TrackingStatus.AT_RISK
    if reality.days_worked > estimated_days * config.open_overdue_ratio:
        return TrackingStatus.OVERDUE
    if reality.velocity < config.slow_velocity:
        return TrackingStatus.AT_RISK
    return TrackingStatus.ON_TRACK


def predict_completion(
    estimate: AgentEstimate,
    reality: Reality,
    config: HeuristicsConfig | None = None,
    now: datetime | None = None,
) -> CompletionPrediction:
    """Predict when an issue will be done.

    Three methods are tried in order: the bare agent estimate for issues with
    no commits yet, the observed commit velocity once there are enough
    commits, and otherwise the estimate rescaled by the progress so far.
    """
    config = config or HeuristicsConfig()
    now = now or datetime.now(UTC)
    hours_per_day = config.hours_per_day

    if not reality.has_started:
        days = math.ceil(estimate.estimated_hours / hours_per_day) + config.start_delay_buffer_days
        return CompletionPrediction(
            predicted_date=now + timedelta(days=days),
            confidence=0.3,
            method=PredictionMethod.AGENT_ESTIMATE_ONLY,
        )

    commit_count = reality.commit_count
    if commit_count >= config.min_commits_for_velocity and reality.velocity > 0:
        avg_commit_size = reality.total_changes / commit_count
        if avg_commit_size > 0:
            remaining_commits = max(1.0, estimate.estimated_hours * 10 / avg_commit_size)
        else:
            remaining_commits = 1.0
        days = math.ceil(remaining_commits / reality.velocity)
        return CompletionPrediction(
            predicted_date=now + timedelta(days=days),
            confidence=min(0.8, 0.3 + 0.1 * commit_count),
            method=PredictionMethod.VELOCITY_BASED,
            remaining_commits_estimate=remaining_commits,
        )

    progress = reality.days_worked / (estimate.estimated_hours / hours_per_day)
    adjusted_hours = estimate.estimated_hours / max(progress, 0.1)
    remaining_days = math.ceil(adjusted_hours / hours_per_day - reality.days_worked)
    return CompletionPrediction(
        predicted_date=now + timedelta(days=max(1, remaining_days)),
        confidence=0.5,
        method=PredictionMethod.PROGRESS_ADJUSTED,
        adjusted_estimate_hours=adjusted_hours,
    )


def generate_coaching_insights(reality: Reality) -> list[str]:
    """Advice for the developer working on an issue."""
    insights = []

    if reality.avg_commit_size > LARGE_COMMIT_LINES:
        insights.append("Consider smaller, more frequent commits for easier review and debugging")
    if reality.velocity < LOW_VELOCITY:
        insights.append("Low commit frequency - consider daily commit goals or breaking down tasks")
    if (reality.days_since_last_commit or 0) > QUIET_DAYS:
        insights.append("No recent commits - check for blockers or need for support")
    if reality.velocity > HIGH_VELOCITY:
        insights.append("High velocity - ensure adequate testing and code review")
    if reality.commit_count > MANY_COMMITS:
        insights.append("Many commits on single issue - consider if scope is too large")

    return insights


def generate_manager_flags(
    estimate: AgentEstimate,
    reality: Reality,
    issue: Issue,
    config: HeuristicsConfig | None = None,
    now: datetime | None = None,
) -> list[str]:
    """Warnings for the manager about a single issue."""
    config = config or HeuristicsConfig()
    now = now or datetime.now(UTC)
    flags = []

    age = issue_age_days(issue, now)
    if age > config.long_open_days and issue.is_open:
        flags.append(f"Issue open for {age} days - needs attention")

    if reality.has_started and (reality.days_since_last_commit or 0) > config.stale_days:
        flags.append(f"No commits for {reality.days_since_last_commit} days - potential blocker")

    estimated_days = estimate.estimated_hours / config.hours_per_day
    if reality.days_worked > estimated_days * config.flag_overrun_ratio:
        flags.append(
            f"Taking {config.flag_overrun_ratio:g}x longer than estimated - reassess scope or provide support"
        )

    if reality.commit_count > TOO_MANY_COMMITS:
        flags.append(f"{reality.commit_count} commits - consider if issue scope is too large")

    if reality.avg_commit_size > HUGE_COMMIT_LINES:
        flags.append(f"Large commits ({round_half_up(reality.avg_commit_size)} lines avg) - review practice")

    return flags


def build_issue_tracking(
    project: str,
    issue: Issue,
    commits: list[Commit],
    config: HeuristicsConfig | None = None,
    now: datetime | None = None,
) -> IssueTracking:
    """Combine estimate, reality and tracking for an issue and its correlated commits."""
    config = config or HeuristicsConfig()
    now = now or datetime.now(UTC)

    estimate = generate_agent_estimate(issue, config)
    reality = calculate_issue_reality(issue, commits, config, now)
    tracking = Tracking(
        status=determine_issue_status(estimate, reality, issue, config, now),
        completion_prediction=predict_completion(estimate, reality, config, now),
        coaching_insights=generate_coaching_insights(reality),
        manager_flags=generate_manager_flags(estimate, reality, issue, config, now),
    )
    return IssueTracking(
        project=project,
        issue=issue,
        commits=commits,
        agent_estimate=estimate,
        reality=reality,
        tracking=tracking,
    )


def generate_manager_alerts(
    tracked: Sequence[IssueTracking],
    config: HeuristicsConfig | None = None,
    now: datetime | None = None,
) -> ManagerAlerts:
    """Roll tracked issues up into critical, attention and positive alerts."""
    config = config or HeuristicsConfig()
    now = now or datetime.now(UTC)
    alerts = ManagerAlerts(date=now.strftime("%a %b %d %Y"))

    stale = [
        t
        for t in tracked
        if t.status == TrackingStatus.AT_RISK and (t.reality.days_since_last_commit or 0) > config.stale_days
    ]
    overdue = [t for t in tracked if t.status == TrackingStatus.OVERDUE]
    if stale:
        alerts.critical.append(f"{len(stale)} issues stale for {config.stale_days}+ days")
    if overdue:
        alerts.critical.append(f"{len(overdue)} issues significantly overdue")

    long_running = [
        t for t in tracked if t.issue.is_open and issue_age_days(t.issue, now) > config.long_open_days
    ]
    if long_running:
        alerts.attention.append(f"{len(long_running)} issues open for {config.long_open_days}+ days")

    recently_closed = [
        t for t in tracked if t.issue.closed_at is not None and whole_days(now - t.issue.closed_at) <= 1
    ]
    if recently_closed:
        alerts.positive.append(f"{len(recently_closed)} issues completed in last 24h")

    on_track = sum(1 for t in tracked if t.status == TrackingStatus.ON_TRACK)
    alerts.summary = f"{len(tracked)} issues tracked, {on_track} on-track"
    return alerts


def calculate_average_estimation_accuracy(
    tracked: Sequence[IssueTracking], config: HeuristicsConfig | None = None
) -> int:
    """Mean estimate accuracy (0-100) over closed issues that saw commits.

    Returns 0 when no issue qualifies.
    """
    config = config or HeuristicsConfig()
    completed = [t for t in tracked if t.issue.state == IssueState.CLOSED and t.reality.has_started]
    if not completed:
        return 0

    scores = []
    for t in completed:
        estimated_days = t.agent_estimate.estimated_hours / config.hours_per_day
        actual_days = t.reality.days_worked
        error_ratio = abs(estimated_days - actual_days) / max(estimated_days, actual_days)
        scores.append(max(0.0, 1 - error_ratio) * 100)

    return round_half_up(sum(scores) / len(scores))


def summarize_tracking(tracked: Sequence[IssueTracking], config: HeuristicsConfig | None = None) -> TrackingSummary:
    return TrackingSummary(
        total_issues=len(tracked),
        on_track=sum(1 for t in tracked if t.status == TrackingStatus.ON_TRACK),
        at_risk=sum(1 for t in tracked if t.status == TrackingStatus.AT_RISK),
        overdue=sum(1 for t in tracked if t.status == TrackingStatus.OVERDUE),
        avg_accuracy=calculate_average_estimation_accuracy(tracked, config),
    )
