"""Observed progress of an issue, measured from its correlated commits."""

from datetime import UTC, datetime, timedelta

from agent_dashboard.config.heuristics import HeuristicsConfig
from agent_dashboard.enums import WorkPattern
from agent_dashboard.models.domain import Commit, Issue, Reality

ONE_DAY = timedelta(days=1)


def whole_days(delta: timedelta) -> int:
    """Number of complete days in a time span (floored, may be negative)."""
    return delta // ONE_DAY


def work_pattern(days_since_last_commit: int, velocity: float, config: HeuristicsConfig) -> WorkPattern:
    if days_since_last_commit > config.stale_days:
        return WorkPattern.STALE
    if velocity > config.high_velocity:
        return WorkPattern.HIGH_VELOCITY
    if velocity < config.slow_velocity:
        return WorkPattern.SLOW_PROGRESS
    return WorkPattern.STEADY


def calculate_issue_reality(
    issue: Issue,
    commits: list[Commit],
    config: HeuristicsConfig | None = None,
    now: datetime | None = None,
) -> Reality:
    """Summarize the commit activity behind an issue.

    ``days_worked`` counts calendar spans, not distinct commit days: a single
    commit is one day of work, two commits 36 hours apart are two.
    """
    config = config or HeuristicsConfig()
    now = now or datetime.now(UTC)

    if not commits:
        return Reality(
            has_started=False,
            days_worked=0,
            total_changes=0,
            velocity=0.0,
            pattern=WorkPattern.NO_ACTIVITY,
        )

    ordered = sorted(commits, key=lambda commit: commit.date)
    first_commit_date = ordered[0].date
    last_commit_date = ordered[-1].date

    days_worked = whole_days(last_commit_date - first_commit_date) + 1
    days_since_last_commit = whole_days(now - last_commit_date)
    total_changes = sum(commit.changes for commit in ordered)
    velocity = len(ordered) / max(days_worked, 1)

    return Reality(
        has_started=True,
        days_worked=days_worked,
        total_changes=total_changes,
        velocity=velocity,
        pattern=work_pattern(days_since_last_commit, velocity, config),
        commit_count=len(ordered),
        days_from_issue_to_first_commit=whole_days(first_commit_date - issue.created_at),
        days_since_last_commit=days_since_last_commit,
        avg_commit_size=total_changes / len(ordered),
        first_commit_date=first_commit_date,
        last_commit_date=last_commit_date,
    )
