"""Heuristic manager analytics.

Pure functions over already-fetched issues and commits. Nothing here talks to
GitHub; fetching and caching live in ``agent_dashboard.engine``.

Modules:
    - correlation: which commits belong to an issue
    - estimation: complexity score and effort estimate from issue text
    - reality: observed activity (days worked, velocity, pattern)
    - tracking: status, completion prediction, insights, flags, alerts
    - workflow: board stage and agent assignment from labels
    - commit_analysis: per-repository developer metrics and project health
    - developer_performance: cross-project productivity over weeks
"""

from agent_dashboard.analytics.correlation import correlate_commits
from agent_dashboard.analytics.estimation import analyze_issue_complexity, generate_agent_estimate
from agent_dashboard.analytics.reality import calculate_issue_reality
from agent_dashboard.analytics.tracking import (
    build_issue_tracking,
    determine_issue_status,
    generate_manager_alerts,
    predict_completion,
    summarize_tracking,
)

__all__ = [
    "analyze_issue_complexity",
    "build_issue_tracking",
    "calculate_issue_reality",
    "correlate_commits",
    "determine_issue_status",
    "generate_agent_estimate",
    "generate_manager_alerts",
    "predict_completion",
    "summarize_tracking",
]
