"""Tests for agent_dashboard/analytics/developer_performance.py."""

from datetime import timedelta

import pytest

from agent_dashboard.analytics.developer_performance import (
    DeveloperActivity,
    build_performance_report,
    calculate_developer_performance,
    collect_activity,
    estimate_working_hours,
    is_tracked_commit,
    performance_quality,
)


@pytest.fixture
def alice(make_commit):
    """Four commits on two days, half of them linked to issues."""
    activity = DeveloperActivity(name="alice")
    messages = [("fixes #1", 1.0), ("#2 tweak", 1.1), ("cleanup", 2.0), ("wip", 2.1)]
    for message, days_ago in messages:
        commit = make_commit(message, author="alice", days_ago=days_ago, additions=100, files_changed=5)
        activity.add_commit("AIBL", commit)
    activity.add_issue("AIBL-1")
    return activity


class TestCollectActivity:
    """Tests for collect_activity."""

    def test_groups_by_developer_across_projects(self, make_commit, make_issue):
        """Should merge commits per author and link assigned issues."""
        assigned = make_issue(number=5)
        assigned.assignee = "alice"
        orphan = make_issue(number=6)
        orphan.assignee = "carol"

        developers = collect_activity(
            [
                ("AIBL", [make_commit(author="alice"), make_commit(author="bob")], [assigned, orphan]),
                ("Upify", [make_commit(author="alice", project="Upify")], []),
            ]
        )

        by_name = {d.name: d for d in developers}
        assert set(by_name) == {"alice", "bob"}
        assert by_name["alice"].projects == ["AIBL", "Upify"]
        assert len(by_name["alice"].commits) == 2
        assert by_name["alice"].issues == ["AIBL-5"]
        assert by_name["bob"].issues == []

    def test_counts_commits_per_day(self, make_commit):
        """Should bucket commits by calendar day."""
        activity = DeveloperActivity(name="alice")
        for days_ago in (1.0, 1.1, 3.0):
            activity.add_commit("AIBL", make_commit(days_ago=days_ago))

        assert sorted(activity.daily_commits.values()) == [1, 2]


class TestHelpers:
    """Tests for is_tracked_commit, estimate_working_hours and performance_quality."""

    def test_is_tracked_commit(self):
        """Should recognize issue references in commit messages."""
        assert is_tracked_commit("Fixes login redirect")
        assert is_tracked_commit("Polish header #12")
        assert not is_tracked_commit("Refactor layout")

    def test_working_hours_bounds(self, make_commit):
        """Should clamp weekly hours to 10-60."""
        big = [make_commit(additions=1000, files_changed=10) for _ in range(2)]

        assert estimate_working_hours([], 0) == 10.0
        assert estimate_working_hours(big, 14) == 40.0
        assert estimate_working_hours(big, 1) == 60.0

    @pytest.mark.parametrize(("size", "expected"), [(100, 100.0), (10, 60.0), (500, 85.0), (1200, 20.0)])
    def test_performance_quality(self, size, expected):
        """Should favour 50-300 line commits."""
        assert performance_quality(size) == expected


class TestCalculateDeveloperPerformance:
    """Tests for calculate_developer_performance."""

    def test_scores(self, alice):
        """Should compute weekly stats and productivity scores."""
        performance = calculate_developer_performance(alice, alice.commits, weeks=1)
        stats = performance.weekly_stats

        assert stats.total_commits == 4
        assert stats.active_days == 2
        assert stats.commits_per_day == 2.0
        assert stats.avg_commit_size == 100.0
        assert stats.estimated_hours_per_week == 10.0
        assert stats.hours_per_day == 5.0
        assert stats.tracked_commits == 2
        assert stats.untracked_commits == 2
        assert stats.issue_workflow_ratio == 50.0
        assert stats.productivity.velocity == 50.0
        assert stats.productivity.quality == 100.0
        assert stats.productivity.focus == 100.0
        assert stats.productivity.efficiency == 20.0
        assert stats.productivity.consistency == 28.6
        assert stats.productivity.overall == 59.7

    def test_flags_and_coaching(self, alice):
        """Should flag the schedule and coach on consistency, efficiency and linking."""
        performance = calculate_developer_performance(alice, alice.commits, weeks=1)

        assert performance.flags == ["Inconsistent schedule"]
        assert performance.coaching_suggestions == [
            "Establish regular coding schedule for predictable delivery",
            "Break larger tasks into smaller, time-boxed commits",
            'Link commits to issues using "fixes #123" or "#123" in commit messages',
        ]

    def test_daily_breakdown_and_untracked_examples(self, alice, now):
        """Should list days in order and give short untracked commit examples."""
        performance = calculate_developer_performance(alice, alice.commits, weeks=1)

        assert [day.date for day in performance.daily_breakdown] == [
            (now - timedelta(days=2)).date().isoformat(),
            (now - timedelta(days=1)).date().isoformat(),
        ]
        assert performance.daily_breakdown[0].estimated_hours == pytest.approx(2.0)
        examples = performance.workflow_analysis.untracked_commit_examples
        assert [e.message for e in examples] == ["cleanup", "wip"]
        assert all(len(e.sha) == 7 for e in examples)

    def test_inactive_developer(self):
        """Should flag a developer without commits."""
        performance = calculate_developer_performance(DeveloperActivity(name="dave"), [], weeks=4)

        assert performance.weekly_stats.total_commits == 0
        assert "No activity this period" in performance.flags
        assert len(performance.flags) == 5


class TestBuildPerformanceReport:
    """Tests for build_performance_report."""

    def test_ranks_and_summarizes(self, alice, now):
        """Should rank by overall score and summarize the active team."""
        dave = calculate_developer_performance(DeveloperActivity(name="dave"), [], weeks=1)
        top = calculate_developer_performance(alice, alice.commits, weeks=1)

        report = build_performance_report([dave, top], now - timedelta(weeks=1), now, weeks=1)

        assert [d.name for d in report.developers] == ["alice", "dave"]
        assert report.period.weeks == 1
        assert report.summary.total_developers == 2
        assert report.summary.active_developers == 1
        assert report.summary.avg_velocity == 50.0
        assert report.summary.avg_quality == 100.0
        assert report.summary.top_performer == "alice"
        assert report.summary.needs_attention == ["dave"]
