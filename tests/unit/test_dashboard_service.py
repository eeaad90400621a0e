"""Tests for agent_dashboard/engine/dashboard.py."""

from dataclasses import replace
from unittest.mock import AsyncMock, Mock

import pytest

from agent_dashboard.engine.dashboard import DashboardService
from agent_dashboard.enums import WorkflowStage
from agent_dashboard.exceptions import GitHubError, IssueNotFoundError, ProjectNotFoundError
from agent_dashboard.models.domain import IssueState


@pytest.fixture
def aibl_data(make_issue, make_commit):
    """Two open issues and three commits for AIBL."""
    issues = [
        make_issue(number=42, title="Improve login page", labels=["agent:aibl-fix", "in-development"]),
        make_issue(number=43, title="Write onboarding docs", labels=["documentation"]),
        make_issue(number=44, title="Old closed thing", state=IssueState.CLOSED, closed_days_ago=3),
    ]
    commits = [
        make_commit("Login tweaks #42", author="alice", days_ago=1),
        make_commit("Bump dependencies", author="bob", days_ago=2),
        make_commit("fixes 42", author="alice", days_ago=3),
    ]
    return issues, commits


@pytest.fixture
def source(aibl_data):
    """Fake data source; Upify requests fail."""
    issues, commits = aibl_data
    data_source = Mock()
    data_source.connect = AsyncMock()
    data_source.disconnect = AsyncMock()

    def list_issues(project, state="open", limit=None, since=None):
        if project.name == "Upify":
            raise GitHubError("Failed to list issues for tomhay/upify", 502)
        if state == "open":
            return [issue for issue in issues if issue.is_open]
        return list(issues)

    def list_commits(project, since, until=None, limit=100):
        if project.name == "Upify":
            raise GitHubError("Failed to list commits for tomhay/upify", 502)
        return list(commits)

    def get_commit_detail(project, sha):
        commit = next(c for c in commits if c.sha == sha)
        return replace(commit, additions=100, deletions=20, files_changed=4)

    data_source.list_issues = AsyncMock(side_effect=list_issues)
    data_source.list_commits = AsyncMock(side_effect=list_commits)
    data_source.get_commit_detail = AsyncMock(side_effect=get_commit_detail)
    data_source.find_issue_by_id = AsyncMock(side_effect=lambda project, issue_id: next(
        (issue for issue in issues if issue.id == issue_id), None
    ))
    data_source.set_issue_labels = AsyncMock(
        side_effect=lambda project, number, labels: replace(
            next(issue for issue in issues if issue.number == number), labels=labels
        )
    )
    return data_source


@pytest.fixture
def service(settings, source):
    return DashboardService(settings, source)


class TestFromSettings:
    """Tests for DashboardService.from_settings."""

    def test_builds_data_source(self, settings):
        """Should configure the data source from GitHub settings."""
        service = DashboardService.from_settings(settings)

        assert service.source.token == "test-token"
        assert service.source.base_url == "https://api.github.com"

    @pytest.mark.asyncio
    async def test_connect_and_disconnect(self, service, source):
        """Should delegate connection handling to the data source."""
        await service.connect()
        await service.disconnect()

        source.connect.assert_awaited_once()
        source.disconnect.assert_awaited_once()


class TestIssueTracking:
    """Tests for DashboardService.issue_tracking."""

    @pytest.mark.asyncio
    async def test_single_project(self, service, now):
        """Should correlate and detail commits for each open issue."""
        report = await service.issue_tracking("AIBL", now=now)

        assert [t.issue.number for t in report.issue_tracking] == [42, 43]
        login = report.issue_tracking[0]
        assert len(login.commits) == 2
        assert all(commit.changes == 120 for commit in login.commits)
        assert login.reality.days_worked == 3
        assert report.issue_tracking[1].reality.has_started is False
        assert report.summary.total_issues == 2
        assert report.errors == {}

    @pytest.mark.asyncio
    async def test_all_projects_collects_errors(self, service, now):
        """Should keep working projects and report failing ones."""
        report = await service.issue_tracking(now=now)

        assert {t.project for t in report.issue_tracking} == {"AIBL"}
        assert set(report.errors) == {"Upify"}
        assert "tomhay/upify" in report.errors["Upify"]

    @pytest.mark.asyncio
    async def test_single_project_errors_propagate(self, service, now):
        """Should raise when the requested project fails."""
        with pytest.raises(GitHubError):
            await service.issue_tracking("Upify", now=now)

    @pytest.mark.asyncio
    async def test_unknown_and_local_only_projects(self, service, now):
        """Should reject unknown projects and projects without a repository."""
        with pytest.raises(ProjectNotFoundError):
            await service.issue_tracking("Nope", now=now)
        with pytest.raises(ProjectNotFoundError):
            await service.issue_tracking("PureZone", now=now)

    @pytest.mark.asyncio
    async def test_results_are_cached(self, service, source, now):
        """Should serve repeated requests from the cache."""
        await service.issue_tracking("AIBL", now=now)
        await service.issue_tracking("AIBL", now=now)

        assert source.list_issues.await_count == 1
        assert source.list_commits.await_count == 1

    @pytest.mark.asyncio
    async def test_failed_commit_details_are_dropped(self, service, source, now):
        """Should leave out commits whose details cannot be fetched."""
        source.get_commit_detail.side_effect = GitHubError("rate limited", 403)

        report = await service.issue_tracking("AIBL", now=now)

        assert all(t.commits == [] for t in report.issue_tracking)


class TestBoardIssues:
    """Tests for DashboardService.list_board_issues."""

    @pytest.mark.asyncio
    async def test_single_project_is_enriched(self, service, source):
        """Should list open issues with stage, agent and tracking status."""
        board = await service.list_board_issues("AIBL")

        assert [b.issue.number for b in board] == [42, 43]
        login = board[0]
        assert login.stage == WorkflowStage.DEVELOPMENT
        assert login.assigned_agent == "aibl-fix"
        assert login.manager_status != "unknown"
        assert login.commit_count == 2
        assert source.list_issues.await_args_list[0].kwargs["limit"] == 50

    @pytest.mark.asyncio
    async def test_all_projects_skips_failures(self, service):
        """Should list every issue of the working projects."""
        board = await service.list_board_issues()

        assert [b.issue.number for b in board] == [42, 43, 44]
        assert board[2].manager_status == "unknown"

    @pytest.mark.asyncio
    async def test_enrichment_failure_keeps_issues(self, service, source):
        """Should still list issues when analytics fail."""
        source.list_commits.side_effect = GitHubError("boom", 500)

        board = await service.list_board_issues("AIBL")

        assert len(board) == 2
        assert all(b.manager_status == "unknown" for b in board)


class TestAssignAgent:
    """Tests for DashboardService.assign_agent."""

    @pytest.mark.asyncio
    async def test_assign_by_number(self, service, source):
        """Should relabel the issue and return the updated issue."""
        issue = await service.assign_agent("AIBL", "aibl-review", issue_number=43)

        source.set_issue_labels.assert_awaited_once()
        args = source.set_issue_labels.await_args.args
        assert args[1] == 43
        assert args[2] == ["documentation", "agent:aibl-review", "in-development"]
        assert issue.labels == args[2]

    @pytest.mark.asyncio
    async def test_assign_by_id(self, service, source):
        """Should look the issue up by id when no number is given."""
        await service.assign_agent("AIBL", "aibl-review", issue_id=1042)

        source.find_issue_by_id.assert_awaited_once()
        assert source.set_issue_labels.await_args.args[1] == 42

    @pytest.mark.asyncio
    async def test_assign_invalidates_cache(self, service, source, now):
        """Should refetch project data after an assignment."""
        await service.issue_tracking("AIBL", now=now)
        await service.assign_agent("AIBL", "aibl-review", issue_number=43)
        await service.issue_tracking("AIBL", now=now)

        assert source.list_commits.await_count == 2

    @pytest.mark.asyncio
    async def test_missing_issue(self, service):
        """Should raise IssueNotFoundError."""
        with pytest.raises(IssueNotFoundError):
            await service.assign_agent("AIBL", "aibl-review", issue_number=999)

    @pytest.mark.asyncio
    async def test_requires_identifier(self, service):
        """Should reject a request without issue id or number."""
        with pytest.raises(ValueError):
            await service.assign_agent("AIBL", "aibl-review")


class TestCommitAnalysis:
    """Tests for DashboardService.commit_analysis."""

    @pytest.mark.asyncio
    async def test_all_projects(self, service, now):
        """Should analyze working projects and record failures."""
        report = await service.commit_analysis(now=now)

        by_project = {a.project: a for a in report.commit_analysis}
        assert by_project["AIBL"].total_commits == 3
        assert {d.name for d in by_project["AIBL"].developers} == {"alice", "bob"}
        assert by_project["AIBL"].developers[0].avg_commit_size == 120.0
        assert by_project["Upify"].error is not None
        assert report.summary.total_projects == 2

    @pytest.mark.asyncio
    async def test_single_project(self, service, now):
        """Should analyze only the requested project."""
        report = await service.commit_analysis("AIBL", now=now)

        assert [a.project for a in report.commit_analysis] == ["AIBL"]


class TestDeveloperPerformance:
    """Tests for DashboardService.developer_performance."""

    @pytest.mark.asyncio
    async def test_report(self, service, now):
        """Should score developers across projects."""
        report = await service.developer_performance(weeks=2, now=now)

        assert {d.name for d in report.developers} == {"alice", "bob"}
        assert report.period.weeks == 2
        assert report.period.end_date == now
        alice = next(d for d in report.developers if d.name == "alice")
        assert alice.weekly_stats.total_commits == 2
        assert alice.weekly_stats.avg_commit_size == 120.0

    @pytest.mark.asyncio
    async def test_report_is_cached_per_period(self, service, source, now):
        """Should reuse a report for the same number of weeks."""
        await service.developer_performance(weeks=2, now=now)
        await service.developer_performance(weeks=2, now=now)
        await service.developer_performance(weeks=3, now=now)

        assert source.list_commits.await_count == 4

    @pytest.mark.asyncio
    async def test_rejects_empty_period(self, service):
        """Should require at least one week."""
        with pytest.raises(ValueError):
            await service.developer_performance(weeks=0)


class TestCommitDetailLimits:
    """Tests for the per-request caps on commit detail lookups."""

    @pytest.fixture
    def serve_commits(self, source, make_commit):
        """Make the fake source return ``commits`` for AIBL and detail any sha."""

        def _serve(commits):
            def list_commits(project, since, until=None, limit=100):
                if project.name == "Upify":
                    raise GitHubError("Failed to list commits for tomhay/upify", 502)
                return list(commits)

            source.list_commits.side_effect = list_commits
            source.get_commit_detail.side_effect = lambda project, sha: make_commit(
                "detailed", sha=sha, additions=40, deletions=10
            )

        return _serve

    @staticmethod
    def detailed_shas(source):
        return [call.args[1] for call in source.get_commit_detail.await_args_list]

    @pytest.mark.asyncio
    async def test_issue_tracking_details_first_correlated_commits(
        self, service, source, serve_commits, make_commit, now
    ):
        """Should detail only the first ten commits that reference an issue."""
        related = [make_commit(f"Login tweaks #42 part {n}", days_ago=1 + n / 10) for n in range(15)]
        serve_commits(related + [make_commit("Bump dependencies")])

        report = await service.issue_tracking("AIBL", now=now)

        login = report.issue_tracking[0]
        assert source.get_commit_detail.await_count == 10
        assert self.detailed_shas(source) == [commit.sha for commit in related[:10]]
        assert [commit.sha for commit in login.commits] == [commit.sha for commit in related[:10]]

    @pytest.mark.asyncio
    async def test_issue_tracking_detail_limit_is_configurable(
        self, settings, source, serve_commits, make_commit, now
    ):
        """Should honour max_commit_details from the heuristics settings."""
        settings.heuristics.max_commit_details = 3
        serve_commits([make_commit(f"fixes #42 step {n}") for n in range(8)])

        report = await DashboardService(settings, source).issue_tracking("AIBL", now=now)

        assert source.get_commit_detail.await_count == 3
        assert len(report.issue_tracking[0].commits) == 3

    @pytest.mark.asyncio
    async def test_commit_analysis_details_ten_commits_per_developer(
        self, service, source, serve_commits, make_commit, now
    ):
        """Should detail at most ten commits for each author."""
        alice = [make_commit(f"alice {n}", author="alice") for n in range(15)]
        bob = [make_commit(f"bob {n}", author="bob") for n in range(12)]
        carol = [make_commit(f"carol {n}", author="carol") for n in range(3)]
        serve_commits(alice + bob + carol)

        report = await service.commit_analysis("AIBL", now=now)

        assert report.commit_analysis[0].total_commits == 30
        assert source.get_commit_detail.await_count == 23
        assert set(self.detailed_shas(source)) == {c.sha for c in alice[:10] + bob[:10] + carol}

    @pytest.mark.asyncio
    async def test_developer_performance_details_twenty_commits_per_developer(
        self, service, source, serve_commits, make_commit, now
    ):
        """Should detail at most twenty commits for each developer."""
        alice = [make_commit(f"alice {n}", author="alice") for n in range(25)]
        bob = [make_commit(f"bob {n}", author="bob") for n in range(5)]
        serve_commits(alice + bob)

        report = await service.developer_performance(weeks=2, now=now)

        assert {d.name for d in report.developers} == {"alice", "bob"}
        assert source.get_commit_detail.await_count == 25
        assert set(self.detailed_shas(source)) == {c.sha for c in alice[:20] + bob}
